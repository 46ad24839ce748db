"""
Conversion between Notion pages and roadmap entities.

Each entity kind lives in its own Notion database. Reading a page falls back
to empty strings, zero and the default status for missing properties.
Writing only emits the properties present in the payload, so the same
functions serve both create and partial update.
"""

from typing import Any, Dict, Optional

from roadmapper.constants import DEFAULT_STATUS
from roadmapper.models.base import Deliverable, Goal, Initiative

NAME = "Name"
DESCRIPTION = "Description"
GOAL_DESIRED_OUTCOME = "Desired Outcome"
GOAL_PRIORITY = "Priority"
ORDER = "Order"
INITIATIVE_IDEAL_OUTCOME = "Ideal Outcome"
INITIATIVE_GOAL = "Goal"
DELIVERABLE_STATUS = "Status"
DELIVERABLE_START = "Start Date"
DELIVERABLE_END = "End Date"
DELIVERABLE_INITIATIVE = "Initiative"


# =============================================================================
# Reading properties
# =============================================================================

def _plain_text(prop: Optional[Dict[str, Any]], key: str) -> str:
    if not prop:
        return ""
    parts = prop.get(key) or []
    return parts[0].get("plain_text", "") if parts else ""


def _number(prop: Optional[Dict[str, Any]]) -> int:
    if not prop or prop.get("number") is None:
        return 0
    return int(prop["number"])


def _relation_id(prop: Optional[Dict[str, Any]]) -> str:
    if not prop:
        return ""
    relations = prop.get("relation") or []
    return relations[0].get("id", "") if relations else ""


def _date_start(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    if not prop or not prop.get("date"):
        return None
    return prop["date"].get("start") or None


def page_to_goal(page: Dict[str, Any]) -> Goal:
    props = page.get("properties", {})
    return Goal(
        id=page["id"],
        name=_plain_text(props.get(NAME), "title"),
        description=_plain_text(props.get(DESCRIPTION), "rich_text"),
        desired_outcome=_plain_text(props.get(GOAL_DESIRED_OUTCOME), "rich_text"),
        priority=_number(props.get(GOAL_PRIORITY)),
        order=_number(props.get(ORDER)),
    )


def page_to_initiative(page: Dict[str, Any]) -> Initiative:
    props = page.get("properties", {})
    return Initiative(
        id=page["id"],
        goal_id=_relation_id(props.get(INITIATIVE_GOAL)),
        name=_plain_text(props.get(NAME), "title"),
        ideal_outcome=_plain_text(props.get(INITIATIVE_IDEAL_OUTCOME), "rich_text"),
        order=_number(props.get(ORDER)),
    )


def page_to_deliverable(page: Dict[str, Any]) -> Deliverable:
    props = page.get("properties", {})
    select = (props.get(DELIVERABLE_STATUS) or {}).get("select") or {}
    return Deliverable(
        id=page["id"],
        initiative_id=_relation_id(props.get(DELIVERABLE_INITIATIVE)),
        name=_plain_text(props.get(NAME), "title"),
        description=_plain_text(props.get(DESCRIPTION), "rich_text"),
        status=select.get("name") or DEFAULT_STATUS,
        start_date=_date_start(props.get(DELIVERABLE_START)),
        end_date=_date_start(props.get(DELIVERABLE_END)),
        order=_number(props.get(ORDER)),
    )


# =============================================================================
# Writing properties
# =============================================================================

def _title(value: str) -> Dict[str, Any]:
    return {"title": [{"text": {"content": value}}]}


def _rich_text(value: Optional[str]) -> Dict[str, Any]:
    return {"rich_text": [{"text": {"content": value}}] if value else []}


def _relation(page_id: str) -> Dict[str, Any]:
    return {"relation": [{"id": page_id}]}


def _date(value: Optional[str]) -> Dict[str, Any]:
    # A null date clears the property
    return {"date": {"start": value}} if value else {"date": None}


def goal_properties(data: Dict[str, Any]) -> Dict[str, Any]:
    """Notion properties for a goal payload (snake_case keys, JSON values)."""
    props = {}
    if data.get("name") is not None:
        props[NAME] = _title(data["name"])
    if "description" in data:
        props[DESCRIPTION] = _rich_text(data["description"])
    if data.get("desired_outcome") is not None:
        props[GOAL_DESIRED_OUTCOME] = _rich_text(data["desired_outcome"])
    if data.get("priority") is not None:
        props[GOAL_PRIORITY] = {"number": data["priority"]}
    if data.get("order") is not None:
        props[ORDER] = {"number": data["order"]}
    return props


def initiative_properties(data: Dict[str, Any]) -> Dict[str, Any]:
    props = {}
    if data.get("name") is not None:
        props[NAME] = _title(data["name"])
    if data.get("ideal_outcome") is not None:
        props[INITIATIVE_IDEAL_OUTCOME] = _rich_text(data["ideal_outcome"])
    if data.get("goal_id") is not None:
        props[INITIATIVE_GOAL] = _relation(data["goal_id"])
    if data.get("order") is not None:
        props[ORDER] = {"number": data["order"]}
    return props


def deliverable_properties(data: Dict[str, Any], creating: bool = False) -> Dict[str, Any]:
    """
    Notion properties for a deliverable payload.

    On create an absent date is simply left out; on update a ``None`` date
    is sent as an explicit clear.
    """
    props = {}
    if data.get("name") is not None:
        props[NAME] = _title(data["name"])
    if "description" in data:
        props[DESCRIPTION] = _rich_text(data["description"])
    if data.get("status") is not None:
        props[DELIVERABLE_STATUS] = {"select": {"name": data["status"]}}
    for key, prop_name in (("start_date", DELIVERABLE_START), ("end_date", DELIVERABLE_END)):
        if key not in data or (creating and not data[key]):
            continue
        props[prop_name] = _date(data[key])
    if data.get("initiative_id") is not None:
        props[DELIVERABLE_INITIATIVE] = _relation(data["initiative_id"])
    if data.get("order") is not None:
        props[ORDER] = {"number": data["order"]}
    return props


# =============================================================================
# Database schemas
# =============================================================================

def goals_database_schema() -> Dict[str, Any]:
    return {
        NAME: {"title": {}},
        DESCRIPTION: {"rich_text": {}},
        GOAL_DESIRED_OUTCOME: {"rich_text": {}},
        GOAL_PRIORITY: {"number": {}},
        ORDER: {"number": {}},
    }


def initiatives_database_schema(goals_db_id: str) -> Dict[str, Any]:
    return {
        NAME: {"title": {}},
        INITIATIVE_IDEAL_OUTCOME: {"rich_text": {}},
        INITIATIVE_GOAL: {"relation": {"database_id": goals_db_id, "single_property": {}}},
        ORDER: {"number": {}},
    }


def deliverables_database_schema(initiatives_db_id: str) -> Dict[str, Any]:
    return {
        NAME: {"title": {}},
        DESCRIPTION: {"rich_text": {}},
        DELIVERABLE_STATUS: {
            "select": {
                "options": [
                    {"name": "planned", "color": "gray"},
                    {"name": "in-progress", "color": "blue"},
                    {"name": "shipped", "color": "green"},
                ]
            }
        },
        DELIVERABLE_START: {"date": {}},
        DELIVERABLE_END: {"date": {}},
        DELIVERABLE_INITIATIVE: {"relation": {"database_id": initiatives_db_id, "single_property": {}}},
        ORDER: {"number": {}},
    }
