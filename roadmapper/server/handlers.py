"""
Request handlers for the Roadmapper API.

Every handler has the signature ``handler(req, res, context)`` and writes
exactly one JSON response. Exceptions never escape a handler; they are
classified into an error body and status.
"""

from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Type

from roadmapper.exceptions import ConfigurationError
from roadmapper.models.base import RoadmapModel
from roadmapper.models.payloads import (
    DeliverableCreate,
    DeliverableUpdate,
    GoalCreate,
    GoalUpdate,
    InitiativeCreate,
    InitiativeUpdate,
)
from roadmapper.notion import mapping
from roadmapper.notion.client import NotionClient
from roadmapper.server.auth import cleared_cookie, is_authorized, key_matches, require_auth, session_cookie
from roadmapper.server.errors import classify_error
from roadmapper.server.http import ApiRequest, ApiResponse, Handler, HandlerContext
from roadmapper.server.validation import validate_body

NOTION_TOKEN_HEADER = "x-notion-token"


def method_not_allowed(res: ApiResponse) -> None:
    res.status(405).json({"error": "Method not allowed"})


def _fail(res: ApiResponse, context: HandlerContext, req: ApiRequest, error: Exception) -> None:
    message, status = classify_error(error)
    if status >= 500:
        context.logger.error("%s %s failed: %s", req.method, req.path, error)
    res.status(status).json({"error": message})


def _workspace_client(context: HandlerContext) -> NotionClient:
    config = context.config
    if not config.is_configured:
        raise ConfigurationError(
            "Notion is not configured. Set " + ", ".join(config.missing()) + "."
        )
    return context.notion_factory(config.notion_token)


# =============================================================================
# Entity resources
# =============================================================================

@dataclass(frozen=True)
class Resource:
    """How one entity kind maps onto its Notion database."""

    kind: str
    create_schema: Type[RoadmapModel]
    update_schema: Type[RoadmapModel]
    from_page: Callable[[Dict[str, Any]], RoadmapModel]
    create_properties: Callable[[Dict[str, Any]], Dict[str, Any]]
    update_properties: Callable[[Dict[str, Any]], Dict[str, Any]]


GOALS = Resource(
    "goal",
    GoalCreate,
    GoalUpdate,
    mapping.page_to_goal,
    mapping.goal_properties,
    mapping.goal_properties,
)
INITIATIVES = Resource(
    "initiative",
    InitiativeCreate,
    InitiativeUpdate,
    mapping.page_to_initiative,
    mapping.initiative_properties,
    mapping.initiative_properties,
)
DELIVERABLES = Resource(
    "deliverable",
    DeliverableCreate,
    DeliverableUpdate,
    mapping.page_to_deliverable,
    partial(mapping.deliverable_properties, creating=True),
    mapping.deliverable_properties,
)


def collection_handler(resource: Resource) -> Handler:
    """GET lists every entity of the kind; POST creates one (201)."""

    def handler(req: ApiRequest, res: ApiResponse, context: HandlerContext) -> None:
        if not require_auth(req, res, context.config):
            return
        try:
            if req.method == "GET":
                with _workspace_client(context) as notion:
                    pages = notion.query_database(context.config.database_ids[resource.kind])
                res.status(200).json([resource.from_page(page).to_json() for page in pages])
                return

            if req.method == "POST":
                payload = validate_body(resource.create_schema, req.body, res)
                if payload is None:
                    return
                data = payload.model_dump(mode="json")
                with _workspace_client(context) as notion:
                    page = notion.create_page(
                        context.config.database_ids[resource.kind],
                        resource.create_properties(data),
                    )
                res.status(201).json({"id": page["id"], **payload.to_json()})
                return

            method_not_allowed(res)
        except Exception as e:
            _fail(res, context, req, e)

    handler.__name__ = f"{resource.kind}s_collection"
    return handler


def item_handler(resource: Resource) -> Handler:
    """PATCH applies a partial update and echoes it; DELETE archives the page."""

    def handler(req: ApiRequest, res: ApiResponse, context: HandlerContext) -> None:
        if not require_auth(req, res, context.config):
            return
        entity_id = req.params.get("id") or req.query.get("id")
        if not entity_id:
            res.status(400).json({"error": f"Missing {resource.kind} ID"})
            return
        try:
            if req.method == "PATCH":
                payload = validate_body(resource.update_schema, req.body, res)
                if payload is None:
                    return
                data = payload.model_dump(mode="json", exclude_unset=True)
                with _workspace_client(context) as notion:
                    notion.update_page(entity_id, resource.update_properties(data))
                res.status(200).json({"id": entity_id, **payload.to_json(exclude_unset=True)})
                return

            if req.method == "DELETE":
                with _workspace_client(context) as notion:
                    notion.archive_page(entity_id)
                res.status(200).json({"success": True})
                return

            method_not_allowed(res)
        except Exception as e:
            _fail(res, context, req, e)

    handler.__name__ = f"{resource.kind}_item"
    return handler


goals_collection = collection_handler(GOALS)
goal_item = item_handler(GOALS)
initiatives_collection = collection_handler(INITIATIVES)
initiative_item = item_handler(INITIATIVES)
deliverables_collection = collection_handler(DELIVERABLES)
deliverable_item = item_handler(DELIVERABLES)


# =============================================================================
# Workspace setup
# =============================================================================

def notion_config(req: ApiRequest, res: ApiResponse, context: HandlerContext) -> None:
    if req.method != "GET":
        return method_not_allowed(res)
    res.status(200).json({"configured": context.config.is_configured})


def validate_token(req: ApiRequest, res: ApiResponse, context: HandlerContext) -> None:
    """Check a user-supplied integration token against users/me."""
    if req.method != "POST":
        return method_not_allowed(res)
    token = req.header(NOTION_TOKEN_HEADER)
    if not token:
        res.status(400).json({"error": "Missing Notion token"})
        return
    try:
        with context.notion_factory(token) as notion:
            user = notion.users_me()
    except Exception as e:
        context.logger.info("Token validation failed: %s", e)
        res.status(401).json({"valid": False, "error": "Invalid token or insufficient permissions"})
        return
    res.status(200).json({
        "valid": True,
        "user": {"id": user.get("id"), "name": user.get("name"), "type": user.get("type")},
    })


def create_databases(req: ApiRequest, res: ApiResponse, context: HandlerContext) -> None:
    """Create the goals, initiatives and deliverables databases under a page."""
    if req.method != "POST":
        return method_not_allowed(res)
    token = req.header(NOTION_TOKEN_HEADER)
    if not token:
        res.status(400).json({"error": "Missing Notion token"})
        return
    body = req.body if isinstance(req.body, dict) else {}
    parent_page_id = body.get("parentPageId")
    if not parent_page_id:
        res.status(400).json({"error": "Missing parent page ID"})
        return

    try:
        with context.notion_factory(token) as notion:
            goals_db = notion.create_database(parent_page_id, "Goals", mapping.goals_database_schema())
            initiatives_db = notion.create_database(
                parent_page_id, "Initiatives", mapping.initiatives_database_schema(goals_db["id"])
            )
            deliverables_db = notion.create_database(
                parent_page_id, "Deliverables", mapping.deliverables_database_schema(initiatives_db["id"])
            )
    except Exception as e:
        context.logger.error("Error creating databases: %s", e)
        res.status(500).json({"error": str(e) or "Unknown error"})
        return

    res.status(200).json({
        "success": True,
        "databases": {
            "goalsDbId": goals_db["id"],
            "initiativesDbId": initiatives_db["id"],
            "deliverablesDbId": deliverables_db["id"],
        },
    })


# =============================================================================
# Auth
# =============================================================================

def auth_login(req: ApiRequest, res: ApiResponse, context: HandlerContext) -> None:
    if req.method != "POST":
        return method_not_allowed(res)
    api_key = context.config.api_key
    if not api_key:
        res.status(200).json({"success": True, "message": "Auth not configured"})
        return
    key = req.body.get("key") if isinstance(req.body, dict) else None
    if not key_matches(key, api_key):
        res.status(401).json({"error": "Invalid access key"})
        return
    res.set_header("Set-Cookie", session_cookie(key))
    res.status(200).json({"success": True})


def auth_logout(req: ApiRequest, res: ApiResponse, context: HandlerContext) -> None:
    if req.method != "POST":
        return method_not_allowed(res)
    res.set_header("Set-Cookie", cleared_cookie())
    res.status(200).json({"success": True})


def auth_status(req: ApiRequest, res: ApiResponse, context: HandlerContext) -> None:
    if req.method != "GET":
        return method_not_allowed(res)
    if not context.config.api_key:
        res.status(200).json({"authenticated": True, "authRequired": False})
        return
    res.status(200).json({"authenticated": is_authorized(req, context.config), "authRequired": True})


# Route table shared by the Flask app and serverless entry points
ROUTES = [
    ("/api/auth/login", auth_login),
    ("/api/auth/logout", auth_logout),
    ("/api/auth/status", auth_status),
    ("/api/notion/config", notion_config),
    ("/api/notion/validate-token", validate_token),
    ("/api/notion/create-databases", create_databases),
    ("/api/notion/goals", goals_collection),
    ("/api/notion/goals/<id>", goal_item),
    ("/api/notion/initiatives", initiatives_collection),
    ("/api/notion/initiatives/<id>", initiative_item),
    ("/api/notion/deliverables", deliverables_collection),
    ("/api/notion/deliverables/<id>", deliverable_item),
]
