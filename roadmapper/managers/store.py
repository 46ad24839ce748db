"""
RoadmapStore for Roadmapper.

Single-writer state container for the local roadmap cache. All changes go
through ``dispatch`` and the pure ``roadmap_reducer``, which never mutates
the previous state, so any earlier state can serve as a rollback snapshot.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from roadmapper.models.base import Goal, RoadmapModel
from roadmapper.models.roadmap import Roadmap
from roadmapper.utils import now_iso


class ActionType(str, Enum):
    """State transitions understood by the reducer."""

    SET_LOADING = "SET_LOADING"
    SET_ERROR = "SET_ERROR"
    LOAD_DATA = "LOAD_DATA"
    ADD_GOAL = "ADD_GOAL"
    UPDATE_GOAL = "UPDATE_GOAL"
    DELETE_GOAL = "DELETE_GOAL"
    SET_GOAL_PRIORITY = "SET_GOAL_PRIORITY"
    REORDER_GOALS = "REORDER_GOALS"
    ADD_INITIATIVE = "ADD_INITIATIVE"
    UPDATE_INITIATIVE = "UPDATE_INITIATIVE"
    DELETE_INITIATIVE = "DELETE_INITIATIVE"
    MOVE_INITIATIVE = "MOVE_INITIATIVE"
    REORDER_INITIATIVES = "REORDER_INITIATIVES"
    ADD_DELIVERABLE = "ADD_DELIVERABLE"
    UPDATE_DELIVERABLE = "UPDATE_DELIVERABLE"
    DELETE_DELIVERABLE = "DELETE_DELIVERABLE"
    MOVE_DELIVERABLE = "MOVE_DELIVERABLE"
    REORDER_DELIVERABLES = "REORDER_DELIVERABLES"
    REPLACE_ID = "REPLACE_ID"
    UPDATE_SETTINGS = "UPDATE_SETTINGS"
    UPDATE_TITLE = "UPDATE_TITLE"
    IMPORT_ROADMAP = "IMPORT_ROADMAP"
    RESET_ROADMAP = "RESET_ROADMAP"


@dataclass(frozen=True)
class Action:
    type: ActionType
    payload: Any = None


@dataclass(frozen=True)
class RoadmapState:
    roadmap: Roadmap
    is_loading: bool = False
    error: Optional[str] = None


def _merge(model: RoadmapModel, changes: Dict[str, Any]) -> RoadmapModel:
    """Apply a partial patch and re-validate the result."""
    return type(model).model_validate({**model.model_dump(), **changes})


def _reorder(items: List, ids: List[str], **extra) -> List:
    by_id = {item.id: item for item in items}
    return [
        by_id[item_id].model_copy(update={"order": index, **{k: f(index) for k, f in extra.items()}})
        for index, item_id in enumerate(ids)
        if item_id in by_id
    ]


def shift_priorities(goals: List[Goal], goal_id: str, new_priority: int) -> List[Goal]:
    """Move one goal to a new priority, shifting the goals in between by one.

    Moving down (old < new) pulls goals in (old, new] up by one; moving up
    pushes goals in [new, old) down by one. The sequence stays dense.
    """
    goal = next((g for g in goals if g.id == goal_id), None)
    if goal is None or goal.priority == new_priority:
        return goals

    old_priority = goal.priority
    updated = []
    for g in goals:
        if g.id == goal_id:
            updated.append(g.model_copy(update={"priority": new_priority}))
        elif new_priority < old_priority and new_priority <= g.priority < old_priority:
            updated.append(g.model_copy(update={"priority": g.priority + 1}))
        elif new_priority > old_priority and old_priority < g.priority <= new_priority:
            updated.append(g.model_copy(update={"priority": g.priority - 1}))
        else:
            updated.append(g)
    return updated


def roadmap_reducer(state: RoadmapState, action: Action) -> RoadmapState:
    """Compute the next state for an action. Never mutates ``state``."""
    roadmap = state.roadmap
    payload = action.payload

    def update_roadmap(**updates) -> RoadmapState:
        return replace(
            state,
            roadmap=roadmap.model_copy(update={**updates, "updated_at": now_iso()}),
        )

    kind = action.type

    if kind == ActionType.SET_LOADING:
        return replace(state, is_loading=bool(payload))

    if kind == ActionType.SET_ERROR:
        return replace(state, error=payload, is_loading=False)

    if kind == ActionType.LOAD_DATA:
        return replace(
            state,
            is_loading=False,
            error=None,
            roadmap=roadmap.model_copy(update={
                "goals": list(payload["goals"]),
                "initiatives": list(payload["initiatives"]),
                "deliverables": list(payload["deliverables"]),
            }),
        )

    # Goals

    if kind == ActionType.ADD_GOAL:
        return update_roadmap(goals=[*roadmap.goals, payload])

    if kind == ActionType.UPDATE_GOAL:
        return update_roadmap(goals=[
            _merge(g, payload["changes"]) if g.id == payload["id"] else g
            for g in roadmap.goals
        ])

    if kind == ActionType.DELETE_GOAL:
        deleted = roadmap.get_goal(payload)
        if deleted is None:
            return state
        goals = [
            g.model_copy(update={"priority": g.priority - 1}) if g.priority > deleted.priority else g
            for g in roadmap.goals
            if g.id != payload
        ]
        removed_initiatives = {i.id for i in roadmap.initiatives if i.goal_id == payload}
        return update_roadmap(
            goals=goals,
            initiatives=[i for i in roadmap.initiatives if i.goal_id != payload],
            deliverables=[
                d for d in roadmap.deliverables if d.initiative_id not in removed_initiatives
            ],
        )

    if kind == ActionType.SET_GOAL_PRIORITY:
        goals = shift_priorities(roadmap.goals, payload["id"], payload["priority"])
        if goals is roadmap.goals:
            return state
        return update_roadmap(goals=goals)

    if kind == ActionType.REORDER_GOALS:
        # Unlisted goals follow the listed ones in their current priority order.
        listed = [goal_id for goal_id in dict.fromkeys(payload) if roadmap.get_goal(goal_id)]
        rest = [g.id for g in roadmap.goals_by_priority() if g.id not in set(listed)]
        return update_roadmap(
            goals=_reorder(roadmap.goals, [*listed, *rest], priority=lambda index: index + 1)
        )

    # Initiatives

    if kind == ActionType.ADD_INITIATIVE:
        return update_roadmap(initiatives=[*roadmap.initiatives, payload])

    if kind == ActionType.UPDATE_INITIATIVE:
        return update_roadmap(initiatives=[
            _merge(i, payload["changes"]) if i.id == payload["id"] else i
            for i in roadmap.initiatives
        ])

    if kind == ActionType.DELETE_INITIATIVE:
        return update_roadmap(
            initiatives=[i for i in roadmap.initiatives if i.id != payload],
            deliverables=[d for d in roadmap.deliverables if d.initiative_id != payload],
        )

    if kind == ActionType.MOVE_INITIATIVE:
        return update_roadmap(initiatives=[
            i.model_copy(update={"goal_id": payload["goal_id"], "order": payload.get("order", i.order)})
            if i.id == payload["id"] else i
            for i in roadmap.initiatives
        ])

    if kind == ActionType.REORDER_INITIATIVES:
        others = [i for i in roadmap.initiatives if i.goal_id != payload["goal_id"]]
        siblings = [i for i in roadmap.initiatives if i.goal_id == payload["goal_id"]]
        return update_roadmap(initiatives=[*others, *_reorder(siblings, payload["ids"])])

    # Deliverables

    if kind == ActionType.ADD_DELIVERABLE:
        return update_roadmap(deliverables=[*roadmap.deliverables, payload])

    if kind == ActionType.UPDATE_DELIVERABLE:
        return update_roadmap(deliverables=[
            _merge(d, payload["changes"]) if d.id == payload["id"] else d
            for d in roadmap.deliverables
        ])

    if kind == ActionType.DELETE_DELIVERABLE:
        return update_roadmap(
            deliverables=[d for d in roadmap.deliverables if d.id != payload]
        )

    if kind == ActionType.MOVE_DELIVERABLE:
        return update_roadmap(deliverables=[
            d.model_copy(update={
                "initiative_id": payload["initiative_id"],
                "order": payload.get("order", d.order),
            })
            if d.id == payload["id"] else d
            for d in roadmap.deliverables
        ])

    if kind == ActionType.REORDER_DELIVERABLES:
        others = [d for d in roadmap.deliverables if d.initiative_id != payload["initiative_id"]]
        siblings = [d for d in roadmap.deliverables if d.initiative_id == payload["initiative_id"]]
        return update_roadmap(deliverables=[*others, *_reorder(siblings, payload["ids"])])

    if kind == ActionType.REPLACE_ID:
        return _replace_id(state, payload["kind"], payload["old_id"], payload["new_id"])

    # Roadmap-level

    if kind == ActionType.UPDATE_SETTINGS:
        return update_roadmap(settings=_merge(roadmap.settings, payload))

    if kind == ActionType.UPDATE_TITLE:
        return update_roadmap(title=payload)

    if kind == ActionType.IMPORT_ROADMAP:
        return replace(state, roadmap=payload, is_loading=False, error=None)

    if kind == ActionType.RESET_ROADMAP:
        return replace(state, roadmap=Roadmap(), is_loading=False, error=None)

    return state


def _replace_id(state: RoadmapState, kind: str, old_id: str, new_id: str) -> RoadmapState:
    """Swap a temporary id for the server id, including child references."""
    roadmap = state.roadmap

    def swap(items):
        return [i.model_copy(update={"id": new_id}) if i.id == old_id else i for i in items]

    if kind == "goal":
        updates = {
            "goals": swap(roadmap.goals),
            "initiatives": [
                i.model_copy(update={"goal_id": new_id}) if i.goal_id == old_id else i
                for i in roadmap.initiatives
            ],
        }
    elif kind == "initiative":
        updates = {
            "initiatives": swap(roadmap.initiatives),
            "deliverables": [
                d.model_copy(update={"initiative_id": new_id}) if d.initiative_id == old_id else d
                for d in roadmap.deliverables
            ],
        }
    elif kind == "deliverable":
        updates = {"deliverables": swap(roadmap.deliverables)}
    else:
        raise ValueError(f"Unknown entity kind: '{kind}'")

    return replace(state, roadmap=roadmap.model_copy(update=updates))


class RoadmapStore:
    """
    Holds the current RoadmapState and applies actions to it.

    Usage:
        store = RoadmapStore()
        store.subscribe(lambda state: print(len(state.roadmap.goals)))
        store.dispatch(Action(ActionType.ADD_GOAL, goal))
    """

    def __init__(self, roadmap: Optional[Roadmap] = None) -> None:
        self._state = RoadmapState(roadmap=roadmap or Roadmap())
        self._subscribers: List[Callable[[RoadmapState], None]] = []

    @property
    def state(self) -> RoadmapState:
        return self._state

    @property
    def roadmap(self) -> Roadmap:
        return self._state.roadmap

    def dispatch(self, action: Action) -> RoadmapState:
        """Apply an action and notify subscribers if the state changed."""
        next_state = roadmap_reducer(self._state, action)
        if next_state is not self._state:
            self._state = next_state
            self._notify()
        return self._state

    def snapshot(self) -> RoadmapState:
        return self._state

    def restore(self, snapshot: RoadmapState) -> None:
        """Roll back to an earlier state."""
        self._state = snapshot
        self._notify()

    def subscribe(self, callback: Callable[[RoadmapState], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self._state)
