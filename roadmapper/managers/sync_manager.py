"""
Optimistic sync layer for Roadmapper.

Every mutation is applied to the local RoadmapStore first, then sent to
the backend. When the backend rejects it the store is either rolled back
to the snapshot taken before the change or refetched from the backend,
depending on the failure policy for that entity kind.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from roadmapper.constants import DEFAULT_FAILURE_POLICIES, DEFAULT_STATUS, VALIDATION_FAILED
from roadmapper.exceptions import InvalidOperationError, NotFoundError, ValidationError
from roadmapper.managers.backend import DELIVERABLE, GOAL, INITIATIVE, EntityKind, RoadmapBackend
from roadmapper.managers.events import EntityEvent, EventBus, EventType, SyncEvent
from roadmapper.managers.store import Action, ActionType, RoadmapStore, shift_priorities
from roadmapper.models.base import Deliverable, Goal, Initiative, RoadmapModel
from roadmapper.models.payloads import GoalUpdate
from roadmapper.models.roadmap import Roadmap, RoadmapSettings
from roadmapper.utils import generate_temp_id, validation_details


class FailurePolicy(str, Enum):
    """What to do with local state when the backend rejects a mutation."""

    ROLLBACK = "rollback"
    REFETCH = "refetch"


_ADD = {
    "goal": ActionType.ADD_GOAL,
    "initiative": ActionType.ADD_INITIATIVE,
    "deliverable": ActionType.ADD_DELIVERABLE,
}
_UPDATE = {
    "goal": ActionType.UPDATE_GOAL,
    "initiative": ActionType.UPDATE_INITIATIVE,
    "deliverable": ActionType.UPDATE_DELIVERABLE,
}


def _validate(schema, data: Dict[str, Any]) -> RoadmapModel:
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(VALIDATION_FAILED, validation_details(e))


class RoadmapSync:
    """
    Keeps a RoadmapStore in step with a RoadmapBackend.

    Usage:
        sync = RoadmapSync(RoadmapStore(), HttpBackend(url))
        await sync.refresh()
        goal = await sync.add_goal("Grow", desired_outcome="More users")
    """

    def __init__(
        self,
        store: RoadmapStore,
        backend: RoadmapBackend,
        event_bus: Optional[EventBus] = None,
        policies: Optional[Dict[str, str]] = None,
    ) -> None:
        """
        Initialize the sync layer.

        Args:
            store: Local state container to keep updated.
            backend: Authoritative store behind it.
            event_bus: Optional bus for entity and sync events.
            policies: Failure policy per entity kind ("rollback" or "refetch").
        """
        self.store = store
        self.backend = backend
        self.event_bus = event_bus or EventBus()
        merged = {**DEFAULT_FAILURE_POLICIES, **(policies or {})}
        self.policies = {kind: FailurePolicy(value) for kind, value in merged.items()}

    @property
    def roadmap(self) -> Roadmap:
        return self.store.roadmap

    # =========================================================================
    # Loading
    # =========================================================================

    async def refresh(self) -> Roadmap:
        """Replace local entities with the backend's, fetching all three lists concurrently."""
        self.store.dispatch(Action(ActionType.SET_LOADING, True))
        try:
            goals, initiatives, deliverables = await asyncio.gather(
                self.backend.list(GOAL),
                self.backend.list(INITIATIVE),
                self.backend.list(DELIVERABLE),
            )
        except Exception as e:
            self.store.dispatch(Action(ActionType.SET_ERROR, str(e)))
            raise
        self.store.dispatch(Action(ActionType.LOAD_DATA, {
            "goals": goals,
            "initiatives": initiatives,
            "deliverables": deliverables,
        }))
        self.event_bus.publish(EntityEvent(type=EventType.RESYNCED))
        return self.roadmap

    async def load(self) -> Roadmap:
        """Refresh entities and pick up the stored title and settings if any."""
        await self.refresh()
        meta = await self.backend.load_meta()
        if meta is not None:
            title, settings = meta
            self.store.dispatch(Action(ActionType.UPDATE_TITLE, title))
            self.store.dispatch(Action(ActionType.UPDATE_SETTINGS, settings.model_dump()))
        return self.roadmap

    # =========================================================================
    # Core mutation flow
    # =========================================================================

    async def _mutate(
        self,
        kind: EntityKind,
        operation: str,
        actions: List[Action],
        request: Callable[[], Awaitable[Any]],
        multi: bool = False,
    ) -> Any:
        """
        Apply actions locally, then run the backend request.

        Args:
            kind: Entity kind whose failure policy applies.
            operation: Name used in sync events (create, update, ...).
            actions: Actions applied optimistically, in order.
            request: Coroutine factory performing the backend calls.
            multi: True when the request issues several backend calls.
                Partial success is possible then, so a refetch is forced.

        Returns:
            Whatever the request returned.

        Raises:
            Exception: The backend error, after recovery has been applied.
        """
        snapshot = self.store.snapshot()
        for action in actions:
            self.store.dispatch(action)
        try:
            return await request()
        except Exception as e:
            policy = FailurePolicy.REFETCH if multi else self.policies[kind.name]
            await self._recover(snapshot, policy)
            self.event_bus.publish(SyncEvent(
                type=EventType.SYNC_FAILED,
                entity_kind=kind.name,
                operation=operation,
                policy=policy.value,
                error=str(e),
            ))
            raise

    async def _recover(self, snapshot, policy: FailurePolicy) -> None:
        if policy == FailurePolicy.ROLLBACK:
            self.store.restore(snapshot)
            return
        try:
            await self.refresh()
        except Exception as e:
            # Backend unreachable: the snapshot is the best known state
            self.store.restore(snapshot)
            self.store.dispatch(Action(ActionType.SET_ERROR, str(e)))

    async def _create(self, kind: EntityKind, data: Dict[str, Any]) -> Any:
        payload = _validate(kind.create_schema, data)
        temp = kind.model.model_validate({**payload.model_dump(), "id": generate_temp_id()})

        created = await self._mutate(
            kind,
            "create",
            [Action(_ADD[kind.name], temp)],
            lambda: self.backend.create(kind, payload),
        )

        self.store.dispatch(Action(ActionType.REPLACE_ID, {
            "kind": kind.name,
            "old_id": temp.id,
            "new_id": created.id,
        }))
        self.store.dispatch(Action(_UPDATE[kind.name], {
            "id": created.id,
            "changes": created.model_dump(exclude={"id"}),
        }))
        self.event_bus.publish(EntityEvent(
            type=EventType.ENTITY_CREATED,
            entity_id=created.id,
            entity_kind=kind.name,
            entity_name=created.name,
            temp_id=temp.id,
        ))
        return created

    async def _update(self, kind: EntityKind, entity_id: str, changes: Dict[str, Any]) -> Any:
        current = self._require(kind, entity_id)
        payload = _validate(kind.update_schema, changes)
        patch = payload.model_dump(exclude_unset=True)
        # The merged entity must still be valid, e.g. an end date moved before the start
        merged = _validate(kind.model, {**current.model_dump(), **patch})

        await self._mutate(
            kind,
            "update",
            [Action(_UPDATE[kind.name], {"id": entity_id, "changes": patch})],
            lambda: self.backend.update(kind, entity_id, payload),
        )
        self.event_bus.publish(EntityEvent(
            type=EventType.ENTITY_UPDATED,
            entity_id=entity_id,
            entity_kind=kind.name,
            entity_name=merged.name,
        ))
        return self._require(kind, entity_id)

    def _require(self, kind: EntityKind, entity_id: str) -> Any:
        getter = getattr(self.roadmap, f"get_{kind.name}")
        entity = getter(entity_id)
        if entity is None:
            raise NotFoundError(f"{kind.name.capitalize()} '{entity_id}' not found.")
        return entity

    def _deleted(self, kind: EntityKind, entity: Any) -> None:
        self.event_bus.publish(EntityEvent(
            type=EventType.ENTITY_DELETED,
            entity_id=entity.id,
            entity_kind=kind.name,
            entity_name=entity.name,
        ))

    async def _update_goals(self, before: List[Goal], after: List[Goal]) -> None:
        """Send one PATCH per goal whose priority or order changed."""
        previous = {g.id: g for g in before}
        requests = []
        for goal in after:
            old = previous.get(goal.id)
            if old is None:
                continue
            patch = {}
            if goal.priority != old.priority:
                patch["priority"] = goal.priority
            if goal.order != old.order:
                patch["order"] = goal.order
            if patch:
                requests.append(self.backend.update(GOAL, goal.id, GoalUpdate(**patch)))
        await asyncio.gather(*requests)

    # =========================================================================
    # Goals
    # =========================================================================

    async def add_goal(
        self,
        name: str,
        desired_outcome: str,
        description: Optional[str] = None,
    ) -> Goal:
        """Create a goal at the lowest priority (N+1)."""
        goals = self.roadmap.goals
        return await self._create(GOAL, {
            "name": name,
            "description": description,
            "desired_outcome": desired_outcome,
            "priority": len(goals) + 1,
            "order": len(goals),
        })

    async def update_goal(self, goal_id: str, **changes) -> Goal:
        if "priority" in changes:
            raise InvalidOperationError("Use set_goal_priority to change a goal's priority.")
        return await self._update(GOAL, goal_id, changes)

    async def delete_goal(self, goal_id: str, cascade: bool = False) -> None:
        """
        Delete a goal, closing the gap in the priority sequence.

        Args:
            goal_id: Goal to delete.
            cascade: Also delete its initiatives and their deliverables.

        Raises:
            NotFoundError: If the goal doesn't exist.
            InvalidOperationError: If the goal has initiatives and cascade is False.
        """
        goal = self._require(GOAL, goal_id)
        roadmap = self.roadmap
        initiatives = [i for i in roadmap.initiatives if i.goal_id == goal_id]
        if initiatives and not cascade:
            raise InvalidOperationError(
                f"Goal '{goal.name}' has {len(initiatives)} initiative(s). Use --cascade to delete them too."
            )
        initiative_ids = {i.id for i in initiatives}
        deliverables = [d for d in roadmap.deliverables if d.initiative_id in initiative_ids]
        before = roadmap.goals

        async def request() -> None:
            await asyncio.gather(*(self.backend.delete(DELIVERABLE, d.id) for d in deliverables))
            await asyncio.gather(*(self.backend.delete(INITIATIVE, i.id) for i in initiatives))
            await self.backend.delete(GOAL, goal_id)
            await self._update_goals(before, self.roadmap.goals)

        await self._mutate(
            GOAL,
            "delete",
            [Action(ActionType.DELETE_GOAL, goal_id)],
            request,
            multi=True,
        )
        self._deleted(GOAL, goal)

    async def set_goal_priority(self, goal_id: str, new_priority: int) -> None:
        """Move a goal to a new priority, shifting the goals in between."""
        goal = self._require(GOAL, goal_id)
        count = len(self.roadmap.goals)
        if not 1 <= new_priority <= count:
            raise ValidationError(
                VALIDATION_FAILED,
                [{"field": "priority", "message": f"Priority must be between 1 and {count}"}],
            )
        if new_priority == goal.priority:
            return

        before = self.roadmap.goals
        after = shift_priorities(before, goal_id, new_priority)

        await self._mutate(
            GOAL,
            "reprioritize",
            [Action(ActionType.SET_GOAL_PRIORITY, {"id": goal_id, "priority": new_priority})],
            lambda: self._update_goals(before, after),
            multi=True,
        )

    async def reorder_goals(self, goal_ids: List[str]) -> None:
        """Reorder goals; list position also becomes priority."""
        before = self.roadmap.goals

        async def request() -> None:
            await self._update_goals(before, self.roadmap.goals)

        await self._mutate(
            GOAL,
            "reorder",
            [Action(ActionType.REORDER_GOALS, list(goal_ids))],
            request,
            multi=True,
        )

    # =========================================================================
    # Initiatives
    # =========================================================================

    async def add_initiative(self, goal_id: str, name: str, ideal_outcome: str) -> Initiative:
        self._require(GOAL, goal_id)
        return await self._create(INITIATIVE, {
            "goal_id": goal_id,
            "name": name,
            "ideal_outcome": ideal_outcome,
            "order": len(self.roadmap.initiatives_for(goal_id)),
        })

    async def update_initiative(self, initiative_id: str, **changes) -> Initiative:
        if "goal_id" in changes:
            self._require(GOAL, changes["goal_id"])
        return await self._update(INITIATIVE, initiative_id, changes)

    async def delete_initiative(self, initiative_id: str, cascade: bool = False) -> None:
        """Delete an initiative; with cascade, its deliverables too."""
        initiative = self._require(INITIATIVE, initiative_id)
        deliverables = self.roadmap.deliverables_for(initiative_id)
        if deliverables and not cascade:
            raise InvalidOperationError(
                f"Initiative '{initiative.name}' has {len(deliverables)} deliverable(s). "
                "Use --cascade to delete them too."
            )

        async def request() -> None:
            await asyncio.gather(*(self.backend.delete(DELIVERABLE, d.id) for d in deliverables))
            await self.backend.delete(INITIATIVE, initiative_id)

        await self._mutate(
            INITIATIVE,
            "delete",
            [Action(ActionType.DELETE_INITIATIVE, initiative_id)],
            request,
            multi=bool(deliverables),
        )
        self._deleted(INITIATIVE, initiative)

    async def move_initiative(self, initiative_id: str, goal_id: str) -> Initiative:
        """Re-parent an initiative under another goal, appended last."""
        initiative = self._require(INITIATIVE, initiative_id)
        self._require(GOAL, goal_id)
        if initiative.goal_id == goal_id:
            return initiative

        order = len(self.roadmap.initiatives_for(goal_id))
        payload = INITIATIVE.update_schema(goal_id=goal_id, order=order)
        await self._mutate(
            INITIATIVE,
            "move",
            [Action(ActionType.MOVE_INITIATIVE, {"id": initiative_id, "goal_id": goal_id, "order": order})],
            lambda: self.backend.update(INITIATIVE, initiative_id, payload),
        )
        return self._require(INITIATIVE, initiative_id)

    async def reorder_initiatives(self, goal_id: str, initiative_ids: List[str]) -> None:
        before = {i.id: i.order for i in self.roadmap.initiatives_for(goal_id)}

        async def request() -> None:
            await asyncio.gather(*(
                self.backend.update(INITIATIVE, i.id, INITIATIVE.update_schema(order=i.order))
                for i in self.roadmap.initiatives_for(goal_id)
                if before.get(i.id) != i.order
            ))

        await self._mutate(
            INITIATIVE,
            "reorder",
            [Action(ActionType.REORDER_INITIATIVES, {"goal_id": goal_id, "ids": list(initiative_ids)})],
            request,
            multi=True,
        )

    # =========================================================================
    # Deliverables
    # =========================================================================

    async def add_deliverable(
        self,
        initiative_id: str,
        name: str,
        status: str = DEFAULT_STATUS,
        description: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Deliverable:
        self._require(INITIATIVE, initiative_id)
        return await self._create(DELIVERABLE, {
            "initiative_id": initiative_id,
            "name": name,
            "description": description,
            "status": status,
            "start_date": start_date,
            "end_date": end_date,
            "order": len(self.roadmap.deliverables_for(initiative_id)),
        })

    async def update_deliverable(self, deliverable_id: str, **changes) -> Deliverable:
        if "initiative_id" in changes:
            self._require(INITIATIVE, changes["initiative_id"])
        return await self._update(DELIVERABLE, deliverable_id, changes)

    async def delete_deliverable(self, deliverable_id: str) -> None:
        deliverable = self._require(DELIVERABLE, deliverable_id)
        await self._mutate(
            DELIVERABLE,
            "delete",
            [Action(ActionType.DELETE_DELIVERABLE, deliverable_id)],
            lambda: self.backend.delete(DELIVERABLE, deliverable_id),
        )
        self._deleted(DELIVERABLE, deliverable)

    async def move_deliverable(self, deliverable_id: str, initiative_id: str) -> Deliverable:
        """Re-parent a deliverable under another initiative, appended last."""
        deliverable = self._require(DELIVERABLE, deliverable_id)
        self._require(INITIATIVE, initiative_id)
        if deliverable.initiative_id == initiative_id:
            return deliverable

        order = len(self.roadmap.deliverables_for(initiative_id))
        payload = DELIVERABLE.update_schema(initiative_id=initiative_id, order=order)
        await self._mutate(
            DELIVERABLE,
            "move",
            [Action(ActionType.MOVE_DELIVERABLE, {
                "id": deliverable_id,
                "initiative_id": initiative_id,
                "order": order,
            })],
            lambda: self.backend.update(DELIVERABLE, deliverable_id, payload),
        )
        return self._require(DELIVERABLE, deliverable_id)

    async def reorder_deliverables(self, initiative_id: str, deliverable_ids: List[str]) -> None:
        before = {d.id: d.order for d in self.roadmap.deliverables_for(initiative_id)}

        async def request() -> None:
            await asyncio.gather(*(
                self.backend.update(DELIVERABLE, d.id, DELIVERABLE.update_schema(order=d.order))
                for d in self.roadmap.deliverables_for(initiative_id)
                if before.get(d.id) != d.order
            ))

        await self._mutate(
            DELIVERABLE,
            "reorder",
            [Action(ActionType.REORDER_DELIVERABLES, {
                "initiative_id": initiative_id,
                "ids": list(deliverable_ids),
            })],
            request,
            multi=True,
        )

    # =========================================================================
    # Roadmap-level
    # =========================================================================

    async def update_title(self, title: str) -> None:
        snapshot = self.store.snapshot()
        self.store.dispatch(Action(ActionType.UPDATE_TITLE, title))
        await self._save_meta(snapshot)

    async def update_settings(self, **changes) -> RoadmapSettings:
        snapshot = self.store.snapshot()
        _validate(RoadmapSettings, {**self.roadmap.settings.model_dump(), **changes})
        self.store.dispatch(Action(ActionType.UPDATE_SETTINGS, changes))
        await self._save_meta(snapshot)
        return self.roadmap.settings

    async def _save_meta(self, snapshot) -> None:
        try:
            await self.backend.save_meta(self.roadmap.title, self.roadmap.settings)
        except Exception:
            self.store.restore(snapshot)
            raise
