"""
Backend interface for the sync layer.

A backend is the authoritative store behind the local cache: either the
HTTP API (which proxies Notion) or a local JSON file.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type

from roadmapper.models.base import Deliverable, Goal, Initiative, RoadmapModel
from roadmapper.models.payloads import (
    DeliverableCreate,
    DeliverableUpdate,
    GoalCreate,
    GoalUpdate,
    InitiativeCreate,
    InitiativeUpdate,
)
from roadmapper.models.roadmap import RoadmapSettings


@dataclass(frozen=True)
class EntityKind:
    """Everything needed to handle one entity type generically."""

    name: str
    collection: str
    model: Type[RoadmapModel]
    create_schema: Type[RoadmapModel]
    update_schema: Type[RoadmapModel]


GOAL = EntityKind("goal", "goals", Goal, GoalCreate, GoalUpdate)
INITIATIVE = EntityKind("initiative", "initiatives", Initiative, InitiativeCreate, InitiativeUpdate)
DELIVERABLE = EntityKind("deliverable", "deliverables", Deliverable, DeliverableCreate, DeliverableUpdate)


class RoadmapBackend(ABC):
    """Async CRUD over the three entity collections."""

    @abstractmethod
    async def list(self, kind: EntityKind) -> List[Any]:
        """Fetch every entity of a kind."""

    @abstractmethod
    async def create(self, kind: EntityKind, payload: RoadmapModel) -> Any:
        """Create an entity and return it with its permanent id."""

    @abstractmethod
    async def update(self, kind: EntityKind, entity_id: str, payload: RoadmapModel) -> Dict[str, Any]:
        """Apply a partial update; only fields set on the payload are sent."""

    @abstractmethod
    async def delete(self, kind: EntityKind, entity_id: str) -> None:
        """Delete (or archive) a single entity. Never cascades."""

    async def load_meta(self) -> Optional[Tuple[str, RoadmapSettings]]:
        """Stored title and settings, or None if the backend does not keep them."""
        return None

    async def save_meta(self, title: str, settings: RoadmapSettings) -> None:
        """Persist roadmap title and settings where the backend supports it."""
        return None

    async def aclose(self) -> None:
        return None
