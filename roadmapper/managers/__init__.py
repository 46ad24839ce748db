"""
Managers for Roadmapper.

This package contains the classes that hold and synchronize roadmap state:
- RoadmapStore: Single-writer local cache driven by actions
- RoadmapSync: Optimistic mutations with rollback or refetch on failure
- HttpBackend / LocalBackend: Authoritative stores behind the cache
- StorageManager: Persistence to the .roadmap/ folder
- EventBus: Event-driven notifications for created, updated and failed changes
"""

from roadmapper.managers.api_client import HttpBackend
from roadmapper.managers.backend import DELIVERABLE, GOAL, INITIATIVE, EntityKind, RoadmapBackend
from roadmapper.managers.events import (
    EntityEvent,
    Event,
    EventBus,
    EventListener,
    EventType,
    SyncEvent,
    SyncWarningListener,
)
from roadmapper.managers.local_backend import LocalBackend
from roadmapper.managers.storage_manager import StorageManager
from roadmapper.managers.store import Action, ActionType, RoadmapState, RoadmapStore
from roadmapper.managers.sync_manager import FailurePolicy, RoadmapSync

__all__ = [
    "Action",
    "ActionType",
    "DELIVERABLE",
    "EntityEvent",
    "EntityKind",
    "Event",
    "EventBus",
    "EventListener",
    "EventType",
    "FailurePolicy",
    "GOAL",
    "HttpBackend",
    "INITIATIVE",
    "LocalBackend",
    "RoadmapBackend",
    "RoadmapState",
    "RoadmapStore",
    "RoadmapSync",
    "StorageManager",
    "SyncEvent",
    "SyncWarningListener",
]
