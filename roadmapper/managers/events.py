"""
Event system for Roadmapper.

Allows decoupled communication between the sync layer and its observers
via events and listeners.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import click


class EventType(str, Enum):
    """Types of events in Roadmapper."""
    ENTITY_CREATED = "entity.created"
    ENTITY_UPDATED = "entity.updated"
    ENTITY_DELETED = "entity.deleted"
    SYNC_FAILED = "sync.failed"
    RESYNCED = "sync.resynced"


@dataclass
class Event:
    """Base event class."""
    type: EventType
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EntityEvent(Event):
    """Event for entity-related actions."""
    entity_id: str = ""
    entity_kind: str = ""
    entity_name: str = ""
    temp_id: Optional[str] = None


@dataclass
class SyncEvent(Event):
    """Event for failed mutations and the recovery applied."""
    entity_kind: str = ""
    operation: str = ""
    policy: str = ""
    error: str = ""


class EventListener(ABC):
    """Base class for event listeners."""

    @abstractmethod
    def handle(self, event: Event) -> None:
        """Handle an event.

        Args:
            event: The event to handle.
        """
        pass

    @property
    @abstractmethod
    def subscribed_events(self) -> List[EventType]:
        """Return list of event types this listener subscribes to."""
        pass


class EventBus:
    """
    Event bus for publishing and subscribing to events.

    One bus is created per sync session and passed to whoever needs it.
    """

    def __init__(self) -> None:
        self._listeners: Dict[EventType, List[EventListener]] = {}

    def subscribe(self, listener: EventListener) -> None:
        """Subscribe a listener to events.

        Args:
            listener: The listener to subscribe.
        """
        for event_type in listener.subscribed_events:
            self._listeners.setdefault(event_type, []).append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        """Unsubscribe a listener from all events.

        Args:
            listener: The listener to unsubscribe.
        """
        for event_type in self._listeners:
            if listener in self._listeners[event_type]:
                self._listeners[event_type].remove(listener)

    def publish(self, event: Event) -> None:
        """Publish an event to all subscribed listeners.

        Args:
            event: The event to publish.
        """
        for listener in list(self._listeners.get(event.type, [])):
            try:
                listener.handle(event)
            except Exception as e:
                # Report but don't stop other listeners
                click.echo(f"  ⚠ Listener {listener.__class__.__name__} failed: {e}", err=True)

    def clear(self) -> None:
        """Remove every listener."""
        self._listeners.clear()


class SyncWarningListener(EventListener):
    """Echo failed mutations and the recovery applied to stderr."""

    @property
    def subscribed_events(self) -> List[EventType]:
        return [EventType.SYNC_FAILED]

    def handle(self, event: Event) -> None:
        if isinstance(event, SyncEvent):
            click.echo(
                f"  ⚠ {event.operation} {event.entity_kind} failed ({event.error}); "
                f"applied {event.policy}",
                err=True,
            )
