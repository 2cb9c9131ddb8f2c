"""Application-level event publishing contracts."""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable

from locallend.domain.events import DomainEvent

ALL_EVENTS = "*"


class EventPublisher(Protocol):
    """Port for publishing domain events."""

    def publish(self, event: DomainEvent | None) -> None:
        """Publish a single event."""

    def publish_all(self, events: Iterable[DomainEvent | None] | None) -> None:
        """Publish events in order."""


class EventDispatcher(Protocol):
    """Delivers one event to every handler registered for its type."""

    def dispatch(self, event: DomainEvent) -> None:
        """Dispatch an event to its handlers."""


@runtime_checkable
class EventHandler(Protocol):
    """Processes one event type; lower ``priority`` runs first."""

    event_type: str
    priority: int
    is_async: bool

    def handle(self, event: DomainEvent) -> None:
        """Handle the event."""


class BaseEventHandler:
    """Convenience base supplying handler defaults: synchronous, priority 0."""

    event_type: str = ALL_EVENTS
    priority: int = 0
    is_async: bool = False

    def handle(self, event: DomainEvent) -> None:
        raise NotImplementedError


class NullEventPublisher:
    """No-op publisher used when event streaming is disabled."""

    def publish(self, event: DomainEvent | None) -> None:  # noqa: ARG002
        return

    def publish_all(self, events: Iterable[DomainEvent | None] | None) -> None:  # noqa: ARG002
        return
