"""Best-effort domain event channel with an in-process audit log.

Publishing never raises into the caller; dispatch failures are logged and the
event is still recorded. The log is bounded and append-only, oldest entries
drop first once ``log_limit`` is reached.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Iterable

from locallend.application.event_publisher import EventDispatcher
from locallend.domain.events import DomainEvent

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 10_000


class DomainEventChannel:
    """Publish-only sink that forwards events to an injected dispatcher."""

    def __init__(self, dispatcher: EventDispatcher, *, log_limit: int | None = DEFAULT_LOG_LIMIT) -> None:
        if log_limit is not None and log_limit < 1:
            raise ValueError("log_limit must be >= 1 when provided.")
        self._dispatcher = dispatcher
        self._published: deque[DomainEvent] = deque(maxlen=log_limit)
        self._lock = threading.Lock()

    @property
    def log_limit(self) -> int | None:
        return self._published.maxlen

    def publish(self, event: DomainEvent | None) -> None:
        if event is None:
            logger.warning("Attempted to publish null event")
            return

        logger.info(
            "Publishing domain event: %s | Type: %s | AggregateId: %s",
            event.event_id,
            event.event_type,
            event.aggregate_id,
            extra=event.log_summary(),
        )

        try:
            self._dispatcher.dispatch(event)
        except Exception as error:  # noqa: BLE001
            logger.error(
                "Failed to publish event: %s | Error: %s",
                event.event_id,
                error,
                exc_info=error,
                extra=event.log_summary(),
            )
        else:
            logger.debug("Successfully published event: %s", event.event_id)

        with self._lock:
            self._published.append(event)

    def publish_all(self, events: Iterable[DomainEvent | None] | None) -> None:
        if events is None:
            return

        batch = list(events)
        if not batch:
            return

        logger.info("Publishing %d domain events", len(batch))
        for event in batch:
            self.publish(event)

    def published_event_count(self) -> int:
        with self._lock:
            return len(self._published)

    def clear_published_events(self) -> None:
        with self._lock:
            self._published.clear()

    def published_events(self) -> list[DomainEvent]:
        """Return a copy of the audit log, oldest first."""

        with self._lock:
            return list(self._published)
