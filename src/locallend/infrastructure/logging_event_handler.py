"""Simple logging-backed audit handler for domain events."""

from __future__ import annotations

import logging

from locallend.application.event_publisher import ALL_EVENTS, BaseEventHandler
from locallend.domain.events import DomainEvent

LOGGER = logging.getLogger("locallend.events")


class LoggingEventHandler(BaseEventHandler):
    """Emit event summaries to structured logs."""

    event_type = ALL_EVENTS

    def __init__(self, *, priority: int = 100) -> None:
        self.priority = priority

    def handle(self, event: DomainEvent) -> None:
        LOGGER.info(
            "domain_event_emitted",
            extra={
                "event_id": event.event_id,
                "event_type": event.event_type,
                "aggregate_id": event.aggregate_id,
                "user_id": event.user_id,
                "occurred_at": event.occurred_at.isoformat(),
            },
        )
