from __future__ import annotations

from datetime import datetime, timezone

import pytest

from locallend.domain.events import DomainEvent


class RecordingDispatcher:
    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.events = []
        self.fail_on = fail_on or set()

    def dispatch(self, event) -> None:
        if event.event_id in self.fail_on:
            raise RuntimeError(f"dispatch failed for {event.event_id}")
        self.events.append(event)


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    def publish(self, event) -> None:
        if event is not None:
            self.events.append(event)

    def publish_all(self, events) -> None:
        for event in events or []:
            self.publish(event)


def make_event(event_id: str, event_type: str = "BookingCreated", aggregate_id: str = "booking-1") -> DomainEvent:
    return DomainEvent(
        event_id=event_id,
        event_type=event_type,
        aggregate_id=aggregate_id,
        user_id="user-1",
        occurred_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()
