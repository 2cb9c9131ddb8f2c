"""Domain event contracts for booking workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from locallend.domain.booking_status import BookingStatus


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainEvent:
    """Something that happened to an aggregate, raised once the change is committed."""

    event_type: str
    aggregate_id: str
    user_id: str | None = None
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=_utcnow)

    def log_summary(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class BookingCreated(DomainEvent):
    """A borrower requested an item; the booking waits for owner approval."""

    event_type: str = "BookingCreated"
    booking_id: str
    item_id: str
    borrower_id: str
    owner_id: str
    start_date: datetime
    end_date: datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class BookingConfirmed(DomainEvent):
    """The owner approved the booking."""

    event_type: str = "BookingConfirmed"
    booking_id: str
    item_id: str
    borrower_id: str
    owner_id: str
    confirmed_at: datetime = field(default_factory=_utcnow)
    owner_notes: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class BookingCompleted(DomainEvent):
    """The item was returned; ratings and trust scores can follow."""

    event_type: str = "BookingCompleted"
    booking_id: str
    item_id: str
    borrower_id: str
    owner_id: str
    completed_at: datetime = field(default_factory=_utcnow)
    actual_start_date: datetime | None = None
    actual_end_date: datetime | None = None
    was_overdue: bool = False
    return_condition: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class BookingStateChanged(DomainEvent):
    """Generic status change, emitted for every transition for auditing."""

    event_type: str = "BookingStateChanged"
    booking_id: str
    previous_status: BookingStatus
    new_status: BookingStatus
    reason: str | None = None
    transition_time: datetime = field(default_factory=_utcnow)

    @property
    def is_terminal_transition(self) -> bool:
        return self.new_status.is_final_status

    @property
    def transition_description(self) -> str:
        return (
            f"Booking {self.booking_id} transitioned from "
            f"{self.previous_status.name} to {self.new_status.name}"
        )
