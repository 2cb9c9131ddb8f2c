"""Domain models for bookings and their lifecycle audit records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from locallend.domain.booking_status import BookingStatus


@dataclass(slots=True)
class Booking:
    """A borrower's reservation of an owner's item for a date range."""

    item_id: str
    borrower_id: str
    owner_id: str
    start_date: datetime
    end_date: datetime
    booking_id: str = field(default_factory=lambda: str(uuid4()))
    status: BookingStatus = BookingStatus.PENDING
    booking_notes: str | None = None
    owner_notes: str | None = None
    cancellation_reason: str | None = None
    return_condition: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    updated_at: datetime | None = None
    confirmed_at: datetime | None = None
    pickup_at: datetime | None = None
    returned_at: datetime | None = None
    cancelled_at: datetime | None = None

    @property
    def duration_days(self) -> int:
        return max(1, (self.end_date - self.start_date).days)

    def is_overdue(self, now: datetime) -> bool:
        return self.status is BookingStatus.ACTIVE and now > self.end_date


@dataclass(frozen=True, slots=True)
class StateTransition:
    """Audit record of one attempted booking status change."""

    from_status: BookingStatus
    to_status: BookingStatus
    triggered_by: str | None
    transition_time: datetime
    successful: bool
    reason: str | None = None
    error_message: str | None = None

    @classmethod
    def success(
        cls,
        from_status: BookingStatus,
        to_status: BookingStatus,
        triggered_by: str | None,
        reason: str | None,
        *,
        at: datetime | None = None,
    ) -> StateTransition:
        return cls(
            from_status=from_status,
            to_status=to_status,
            triggered_by=triggered_by,
            transition_time=at or datetime.now(tz=timezone.utc),
            successful=True,
            reason=reason,
        )

    @classmethod
    def failure(
        cls,
        from_status: BookingStatus,
        to_status: BookingStatus,
        triggered_by: str | None,
        error_message: str,
        *,
        at: datetime | None = None,
    ) -> StateTransition:
        return cls(
            from_status=from_status,
            to_status=to_status,
            triggered_by=triggered_by,
            transition_time=at or datetime.now(tz=timezone.utc),
            successful=False,
            error_message=error_message,
        )

    @property
    def description(self) -> str:
        if self.successful:
            return (
                f"Successfully transitioned from {self.from_status.name} "
                f"to {self.to_status.name}: {self.reason}"
            )
        return (
            f"Failed to transition from {self.from_status.name} "
            f"to {self.to_status.name}: {self.error_message}"
        )
