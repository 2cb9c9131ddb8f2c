"""Domain error types for booking workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from locallend.domain.booking_status import BookingStatus
    from locallend.domain.models import StateTransition


class LocalLendError(Exception):
    """Base error carrying a stable machine-readable code."""

    code = "locallend_error"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidBookingStatusError(LocalLendError, ValueError):
    """Raised when a booking status name cannot be parsed."""

    code = "invalid_booking_status"


class InvalidStateTransitionError(LocalLendError):
    """Raised when a booking is asked to move along an illegal edge."""

    code = "invalid_state_transition"

    def __init__(
        self,
        current_status: BookingStatus,
        target_status: BookingStatus,
        transition: StateTransition | None = None,
    ) -> None:
        super().__init__(
            f"Cannot transition booking from '{current_status.name}' to '{target_status.name}'"
        )
        self.current_status = current_status
        self.target_status = target_status
        self.transition = transition


class InvalidBookingError(LocalLendError, ValueError):
    """Booking request failed validation."""

    code = "invalid_booking"


class BookingConflictError(LocalLendError):
    """The item is already booked for an overlapping date range."""

    code = "booking_conflict"

    def __init__(self, item_id: str, conflicting_booking_id: str) -> None:
        super().__init__(
            f"Item already booked for selected dates. Conflict with booking {conflicting_booking_id}"
        )
        self.item_id = item_id
        self.conflicting_booking_id = conflicting_booking_id


class BookingNotFoundError(LocalLendError, LookupError):
    code = "booking_not_found"

    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking not found: {booking_id}")
        self.booking_id = booking_id


class UnauthorizedBookingError(LocalLendError, PermissionError):
    """The acting user is not allowed to perform the booking operation."""

    code = "unauthorized_booking_access"
