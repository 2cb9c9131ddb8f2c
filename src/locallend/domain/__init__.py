"""DDD domain layer."""

from .booking_status import BookingStatus, can_transition
from .errors import (
    BookingConflictError,
    BookingNotFoundError,
    InvalidBookingError,
    InvalidBookingStatusError,
    InvalidStateTransitionError,
    LocalLendError,
    UnauthorizedBookingError,
)
from .events import BookingCompleted, BookingConfirmed, BookingCreated, BookingStateChanged, DomainEvent
from .models import Booking, StateTransition

__all__ = [
    "BookingStatus",
    "can_transition",
    "DomainEvent",
    "BookingCreated",
    "BookingConfirmed",
    "BookingCompleted",
    "BookingStateChanged",
    "Booking",
    "StateTransition",
    "LocalLendError",
    "InvalidBookingStatusError",
    "InvalidStateTransitionError",
    "InvalidBookingError",
    "BookingConflictError",
    "BookingNotFoundError",
    "UnauthorizedBookingError",
]
