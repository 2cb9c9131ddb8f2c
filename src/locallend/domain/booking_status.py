"""Booking lifecycle states and the transition table between them."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

from locallend.domain.errors import InvalidBookingStatusError


class BookingStatus(str, Enum):
    """Lifecycle status of a booking, from request to return or cancellation."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"
    OVERDUE = "OVERDUE"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def can_be_cancelled(self) -> bool:
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    @property
    def can_be_confirmed(self) -> bool:
        return self is BookingStatus.PENDING

    @property
    def can_be_activated(self) -> bool:
        return self is BookingStatus.CONFIRMED

    @property
    def can_be_completed(self) -> bool:
        # OVERDUE counts as completable here but has no outgoing edge in
        # _TRANSITIONS; keep both as they are until product decides.
        return self in (BookingStatus.ACTIVE, BookingStatus.OVERDUE)

    @property
    def is_final_status(self) -> bool:
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.REJECTED)

    @property
    def is_active(self) -> bool:
        return self in (BookingStatus.ACTIVE, BookingStatus.OVERDUE)

    def allowed_transitions(self) -> frozenset[BookingStatus]:
        return _TRANSITIONS[self]

    def can_transition_to(self, target: BookingStatus | None) -> bool:
        """Return whether a booking in this status may move to ``target``."""

        if target is None:
            return False
        return target in _TRANSITIONS[self]

    @classmethod
    def from_string(cls, value: str | None) -> BookingStatus:
        """Parse a status name case-insensitively, ignoring surrounding whitespace."""

        if value is None or not value.strip():
            raise InvalidBookingStatusError(
                f"Booking status cannot be null or empty. Valid values are: {_valid_names()}"
            )

        normalized = value.strip().upper()
        try:
            return cls[normalized]
        except KeyError:
            raise InvalidBookingStatusError(
                f"Invalid booking status: '{value}'. Valid values are: {_valid_names()}"
            ) from None


_DESCRIPTIONS: dict[BookingStatus, str] = {
    BookingStatus.PENDING: "Pending - Waiting for owner approval",
    BookingStatus.CONFIRMED: "Confirmed - Approved by owner, awaiting pickup",
    BookingStatus.ACTIVE: "Active - Item currently borrowed",
    BookingStatus.COMPLETED: "Completed - Item returned successfully",
    BookingStatus.CANCELLED: "Cancelled - Booking cancelled by borrower",
    BookingStatus.REJECTED: "Rejected - Declined by owner",
    BookingStatus.OVERDUE: "Overdue - Return date passed",
}

_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {BookingStatus.CONFIRMED, BookingStatus.CANCELLED, BookingStatus.REJECTED}
    ),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.ACTIVE, BookingStatus.CANCELLED}),
    BookingStatus.ACTIVE: frozenset({BookingStatus.COMPLETED, BookingStatus.OVERDUE}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.REJECTED: frozenset(),
    BookingStatus.OVERDUE: frozenset(),
}


def _valid_names() -> str:
    return ", ".join(member.name for member in BookingStatus)


def can_transition(current: BookingStatus, target: BookingStatus | None) -> bool:
    """Functional form of :meth:`BookingStatus.can_transition_to`."""

    return current.can_transition_to(target)


EnumT = TypeVar("EnumT", bound=Enum)


def enum_values(enum_cls: type[EnumT]) -> tuple[str, ...]:
    """Return enum values for UI/API hinting in declaration order."""

    return tuple(str(member.value) for member in enum_cls)
