"""Application port for booking persistence."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from locallend.domain.booking_status import BookingStatus
from locallend.domain.models import Booking


class BookingRepository(Protocol):
    """Port implemented by infrastructure adapters for booking storage."""

    def get(self, booking_id: str) -> Booking | None:
        """Return the booking or ``None`` when unknown."""

    def save(self, booking: Booking) -> Booking:
        """Insert or replace a booking."""

    def list_by_status(self, status: BookingStatus) -> list[Booking]:
        """Return bookings currently in ``status``."""

    def find_conflicting(self, item_id: str, start_date: datetime, end_date: datetime) -> list[Booking]:
        """Return non-final bookings of ``item_id`` whose dates overlap the range."""
