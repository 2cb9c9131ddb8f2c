"""Infrastructure adapters for booking persistence."""

from __future__ import annotations

import logging
import threading
from datetime import datetime

from locallend.application.booking_repository import BookingRepository
from locallend.domain.booking_status import BookingStatus
from locallend.domain.models import Booking

logger = logging.getLogger(__name__)


class InMemoryBookingRepository(BookingRepository):
    """Process-local booking store keyed by booking id."""

    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}
        self._lock = threading.Lock()

    def get(self, booking_id: str) -> Booking | None:
        with self._lock:
            return self._bookings.get(booking_id)

    def save(self, booking: Booking) -> Booking:
        with self._lock:
            self._bookings[booking.booking_id] = booking
        logger.debug(
            "Saved booking",
            extra={"booking_id": booking.booking_id, "status": booking.status.name},
        )
        return booking

    def list_by_status(self, status: BookingStatus) -> list[Booking]:
        with self._lock:
            return [booking for booking in self._bookings.values() if booking.status is status]

    def find_conflicting(self, item_id: str, start_date: datetime, end_date: datetime) -> list[Booking]:
        with self._lock:
            return [
                booking
                for booking in self._bookings.values()
                if booking.item_id == item_id
                and not booking.status.is_final_status
                and booking.start_date < end_date
                and start_date < booking.end_date
            ]

    def clear(self) -> None:
        with self._lock:
            self._bookings.clear()
