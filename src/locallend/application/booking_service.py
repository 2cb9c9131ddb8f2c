"""Application services orchestrating booking lifecycle use-cases."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable

from locallend.application.booking_repository import BookingRepository
from locallend.application.event_publisher import EventPublisher, NullEventPublisher
from locallend.domain.booking_status import BookingStatus
from locallend.domain.errors import (
    BookingConflictError,
    BookingNotFoundError,
    InvalidBookingError,
    InvalidStateTransitionError,
    UnauthorizedBookingError,
)
from locallend.domain.events import BookingCompleted, BookingConfirmed, BookingCreated, BookingStateChanged, DomainEvent
from locallend.domain.models import Booking, StateTransition

logger = logging.getLogger(__name__)

SYSTEM_USER = "SYSTEM"
MAX_BOOKING_DURATION = timedelta(days=30)
ACTIVATION_WINDOW = timedelta(days=1)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(slots=True)
class BookingLifecycleService:
    """Use case that creates bookings and moves them through their lifecycle.

    Every transition is checked against :class:`BookingStatus` before the
    booking is mutated. Check, mutation and save happen under one lock; events
    are published after the lock is released. An illegal transition publishes
    nothing.
    """

    repository: BookingRepository
    event_publisher: EventPublisher = field(default_factory=NullEventPublisher)
    clock: Callable[[], datetime] = _utcnow
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False, compare=False)

    def create_booking(
        self,
        *,
        item_id: str,
        borrower_id: str,
        owner_id: str,
        start_date: datetime,
        end_date: datetime,
        notes: str | None = None,
    ) -> Booking:
        now = self.clock()
        start_date = _as_utc(start_date)
        end_date = _as_utc(end_date)
        if end_date <= start_date:
            raise InvalidBookingError("End date must be after start date", code="invalid_booking_period")
        if start_date < now:
            raise InvalidBookingError("Start date must be in the future", code="invalid_booking_period")
        if end_date - start_date > MAX_BOOKING_DURATION:
            raise InvalidBookingError(
                f"Booking duration cannot exceed {MAX_BOOKING_DURATION.days} days",
                code="invalid_booking_period",
            )
        if borrower_id == owner_id:
            raise InvalidBookingError("Owners cannot book their own items")

        with self._lock:
            conflicts = self.repository.find_conflicting(item_id, start_date, end_date)
            if conflicts:
                raise BookingConflictError(item_id, conflicts[0].booking_id)

            booking = Booking(
                item_id=item_id,
                borrower_id=borrower_id,
                owner_id=owner_id,
                start_date=start_date,
                end_date=end_date,
                booking_notes=notes,
                created_at=now,
                updated_at=now,
            )
            self.repository.save(booking)

        logger.info(
            "Created booking %s for item %s by borrower %s",
            booking.booking_id,
            item_id,
            borrower_id,
        )
        self.event_publisher.publish(
            BookingCreated(
                aggregate_id=booking.booking_id,
                user_id=borrower_id,
                occurred_at=now,
                booking_id=booking.booking_id,
                item_id=item_id,
                borrower_id=borrower_id,
                owner_id=owner_id,
                start_date=start_date,
                end_date=end_date,
            )
        )
        return booking

    def get_booking(self, booking_id: str) -> Booking:
        booking = self.repository.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def confirm(self, booking_id: str, user_id: str, notes: str | None = None) -> StateTransition:
        with self._lock:
            booking = self.get_booking(booking_id)
            _require(user_id == booking.owner_id, "Only the owner can confirm this booking")

            now = self.clock()
            self._ensure_transition(booking, BookingStatus.CONFIRMED, user_id, now)
            if booking.start_date < now:
                raise InvalidBookingError(
                    "Cannot confirm booking with start date in the past",
                    code="invalid_booking_period",
                )

            record = self._transition(booking, BookingStatus.CONFIRMED, user_id, "Booking confirmed by owner", now=now)
            booking.confirmed_at = now
            booking.owner_notes = notes
            events = self._commit(
                booking,
                record,
                BookingConfirmed(
                    aggregate_id=booking.booking_id,
                    user_id=user_id,
                    occurred_at=now,
                    booking_id=booking.booking_id,
                    item_id=booking.item_id,
                    borrower_id=booking.borrower_id,
                    owner_id=booking.owner_id,
                    confirmed_at=now,
                    owner_notes=notes,
                ),
            )
        self.event_publisher.publish_all(events)
        return record

    def activate(self, booking_id: str, user_id: str) -> StateTransition:
        with self._lock:
            booking = self.get_booking(booking_id)
            _require(user_id == booking.borrower_id, "Only the borrower can activate this booking")

            now = self.clock()
            self._ensure_transition(booking, BookingStatus.ACTIVE, user_id, now)
            if now > booking.start_date + ACTIVATION_WINDOW:
                raise InvalidBookingError("Booking activation window has passed", code="invalid_booking_period")

            record = self._transition(booking, BookingStatus.ACTIVE, user_id, "Item picked up by borrower", now=now)
            booking.pickup_at = now
            events = self._commit(booking, record)
        self.event_publisher.publish_all(events)
        return record

    def complete(self, booking_id: str, user_id: str, return_condition: str | None = None) -> StateTransition:
        with self._lock:
            booking = self.get_booking(booking_id)
            _require(user_id == booking.borrower_id, "Only the borrower can complete this booking")

            now = self.clock()
            was_overdue = booking.is_overdue(now)
            record = self._transition(
                booking, BookingStatus.COMPLETED, user_id, "Booking completed - item returned", now=now
            )
            booking.returned_at = now
            booking.return_condition = return_condition
            events = self._commit(
                booking,
                record,
                BookingCompleted(
                    aggregate_id=booking.booking_id,
                    user_id=user_id,
                    occurred_at=now,
                    booking_id=booking.booking_id,
                    item_id=booking.item_id,
                    borrower_id=booking.borrower_id,
                    owner_id=booking.owner_id,
                    completed_at=now,
                    actual_start_date=booking.pickup_at,
                    actual_end_date=now,
                    was_overdue=was_overdue,
                    return_condition=return_condition,
                ),
            )
        self.event_publisher.publish_all(events)
        return record

    def cancel(self, booking_id: str, user_id: str, reason: str | None = None) -> StateTransition:
        with self._lock:
            booking = self.get_booking(booking_id)
            _require(
                user_id in (booking.borrower_id, booking.owner_id),
                "Only the borrower or owner can cancel this booking",
            )

            record = self._transition(booking, BookingStatus.CANCELLED, user_id, reason or "Booking cancelled")
            booking.cancelled_at = record.transition_time
            booking.cancellation_reason = reason
            events = self._commit(booking, record)
        self.event_publisher.publish_all(events)
        return record

    def reject(self, booking_id: str, user_id: str, reason: str | None = None) -> StateTransition:
        with self._lock:
            booking = self.get_booking(booking_id)
            _require(user_id == booking.owner_id, "Only the owner can reject this booking")

            record = self._transition(booking, BookingStatus.REJECTED, user_id, reason or "Booking rejected by owner")
            booking.cancellation_reason = reason
            events = self._commit(booking, record)
        self.event_publisher.publish_all(events)
        return record

    def mark_overdue(self, booking_id: str) -> StateTransition:
        with self._lock:
            booking = self.get_booking(booking_id)
            record = self._transition(booking, BookingStatus.OVERDUE, SYSTEM_USER, "Booking marked as overdue")
            events = self._commit(booking, record)
        self.event_publisher.publish_all(events)
        logger.warning("Booking %s marked as overdue", booking.booking_id)
        return record

    def mark_overdue_bookings(self) -> list[StateTransition]:
        """Move every active booking past its end date to OVERDUE.

        A booking that can no longer be marked (its status changed since the
        sweep started) is logged and skipped.
        """

        now = self.clock()
        records: list[StateTransition] = []
        for booking in self.repository.list_by_status(BookingStatus.ACTIVE):
            if not booking.is_overdue(now):
                continue
            try:
                records.append(self.mark_overdue(booking.booking_id))
            except InvalidStateTransitionError as error:
                logger.warning(
                    "Skipping overdue booking %s: %s",
                    booking.booking_id,
                    error.message,
                    extra={"booking_id": booking.booking_id},
                )
        return records

    def _ensure_transition(self, booking: Booking, target: BookingStatus, user_id: str, at: datetime) -> None:
        current = booking.status
        if current.can_transition_to(target):
            return

        record = StateTransition.failure(
            current,
            target,
            user_id,
            f"Invalid transition from {current.name} to {target.name}",
            at=at,
        )
        logger.warning(
            record.description,
            extra={"booking_id": booking.booking_id, "triggered_by": user_id},
        )
        raise InvalidStateTransitionError(current, target, record)

    def _transition(
        self,
        booking: Booking,
        target: BookingStatus,
        user_id: str,
        reason: str,
        *,
        now: datetime | None = None,
    ) -> StateTransition:
        current = booking.status
        at = now or self.clock()
        self._ensure_transition(booking, target, user_id, at)

        logger.info("Transitioning booking %s from %s to %s", booking.booking_id, current.name, target.name)
        booking.status = target
        booking.updated_at = at
        return StateTransition.success(current, target, user_id, reason, at=at)

    def _commit(self, booking: Booking, record: StateTransition, *events: DomainEvent) -> list[DomainEvent]:
        self.repository.save(booking)
        return [
            BookingStateChanged(
                aggregate_id=booking.booking_id,
                user_id=record.triggered_by,
                occurred_at=record.transition_time,
                booking_id=booking.booking_id,
                previous_status=record.from_status,
                new_status=record.to_status,
                reason=record.reason,
                transition_time=record.transition_time,
            ),
            *events,
        ]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise UnauthorizedBookingError(message)
