from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from locallend.application.booking_service import SYSTEM_USER, BookingLifecycleService
from locallend.domain.booking_status import BookingStatus
from locallend.domain.errors import (
    BookingConflictError,
    BookingNotFoundError,
    InvalidBookingError,
    InvalidStateTransitionError,
    UnauthorizedBookingError,
)
from locallend.domain.events import BookingCompleted, BookingConfirmed, BookingCreated, BookingStateChanged
from locallend.infrastructure.booking_repositories import InMemoryBookingRepository

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> _Clock:
    return _Clock(NOW)


@pytest.fixture
def service(publisher, clock) -> BookingLifecycleService:
    return BookingLifecycleService(
        repository=InMemoryBookingRepository(),
        event_publisher=publisher,
        clock=clock,
    )


def _create(service: BookingLifecycleService, **overrides):
    params = {
        "item_id": "item-1",
        "borrower_id": "borrower-1",
        "owner_id": "owner-1",
        "start_date": NOW + timedelta(days=1),
        "end_date": NOW + timedelta(days=4),
    }
    params.update(overrides)
    return service.create_booking(**params)


def test_create_booking_is_pending_and_publishes_created(service, publisher) -> None:
    booking = _create(service)

    assert booking.status is BookingStatus.PENDING
    assert booking.duration_days == 3
    assert service.get_booking(booking.booking_id) is booking
    assert [type(event) for event in publisher.events] == [BookingCreated]
    created = publisher.events[0]
    assert created.aggregate_id == booking.booking_id
    assert created.user_id == "borrower-1"
    assert created.event_type == "BookingCreated"


@pytest.mark.parametrize(
    "overrides",
    [
        {"end_date": NOW + timedelta(days=1)},
        {"start_date": NOW - timedelta(days=1)},
        {"end_date": NOW + timedelta(days=40)},
        {"owner_id": "borrower-1"},
    ],
)
def test_create_booking_rejects_invalid_requests(service, publisher, overrides) -> None:
    with pytest.raises(InvalidBookingError):
        _create(service, **overrides)

    assert publisher.events == []


def test_create_booking_treats_naive_dates_as_utc(service) -> None:
    booking = _create(
        service,
        start_date=datetime(2026, 3, 2, 12, 0),
        end_date=datetime(2026, 3, 3, 12, 0),
    )

    assert booking.start_date.tzinfo is timezone.utc


def test_full_lifecycle_emits_events_in_order(service, publisher, clock) -> None:
    booking = _create(service)

    service.confirm(booking.booking_id, "owner-1", notes="Pick up after 5pm")
    service.activate(booking.booking_id, "borrower-1")
    clock.now = NOW + timedelta(days=3)
    record = service.complete(booking.booking_id, "borrower-1", return_condition="good")

    assert booking.status is BookingStatus.COMPLETED
    assert booking.owner_notes == "Pick up after 5pm"
    assert booking.returned_at == clock.now
    assert record.successful
    assert record.from_status is BookingStatus.ACTIVE
    assert record.to_status is BookingStatus.COMPLETED
    assert [type(event) for event in publisher.events] == [
        BookingCreated,
        BookingStateChanged,
        BookingConfirmed,
        BookingStateChanged,
        BookingStateChanged,
        BookingCompleted,
    ]
    completed = publisher.events[-1]
    assert completed.was_overdue is False
    assert completed.return_condition == "good"
    assert publisher.events[-2].is_terminal_transition is True


def test_state_changed_event_describes_transition(service, publisher) -> None:
    booking = _create(service)

    service.reject(booking.booking_id, "owner-1", reason="Item unavailable")

    changed = publisher.events[-1]
    assert isinstance(changed, BookingStateChanged)
    assert changed.previous_status is BookingStatus.PENDING
    assert changed.new_status is BookingStatus.REJECTED
    assert changed.reason == "Item unavailable"
    assert changed.transition_description == (
        f"Booking {booking.booking_id} transitioned from PENDING to REJECTED"
    )


def test_illegal_transition_raises_and_publishes_nothing(service, publisher) -> None:
    booking = _create(service)
    publisher.events.clear()

    with pytest.raises(InvalidStateTransitionError) as exc_info:
        service.activate(booking.booking_id, "borrower-1")

    error = exc_info.value
    assert error.current_status is BookingStatus.PENDING
    assert error.target_status is BookingStatus.ACTIVE
    assert error.transition.successful is False
    assert "PENDING" in error.transition.description
    assert booking.status is BookingStatus.PENDING
    assert publisher.events == []


def test_overdue_booking_cannot_be_completed(service, clock) -> None:
    booking = _create(service)
    service.confirm(booking.booking_id, "owner-1")
    service.activate(booking.booking_id, "borrower-1")
    clock.now = NOW + timedelta(days=10)

    records = service.mark_overdue_bookings()

    assert [record.to_status for record in records] == [BookingStatus.OVERDUE]
    assert records[0].triggered_by == SYSTEM_USER
    with pytest.raises(InvalidStateTransitionError):
        service.complete(booking.booking_id, "borrower-1")


def test_mark_overdue_bookings_skips_bookings_within_period(service) -> None:
    booking = _create(service)
    service.confirm(booking.booking_id, "owner-1")
    service.activate(booking.booking_id, "borrower-1")

    assert service.mark_overdue_bookings() == []
    assert booking.status is BookingStatus.ACTIVE


def test_complete_after_end_date_reports_was_overdue(service, publisher, clock) -> None:
    booking = _create(service)
    service.confirm(booking.booking_id, "owner-1")
    service.activate(booking.booking_id, "borrower-1")
    clock.now = NOW + timedelta(days=6)

    service.complete(booking.booking_id, "borrower-1")

    assert publisher.events[-1].was_overdue is True


@pytest.mark.parametrize(
    ("action", "user_id"),
    [
        ("confirm", "borrower-1"),
        ("reject", "borrower-1"),
        ("activate", "owner-1"),
        ("cancel", "stranger"),
    ],
)
def test_actions_require_the_right_party(service, action: str, user_id: str) -> None:
    booking = _create(service)

    with pytest.raises(UnauthorizedBookingError):
        getattr(service, action)(booking.booking_id, user_id)


def test_cancel_by_owner_records_reason(service) -> None:
    booking = _create(service)
    service.confirm(booking.booking_id, "owner-1")

    service.cancel(booking.booking_id, "owner-1", reason="Item broke")

    assert booking.status is BookingStatus.CANCELLED
    assert booking.cancellation_reason == "Item broke"
    assert booking.cancelled_at == NOW


def test_unknown_booking_raises_not_found(service) -> None:
    with pytest.raises(BookingNotFoundError):
        service.confirm("missing", "owner-1")


def test_overlapping_booking_for_same_item_is_rejected(service, publisher) -> None:
    first = _create(service, start_date=NOW + timedelta(days=1), end_date=NOW + timedelta(days=5))

    with pytest.raises(BookingConflictError) as exc_info:
        _create(
            service,
            borrower_id="borrower-2",
            start_date=NOW + timedelta(days=2),
            end_date=NOW + timedelta(days=4),
        )

    assert exc_info.value.conflicting_booking_id == first.booking_id
    assert exc_info.value.as_dict()["code"] == "booking_conflict"
    assert [type(event) for event in publisher.events] == [BookingCreated]


def test_back_to_back_and_other_item_bookings_do_not_conflict(service) -> None:
    _create(service, start_date=NOW + timedelta(days=1), end_date=NOW + timedelta(days=3))

    adjacent = _create(
        service,
        borrower_id="borrower-2",
        start_date=NOW + timedelta(days=3),
        end_date=NOW + timedelta(days=5),
    )
    other_item = _create(service, item_id="item-2", borrower_id="borrower-3")

    assert adjacent.status is BookingStatus.PENDING
    assert other_item.status is BookingStatus.PENDING


def test_final_bookings_release_their_dates(service) -> None:
    first = _create(service)
    service.cancel(first.booking_id, "borrower-1", reason="Changed plans")

    second = _create(service, borrower_id="borrower-2")

    assert second.status is BookingStatus.PENDING


def test_confirm_rejects_booking_whose_start_has_passed(service, publisher, clock) -> None:
    booking = _create(service)
    publisher.events.clear()
    clock.now = NOW + timedelta(days=2)

    with pytest.raises(InvalidBookingError, match="start date in the past"):
        service.confirm(booking.booking_id, "owner-1")

    assert booking.status is BookingStatus.PENDING
    assert publisher.events == []


def test_activate_rejects_after_activation_window(service, clock) -> None:
    booking = _create(service)
    service.confirm(booking.booking_id, "owner-1")
    clock.now = booking.start_date + timedelta(days=1, minutes=1)

    with pytest.raises(InvalidBookingError, match="activation window"):
        service.activate(booking.booking_id, "borrower-1")

    assert booking.status is BookingStatus.CONFIRMED


def test_activate_within_window_after_start(service, clock) -> None:
    booking = _create(service)
    service.confirm(booking.booking_id, "owner-1")
    clock.now = booking.start_date + timedelta(hours=12)

    service.activate(booking.booking_id, "borrower-1")

    assert booking.status is BookingStatus.ACTIVE


class _StaleListingRepository(InMemoryBookingRepository):
    def __init__(self) -> None:
        super().__init__()
        self.listing = None

    def list_by_status(self, status):
        if self.listing is not None:
            return list(self.listing)
        return super().list_by_status(status)


def test_overdue_sweep_skips_bookings_that_changed_status(publisher, clock, caplog) -> None:
    repository = _StaleListingRepository()
    service = BookingLifecycleService(repository=repository, event_publisher=publisher, clock=clock)
    first = _create(service)
    second = _create(service, item_id="item-2")
    for booking in (first, second):
        service.confirm(booking.booking_id, "owner-1")
        service.activate(booking.booking_id, "borrower-1")
    repository.listing = [replace(first), replace(second)]
    service.complete(first.booking_id, "borrower-1")
    clock.now = NOW + timedelta(days=10)

    with caplog.at_level(logging.WARNING, logger="locallend.application.booking_service"):
        records = service.mark_overdue_bookings()

    assert [record.to_status for record in records] == [BookingStatus.OVERDUE]
    assert f"Skipping overdue booking {first.booking_id}" in caplog.text
    assert second.status is BookingStatus.OVERDUE
    assert first.status is BookingStatus.COMPLETED


class _SlowRepository(InMemoryBookingRepository):
    def get(self, booking_id):
        booking = super().get(booking_id)
        time.sleep(0.05)
        return booking


def test_concurrent_transitions_on_one_booking_apply_once(publisher, clock) -> None:
    service = BookingLifecycleService(repository=_SlowRepository(), event_publisher=publisher, clock=clock)
    booking = _create(service)
    outcomes = []
    barrier = threading.Barrier(2)

    def _confirm() -> None:
        barrier.wait()
        try:
            service.confirm(booking.booking_id, "owner-1")
            outcomes.append("confirmed")
        except InvalidStateTransitionError:
            outcomes.append("rejected")

    threads = [threading.Thread(target=_confirm) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(outcomes) == ["confirmed", "rejected"]
    assert [type(event) for event in publisher.events].count(BookingConfirmed) == 1
