"""FastAPI interface for LocalLend bookings."""

from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .domain.booking_status import BookingStatus, enum_values
from .domain.errors import (
    BookingConflictError,
    BookingNotFoundError,
    InvalidBookingError,
    InvalidBookingStatusError,
    InvalidStateTransitionError,
    LocalLendError,
    UnauthorizedBookingError,
)
from .interfaces.api_handlers import (
    booking_service,
    booking_to_dict,
    event_channel,
    event_to_dict,
    status_to_dict,
    transition_to_dict,
)

app = FastAPI(title="LocalLend API", version="0.1.0")


class CreateBookingRequest(BaseModel):
    item_id: str = Field(..., min_length=1)
    borrower_id: str = Field(..., min_length=1)
    owner_id: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    notes: str | None = Field(None, max_length=500)


class BookingActionRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    notes: str | None = Field(None, max_length=500)
    reason: str | None = Field(None, max_length=500)
    return_condition: str | None = Field(None, max_length=200)


_ERROR_STATUS: tuple[tuple[type[LocalLendError], int], ...] = (
    (InvalidBookingStatusError, 400),
    (InvalidBookingError, 400),
    (UnauthorizedBookingError, 403),
    (BookingNotFoundError, 404),
    (InvalidStateTransitionError, 409),
    (BookingConflictError, 409),
)


def _http_error(error: LocalLendError) -> HTTPException:
    status_code = next((code for error_type, code in _ERROR_STATUS if isinstance(error, error_type)), 400)
    detail: dict[str, Any] = error.as_dict()
    if isinstance(error, InvalidBookingStatusError):
        detail["allowed_values"] = list(enum_values(BookingStatus))
    return HTTPException(status_code=status_code, detail=detail)


def _parse_status(raw_value: str, parameter: str) -> BookingStatus:
    try:
        return BookingStatus.from_string(raw_value)
    except InvalidBookingStatusError as error:
        exc = _http_error(error)
        exc.detail["parameter"] = parameter
        raise exc from error


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint."""

    return {"status": "ok"}


@app.get("/booking-statuses")
def list_booking_statuses() -> list[dict[str, Any]]:
    return [status_to_dict(status) for status in BookingStatus]


@app.get("/booking-statuses/{status}/transitions/{target}")
def check_transition(status: str, target: str) -> dict[str, Any]:
    """Report whether a booking in ``status`` may move to ``target``."""

    current = _parse_status(status, "status")
    target_status = _parse_status(target, "target")
    return {
        "current": current.name,
        "target": target_status.name,
        "allowed": current.can_transition_to(target_status),
    }


@app.post("/bookings", status_code=201)
def create_booking(request: CreateBookingRequest) -> dict[str, Any]:
    try:
        booking = booking_service.create_booking(
            item_id=request.item_id,
            borrower_id=request.borrower_id,
            owner_id=request.owner_id,
            start_date=request.start_date,
            end_date=request.end_date,
            notes=request.notes,
        )
    except LocalLendError as error:
        raise _http_error(error) from error
    return booking_to_dict(booking)


@app.get("/bookings/{booking_id}")
def get_booking(booking_id: str) -> dict[str, Any]:
    try:
        return booking_to_dict(booking_service.get_booking(booking_id))
    except LocalLendError as error:
        raise _http_error(error) from error


@app.post("/bookings/{booking_id}/{action}")
def apply_booking_action(booking_id: str, action: str, request: BookingActionRequest) -> dict[str, Any]:
    """Drive a booking through its lifecycle: confirm, activate, complete, cancel or reject."""

    handlers = {
        "confirm": lambda: booking_service.confirm(booking_id, request.user_id, request.notes),
        "activate": lambda: booking_service.activate(booking_id, request.user_id),
        "complete": lambda: booking_service.complete(booking_id, request.user_id, request.return_condition),
        "cancel": lambda: booking_service.cancel(booking_id, request.user_id, request.reason),
        "reject": lambda: booking_service.reject(booking_id, request.user_id, request.reason),
    }
    if action not in handlers:
        raise HTTPException(
            status_code=404,
            detail={
                "code": "unknown_booking_action",
                "message": f"Unknown booking action: '{action}'",
                "allowed_values": sorted(handlers),
            },
        )

    try:
        record = handlers[action]()
    except LocalLendError as error:
        raise _http_error(error) from error

    return {
        "booking": booking_to_dict(booking_service.get_booking(booking_id)),
        "transition": transition_to_dict(record),
    }


@app.post("/bookings/overdue-sweep")
def sweep_overdue_bookings() -> dict[str, Any]:
    records = booking_service.mark_overdue_bookings()
    return {"marked_overdue": len(records), "transitions": [transition_to_dict(record) for record in records]}


@app.get("/events")
def list_events() -> dict[str, Any]:
    events = event_channel.published_events()
    return {"count": len(events), "events": [event_to_dict(event) for event in events]}


@app.delete("/events", status_code=204)
def clear_events() -> None:
    event_channel.clear_published_events()
