"""API-facing wiring that delegates to application services."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from locallend.application.booking_service import BookingLifecycleService
from locallend.application.event_channel import DomainEventChannel
from locallend.domain.booking_status import BookingStatus
from locallend.domain.events import DomainEvent
from locallend.domain.models import Booking, StateTransition
from locallend.infrastructure.booking_repositories import InMemoryBookingRepository
from locallend.infrastructure.handler_registry import HandlerRegistryDispatcher
from locallend.infrastructure.logging_event_handler import LoggingEventHandler
from locallend.utils.config import AppConfig, load_env_config


def build_event_channel(config: AppConfig) -> tuple[DomainEventChannel, HandlerRegistryDispatcher]:
    dispatcher = HandlerRegistryDispatcher(max_async_workers=config.event_channel.async_workers)
    dispatcher.register(LoggingEventHandler())
    channel = DomainEventChannel(dispatcher, log_limit=config.event_channel.log_limit)
    return channel, dispatcher


_config = load_env_config()
event_channel, event_dispatcher = build_event_channel(_config)
booking_repository = InMemoryBookingRepository()
booking_service = BookingLifecycleService(repository=booking_repository, event_publisher=event_channel)


def status_to_dict(status: BookingStatus) -> dict[str, Any]:
    return {
        "name": status.name,
        "description": status.description,
        "can_be_cancelled": status.can_be_cancelled,
        "can_be_confirmed": status.can_be_confirmed,
        "can_be_activated": status.can_be_activated,
        "can_be_completed": status.can_be_completed,
        "is_final_status": status.is_final_status,
        "is_active": status.is_active,
        "allowed_transitions": [target.name for target in BookingStatus if target in status.allowed_transitions()],
    }


def booking_to_dict(booking: Booking) -> dict[str, Any]:
    payload = asdict(booking)
    payload["status"] = booking.status.name
    payload["duration_days"] = booking.duration_days
    return _jsonable(payload)


def transition_to_dict(record: StateTransition) -> dict[str, Any]:
    payload = asdict(record)
    payload["description"] = record.description
    return _jsonable(payload)


def event_to_dict(event: DomainEvent) -> dict[str, Any]:
    return _jsonable(asdict(event))


def _jsonable(payload: dict[str, Any]) -> dict[str, Any]:
    rendered: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, BookingStatus):
            rendered[key] = value.name
        elif hasattr(value, "isoformat"):
            rendered[key] = value.isoformat()
        else:
            rendered[key] = value
    return rendered


__all__ = [
    "booking_repository",
    "booking_service",
    "booking_to_dict",
    "build_event_channel",
    "event_channel",
    "event_dispatcher",
    "event_to_dict",
    "status_to_dict",
    "transition_to_dict",
]
