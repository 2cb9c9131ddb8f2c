"""Public package exports for LocalLend with lazy imports."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "BookingStatus",
    "can_transition",
    "DomainEvent",
    "Booking",
    "StateTransition",
    "DomainEventChannel",
    "BookingLifecycleService",
    "HandlerRegistryDispatcher",
    "InvalidBookingStatusError",
    "InvalidStateTransitionError",
]

_EXPORT_MODULES: dict[str, str] = {
    "BookingStatus": "locallend.domain.booking_status",
    "can_transition": "locallend.domain.booking_status",
    "DomainEvent": "locallend.domain.events",
    "Booking": "locallend.domain.models",
    "StateTransition": "locallend.domain.models",
    "DomainEventChannel": "locallend.application.event_channel",
    "BookingLifecycleService": "locallend.application.booking_service",
    "HandlerRegistryDispatcher": "locallend.infrastructure.handler_registry",
    "InvalidBookingStatusError": "locallend.domain.errors",
    "InvalidStateTransitionError": "locallend.domain.errors",
}


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MODULES:
        raise AttributeError(f"module 'locallend' has no attribute {name!r}")

    module = import_module(_EXPORT_MODULES[name])
    value = getattr(module, name)
    globals()[name] = value
    return value
