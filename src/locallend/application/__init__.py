"""DDD application layer."""

from .booking_repository import BookingRepository
from .booking_service import BookingLifecycleService
from .event_channel import DomainEventChannel
from .event_publisher import ALL_EVENTS, BaseEventHandler, EventDispatcher, EventHandler, EventPublisher, NullEventPublisher

__all__ = [
    "ALL_EVENTS",
    "BaseEventHandler",
    "BookingLifecycleService",
    "BookingRepository",
    "DomainEventChannel",
    "EventDispatcher",
    "EventHandler",
    "EventPublisher",
    "NullEventPublisher",
]
