"""In-process dispatcher that routes events to handlers by event type."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from locallend.application.event_publisher import ALL_EVENTS, EventHandler
from locallend.domain.events import DomainEvent

logger = logging.getLogger(__name__)


class HandlerRegistryDispatcher:
    """Dispatch events to registered handlers in priority order.

    Handlers are looked up by ``event.event_type``; handlers registered for
    ``ALL_EVENTS`` receive every event. Synchronous handlers run on the
    caller's thread and the first failure propagates. Asynchronous handlers
    are submitted to a worker pool and dispatch does not wait for them.
    """

    def __init__(self, *, max_async_workers: int = 4) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_async_workers),
            thread_name_prefix="locallend-events",
        )

    def register(self, handler: EventHandler) -> None:
        with self._lock:
            handlers = self._handlers.setdefault(handler.event_type, [])
            handlers.append(handler)
            # sort() is stable: equal priorities keep registration order
            handlers.sort(key=lambda item: item.priority)

    def unregister(self, handler: EventHandler) -> None:
        with self._lock:
            handlers = self._handlers.get(handler.event_type, [])
            if handler in handlers:
                handlers.remove(handler)

    def handlers_for(self, event_type: str) -> list[EventHandler]:
        with self._lock:
            typed = list(self._handlers.get(event_type, ()))
            wildcard = [] if event_type == ALL_EVENTS else list(self._handlers.get(ALL_EVENTS, ()))
        return sorted(typed + wildcard, key=lambda item: item.priority)

    def dispatch(self, event: DomainEvent) -> None:
        for handler in self.handlers_for(event.event_type):
            if handler.is_async:
                future = self._executor.submit(handler.handle, event)
                future.add_done_callback(_log_async_failure(handler, event))
            else:
                handler.handle(event)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def _log_async_failure(handler: EventHandler, event: DomainEvent):
    def _callback(future: Future) -> None:
        error = future.exception()
        if error is not None:
            logger.error(
                "Async event handler %s failed for event %s",
                type(handler).__name__,
                event.event_id,
                exc_info=error,
                extra=event.log_summary(),
            )

    return _callback
