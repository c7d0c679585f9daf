from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from threading import RLock
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

E = TypeVar("E")
Handler = Callable[[Any], None]


@dataclass(frozen=True, slots=True)
class Subscription:
    event_type: type
    handler: Handler


class EventBus:
    """Delivers task lifecycle events to listeners registered per event class.

    ``TaskRunner`` publishes from inside its batch loop, so a listener that
    raises is logged and skipped; it never reaches the runner.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._handlers: dict[type, list[Handler]] = {}

    def subscribe(self, event_type: type[E], handler: Callable[[E], None]) -> Subscription:
        sub = Subscription(event_type=event_type, handler=handler)
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        return sub

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            listeners = self._handlers.get(subscription.event_type, [])
            if subscription.handler in listeners:
                listeners.remove(subscription.handler)

    def handler_count(self, event_type: type) -> int:
        with self._lock:
            return len(self._handlers.get(event_type, []))

    def publish(self, event: object) -> None:
        # Snapshot so listeners may (un)subscribe while being called.
        with self._lock:
            listeners = tuple(self._handlers.get(type(event), ()))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Event handler failed for %s",
                    type(event).__name__,
                    extra={
                        "event": type(event).__name__,
                        "job_type": getattr(event, "job_type", None),
                        "job_id": getattr(event, "job_id", None),
                    },
                )

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()
