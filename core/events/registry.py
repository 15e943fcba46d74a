"""
BOS Event Bus — Subscriber Registry
======================================
Controls which handlers receive which engine events.

Rules:
- Event types must follow engine.domain.action format
- Multiple subscribers per event type allowed
- Duplicate handler for same event type forbidden
- Self-subscription (engine listens to own events) blocked unless explicit
- In-memory only, thread-safe
"""

import logging
from threading import Lock
from typing import Callable, Iterable

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)

logger = logging.getLogger("bos.events")

Handler = Callable[[object], None]


class SubscriberRegistry:
    """
    In-memory registry of event subscribers.

    Each entry maps an event_type to a list of
    (handler, subscriber_engine) tuples, kept in registration order.
    """

    def __init__(self):
        self._subscribers: dict[str, list[tuple[Handler, str]]] = {}
        self._lock = Lock()

    @staticmethod
    def _validate_event_type_format(event_type: str) -> None:
        if not event_type or not isinstance(event_type, str):
            raise InvalidEventTypeFormat(event_type or "")
        parts = event_type.strip().split(".")
        if len(parts) < 3 or not all(parts):
            raise InvalidEventTypeFormat(event_type)

    def register_subscriber(
        self,
        event_type: str,
        handler: Handler,
        subscriber_engine: str,
        allow_self_subscription: bool = False,
    ) -> None:
        """
        Register a handler for an event type.

        Raises:
            InvalidEventTypeFormat:  Bad event type format
            DuplicateSubscriberError: Handler already registered
            SelfSubscriptionError:   Engine subscribing to own events
        """
        self._validate_event_type_format(event_type)

        if not callable(handler):
            raise EventBusError(f"Handler must be callable, got {type(handler)}.")

        source_engine = event_type.split(".")[0]
        if source_engine == subscriber_engine and not allow_self_subscription:
            raise SelfSubscriptionError(subscriber_engine, event_type)

        handler_name = getattr(handler, "__qualname__", str(handler))

        with self._lock:
            entries = self._subscribers.setdefault(event_type, [])
            if any(existing == handler for existing, _ in entries):
                raise DuplicateSubscriberError(event_type, handler_name)
            entries.append((handler, subscriber_engine))

        logger.info(
            f"Subscriber registered: {handler_name} → {event_type} "
            f"(from engine: {subscriber_engine})"
        )

    def register_many(
        self,
        event_types: Iterable[str],
        handler: Handler,
        subscriber_engine: str,
    ) -> None:
        """Register one handler for several event types."""
        for event_type in event_types:
            self.register_subscriber(event_type, handler, subscriber_engine)

    def get_subscribers(self, event_type: str) -> list[tuple[Handler, str]]:
        """Subscribers for an event type; empty list when none."""
        with self._lock:
            return list(self._subscribers.get(event_type, []))

    def subscriber_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._subscribers.get(event_type, []))
