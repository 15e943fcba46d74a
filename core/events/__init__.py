"""
BOS Event Bus — Public API
============================
Engines commit first; the bus distributes afterwards.
"""

from core.events.dispatcher import dispatch
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)
from core.events.event import DomainEvent
from core.events.registry import SubscriberRegistry

__all__ = [
    "dispatch",
    "DomainEvent",
    "SubscriberRegistry",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
    "SelfSubscriptionError",
]
