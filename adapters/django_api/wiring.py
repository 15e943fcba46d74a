"""
BOS Django Adapter Wiring
=========================
Constructs the HotelStayService for the configured property.

This module is adapter-only glue:
- property context and policy come from settings.HOTEL_STAY
- notifications are registered as post-commit event subscribers
- the service is built once per process
"""

from __future__ import annotations

import threading

from django.conf import settings

from core.config.rules import StayPolicy
from core.context.tenant_context import TenantContext
from core.events.registry import SubscriberRegistry
from core.time.clock import Clock, SystemClock
from engines.hotel_stay.notifications import (
    EmailNotifier,
    LoggingNotifier,
    NotificationSubscriber,
    Notifier,
    StaffRecipients,
)
from engines.hotel_stay.services import HotelStayService


_SERVICE_LOCK = threading.Lock()
_SERVICE: HotelStayService | None = None


def build_notifier(hotel_settings: dict) -> Notifier:
    kind = str(hotel_settings.get("NOTIFIER", "logging")).lower()
    if kind == "email":
        return EmailNotifier(from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None))
    if kind == "logging":
        return LoggingNotifier()
    raise ValueError(f"Unknown HOTEL_STAY NOTIFIER '{kind}' (expected logging or email).")


def create_service(
    hotel_settings: dict | None = None,
    *,
    clock: Clock | None = None,
    notifier: Notifier | None = None,
) -> HotelStayService:
    hotel_settings = dict(hotel_settings if hotel_settings is not None else settings.HOTEL_STAY)
    policy = StayPolicy.from_settings(hotel_settings)

    registry = SubscriberRegistry()
    NotificationSubscriber(
        notifier or build_notifier(hotel_settings),
        policy.transfer_rules,
        StaffRecipients(
            housekeeping=hotel_settings.get("HOUSEKEEPING_EMAIL", ""),
            management=hotel_settings.get("MANAGEMENT_EMAIL", ""),
        ),
    ).register(registry)

    return HotelStayService(
        context=TenantContext.from_settings(hotel_settings),
        policy=policy,
        clock=clock or SystemClock(),
        subscriber_registry=registry,
    )


def build_service() -> HotelStayService:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _SERVICE
    with _SERVICE_LOCK:
        if _SERVICE is None:
            _SERVICE = create_service()
        return _SERVICE


def reset_service() -> None:
    global _SERVICE
    with _SERVICE_LOCK:
        _SERVICE = None
