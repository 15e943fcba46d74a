"""
BOS Hotel Stay Engine — Notifications
=======================================
Translates committed stay events into notifications for the guest,
housekeeping and management.

Runs strictly after commit as an event-bus subscriber. A failed
delivery is logged with its traceback and never reaches the
operation that produced the event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from django.core.mail import send_mail

from core.config.rules import TransferRules
from core.events.event import DomainEvent
from core.events.registry import SubscriberRegistry
from engines.hotel_stay.checkout import CheckoutKind
from engines.hotel_stay.events import GUEST_CHECKED_OUT_V1, ROOM_TRANSFERRED_V1

logger = logging.getLogger("bos.hotel_stay.notifications")

SUBSCRIBER_ENGINE = "notifications"


class Audience:
    GUEST = "guest"
    HOUSEKEEPING = "housekeeping"
    MANAGEMENT = "management"


@dataclass(frozen=True)
class Notification:
    channel: str
    audience: str
    subject: str
    body: str
    recipient: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


class Notifier(Protocol):
    def send(self, notification: Notification) -> None:
        ...  # pragma: no cover


class LoggingNotifier:
    """Writes every notification to the log."""

    channel = "log"

    def send(self, notification: Notification) -> None:
        logger.info(
            f"[{notification.audience}] {notification.subject} "
            f"→ {notification.recipient or '-'}: {notification.body}"
        )


class EmailNotifier:
    """
    Sends through django.core.mail. Notifications without a recipient
    address are logged and skipped.
    """

    channel = "email"

    def __init__(self, from_email: str | None = None):
        self._from_email = from_email

    def send(self, notification: Notification) -> None:
        if not notification.recipient:
            logger.info(
                f"No email recipient for {notification.audience} notification "
                f"'{notification.subject}', skipped."
            )
            return
        send_mail(
            notification.subject,
            notification.body,
            self._from_email,
            [notification.recipient],
            fail_silently=False,
        )


@dataclass(frozen=True)
class StaffRecipients:
    housekeeping: str = ""
    management: str = ""


# ══════════════════════════════════════════════════════════════
# EVENT → NOTIFICATION
# ══════════════════════════════════════════════════════════════

def checkout_notifications(payload: dict, recipients: StaffRecipients) -> list[Notification]:
    kind = payload["checkout_kind"]
    rooms = ", ".join(payload["room_numbers"])
    number = payload["booking_number"]
    if kind == CheckoutKind.LATE_CHARGES:
        subject = f"Late checkout charges for booking {number}"
        body = (
            f"Dear {payload['guest_name']}, you checked out of room {rooms} "
            f"{payload['late_minutes']} minutes after the scheduled time. "
            f"A late checkout fee of ₹{payload['late_fee']} has been applied."
        )
    elif kind == CheckoutKind.GRACE_PERIOD:
        subject = f"Checkout within grace period for booking {number}"
        body = (
            f"Dear {payload['guest_name']}, you checked out of room {rooms} "
            f"{payload['late_minutes']} minutes late, within the grace period. "
            f"No late fee applies."
        )
    else:
        subject = f"Thank you for staying with us ({number})"
        body = f"Dear {payload['guest_name']}, your checkout from room {rooms} is complete."

    notices = []
    if payload.get("guest_email") or payload.get("guest_phone"):
        notices.append(Notification(
            channel="email",
            audience=Audience.GUEST,
            subject=subject,
            body=body,
            recipient=payload.get("guest_email", ""),
            metadata={"booking_id": payload["booking_id"], "kind": kind},
        ))
    notices.append(Notification(
        channel="email",
        audience=Audience.MANAGEMENT,
        subject=f"Checkout {kind.replace('_', ' ')}: {number}",
        body=(
            f"Rooms {rooms} checked out at {payload['actual_check_out']}. "
            f"Late fee ₹{payload['late_fee']}, outstanding ₹{payload['outstanding']}."
        ),
        recipient=recipients.management,
        metadata={"booking_id": payload["booking_id"], "kind": kind},
    ))
    return notices


def transfer_notifications(
    payload: dict, rules: TransferRules, recipients: StaffRecipients
) -> list[Notification]:
    notify = payload.get("notify", {})
    number = payload["booking_number"]
    source, target = payload["from_room_number"], payload["to_room_number"]
    meta = {"booking_id": payload["booking_id"], "transfer_id": payload["transfer_id"]}
    notices = []

    has_contact = bool(payload.get("guest_email") or payload.get("guest_phone"))
    if rules.notify_guest and notify.get("guest", True) and has_contact:
        notices.append(Notification(
            channel="email",
            audience=Audience.GUEST,
            subject=f"Your room has been changed ({number})",
            body=(
                f"Dear {payload['guest_name']}, you have been moved from room {source} "
                f"to room {target}. Reason: {payload['reason']}."
            ),
            recipient=payload.get("guest_email", ""),
            metadata=meta,
        ))
    if rules.notify_housekeeping and notify.get("housekeeping", True):
        notices.append(Notification(
            channel="email",
            audience=Audience.HOUSEKEEPING,
            subject=f"Room {source} vacated by transfer",
            body=f"Room {source} was vacated (guest moved to {target}) and needs cleaning.",
            recipient=recipients.housekeeping,
            metadata=meta,
        ))
    if rules.notify_management and notify.get("management", True):
        notices.append(Notification(
            channel="email",
            audience=Audience.MANAGEMENT,
            subject=f"Room transfer {source} → {target} ({number})",
            body=(
                f"Booking {number} moved from room {source} to room {target} by "
                f"{payload['staff_id']} at {payload['transferred_at']}. "
                f"Reason: {payload['reason']}."
            ),
            recipient=recipients.management,
            metadata=meta,
        ))
    return notices


class NotificationSubscriber:
    """Event-bus subscriber delivering stay notifications."""

    def __init__(
        self,
        notifier: Notifier,
        transfer_rules: TransferRules,
        recipients: StaffRecipients | None = None,
    ):
        self._notifier = notifier
        self._rules = transfer_rules
        self._recipients = recipients or StaffRecipients()

    def on_checked_out(self, event: DomainEvent) -> None:
        self._deliver_all(event, checkout_notifications(event.payload, self._recipients))

    def on_transferred(self, event: DomainEvent) -> None:
        self._deliver_all(
            event, transfer_notifications(event.payload, self._rules, self._recipients)
        )

    def _deliver_all(self, event: DomainEvent, notices: list[Notification]) -> int:
        delivered = 0
        for notice in notices:
            try:
                self._notifier.send(notice)
                delivered += 1
            except Exception as exc:
                logger.error(
                    f"{notice.audience} notification failed for {event.event_type} "
                    f"(event_id: {event.event_id}): {exc}",
                    exc_info=True,
                )
        return delivered

    def register(self, registry: SubscriberRegistry) -> None:
        registry.register_subscriber(GUEST_CHECKED_OUT_V1, self.on_checked_out, SUBSCRIBER_ENGINE)
        registry.register_subscriber(ROOM_TRANSFERRED_V1, self.on_transferred, SUBSCRIBER_ENGINE)
