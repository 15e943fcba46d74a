"""
BOS Hotel Stay Engine — Booking / Assignment State Machine
============================================================
A booking aggregates 1..N room assignments. Assignments move
independently (partial check-in/out); the booking status is derived
from them.

Assignment:  reserved → checked_in → checked_out
             reserved → cancelled
             reserved → checked_out   (no-show closed at checkout)
Booking:     pending → confirmed → checked_in → checked_out
             cancelled from pending / confirmed
"""

from __future__ import annotations

from typing import Iterable

from django.db import models

from engines.hotel_stay.errors import StateTransitionError


class BookingStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    CONFIRMED = "confirmed", "Confirmed"
    CHECKED_IN = "checked_in", "Checked in"
    CHECKED_OUT = "checked_out", "Checked out"
    CANCELLED = "cancelled", "Cancelled"


class AssignmentStatus(models.TextChoices):
    RESERVED = "reserved", "Reserved"
    CHECKED_IN = "checked_in", "Checked in"
    CHECKED_OUT = "checked_out", "Checked out"
    CANCELLED = "cancelled", "Cancelled"


class ArrivalType(models.TextChoices):
    WALK_IN = "walk_in", "Walk-in"
    PHONE = "phone", "Phone"
    ONLINE = "online", "Online"
    OTA = "OTA", "OTA"
    AGENT = "agent", "Agent"
    CORPORATE = "corporate", "Corporate"


class MealPlan(models.TextChoices):
    EP = "EP", "Room only"
    CP = "CP", "Breakfast"
    MAP = "MAP", "Breakfast + one meal"


BOOKING_TRANSITIONS: dict[str, frozenset[str]] = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN, BookingStatus.CANCELLED,
    }),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED,
    }),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

ASSIGNMENT_TRANSITIONS: dict[str, frozenset[str]] = {
    AssignmentStatus.RESERVED: frozenset({
        AssignmentStatus.CHECKED_IN,
        AssignmentStatus.CHECKED_OUT,
        AssignmentStatus.CANCELLED,
    }),
    AssignmentStatus.CHECKED_IN: frozenset({AssignmentStatus.CHECKED_OUT}),
    AssignmentStatus.CHECKED_OUT: frozenset(),
    AssignmentStatus.CANCELLED: frozenset(),
}

TERMINAL_BOOKING_STATUSES = frozenset({BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED})
CHECK_IN_REFUSED_STATUSES = frozenset({
    BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED,
})
CHECKOUT_ALLOWED_STATUSES = frozenset({BookingStatus.CHECKED_IN, BookingStatus.CONFIRMED})
CANCEL_ALLOWED_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED})
TRANSFER_ALLOWED_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN})
PAYMENT_REFUSED_STATUSES = frozenset({BookingStatus.CANCELLED})


def validate_assignment_transition(current: str, target: str) -> None:
    if target not in ASSIGNMENT_TRANSITIONS.get(current, frozenset()):
        raise StateTransitionError(
            f"Room assignment cannot move from {current} to {target}.",
            details={"current": current, "target": target},
        )


def validate_booking_transition(current: str, target: str) -> None:
    if target not in BOOKING_TRANSITIONS.get(current, frozenset()):
        raise StateTransitionError(
            f"Booking cannot move from {current} to {target}.",
            details={"current": current, "target": target},
        )


def derive_booking_status(current: str, assignment_statuses: Iterable[str]) -> str:
    """
    Booking status implied by its assignments.

    all cancelled                                 → cancelled
    all checked_out/cancelled, ≥1 checked_out     → checked_out
    any checked_in                                → checked_in
    otherwise                                     → current
    """
    statuses = list(assignment_statuses)
    if not statuses:
        return current
    if all(s == AssignmentStatus.CANCELLED for s in statuses):
        return BookingStatus.CANCELLED
    closed = {AssignmentStatus.CHECKED_OUT, AssignmentStatus.CANCELLED}
    if all(s in closed for s in statuses):
        return BookingStatus.CHECKED_OUT
    if any(s == AssignmentStatus.CHECKED_IN for s in statuses):
        return BookingStatus.CHECKED_IN
    return current
