"""
BOS Hotel Stay Engine — Transaction Plumbing
==============================================
One transactional unit per operation:

- django.db.transaction.atomic() around every multi-row write
- per-transaction statement timeout (PostgreSQL SET LOCAL)
- datastore failures translated into engine errors
- audit entries written inside the transaction
- events dispatched via transaction.on_commit(), never before commit

Lock order inside a transaction is fixed:
booking → assignments → rooms (by primary key) → payment breakdown.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from django.db import DatabaseError, IntegrityError, connection, transaction

from core.audit.functions import create_audit_entry
from core.audit.models import AuditEntry
from core.events.dispatcher import dispatch
from core.events.event import DomainEvent
from core.events.registry import SubscriberRegistry
from engines.hotel_stay.errors import (
    ConflictError,
    HotelStayError,
    NotFoundError,
    PersistenceError,
)
from engines.hotel_stay.models import (
    Booking,
    PaymentBreakdown,
    Room,
    RoomAssignment,
    StaffLog,
)

logger = logging.getLogger("bos.hotel_stay")

BOOKING_NUMBER_CONSTRAINT = "uq_hotel_booking_number"


def _constraint_name(exc: IntegrityError) -> Optional[str]:
    cause = getattr(exc, "__cause__", None)
    diag = getattr(cause, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if isinstance(name, str) and name:
        return name
    return None


def is_booking_number_conflict(exc: IntegrityError) -> bool:
    if _constraint_name(exc) == BOOKING_NUMBER_CONSTRAINT:
        return True
    text = str(exc)
    # SQLite reports the columns, not the constraint name
    return BOOKING_NUMBER_CONSTRAINT in text or "booking_number" in text


def apply_statement_timeout(timeout_ms: int) -> None:
    """Bound every statement of the current transaction (PostgreSQL only)."""
    if timeout_ms <= 0 or connection.vendor != "postgresql":
        return
    with connection.cursor() as cursor:
        cursor.execute(f"SET LOCAL statement_timeout = {int(timeout_ms)}")


@contextmanager
def stay_transaction(timeout_ms: int, operation: str) -> Iterator[None]:
    """
    Run a block as one atomic unit.

    Engine errors pass through unchanged (the transaction is rolled
    back). IntegrityError on the booking number becomes ConflictError;
    other integrity failures are fatal PersistenceErrors; remaining
    database errors (timeouts, lock failures, lost connections) are
    retryable PersistenceErrors.
    """
    try:
        with transaction.atomic():
            apply_statement_timeout(timeout_ms)
            yield
    except HotelStayError:
        raise
    except IntegrityError as exc:
        if is_booking_number_conflict(exc):
            raise ConflictError(
                "Booking number already exists for this property.",
                details={"operation": operation},
            ) from exc
        logger.error(f"{operation}: integrity failure: {exc}", exc_info=True)
        raise PersistenceError(
            f"{operation} violated a datastore constraint: {exc}",
            details={"operation": operation},
            retryable=False,
        ) from exc
    except DatabaseError as exc:
        logger.error(f"{operation}: transaction aborted: {exc}", exc_info=True)
        raise PersistenceError(
            f"{operation} aborted by the datastore: {exc}",
            details={"operation": operation},
            retryable=True,
        ) from exc


# ══════════════════════════════════════════════════════════════
# LOCKING READS
# ══════════════════════════════════════════════════════════════

def lock_booking(property_id, booking_id) -> Booking:
    booking = (
        Booking.objects.select_for_update()
        .select_related("guest")
        .filter(property_id=property_id, pk=booking_id)
        .first()
    )
    if booking is None:
        raise NotFoundError(f"Booking {booking_id} not found.")
    return booking


def lock_assignments(booking: Booking) -> list[RoomAssignment]:
    return list(
        RoomAssignment.objects.select_for_update().filter(booking=booking).order_by("pk")
    )


def lock_rooms(property_id, room_ids: Iterable[int]) -> dict[int, Room]:
    """Lock rooms in primary-key order; raise NotFoundError for any unknown id."""
    wanted = sorted(set(room_ids))
    rooms = {
        room.pk: room
        for room in Room.objects.select_for_update()
        .select_related("room_type")
        .filter(property_id=property_id, pk__in=wanted)
        .order_by("pk")
    }
    missing = [room_id for room_id in wanted if room_id not in rooms]
    if missing:
        raise NotFoundError(f"Room {missing[0]} not found.")
    return rooms


def lock_breakdown(booking: Booking) -> PaymentBreakdown:
    breakdown = PaymentBreakdown.objects.select_for_update().filter(booking=booking).first()
    if breakdown is None:
        raise NotFoundError(f"Payment breakdown for booking {booking.booking_number} not found.")
    return breakdown


# ══════════════════════════════════════════════════════════════
# AUDIT + EVENTS
# ══════════════════════════════════════════════════════════════

def write_staff_log(entry: AuditEntry, payload: Optional[dict] = None) -> StaffLog:
    return StaffLog.objects.create(
        entry_id=entry.entry_id,
        property_id=entry.property_id,
        staff_id=entry.actor_id,
        action=entry.action,
        resource_type=entry.resource_type,
        resource_id=entry.resource_id,
        status=entry.status,
        details=entry.details,
        payload=dict(payload or entry.metadata),
        occurred_at=entry.occurred_at,
    )


def audit(
    *,
    property_id,
    actor_id: str,
    action: str,
    resource_type: str,
    resource_id,
    occurred_at,
    details: str = "",
    metadata: Optional[dict] = None,
) -> StaffLog:
    entry = create_audit_entry(
        actor_id=actor_id,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id),
        property_id=property_id,
        occurred_at=occurred_at,
        details=details,
        metadata=metadata,
    )
    return write_staff_log(entry)


def publish_after_commit(
    event: DomainEvent, registry: Optional[SubscriberRegistry]
) -> None:
    """Schedule dispatch for after the surrounding transaction commits."""
    if registry is None:
        return

    def _dispatch() -> None:
        try:
            dispatch(event, registry)
        except Exception as exc:
            logger.error(
                f"Post-commit dispatch failed for {event.event_type} "
                f"(event_id: {event.event_id}): {exc}",
                exc_info=True,
            )

    transaction.on_commit(_dispatch)
