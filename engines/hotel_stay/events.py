"""
BOS Hotel Stay Engine — Event Types and Payload Builders
==========================================================
Engine: hotel_stay
Events are dispatched after commit; payloads are plain JSON-safe dicts.
"""

from __future__ import annotations

BOOKING_CREATED_V1       = "hotel_stay.booking.created.v1"
BOOKING_CONFIRMED_V1     = "hotel_stay.booking.confirmed.v1"
BOOKING_CANCELLED_V1     = "hotel_stay.booking.cancelled.v1"
BOOKING_TARIFF_UPDATED_V1 = "hotel_stay.booking.tariff_updated.v1"
GUEST_CHECKED_IN_V1      = "hotel_stay.guest.checked_in.v1"
GUEST_CHECKED_OUT_V1     = "hotel_stay.guest.checked_out.v1"
ROOM_STATUS_CHANGED_V1   = "hotel_stay.room.status_changed.v1"
ROOM_TRANSFERRED_V1      = "hotel_stay.room.transferred.v1"
PAYMENT_RECORDED_V1      = "hotel_stay.payment.recorded.v1"
HOUSEKEEPING_TASK_COMPLETED_V1 = "hotel_stay.housekeeping.task_completed.v1"

HOTEL_STAY_EVENT_TYPES = (
    BOOKING_CREATED_V1, BOOKING_CONFIRMED_V1, BOOKING_CANCELLED_V1,
    BOOKING_TARIFF_UPDATED_V1, GUEST_CHECKED_IN_V1, GUEST_CHECKED_OUT_V1,
    ROOM_STATUS_CHANGED_V1, ROOM_TRANSFERRED_V1, PAYMENT_RECORDED_V1,
    HOUSEKEEPING_TASK_COMPLETED_V1,
)


def _guest_contact(booking) -> dict:
    guest = booking.guest
    return {
        "guest_name": guest.name,
        "guest_email": guest.email,
        "guest_phone": guest.phone,
    }


def build_booking_created_payload(booking, breakdown) -> dict:
    return {
        "booking_id":     booking.pk,
        "booking_number": booking.booking_number,
        "status":         booking.status,
        "check_in_date":  booking.check_in_date.isoformat(),
        "check_out_date": booking.check_out_date.isoformat(),
        "room_ids":       [a.room_id for a in booking.assignments.all()],
        "grand_total":    str(breakdown.grand_total),
        "outstanding":    str(breakdown.outstanding),
        **_guest_contact(booking),
    }


def build_booking_status_payload(booking) -> dict:
    return {
        "booking_id":     booking.pk,
        "booking_number": booking.booking_number,
        "status":         booking.status,
        "reason":         booking.cancellation_reason,
        "refund_amount":  str(booking.refund_amount),
        **_guest_contact(booking),
    }


def build_checked_in_payload(booking, rooms) -> dict:
    return {
        "booking_id":     booking.pk,
        "booking_number": booking.booking_number,
        "room_numbers":   [room.number for room in rooms],
        "checked_in_at":  booking.checked_in_at.isoformat() if booking.checked_in_at else None,
        **_guest_contact(booking),
    }


def build_checked_out_payload(booking, rooms, assessment, breakdown, actual_time) -> dict:
    return {
        "booking_id":        booking.pk,
        "booking_number":    booking.booking_number,
        "booking_status":    booking.status,
        "room_numbers":      [room.number for room in rooms],
        "actual_check_out":  actual_time.isoformat(),
        "checkout_kind":     assessment.kind,
        "late_minutes":      assessment.late_minutes,
        "late_fee":          str(assessment.late_fee),
        "grace_period_used": assessment.grace_period_used,
        "grand_total":       str(breakdown.grand_total),
        "outstanding":       str(breakdown.outstanding),
        **_guest_contact(booking),
    }


def build_transferred_payload(record, booking, notify: dict) -> dict:
    return {
        "transfer_id":      record.pk,
        "booking_id":       booking.pk,
        "booking_number":   booking.booking_number,
        "from_room_id":     record.from_room_id,
        "from_room_number": record.from_room.number,
        "to_room_id":       record.to_room_id,
        "to_room_number":   record.to_room.number,
        "reason":           record.reason,
        "staff_id":         record.staff_id,
        "transferred_at":   record.transferred_at.isoformat(),
        "notify":           dict(notify),
        **_guest_contact(booking),
    }


def build_room_status_payload(room, previous_status: str) -> dict:
    return {
        "room_id":         room.pk,
        "room_number":     room.number,
        "previous_status": previous_status,
        "status":          room.status,
        "reason":          room.status_reason,
        "staff_id":        room.updated_by,
    }


def build_payment_payload(txn, breakdown) -> dict:
    return {
        "transaction_id":   txn.pk,
        "booking_id":       txn.booking_id,
        "amount":           str(txn.amount),
        "method":           txn.method,
        "transaction_type": txn.transaction_type,
        "outstanding":      str(breakdown.outstanding),
    }


def build_task_completed_payload(task) -> dict:
    return {
        "task_id":     task.pk,
        "room_id":     task.room_id,
        "task_type":   task.task_type,
        "final_status": task.room.status,
        "completed_by": task.completed_by,
    }
