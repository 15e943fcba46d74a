"""
BOS Hotel Stay Engine — Policies
"""
from __future__ import annotations
from typing import Iterable, Optional

from engines.hotel_stay.booking_states import (
    CANCEL_ALLOWED_STATUSES, CHECK_IN_REFUSED_STATUSES,
    CHECKOUT_ALLOWED_STATUSES, PAYMENT_REFUSED_STATUSES,
    TRANSFER_ALLOWED_STATUSES, AssignmentStatus,
)
from engines.hotel_stay.room_states import (
    CHECK_IN_BLOCKING_STATUSES, OUT_OF_ORDER_STATUSES, RoomStatus,
)


def booking_may_check_in_policy(booking) -> Optional[str]:
    if booking.status in CHECK_IN_REFUSED_STATUSES:
        return f"Booking {booking.booking_number} is already {booking.status}."
    return None


def rooms_may_receive_guest_policy(rooms: Iterable) -> Optional[str]:
    for room in rooms:
        if room.status in CHECK_IN_BLOCKING_STATUSES:
            return f"Room {room.number} is not available (status: {room.status})."
    return None


def booking_may_check_out_policy(booking) -> Optional[str]:
    if booking.status not in CHECKOUT_ALLOWED_STATUSES:
        return (f"Booking {booking.booking_number} is {booking.status} "
                f"— checkout needs checked_in or confirmed.")
    return None


def booking_may_be_cancelled_policy(booking, assignments: Iterable) -> Optional[str]:
    if booking.status not in CANCEL_ALLOWED_STATUSES:
        return (f"Booking {booking.booking_number} is {booking.status} "
                f"— only pending or confirmed bookings can be cancelled.")
    for assignment in assignments:
        if assignment.actual_check_in is not None:
            return (f"Booking {booking.booking_number} has a guest arrival recorded "
                    f"— use checkout instead of cancellation.")
    return None


def booking_may_be_transferred_policy(booking) -> Optional[str]:
    if booking.status not in TRANSFER_ALLOWED_STATUSES:
        return (f"Cannot transfer room for booking with status: {booking.status}.")
    return None


def booking_accepts_payment_policy(booking) -> Optional[str]:
    if booking.status in PAYMENT_REFUSED_STATUSES:
        return f"Booking {booking.booking_number} is {booking.status} — payments are closed."
    return None


def room_is_bookable_policy(room, covers_today: bool) -> Optional[str]:
    if covers_today and room.status in OUT_OF_ORDER_STATUSES:
        return f"Room {room.number} is not available (status: {room.status})."
    return None


def transfer_target_available_policy(room) -> Optional[str]:
    if room.status != RoomStatus.AVAILABLE:
        return f"Room {room.number} is not available (Status: {room.status})."
    return None


def room_may_leave_occupied_policy(room, target: str, has_guest_in_house: bool) -> Optional[str]:
    if room.status == RoomStatus.OCCUPIED and target != RoomStatus.OCCUPIED and has_guest_in_house:
        return (f"Room {room.number} has a checked-in guest "
                f"— check the guest out or transfer them first.")
    return None


def assignment_is_active_policy(assignment) -> Optional[str]:
    if assignment.status not in (AssignmentStatus.RESERVED, AssignmentStatus.CHECKED_IN):
        return f"Room assignment {assignment.pk} is {assignment.status}."
    return None
