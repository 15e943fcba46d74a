"""
BOS Hotel Stay Engine - Relational Stay State
=============================================
Rooms, bookings, room assignments, the payment ledger and the
operational side records (transfers, housekeeping, staff log,
late-checkout charges, grace-period usage).

Nothing here is hard-deleted: cancellation and completion are
status changes. Foreign keys use PROTECT throughout.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from engines.hotel_stay.booking_states import (
    ArrivalType,
    AssignmentStatus,
    BookingStatus,
    MealPlan,
)
from engines.hotel_stay.ledger import PaymentMethod, TransactionType
from engines.hotel_stay.room_states import RoomStatus, TaskPriority, TaskStatus

ZERO = Decimal("0.00")


def _money(**kwargs) -> models.DecimalField:
    kwargs.setdefault("default", ZERO)
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


class RoomType(models.Model):
    property_id = models.UUIDField(db_index=True)
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, default="", blank=True)
    base_price = _money()
    max_occupancy = models.PositiveSmallIntegerField(default=2)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "bos_hotel_room_types"
        ordering = ["property_id", "name"]
        constraints = [
            models.UniqueConstraint(
                fields=["property_id", "name"], name="uq_hotel_room_type_name"
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Room(models.Model):
    property_id = models.UUIDField(db_index=True)
    number = models.CharField(max_length=20)
    room_type = models.ForeignKey(
        RoomType, on_delete=models.PROTECT, related_name="rooms"
    )
    floor = models.SmallIntegerField(default=0)
    price = _money()
    status = models.CharField(
        max_length=20, choices=RoomStatus.choices, default=RoomStatus.AVAILABLE
    )
    status_reason = models.CharField(max_length=255, default="", blank=True)
    updated_by = models.CharField(max_length=255, default="", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "bos_hotel_rooms"
        ordering = ["property_id", "number"]
        constraints = [
            models.UniqueConstraint(
                fields=["property_id", "number"], name="uq_hotel_room_number"
            ),
        ]

    def __str__(self) -> str:
        return f"Room {self.number} ({self.status})"


class Guest(models.Model):
    property_id = models.UUIDField(db_index=True)
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, default="", blank=True)
    email = models.EmailField(default="", blank=True)
    address_line1 = models.CharField(max_length=255, default="", blank=True)
    address_line2 = models.CharField(max_length=255, default="", blank=True)
    city = models.CharField(max_length=100, default="", blank=True)
    state = models.CharField(max_length=100, default="", blank=True)
    country = models.CharField(max_length=100, default="", blank=True)
    postal_code = models.CharField(max_length=20, default="", blank=True)
    id_type = models.CharField(max_length=50, default="", blank=True)
    id_number = models.CharField(max_length=100, default="", blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "bos_hotel_guests"
        ordering = ["property_id", "name"]
        indexes = [
            models.Index(fields=["property_id", "phone"], name="idx_guest_prop_phone"),
        ]

    def __str__(self) -> str:
        return self.name


class Booking(models.Model):
    property_id = models.UUIDField(db_index=True)
    booking_number = models.CharField(max_length=32)
    guest = models.ForeignKey(Guest, on_delete=models.PROTECT, related_name="bookings")
    staff_id = models.CharField(max_length=255)
    status = models.CharField(
        max_length=20, choices=BookingStatus.choices, default=BookingStatus.CONFIRMED
    )
    arrival_type = models.CharField(
        max_length=20, choices=ArrivalType.choices, default=ArrivalType.WALK_IN
    )
    meal_plan = models.CharField(max_length=10, choices=MealPlan.choices, default=MealPlan.EP)
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    adults = models.PositiveSmallIntegerField(default=1)
    children = models.PositiveSmallIntegerField(default=0)
    extra_beds = models.PositiveSmallIntegerField(default=0)
    total_amount = _money()
    special_requests = models.TextField(default="", blank=True)
    notes = models.TextField(default="", blank=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.CharField(max_length=255, default="", blank=True)
    cancellation_reason = models.TextField(default="", blank=True)
    refund_amount = _money()
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "bos_hotel_bookings"
        ordering = ["property_id", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["property_id", "booking_number"],
                name="uq_hotel_booking_number",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.booking_number} ({self.status})"


class RoomAssignment(models.Model):
    booking = models.ForeignKey(
        Booking, on_delete=models.PROTECT, related_name="assignments"
    )
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name="assignments")
    status = models.CharField(
        max_length=20, choices=AssignmentStatus.choices, default=AssignmentStatus.RESERVED
    )
    check_in_date = models.DateField()
    check_out_date = models.DateField()
    expected_check_in_time = models.TimeField(null=True, blank=True)
    expected_check_out_time = models.TimeField(null=True, blank=True)
    room_rate = _money()
    expected_nights = models.PositiveSmallIntegerField(default=1)
    room_total = _money()
    adults = models.PositiveSmallIntegerField(default=1)
    children = models.PositiveSmallIntegerField(default=0)
    extra_beds = models.PositiveSmallIntegerField(default=0)
    actual_check_in = models.DateTimeField(null=True, blank=True)
    actual_check_out = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "bos_hotel_room_assignments"
        ordering = ["booking_id", "id"]
        indexes = [
            models.Index(
                fields=["room", "status", "check_in_date"],
                name="idx_assign_room_status_in",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(check_out_date__gte=models.F("check_in_date")),
                name="ck_assignment_dates_ordered",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.booking_id}:{self.room_id} ({self.status})"


class PaymentBreakdown(models.Model):
    booking = models.OneToOneField(
        Booking, on_delete=models.PROTECT, related_name="payment_breakdown"
    )
    base_amount = _money()
    tax_components = models.JSONField(default=dict)
    total_tax = _money()
    taxed_total = _money()
    price_adjustment = _money()
    late_fee = _money()
    grand_total = _money()
    advance_cash = _money()
    advance_card = _money()
    advance_upi = _money()
    advance_bank = _money()
    receipt_cash = _money()
    receipt_card = _money()
    receipt_upi = _money()
    receipt_bank = _money()
    outstanding = _money()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "bos_hotel_payment_breakdowns"


class PaymentTransaction(models.Model):
    booking = models.ForeignKey(
        Booking, on_delete=models.PROTECT, related_name="transactions"
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    method = models.CharField(max_length=10, choices=PaymentMethod.choices)
    transaction_type = models.CharField(max_length=10, choices=TransactionType.choices)
    reference = models.CharField(max_length=255, default="", blank=True)
    staff_id = models.CharField(max_length=255)
    status = models.CharField(max_length=20, default="completed")
    created_at = models.DateTimeField()

    class Meta:
        db_table = "bos_hotel_payment_transactions"
        ordering = ["booking_id", "created_at", "id"]


class TransferRecord(models.Model):
    property_id = models.UUIDField(db_index=True)
    booking = models.ForeignKey(
        Booking, on_delete=models.PROTECT, related_name="transfers"
    )
    assignment = models.ForeignKey(
        RoomAssignment, on_delete=models.PROTECT, related_name="transfers"
    )
    from_room = models.ForeignKey(
        Room, on_delete=models.PROTECT, related_name="transfers_out"
    )
    to_room = models.ForeignKey(
        Room, on_delete=models.PROTECT, related_name="transfers_in"
    )
    reason = models.CharField(max_length=255)
    staff_id = models.CharField(max_length=255)
    notes = models.TextField(default="", blank=True)
    transferred_at = models.DateTimeField()

    class Meta:
        db_table = "bos_hotel_transfers"
        ordering = ["booking_id", "transferred_at", "id"]


class HousekeepingTask(models.Model):
    property_id = models.UUIDField(db_index=True)
    room = models.ForeignKey(
        Room, on_delete=models.PROTECT, related_name="housekeeping_tasks"
    )
    booking = models.ForeignKey(
        Booking,
        on_delete=models.PROTECT,
        related_name="housekeeping_tasks",
        null=True,
        blank=True,
    )
    task_type = models.CharField(max_length=50)
    priority = models.CharField(max_length=10, choices=TaskPriority.choices)
    status = models.CharField(
        max_length=20, choices=TaskStatus.choices, default=TaskStatus.PENDING
    )
    estimated_minutes = models.PositiveIntegerField(default=0)
    notes = models.TextField(default="", blank=True)
    created_by = models.CharField(max_length=255)
    created_at = models.DateTimeField()
    completed_by = models.CharField(max_length=255, default="", blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "bos_hotel_housekeeping_tasks"
        ordering = ["property_id", "created_at", "id"]


class StaffLog(models.Model):
    entry_id = models.UUIDField(unique=True, editable=False)
    property_id = models.UUIDField(db_index=True)
    staff_id = models.CharField(max_length=255)
    action = models.CharField(max_length=100)
    resource_type = models.CharField(max_length=50)
    resource_id = models.CharField(max_length=64)
    status = models.CharField(max_length=10, default="EXECUTED")
    details = models.TextField(default="", blank=True)
    payload = models.JSONField(default=dict)
    occurred_at = models.DateTimeField()

    class Meta:
        db_table = "bos_hotel_staff_logs"
        ordering = ["property_id", "occurred_at", "id"]


class LateCheckoutCharge(models.Model):
    booking = models.ForeignKey(
        Booking, on_delete=models.PROTECT, related_name="late_checkout_charges"
    )
    assignment = models.ForeignKey(
        RoomAssignment, on_delete=models.PROTECT, related_name="late_checkout_charges"
    )
    scheduled_checkout = models.DateTimeField()
    actual_checkout = models.DateTimeField()
    late_minutes = models.PositiveIntegerField()
    hours_charged = models.PositiveIntegerField()
    amount = _money()
    created_at = models.DateTimeField()

    class Meta:
        db_table = "bos_hotel_late_checkout_charges"


class GracePeriodRecord(models.Model):
    booking = models.ForeignKey(
        Booking, on_delete=models.PROTECT, related_name="grace_period_records"
    )
    assignment = models.ForeignKey(
        RoomAssignment, on_delete=models.PROTECT, related_name="grace_period_records"
    )
    scheduled_checkout = models.DateTimeField()
    actual_checkout = models.DateTimeField()
    late_minutes = models.PositiveIntegerField()
    grace_minutes = models.PositiveIntegerField()
    created_at = models.DateTimeField()

    class Meta:
        db_table = "bos_hotel_grace_period_records"
