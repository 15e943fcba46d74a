from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


def _money(**kwargs):
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(decimal_places=2, max_digits=12, **kwargs)


ROOM_STATUS_CHOICES = [
    ("available", "Available"),
    ("reserved", "Reserved"),
    ("occupied", "Occupied"),
    ("unclean", "Unclean"),
    ("cleaning", "Cleaning"),
    ("maintenance", "Maintenance"),
    ("blocked", "Blocked"),
]
BOOKING_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("confirmed", "Confirmed"),
    ("checked_in", "Checked in"),
    ("checked_out", "Checked out"),
    ("cancelled", "Cancelled"),
]
ASSIGNMENT_STATUS_CHOICES = [
    ("reserved", "Reserved"),
    ("checked_in", "Checked in"),
    ("checked_out", "Checked out"),
    ("cancelled", "Cancelled"),
]
ARRIVAL_TYPE_CHOICES = [
    ("walk_in", "Walk-in"),
    ("phone", "Phone"),
    ("online", "Online"),
    ("OTA", "OTA"),
    ("agent", "Agent"),
    ("corporate", "Corporate"),
]
MEAL_PLAN_CHOICES = [
    ("EP", "Room only"),
    ("CP", "Breakfast"),
    ("MAP", "Breakfast + one meal"),
]
PAYMENT_METHOD_CHOICES = [
    ("cash", "Cash"),
    ("card", "Card"),
    ("upi", "UPI"),
    ("bank", "Bank transfer"),
]
TRANSACTION_TYPE_CHOICES = [
    ("advance", "Advance"),
    ("receipt", "Receipt"),
]
TASK_PRIORITY_CHOICES = [
    ("low", "Low"),
    ("medium", "Medium"),
    ("high", "High"),
]
TASK_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("completed", "Completed"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="RoomType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("property_id", models.UUIDField(db_index=True)),
                ("name", models.CharField(max_length=100)),
                ("code", models.CharField(blank=True, default="", max_length=20)),
                ("base_price", _money()),
                ("max_occupancy", models.PositiveSmallIntegerField(default=2)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "bos_hotel_room_types",
                "ordering": ["property_id", "name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("property_id", "name"), name="uq_hotel_room_type_name"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Room",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("property_id", models.UUIDField(db_index=True)),
                ("number", models.CharField(max_length=20)),
                ("floor", models.SmallIntegerField(default=0)),
                ("price", _money()),
                ("status", models.CharField(choices=ROOM_STATUS_CHOICES, default="available", max_length=20)),
                ("status_reason", models.CharField(blank=True, default="", max_length=255)),
                ("updated_by", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "room_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="rooms",
                        to="hotel_stay.roomtype",
                    ),
                ),
            ],
            options={
                "db_table": "bos_hotel_rooms",
                "ordering": ["property_id", "number"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("property_id", "number"), name="uq_hotel_room_number"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Guest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("property_id", models.UUIDField(db_index=True)),
                ("name", models.CharField(max_length=255)),
                ("phone", models.CharField(blank=True, default="", max_length=32)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address_line1", models.CharField(blank=True, default="", max_length=255)),
                ("address_line2", models.CharField(blank=True, default="", max_length=255)),
                ("city", models.CharField(blank=True, default="", max_length=100)),
                ("state", models.CharField(blank=True, default="", max_length=100)),
                ("country", models.CharField(blank=True, default="", max_length=100)),
                ("postal_code", models.CharField(blank=True, default="", max_length=20)),
                ("id_type", models.CharField(blank=True, default="", max_length=50)),
                ("id_number", models.CharField(blank=True, default="", max_length=100)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "bos_hotel_guests",
                "ordering": ["property_id", "name"],
                "indexes": [
                    models.Index(fields=["property_id", "phone"], name="idx_guest_prop_phone"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("property_id", models.UUIDField(db_index=True)),
                ("booking_number", models.CharField(max_length=32)),
                ("staff_id", models.CharField(max_length=255)),
                ("status", models.CharField(choices=BOOKING_STATUS_CHOICES, default="confirmed", max_length=20)),
                ("arrival_type", models.CharField(choices=ARRIVAL_TYPE_CHOICES, default="walk_in", max_length=20)),
                ("meal_plan", models.CharField(choices=MEAL_PLAN_CHOICES, default="EP", max_length=10)),
                ("check_in_date", models.DateField()),
                ("check_out_date", models.DateField()),
                ("adults", models.PositiveSmallIntegerField(default=1)),
                ("children", models.PositiveSmallIntegerField(default=0)),
                ("extra_beds", models.PositiveSmallIntegerField(default=0)),
                ("total_amount", _money()),
                ("special_requests", models.TextField(blank=True, default="")),
                ("notes", models.TextField(blank=True, default="")),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("checked_out_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_by", models.CharField(blank=True, default="", max_length=255)),
                ("cancellation_reason", models.TextField(blank=True, default="")),
                ("refund_amount", _money()),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "guest",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="bookings",
                        to="hotel_stay.guest",
                    ),
                ),
            ],
            options={
                "db_table": "bos_hotel_bookings",
                "ordering": ["property_id", "-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("property_id", "booking_number"),
                        name="uq_hotel_booking_number",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RoomAssignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=ASSIGNMENT_STATUS_CHOICES, default="reserved", max_length=20)),
                ("check_in_date", models.DateField()),
                ("check_out_date", models.DateField()),
                ("expected_check_in_time", models.TimeField(blank=True, null=True)),
                ("expected_check_out_time", models.TimeField(blank=True, null=True)),
                ("room_rate", _money()),
                ("expected_nights", models.PositiveSmallIntegerField(default=1)),
                ("room_total", _money()),
                ("adults", models.PositiveSmallIntegerField(default=1)),
                ("children", models.PositiveSmallIntegerField(default=0)),
                ("extra_beds", models.PositiveSmallIntegerField(default=0)),
                ("actual_check_in", models.DateTimeField(blank=True, null=True)),
                ("actual_check_out", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assignments",
                        to="hotel_stay.booking",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="assignments",
                        to="hotel_stay.room",
                    ),
                ),
            ],
            options={
                "db_table": "bos_hotel_room_assignments",
                "ordering": ["booking_id", "id"],
                "indexes": [
                    models.Index(
                        fields=["room", "status", "check_in_date"],
                        name="idx_assign_room_status_in",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(check_out_date__gte=models.F("check_in_date")),
                        name="ck_assignment_dates_ordered",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PaymentBreakdown",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("base_amount", _money()),
                ("tax_components", models.JSONField(default=dict)),
                ("total_tax", _money()),
                ("taxed_total", _money()),
                ("price_adjustment", _money()),
                ("late_fee", _money()),
                ("grand_total", _money()),
                ("advance_cash", _money()),
                ("advance_card", _money()),
                ("advance_upi", _money()),
                ("advance_bank", _money()),
                ("receipt_cash", _money()),
                ("receipt_card", _money()),
                ("receipt_upi", _money()),
                ("receipt_bank", _money()),
                ("outstanding", _money()),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "booking",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_breakdown",
                        to="hotel_stay.booking",
                    ),
                ),
            ],
            options={
                "db_table": "bos_hotel_payment_breakdowns",
            },
        ),
        migrations.CreateModel(
            name="PaymentTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=12)),
                ("method", models.CharField(choices=PAYMENT_METHOD_CHOICES, max_length=10)),
                ("transaction_type", models.CharField(choices=TRANSACTION_TYPE_CHOICES, max_length=10)),
                ("reference", models.CharField(blank=True, default="", max_length=255)),
                ("staff_id", models.CharField(max_length=255)),
                ("status", models.CharField(default="completed", max_length=20)),
                ("created_at", models.DateTimeField()),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transactions",
                        to="hotel_stay.booking",
                    ),
                ),
            ],
            options={
                "db_table": "bos_hotel_payment_transactions",
                "ordering": ["booking_id", "created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="TransferRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("property_id", models.UUIDField(db_index=True)),
                ("reason", models.CharField(max_length=255)),
                ("staff_id", models.CharField(max_length=255)),
                ("notes", models.TextField(blank=True, default="")),
                ("transferred_at", models.DateTimeField()),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transfers",
                        to="hotel_stay.roomassignment",
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transfers",
                        to="hotel_stay.booking",
                    ),
                ),
                (
                    "from_room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transfers_out",
                        to="hotel_stay.room",
                    ),
                ),
                (
                    "to_room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="transfers_in",
                        to="hotel_stay.room",
                    ),
                ),
            ],
            options={
                "db_table": "bos_hotel_transfers",
                "ordering": ["booking_id", "transferred_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="HousekeepingTask",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("property_id", models.UUIDField(db_index=True)),
                ("task_type", models.CharField(max_length=50)),
                ("priority", models.CharField(choices=TASK_PRIORITY_CHOICES, max_length=10)),
                ("status", models.CharField(choices=TASK_STATUS_CHOICES, default="pending", max_length=20)),
                ("estimated_minutes", models.PositiveIntegerField(default=0)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_by", models.CharField(max_length=255)),
                ("created_at", models.DateTimeField()),
                ("completed_by", models.CharField(blank=True, default="", max_length=255)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "booking",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="housekeeping_tasks",
                        to="hotel_stay.booking",
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="housekeeping_tasks",
                        to="hotel_stay.room",
                    ),
                ),
            ],
            options={
                "db_table": "bos_hotel_housekeeping_tasks",
                "ordering": ["property_id", "created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="StaffLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_id", models.UUIDField(editable=False, unique=True)),
                ("property_id", models.UUIDField(db_index=True)),
                ("staff_id", models.CharField(max_length=255)),
                ("action", models.CharField(max_length=100)),
                ("resource_type", models.CharField(max_length=50)),
                ("resource_id", models.CharField(max_length=64)),
                ("status", models.CharField(default="EXECUTED", max_length=10)),
                ("details", models.TextField(blank=True, default="")),
                ("payload", models.JSONField(default=dict)),
                ("occurred_at", models.DateTimeField()),
            ],
            options={
                "db_table": "bos_hotel_staff_logs",
                "ordering": ["property_id", "occurred_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="LateCheckoutCharge",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("scheduled_checkout", models.DateTimeField()),
                ("actual_checkout", models.DateTimeField()),
                ("late_minutes", models.PositiveIntegerField()),
                ("hours_charged", models.PositiveIntegerField()),
                ("amount", _money()),
                ("created_at", models.DateTimeField()),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="late_checkout_charges",
                        to="hotel_stay.roomassignment",
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="late_checkout_charges",
                        to="hotel_stay.booking",
                    ),
                ),
            ],
            options={
                "db_table": "bos_hotel_late_checkout_charges",
            },
        ),
        migrations.CreateModel(
            name="GracePeriodRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("scheduled_checkout", models.DateTimeField()),
                ("actual_checkout", models.DateTimeField()),
                ("late_minutes", models.PositiveIntegerField()),
                ("grace_minutes", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField()),
                (
                    "assignment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="grace_period_records",
                        to="hotel_stay.roomassignment",
                    ),
                ),
                (
                    "booking",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="grace_period_records",
                        to="hotel_stay.booking",
                    ),
                ),
            ],
            options={
                "db_table": "bos_hotel_grace_period_records",
            },
        ),
    ]
