"""
BOS Hotel Stay Engine — Service
=================================
The operations front desk, housekeeping and cashiers call.

Every write runs as one transactional unit (see services.persistence):
row locks, the overlap check and the inserts it guards all happen in
the same transaction. Events, and therefore notifications, leave only
after commit.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from core.config.rules import StayPolicy
from core.context.tenant_context import TenantContext
from core.events.event import DomainEvent
from core.events.registry import SubscriberRegistry
from core.time.clock import Clock
from engines.hotel_stay.booking_states import (
    AssignmentStatus, BookingStatus, derive_booking_status,
    validate_assignment_transition, validate_booking_transition,
)
from engines.hotel_stay.checkout import (
    LatenessAssessment, assess_lateness, departure_facts,
    scheduled_checkout_time,
)
from engines.hotel_stay.commands import (
    CheckoutRequest, CreateBookingRequest, GuestInfo, PaymentRequest,
    TariffUpdateRequest,
)
from engines.hotel_stay.errors import (
    BulkResult, ConflictError, HotelStayError, InvalidStateError, ItemResult,
    NotFoundError, ValidationError,
)
from engines.hotel_stay.events import (
    BOOKING_CANCELLED_V1, BOOKING_CONFIRMED_V1, BOOKING_CREATED_V1,
    BOOKING_TARIFF_UPDATED_V1, GUEST_CHECKED_IN_V1, GUEST_CHECKED_OUT_V1,
    HOUSEKEEPING_TASK_COMPLETED_V1, PAYMENT_RECORDED_V1,
    ROOM_STATUS_CHANGED_V1, ROOM_TRANSFERRED_V1,
    build_booking_created_payload, build_booking_status_payload,
    build_checked_in_payload, build_checked_out_payload,
    build_payment_payload, build_room_status_payload,
    build_task_completed_payload, build_transferred_payload,
)
from engines.hotel_stay.ledger import (
    ADVANCE_FIELDS, RECEIPT_FIELDS, ZERO, TransactionType, breakdown_snapshot,
    bucket_field, compute_taxed_total, grand_total_of, quantize,
    recompute_outstanding, reconcile_final_amount, to_money,
)
from engines.hotel_stay.models import (
    Booking, GracePeriodRecord, Guest, HousekeepingTask, LateCheckoutCharge,
    PaymentBreakdown, PaymentTransaction, Room, RoomAssignment, RoomType,
    TransferRecord,
)
from engines.hotel_stay.overlap import (
    ACTIVE_ASSIGNMENT_STATUSES, StayWindow, find_conflict, stay_nights,
)
from engines.hotel_stay.policies import (
    assignment_is_active_policy, booking_accepts_payment_policy,
    booking_may_be_cancelled_policy, booking_may_be_transferred_policy,
    booking_may_check_in_policy, booking_may_check_out_policy,
    room_is_bookable_policy, room_may_leave_occupied_policy,
    rooms_may_receive_guest_policy, transfer_target_available_policy,
)
from engines.hotel_stay.room_states import (
    CHECKOUT_CLEANING_TASK, OUT_OF_ORDER_STATUSES, TASK_COMPLETION_STATUSES,
    TRANSFER_CLEANING_TASK, HousekeepingTaskSpec, RoomStatus, TaskStatus,
    housekeeping_task_for, validate_room_transition,
)
from engines.hotel_stay.services.persistence import (
    audit, lock_assignments, lock_booking, lock_breakdown, lock_rooms,
    publish_after_commit, stay_transaction,
)
from engines.hotel_stay.transfer_rules import evaluate_transfer_rules

logger = logging.getLogger("bos.hotel_stay")


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    conflict: Optional[StayWindow] = None
    message: str = ""


@dataclass(frozen=True)
class CheckoutResult:
    booking: Booking
    late_fee: Decimal
    grace_period_used: bool
    is_late: bool
    late_minutes: int
    hours_charged: int
    is_early: bool
    days_difference: int
    grand_total: Decimal
    outstanding: Decimal


class HotelStayService:
    def __init__(
        self,
        *,
        context: TenantContext,
        policy: StayPolicy,
        clock: Clock,
        subscriber_registry: Optional[SubscriberRegistry] = None,
    ):
        self._context = context
        self._policy = policy
        self._clock = clock
        self._registry = subscriber_registry

    @property
    def context(self) -> TenantContext:
        return self._context

    @property
    def policy(self) -> StayPolicy:
        return self._policy

    # ── internals ─────────────────────────────────────────────

    def _now(self) -> datetime:
        return self._clock.now_utc()

    def _tx(self, operation: str):
        return stay_transaction(self._policy.statement_timeout_ms, operation)

    def _emit(self, event_type: str, payload: dict, actor_id: str, when: datetime) -> None:
        publish_after_commit(
            DomainEvent(
                event_type=event_type,
                property_id=self._context.property_id,
                actor_id=actor_id,
                occurred_at=when,
                payload=payload,
            ),
            self._registry,
        )

    def _audit(self, actor_id, action, resource_type, resource_id, when, details="", **metadata):
        audit(
            property_id=self._context.property_id,
            actor_id=actor_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            occurred_at=when,
            details=details,
            metadata=metadata,
        )

    def _reject(self, error_cls, reason: str, **details) -> HotelStayError:
        logger.warning(f"Rejected: {reason}")
        return error_cls(reason, details=details)

    def _active_windows(
        self,
        room_id: int,
        *,
        exclude_booking_id: Optional[int] = None,
        around: Optional[tuple[date, date]] = None,
    ) -> list[StayWindow]:
        qs = RoomAssignment.objects.filter(
            room_id=room_id, status__in=ACTIVE_ASSIGNMENT_STATUSES
        )
        if exclude_booking_id is not None:
            qs = qs.exclude(booking_id=exclude_booking_id)
        if around is not None:
            start, end = around
            # coarse pre-filter, the exact rule is windows_conflict
            qs = qs.filter(check_in_date__lte=end, check_out_date__gte=start)
        return [
            StayWindow(
                a.check_in_date,
                a.check_out_date,
                a.expected_check_in_time,
                a.expected_check_out_time,
                reference=a.pk,
            )
            for a in qs.order_by("check_in_date", "pk")
        ]

    def _covers_today(self, window: StayWindow) -> bool:
        today = self._context.today(self._now())
        return window.check_in_date <= today < window.effective_end

    def _create_task(
        self,
        room: Room,
        spec: HousekeepingTaskSpec,
        actor_id: str,
        when: datetime,
        *,
        booking: Optional[Booking] = None,
        notes: str = "",
    ) -> HousekeepingTask:
        return HousekeepingTask.objects.create(
            property_id=self._context.property_id,
            room=room,
            booking=booking,
            task_type=spec.task_type,
            priority=spec.priority,
            estimated_minutes=spec.estimated_minutes,
            notes=notes,
            created_by=actor_id,
            created_at=when,
        )

    def _set_room_status(self, room: Room, status: str, reason: str, actor_id: str) -> str:
        previous = room.status
        room.status = status
        room.status_reason = reason
        room.updated_by = actor_id
        room.save(update_fields=["status", "status_reason", "updated_by", "updated_at"])
        return previous

    def _release_room(self, room: Room, reason: str, actor_id: str) -> str:
        """Free a room, or leave it reserved while another active assignment holds it."""
        held = RoomAssignment.objects.filter(
            room=room, status__in=ACTIVE_ASSIGNMENT_STATUSES
        ).exists()
        target = RoomStatus.RESERVED if held else RoomStatus.AVAILABLE
        if room.status != target:
            self._set_room_status(room, target, reason, actor_id)
        return target

    @staticmethod
    def _rebalance(breakdown: PaymentBreakdown) -> None:
        breakdown.grand_total = grand_total_of(
            breakdown.taxed_total, breakdown.price_adjustment, breakdown.late_fee
        )
        breakdown.outstanding = recompute_outstanding(
            breakdown.grand_total,
            (getattr(breakdown, f) for f in ADVANCE_FIELDS),
            (getattr(breakdown, f) for f in RECEIPT_FIELDS),
        )
        breakdown.save()

    def _apply_payment(
        self,
        booking: Booking,
        breakdown: PaymentBreakdown,
        *,
        amount: Decimal,
        method: str,
        transaction_type: str,
        actor_id: str,
        when: datetime,
        reference: str = "",
    ) -> PaymentTransaction:
        field_name = bucket_field(transaction_type, method)
        txn = PaymentTransaction.objects.create(
            booking=booking,
            amount=amount,
            method=method,
            transaction_type=transaction_type,
            reference=reference,
            staff_id=actor_id,
            created_at=when,
        )
        setattr(breakdown, field_name, getattr(breakdown, field_name) + amount)
        return txn

    def _upsert_guest(self, info: GuestInfo) -> Guest:
        guest = None
        if info.phone:
            guest = (
                Guest.objects.select_for_update()
                .filter(property_id=self._context.property_id, phone=info.phone)
                .order_by("pk")
                .first()
            )
        fields = {
            "name": info.name,
            "phone": info.phone,
            "email": info.email,
            "address_line1": info.address.line1,
            "address_line2": info.address.line2,
            "city": info.address.city,
            "state": info.address.state,
            "country": info.address.country,
            "postal_code": info.address.postal_code,
            "id_type": info.id_type,
            "id_number": info.id_number,
        }
        if guest is None:
            return Guest.objects.create(property_id=self._context.property_id, **fields)
        for name, value in fields.items():
            # keep what we know when the new request leaves a field blank
            if value:
                setattr(guest, name, value)
        guest.save()
        return guest

    @staticmethod
    def _booking_number(when: datetime) -> str:
        return f"BK{when:%Y%m%d}{uuid.uuid4().hex[:6].upper()}"

    def _get_booking(self, booking_id: int) -> Booking:
        booking = (
            Booking.objects.select_related("guest")
            .filter(property_id=self._context.property_id, pk=booking_id)
            .first()
        )
        if booking is None:
            raise NotFoundError(f"Booking {booking_id} not found.")
        return booking

    def _get_room(self, room_id: int) -> Room:
        room = (
            Room.objects.select_related("room_type")
            .filter(property_id=self._context.property_id, pk=room_id)
            .first()
        )
        if room is None:
            raise NotFoundError(f"Room {room_id} not found.")
        return room

    # ══════════════════════════════════════════════════════════
    # AVAILABILITY
    # ══════════════════════════════════════════════════════════

    def check_availability(
        self,
        room_id: int,
        from_date: date,
        to_date: date,
        *,
        times: Optional[tuple[Optional[time], Optional[time]]] = None,
        exclude_booking_id: Optional[int] = None,
    ) -> AvailabilityResult:
        if to_date < from_date:
            raise ValidationError(f"Date range end {to_date} is before start {from_date}.")
        room = self._get_room(room_id)
        check_in_time, check_out_time = times or (None, None)
        candidate = StayWindow(from_date, to_date, check_in_time, check_out_time)
        conflict = find_conflict(
            candidate,
            self._active_windows(
                room.pk,
                exclude_booking_id=exclude_booking_id,
                around=(from_date, candidate.effective_end),
            ),
        )
        if conflict is None:
            return AvailabilityResult(available=True)
        return AvailabilityResult(
            available=False,
            conflict=conflict,
            message=(
                f"Room {room.number} is already booked from {conflict.check_in_date} "
                f"to {conflict.check_out_date}."
            ),
        )

    def available_rooms(
        self,
        from_date: date,
        to_date: date,
        *,
        room_type_id: Optional[int] = None,
    ) -> list[Room]:
        if to_date < from_date:
            raise ValidationError(f"Date range end {to_date} is before start {from_date}.")
        candidate = StayWindow(from_date, to_date)
        rooms = Room.objects.select_related("room_type").filter(
            property_id=self._context.property_id
        )
        if self._covers_today(candidate):
            rooms = rooms.exclude(status__in=OUT_OF_ORDER_STATUSES)
        if room_type_id is not None:
            rooms = rooms.filter(room_type_id=room_type_id)
        return [
            room
            for room in rooms.order_by("number")
            if find_conflict(
                candidate,
                self._active_windows(room.pk, around=(from_date, candidate.effective_end)),
            ) is None
        ]

    # ══════════════════════════════════════════════════════════
    # BOOKINGS
    # ══════════════════════════════════════════════════════════

    def create_booking(self, request: CreateBookingRequest, staff_id: Optional[str] = None) -> Booking:
        actor = self._context.actor_or_system(staff_id)
        now = self._now()
        nights = stay_nights(request.check_in_date, request.check_out_date)

        with self._tx("create_booking"):
            guest = self._upsert_guest(request.guest)
            rooms = lock_rooms(self._context.property_id, [r.room_id for r in request.rooms])

            for room_request in request.rooms:
                room = rooms[room_request.room_id]
                candidate = StayWindow(
                    request.check_in_date,
                    request.check_out_date,
                    room_request.check_in_time,
                    room_request.check_out_time,
                )
                reason = room_is_bookable_policy(room, self._covers_today(candidate))
                if reason:
                    raise self._reject(ConflictError, reason, room_id=room.pk)
                conflict = find_conflict(
                    candidate,
                    self._active_windows(
                        room.pk, around=(request.check_in_date, candidate.effective_end)
                    ),
                )
                if conflict is not None:
                    raise self._reject(
                        ConflictError,
                        f"Room {room.number} is already booked from "
                        f"{conflict.check_in_date} to {conflict.check_out_date}.",
                        room_id=room.pk,
                        conflicting_assignment_id=conflict.reference,
                    )

            derived_base = quantize(
                sum((r.room_rate * nights for r in request.rooms), ZERO)
            )
            base = request.total_amount if request.total_amount is not None else derived_base

            booking = Booking.objects.create(
                property_id=self._context.property_id,
                booking_number=self._booking_number(now),
                guest=guest,
                staff_id=actor,
                status=BookingStatus.CONFIRMED if request.confirm else BookingStatus.PENDING,
                arrival_type=request.arrival_type,
                meal_plan=request.meal_plan,
                check_in_date=request.check_in_date,
                check_out_date=request.check_out_date,
                adults=request.adults,
                children=request.children,
                extra_beds=request.extra_beds,
                total_amount=base,
                special_requests=request.special_requests,
                created_at=now,
            )

            for room_request in request.rooms:
                room = rooms[room_request.room_id]
                RoomAssignment.objects.create(
                    booking=booking,
                    room=room,
                    check_in_date=request.check_in_date,
                    check_out_date=request.check_out_date,
                    expected_check_in_time=room_request.check_in_time,
                    expected_check_out_time=room_request.check_out_time,
                    room_rate=room_request.room_rate,
                    expected_nights=nights,
                    room_total=quantize(room_request.room_rate * nights),
                    adults=room_request.adults,
                    children=room_request.children,
                    extra_beds=room_request.extra_beds,
                )
                if room.status == RoomStatus.AVAILABLE:
                    self._set_room_status(
                        room, RoomStatus.RESERVED, f"Booking {booking.booking_number}", actor
                    )

            tax = compute_taxed_total(base, self._policy.tax_rates)
            breakdown = PaymentBreakdown.objects.create(
                booking=booking,
                base_amount=tax.base_amount,
                tax_components=tax.components_as_dict(),
                total_tax=tax.total_tax,
                taxed_total=tax.grand_total,
                grand_total=tax.grand_total,
                outstanding=tax.grand_total,
            )
            for advance in request.advances:
                self._apply_payment(
                    booking,
                    breakdown,
                    amount=advance.amount,
                    method=advance.method,
                    transaction_type=TransactionType.ADVANCE,
                    actor_id=actor,
                    when=now,
                    reference=advance.reference,
                )
            self._rebalance(breakdown)

            self._audit(
                actor, "booking.created", "booking", booking.pk, now,
                details=f"Booking {booking.booking_number} created for {guest.name}",
                booking_number=booking.booking_number,
                rooms=[rooms[r.room_id].number for r in request.rooms],
                grand_total=str(breakdown.grand_total),
            )
            self._emit(
                BOOKING_CREATED_V1,
                build_booking_created_payload(booking, breakdown),
                actor,
                now,
            )

        logger.info(
            f"Booking {booking.booking_number} created: {len(request.rooms)} room(s), "
            f"{request.check_in_date} → {request.check_out_date}, "
            f"grand total {breakdown.grand_total}"
        )
        return booking

    def confirm_booking(self, booking_id: int, staff_id: Optional[str] = None) -> Booking:
        actor = self._context.actor_or_system(staff_id)
        now = self._now()
        with self._tx("confirm_booking"):
            booking = lock_booking(self._context.property_id, booking_id)
            if booking.status != BookingStatus.PENDING:
                raise self._reject(
                    InvalidStateError,
                    f"Booking {booking.booking_number} is {booking.status}; only pending "
                    f"bookings can be confirmed.",
                    booking_id=booking.pk,
                )
            validate_booking_transition(booking.status, BookingStatus.CONFIRMED)
            booking.status = BookingStatus.CONFIRMED
            booking.save(update_fields=["status", "updated_at"])
            self._audit(actor, "booking.confirmed", "booking", booking.pk, now,
                        details=f"Booking {booking.booking_number} confirmed")
            self._emit(BOOKING_CONFIRMED_V1, build_booking_status_payload(booking), actor, now)
        logger.info(f"Booking {booking.booking_number} confirmed")
        return booking

    def check_in(
        self,
        booking_id: int,
        actual_time: Optional[datetime] = None,
        notes: Optional[str] = None,
        staff_id: Optional[str] = None,
    ) -> Booking:
        if actual_time is not None and actual_time.tzinfo is None:
            raise ValidationError("actual_time must be timezone-aware.")
        actor = self._context.actor_or_system(staff_id)
        now = self._now()
        arrived_at = actual_time or now

        with self._tx("check_in"):
            booking = lock_booking(self._context.property_id, booking_id)
            reason = booking_may_check_in_policy(booking)
            if reason:
                raise self._reject(InvalidStateError, reason, booking_id=booking.pk)

            assignments = [
                a for a in lock_assignments(booking) if a.status == AssignmentStatus.RESERVED
            ]
            if not assignments:
                raise self._reject(
                    InvalidStateError,
                    f"Booking {booking.booking_number} has no reserved rooms to check in.",
                    booking_id=booking.pk,
                )
            rooms = lock_rooms(self._context.property_id, [a.room_id for a in assignments])
            reason = rooms_may_receive_guest_policy(rooms.values())
            if reason:
                raise self._reject(ConflictError, reason, booking_id=booking.pk)

            for assignment in assignments:
                validate_assignment_transition(assignment.status, AssignmentStatus.CHECKED_IN)
                assignment.status = AssignmentStatus.CHECKED_IN
                assignment.actual_check_in = arrived_at
                assignment.save(update_fields=["status", "actual_check_in", "updated_at"])
            for room in rooms.values():
                self._set_room_status(
                    room, RoomStatus.OCCUPIED, f"Checked in: {booking.booking_number}", actor
                )

            validate_booking_transition(booking.status, BookingStatus.CHECKED_IN)
            booking.status = BookingStatus.CHECKED_IN
            booking.checked_in_at = arrived_at
            if notes:
                booking.notes = f"{booking.notes}\n{notes}".strip()
            booking.save(update_fields=["status", "checked_in_at", "notes", "updated_at"])

            room_list = sorted(rooms.values(), key=lambda r: r.number)
            self._audit(
                actor, "booking.checked_in", "booking", booking.pk, now,
                details=f"Checked in {booking.booking_number} to "
                        f"{', '.join(r.number for r in room_list)}",
                actual_check_in=arrived_at.isoformat(),
            )
            self._emit(
                GUEST_CHECKED_IN_V1, build_checked_in_payload(booking, room_list), actor, now
            )

        logger.info(f"Booking {booking.booking_number} checked in ({len(assignments)} room(s))")
        return booking

    def cancel_booking(
        self,
        booking_id: int,
        reason: str,
        staff_id: Optional[str] = None,
        refund_amount: Decimal | str | int = 0,
    ) -> Booking:
        if not reason or not str(reason).strip():
            raise ValidationError("Cancellation reason is required.")
        refund = to_money(refund_amount, "refund_amount")
        if refund < 0:
            raise ValidationError("refund_amount must be >= 0.")
        actor = self._context.actor_or_system(staff_id)
        now = self._now()

        with self._tx("cancel_booking"):
            booking = lock_booking(self._context.property_id, booking_id)
            assignments = lock_assignments(booking)
            rejection = booking_may_be_cancelled_policy(booking, assignments)
            if rejection:
                raise self._reject(InvalidStateError, rejection, booking_id=booking.pk)

            reserved = [a for a in assignments if a.status == AssignmentStatus.RESERVED]
            rooms = lock_rooms(self._context.property_id, [a.room_id for a in reserved])
            for assignment in reserved:
                validate_assignment_transition(assignment.status, AssignmentStatus.CANCELLED)
                assignment.status = AssignmentStatus.CANCELLED
                assignment.save(update_fields=["status", "updated_at"])
            for room in rooms.values():
                if room.status == RoomStatus.RESERVED:
                    self._release_room(
                        room, f"Booking {booking.booking_number} cancelled", actor
                    )

            validate_booking_transition(booking.status, BookingStatus.CANCELLED)
            booking.status = BookingStatus.CANCELLED
            booking.cancelled_at = now
            booking.cancelled_by = actor
            booking.cancellation_reason = str(reason).strip()
            booking.refund_amount = refund
            booking.save()

            self._audit(
                actor, "booking.cancelled", "booking", booking.pk, now,
                details=f"Booking {booking.booking_number} cancelled: {booking.cancellation_reason}",
                refund_amount=str(refund),
            )
            self._emit(BOOKING_CANCELLED_V1, build_booking_status_payload(booking), actor, now)

        logger.info(f"Booking {booking.booking_number} cancelled by {actor}")
        return booking

    def update_assignment_tariff(
        self, request: TariffUpdateRequest, staff_id: Optional[str] = None
    ) -> RoomAssignment:
        """
        Change the rate or pax of one room. room_total becomes
        rate × nights and the booking's taxed total is re-derived from
        the room totals of its non-cancelled rooms.
        """
        actor = self._context.actor_or_system(staff_id)
        now = self._now()

        with self._tx("update_assignment_tariff"):
            booking_id = (
                RoomAssignment.objects.filter(
                    pk=request.assignment_id,
                    booking__property_id=self._context.property_id,
                )
                .values_list("booking_id", flat=True)
                .first()
            )
            if booking_id is None:
                raise NotFoundError(f"Room assignment {request.assignment_id} not found.")
            booking = lock_booking(self._context.property_id, booking_id)
            assignments = lock_assignments(booking)
            assignment = next(a for a in assignments if a.pk == request.assignment_id)
            reason = assignment_is_active_policy(assignment)
            if reason:
                raise self._reject(InvalidStateError, reason, assignment_id=assignment.pk)

            if request.room_rate is not None:
                assignment.room_rate = request.room_rate
            for name in ("adults", "children", "extra_beds"):
                value = getattr(request, name)
                if value is not None:
                    setattr(assignment, name, value)
            assignment.room_total = quantize(assignment.room_rate * assignment.expected_nights)
            assignment.save()

            billable = [a for a in assignments if a.status != AssignmentStatus.CANCELLED]
            base = quantize(sum((a.room_total for a in billable), ZERO))
            booking.total_amount = base
            booking.adults = sum(a.adults for a in billable)
            booking.children = sum(a.children for a in billable)
            booking.extra_beds = sum(a.extra_beds for a in billable)
            booking.save()

            breakdown = lock_breakdown(booking)
            tax = compute_taxed_total(base, self._policy.tax_rates)
            breakdown.base_amount = tax.base_amount
            breakdown.tax_components = tax.components_as_dict()
            breakdown.total_tax = tax.total_tax
            breakdown.taxed_total = tax.grand_total
            self._rebalance(breakdown)

            self._audit(
                actor, "booking.tariff_updated", "room_assignment", assignment.pk, now,
                details=f"Tariff for booking {booking.booking_number} set to "
                        f"{assignment.room_rate} × {assignment.expected_nights}",
                room_total=str(assignment.room_total),
                grand_total=str(breakdown.grand_total),
            )
            self._emit(
                BOOKING_TARIFF_UPDATED_V1,
                build_booking_created_payload(booking, breakdown),
                actor,
                now,
            )

        logger.info(
            f"Tariff updated on booking {booking.booking_number}: "
            f"room total {assignment.room_total}, grand total {breakdown.grand_total}"
        )
        return assignment

    def get_booking(self, booking_id: int) -> Booking:
        return self._get_booking(booking_id)

    # ══════════════════════════════════════════════════════════
    # ROOMS
    # ══════════════════════════════════════════════════════════

    def update_room_status(
        self,
        room_id: int,
        new_status: str,
        reason: str = "",
        staff_id: Optional[str] = None,
    ) -> Room:
        actor = self._context.actor_or_system(staff_id)
        now = self._now()

        with self._tx("update_room_status"):
            room = lock_rooms(self._context.property_id, [room_id])[room_id]
            try:
                validate_room_transition(room.status, new_status)
            except HotelStayError as exc:
                logger.warning(f"Rejected: room {room.number}: {exc.message}")
                raise
            has_guest = RoomAssignment.objects.filter(
                room=room, status=AssignmentStatus.CHECKED_IN
            ).exists()
            rejection = room_may_leave_occupied_policy(room, new_status, has_guest)
            if rejection:
                raise self._reject(ConflictError, rejection, room_id=room.pk)

            previous = self._set_room_status(room, new_status, (reason or "").strip(), actor)
            spec = housekeeping_task_for(new_status)
            if spec is not None:
                self._create_task(room, spec, actor, now, notes=(reason or "").strip())

            self._audit(
                actor, "room.status_changed", "room", room.pk, now,
                details=f"Room {room.number}: {previous} → {new_status}",
                previous_status=previous,
                status=new_status,
                reason=room.status_reason,
            )
            self._emit(
                ROOM_STATUS_CHANGED_V1, build_room_status_payload(room, previous), actor, now
            )

        logger.info(f"Room {room.number} status {previous} → {new_status} by {actor}")
        return room

    def bulk_update_room_status(
        self,
        room_ids: Iterable[int],
        new_status: str,
        reason: str = "",
        staff_id: Optional[str] = None,
    ) -> BulkResult:
        """Each room is updated in its own transaction; failures do not stop the rest."""
        results = []
        for room_id in room_ids:
            try:
                self.update_room_status(room_id, new_status, reason, staff_id)
            except HotelStayError as exc:
                results.append(
                    ItemResult(
                        item_id=room_id,
                        ok=False,
                        error_code=exc.code,
                        message=exc.message,
                        retryable=exc.retryable,
                    )
                )
            else:
                results.append(ItemResult(item_id=room_id, ok=True))
        bulk = BulkResult(tuple(results))
        if not bulk.all_ok:
            logger.warning(
                f"Bulk room status update to {new_status}: "
                f"{len(bulk.failed)} of {len(bulk.results)} failed"
            )
        return bulk

    def change_room_type(
        self,
        room_id: int,
        room_type_id: int,
        *,
        sync_price: bool = False,
        staff_id: Optional[str] = None,
    ) -> Room:
        """Refused while the room holds reservations from today onwards."""
        actor = self._context.actor_or_system(staff_id)
        now = self._now()
        today = self._context.today(now)

        with self._tx("change_room_type"):
            room = lock_rooms(self._context.property_id, [room_id])[room_id]
            room_type = RoomType.objects.filter(
                property_id=self._context.property_id, pk=room_type_id
            ).first()
            if room_type is None:
                raise NotFoundError(f"Room type {room_type_id} not found.")
            upcoming = RoomAssignment.objects.filter(
                room=room,
                status__in=ACTIVE_ASSIGNMENT_STATUSES,
                check_out_date__gte=today,
            ).count()
            if upcoming:
                raise self._reject(
                    ConflictError,
                    f"Room {room.number} has {upcoming} active reservation(s) from "
                    f"{today} onwards; move them before changing its type.",
                    room_id=room.pk,
                )
            previous_type = room.room_type.name
            room.room_type = room_type
            if sync_price:
                room.price = room_type.base_price
            room.updated_by = actor
            room.save()
            self._audit(
                actor, "room.type_changed", "room", room.pk, now,
                details=f"Room {room.number}: {previous_type} → {room_type.name}",
                sync_price=sync_price,
            )

        logger.info(f"Room {room.number} type changed to {room_type.name}")
        return room

    def complete_housekeeping_task(
        self,
        task_id: int,
        staff_id: Optional[str] = None,
        final_status: str = RoomStatus.AVAILABLE,
    ) -> HousekeepingTask:
        if final_status not in TASK_COMPLETION_STATUSES:
            raise ValidationError(
                f"A housekeeping task can release a room only to "
                f"{', '.join(sorted(TASK_COMPLETION_STATUSES))}, not {final_status}."
            )
        actor = self._context.actor_or_system(staff_id)
        now = self._now()

        with self._tx("complete_housekeeping_task"):
            task = (
                HousekeepingTask.objects.select_for_update()
                .filter(property_id=self._context.property_id, pk=task_id)
                .first()
            )
            if task is None:
                raise NotFoundError(f"Housekeeping task {task_id} not found.")
            if task.status == TaskStatus.COMPLETED:
                raise self._reject(
                    InvalidStateError, f"Housekeeping task {task_id} is already completed.",
                    task_id=task_id,
                )
            room = lock_rooms(self._context.property_id, [task.room_id])[task.room_id]
            if room.status != final_status:
                validate_room_transition(room.status, final_status)
                has_guest = RoomAssignment.objects.filter(
                    room=room, status=AssignmentStatus.CHECKED_IN
                ).exists()
                rejection = room_may_leave_occupied_policy(room, final_status, has_guest)
                if rejection:
                    raise self._reject(ConflictError, rejection, room_id=room.pk)
                self._set_room_status(room, final_status, f"{task.task_type} completed", actor)

            task.status = TaskStatus.COMPLETED
            task.completed_by = actor
            task.completed_at = now
            task.save(update_fields=["status", "completed_by", "completed_at"])
            task.room = room

            self._audit(
                actor, "housekeeping.task_completed", "housekeeping_task", task.pk, now,
                details=f"{task.task_type} for room {room.number} completed; room {final_status}",
            )
            self._emit(
                HOUSEKEEPING_TASK_COMPLETED_V1, build_task_completed_payload(task), actor, now
            )

        logger.info(f"Housekeeping task {task.pk} completed, room {room.number} → {room.status}")
        return task

    def pending_housekeeping_tasks(self) -> list[HousekeepingTask]:
        return list(
            HousekeepingTask.objects.select_related("room")
            .filter(property_id=self._context.property_id, status=TaskStatus.PENDING)
            .order_by("created_at", "pk")
        )

    # ══════════════════════════════════════════════════════════
    # PAYMENTS
    # ══════════════════════════════════════════════════════════

    def record_payment(self, request: PaymentRequest) -> PaymentTransaction:
        actor = self._context.actor_or_system(request.staff_id)
        now = self._now()

        with self._tx("record_payment"):
            booking = lock_booking(self._context.property_id, request.booking_id)
            reason = booking_accepts_payment_policy(booking)
            if reason:
                raise self._reject(InvalidStateError, reason, booking_id=booking.pk)
            breakdown = lock_breakdown(booking)
            txn = self._apply_payment(
                booking,
                breakdown,
                amount=request.amount,
                method=request.method,
                transaction_type=request.transaction_type,
                actor_id=actor,
                when=now,
                reference=request.reference,
            )
            self._rebalance(breakdown)
            self._audit(
                actor, "payment.recorded", "booking", booking.pk, now,
                details=f"{request.transaction_type} of {request.amount} by {request.method} "
                        f"on {booking.booking_number}",
                transaction_id=txn.pk,
                outstanding=str(breakdown.outstanding),
            )
            self._emit(PAYMENT_RECORDED_V1, build_payment_payload(txn, breakdown), actor, now)

        logger.info(
            f"Payment recorded on {booking.booking_number}: {request.transaction_type} "
            f"{request.amount} ({request.method}), outstanding {breakdown.outstanding}"
        )
        return txn

    def get_payment_breakdown(self, booking_id: int) -> dict:
        booking = self._get_booking(booking_id)
        breakdown = PaymentBreakdown.objects.filter(booking=booking).first()
        if breakdown is None:
            raise NotFoundError(
                f"Payment breakdown for booking {booking.booking_number} not found."
            )
        return breakdown_snapshot(breakdown)

    def list_payment_transactions(self, booking_id: int) -> list[PaymentTransaction]:
        booking = self._get_booking(booking_id)
        return list(booking.transactions.order_by("created_at", "pk"))

    # ══════════════════════════════════════════════════════════
    # CHECKOUT
    # ══════════════════════════════════════════════════════════

    def checkout(self, request: CheckoutRequest) -> CheckoutResult:
        actor = self._context.actor_or_system(request.staff_id)
        now = self._now()
        departed_at = request.actual_time or now

        with self._tx("checkout"):
            booking = lock_booking(self._context.property_id, request.booking_id)
            reason = booking_may_check_out_policy(booking)
            if reason:
                raise self._reject(InvalidStateError, reason, booking_id=booking.pk)

            assignments = lock_assignments(booking)
            open_assignments = [
                a for a in assignments if a.status in ACTIVE_ASSIGNMENT_STATUSES
            ]
            if request.room_id is not None:
                targeted = [a for a in open_assignments if a.room_id == request.room_id]
                if not targeted:
                    raise self._reject(
                        NotFoundError,
                        f"Room {request.room_id} has no open stay on booking "
                        f"{booking.booking_number}.",
                        booking_id=booking.pk,
                    )
            else:
                targeted = open_assignments
            if not targeted:
                raise self._reject(
                    InvalidStateError,
                    f"Booking {booking.booking_number} has no rooms left to check out.",
                    booking_id=booking.pk,
                )

            rooms = lock_rooms(self._context.property_id, [a.room_id for a in targeted])
            breakdown = lock_breakdown(booking)

            schedules = {
                a.pk: self._context.at(
                    a.check_out_date,
                    scheduled_checkout_time(
                        a.expected_check_out_time, self._policy.default_check_out_time
                    ),
                )
                for a in targeted
            }
            judged = max(targeted, key=lambda a: (schedules[a.pk], a.pk))
            scheduled = schedules[judged.pk]
            assessment = assess_lateness(scheduled, departed_at, self._policy.grace_period)

            reconcile_final_amount(
                breakdown.grand_total, request.adjustment, request.final_amount
            )
            breakdown.price_adjustment = quantize(
                breakdown.price_adjustment + request.adjustment
            )
            breakdown.late_fee = quantize(breakdown.late_fee + assessment.late_fee)

            for assignment in targeted:
                no_show = assignment.status == AssignmentStatus.RESERVED
                validate_assignment_transition(assignment.status, AssignmentStatus.CHECKED_OUT)
                assignment.status = AssignmentStatus.CHECKED_OUT
                assignment.actual_check_out = departed_at
                if no_show:
                    assignment.actual_check_in = departed_at
                assignment.save(
                    update_fields=["status", "actual_check_in", "actual_check_out", "updated_at"]
                )

            for room in rooms.values():
                self._release_room(room, f"Checked out: {booking.booking_number}", actor)
                self._create_task(
                    room, CHECKOUT_CLEANING_TASK, actor, now,
                    booking=booking, notes=f"Checkout of {booking.booking_number}",
                )

            derived = derive_booking_status(booking.status, [a.status for a in assignments])
            if derived == BookingStatus.CHECKED_OUT:
                validate_booking_transition(booking.status, BookingStatus.CHECKED_OUT)
                booking.status = BookingStatus.CHECKED_OUT
                booking.checked_out_at = departed_at
            if request.notes:
                booking.notes = f"{booking.notes}\n{request.notes}".strip()
            booking.save()

            if request.remaining_balance:
                self._apply_payment(
                    booking,
                    breakdown,
                    amount=request.remaining_balance,
                    method=request.payment_method,
                    transaction_type=TransactionType.RECEIPT,
                    actor_id=actor,
                    when=now,
                    reference="checkout settlement",
                )
            self._rebalance(breakdown)

            self._record_lateness(booking, judged, scheduled, departed_at, assessment, now)

            facts = departure_facts(
                max(a.check_out_date for a in targeted), self._context.today(departed_at)
            )
            room_list = sorted(rooms.values(), key=lambda r: r.number)
            self._audit(
                actor, "booking.checked_out", "booking", booking.pk, now,
                details=(
                    f"Checked out {', '.join(r.number for r in room_list)} on "
                    f"{booking.booking_number} ({assessment.kind})"
                ),
                late_minutes=assessment.late_minutes,
                late_fee=str(assessment.late_fee),
                adjustment=str(request.adjustment),
                adjustment_reason=request.adjustment_reason,
                grand_total=str(breakdown.grand_total),
                is_early=facts.is_early,
            )
            self._emit(
                GUEST_CHECKED_OUT_V1,
                build_checked_out_payload(booking, room_list, assessment, breakdown, departed_at),
                actor,
                now,
            )

        logger.info(
            f"Checkout on {booking.booking_number}: {assessment.kind}, "
            f"late fee {assessment.late_fee}, booking {booking.status}"
        )
        return CheckoutResult(
            booking=booking,
            late_fee=assessment.late_fee,
            grace_period_used=assessment.grace_period_used,
            is_late=assessment.is_late,
            late_minutes=assessment.late_minutes,
            hours_charged=assessment.hours_charged,
            is_early=facts.is_early,
            days_difference=facts.days_difference,
            grand_total=breakdown.grand_total,
            outstanding=breakdown.outstanding,
        )

    def _record_lateness(
        self,
        booking: Booking,
        assignment: RoomAssignment,
        scheduled: datetime,
        departed_at: datetime,
        assessment: LatenessAssessment,
        now: datetime,
    ) -> None:
        if assessment.late_fee > 0:
            LateCheckoutCharge.objects.create(
                booking=booking,
                assignment=assignment,
                scheduled_checkout=scheduled,
                actual_checkout=departed_at,
                late_minutes=assessment.late_minutes,
                hours_charged=assessment.hours_charged,
                amount=assessment.late_fee,
                created_at=now,
            )
        if assessment.grace_period_used:
            GracePeriodRecord.objects.create(
                booking=booking,
                assignment=assignment,
                scheduled_checkout=scheduled,
                actual_checkout=departed_at,
                late_minutes=assessment.late_minutes,
                grace_minutes=self._policy.grace_period.duration_minutes,
                created_at=now,
            )

    # ══════════════════════════════════════════════════════════
    # TRANSFERS
    # ══════════════════════════════════════════════════════════

    def transfer_room(
        self,
        booking_id: int,
        from_room_id: int,
        to_room_id: int,
        reason: str,
        staff_id: Optional[str] = None,
        *,
        notify_guest: bool = True,
        notify_housekeeping: bool = True,
        notes: str = "",
    ) -> TransferRecord:
        if from_room_id == to_room_id:
            raise self._reject(
                ValidationError, "Source and target rooms must be different.",
                room_id=from_room_id,
            )
        if not reason or not str(reason).strip():
            raise self._reject(ValidationError, "Transfer reason is required.")
        actor = self._context.actor_or_system(staff_id)
        now = self._now()

        with self._tx("transfer_room"):
            booking = lock_booking(self._context.property_id, booking_id)
            rejection = booking_may_be_transferred_policy(booking)
            if rejection:
                raise self._reject(InvalidStateError, rejection, booking_id=booking.pk)

            assignments = lock_assignments(booking)
            assignment = next(
                (
                    a for a in assignments
                    if a.room_id == from_room_id and a.status in ACTIVE_ASSIGNMENT_STATUSES
                ),
                None,
            )
            if assignment is None:
                raise self._reject(
                    ConflictError,
                    f"Room {from_room_id} is not assigned to booking {booking.booking_number}.",
                    booking_id=booking.pk,
                )

            rooms = lock_rooms(self._context.property_id, [from_room_id, to_room_id])
            source, target = rooms[from_room_id], rooms[to_room_id]
            rejection = transfer_target_available_policy(target)
            if rejection:
                raise self._reject(ConflictError, rejection, room_id=target.pk)

            window_start = assignment.check_in_date
            if assignment.status == AssignmentStatus.CHECKED_IN:
                window_start = max(window_start, self._context.today(now))
            window_start = min(window_start, assignment.check_out_date)
            candidate = StayWindow(
                window_start,
                assignment.check_out_date,
                assignment.expected_check_in_time,
                assignment.expected_check_out_time,
            )
            conflict = find_conflict(
                candidate,
                self._active_windows(
                    target.pk,
                    exclude_booking_id=booking.pk,
                    around=(window_start, candidate.effective_end),
                ),
            )
            if conflict is not None:
                raise self._reject(
                    ConflictError,
                    f"Room {target.number} is already booked from {conflict.check_in_date} "
                    f"to {conflict.check_out_date}.",
                    room_id=target.pk,
                )

            rejection = evaluate_transfer_rules(
                transfers_so_far=TransferRecord.objects.filter(booking=booking).count(),
                source_type=source.room_type.name,
                target_type=target.room_type.name,
                rules=self._policy.transfer_rules,
            )
            if rejection:
                raise self._reject(ConflictError, rejection, booking_id=booking.pk)

            source_was_occupied = source.status == RoomStatus.OCCUPIED
            assignment.room = target
            assignment.save(update_fields=["room", "updated_at"])
            self._set_room_status(
                target,
                RoomStatus.OCCUPIED
                if assignment.status == AssignmentStatus.CHECKED_IN
                else RoomStatus.RESERVED,
                f"Transfer in: {booking.booking_number}",
                actor,
            )
            self._release_room(source, f"Transfer out: {booking.booking_number}", actor)
            if source_was_occupied:
                self._create_task(
                    source, TRANSFER_CLEANING_TASK, actor, now,
                    booking=booking, notes=f"Vacated by transfer to room {target.number}",
                )

            record = TransferRecord.objects.create(
                property_id=self._context.property_id,
                booking=booking,
                assignment=assignment,
                from_room=source,
                to_room=target,
                reason=str(reason).strip(),
                staff_id=actor,
                notes=notes,
                transferred_at=now,
            )
            self._audit(
                actor, "room.transferred", "booking", booking.pk, now,
                details=f"Room transfer {source.number} → {target.number}: {record.reason}",
                transfer_id=record.pk,
            )
            self._emit(
                ROOM_TRANSFERRED_V1,
                build_transferred_payload(
                    record,
                    booking,
                    {
                        "guest": notify_guest,
                        "housekeeping": notify_housekeeping,
                        "management": True,
                    },
                ),
                actor,
                now,
            )

        logger.info(
            f"Booking {booking.booking_number} transferred {source.number} → {target.number}"
        )
        return record

    def available_rooms_for_transfer(
        self, booking_id: int, exclude_room_id: Optional[int] = None
    ) -> list[Room]:
        booking = self._get_booking(booking_id)
        start = booking.check_in_date
        if booking.status == BookingStatus.CHECKED_IN:
            start = min(max(start, self._context.today(self._now())), booking.check_out_date)
        candidate = StayWindow(start, booking.check_out_date)
        rooms = Room.objects.select_related("room_type").filter(
            property_id=self._context.property_id, status=RoomStatus.AVAILABLE
        )
        if exclude_room_id is not None:
            rooms = rooms.exclude(pk=exclude_room_id)
        return [
            room
            for room in rooms.order_by("number")
            if find_conflict(
                candidate,
                self._active_windows(
                    room.pk,
                    exclude_booking_id=booking.pk,
                    around=(start, candidate.effective_end),
                ),
            ) is None
        ]

    def transfer_history(self, booking_id: int) -> list[TransferRecord]:
        booking = self._get_booking(booking_id)
        return list(
            TransferRecord.objects.select_related("from_room", "to_room")
            .filter(booking=booking)
            .order_by("transferred_at", "pk")
        )

    def transfer_statistics(self, start: date, end: date) -> dict:
        """Transfers whose property-local date falls in [start, end]."""
        if end < start:
            raise ValidationError(f"Date range end {end} is before start {start}.")
        records = TransferRecord.objects.filter(
            property_id=self._context.property_id,
            transferred_at__gte=self._context.at(start, time.min),
            transferred_at__lt=self._context.at(end + timedelta(days=1), time.min),
        )
        by_reason: dict[str, int] = {}
        for reason in records.values_list("reason", flat=True):
            by_reason[reason] = by_reason.get(reason, 0) + 1
        return {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "total_transfers": sum(by_reason.values()),
            "by_reason": dict(sorted(by_reason.items())),
        }
