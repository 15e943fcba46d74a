"""
BOS Django Adapter Views
========================
Thin JSON views over HotelStayService.

Views parse the transport payload into engine request objects, call
the service and render the result in the standard envelope. Every
engine error maps to its own status code; nothing here decides
business rules.
"""

from __future__ import annotations

import json
from datetime import date, datetime, time
from typing import Any, Callable

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_service
from core.http_api.errors import error_response, map_engine_error, success_response
from engines.hotel_stay.commands import (
    AdvancePayment,
    CheckoutRequest,
    CreateBookingRequest,
    GuestInfo,
    PaymentRequest,
    RoomRequest,
    TariffUpdateRequest,
)
from engines.hotel_stay.errors import HotelStayError
from engines.hotel_stay.ledger import TransactionType


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _parse_date(value: Any, field_name: str) -> date:
    if value is None or value == "":
        raise ValueError(f"{field_name} is required.")
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(f"{field_name} must be an ISO date (YYYY-MM-DD).") from exc


def _parse_optional_time(value: Any, field_name: str) -> time | None:
    if value is None or value == "":
        return None
    try:
        return time.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(f"{field_name} must be a time (HH:MM).") from exc


def _parse_optional_datetime(value: Any, field_name: str) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise ValueError(f"{field_name} must be an ISO datetime.") from exc
    if parsed.tzinfo is None:
        raise ValueError(f"{field_name} must carry a UTC offset.")
    return parsed


def _parse_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be an integer.") from exc


def _staff_id(request: HttpRequest, body: dict[str, Any]) -> str | None:
    return body.get("staff_id") or request.headers.get("X-Staff-Id") or None


def _run(operation: Callable[[], Any], *, status: int = 200) -> JsonResponse:
    """Call the service and render its result or error."""
    try:
        data = operation()
    except HotelStayError as exc:
        error_status, body = map_engine_error(exc)
        return JsonResponse(body, status=error_status)
    except (ValueError, KeyError, TypeError) as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return JsonResponse(success_response(data), status=status)


# ══════════════════════════════════════════════════════════════
# SERIALIZERS
# ══════════════════════════════════════════════════════════════

def _iso(value) -> str | None:
    return value.isoformat() if value is not None else None


def _room_to_dict(room) -> dict[str, Any]:
    return {
        "room_id": room.pk,
        "number": room.number,
        "room_type": room.room_type.name,
        "floor": room.floor,
        "price": str(room.price),
        "status": room.status,
        "status_reason": room.status_reason,
    }


def _assignment_to_dict(assignment) -> dict[str, Any]:
    return {
        "assignment_id": assignment.pk,
        "room_id": assignment.room_id,
        "status": assignment.status,
        "check_in_date": _iso(assignment.check_in_date),
        "check_out_date": _iso(assignment.check_out_date),
        "expected_check_in_time": _iso(assignment.expected_check_in_time),
        "expected_check_out_time": _iso(assignment.expected_check_out_time),
        "room_rate": str(assignment.room_rate),
        "expected_nights": assignment.expected_nights,
        "room_total": str(assignment.room_total),
        "adults": assignment.adults,
        "children": assignment.children,
        "extra_beds": assignment.extra_beds,
        "actual_check_in": _iso(assignment.actual_check_in),
        "actual_check_out": _iso(assignment.actual_check_out),
    }


def _booking_to_dict(booking) -> dict[str, Any]:
    return {
        "booking_id": booking.pk,
        "booking_number": booking.booking_number,
        "status": booking.status,
        "guest": {
            "guest_id": booking.guest_id,
            "name": booking.guest.name,
            "phone": booking.guest.phone,
            "email": booking.guest.email,
        },
        "arrival_type": booking.arrival_type,
        "meal_plan": booking.meal_plan,
        "check_in_date": _iso(booking.check_in_date),
        "check_out_date": _iso(booking.check_out_date),
        "adults": booking.adults,
        "children": booking.children,
        "extra_beds": booking.extra_beds,
        "total_amount": str(booking.total_amount),
        "checked_in_at": _iso(booking.checked_in_at),
        "checked_out_at": _iso(booking.checked_out_at),
        "cancelled_at": _iso(booking.cancelled_at),
        "cancellation_reason": booking.cancellation_reason,
        "assignments": [_assignment_to_dict(a) for a in booking.assignments.order_by("pk")],
    }


def _transaction_to_dict(txn) -> dict[str, Any]:
    return {
        "transaction_id": txn.pk,
        "amount": str(txn.amount),
        "method": txn.method,
        "transaction_type": txn.transaction_type,
        "reference": txn.reference,
        "staff_id": txn.staff_id,
        "created_at": _iso(txn.created_at),
    }


def _transfer_to_dict(record) -> dict[str, Any]:
    return {
        "transfer_id": record.pk,
        "booking_id": record.booking_id,
        "from_room": record.from_room.number,
        "to_room": record.to_room.number,
        "reason": record.reason,
        "staff_id": record.staff_id,
        "notes": record.notes,
        "transferred_at": _iso(record.transferred_at),
    }


# ══════════════════════════════════════════════════════════════
# REQUEST FACTORIES
# ══════════════════════════════════════════════════════════════

def _create_booking_request(body: dict[str, Any]) -> CreateBookingRequest:
    guest = body["guest"]
    if not isinstance(guest, dict):
        raise ValueError("guest must be an object.")
    rooms = body["rooms"]
    if not isinstance(rooms, list):
        raise ValueError("rooms must be a list.")
    return CreateBookingRequest(
        guest=GuestInfo.from_mapping(guest),
        rooms=tuple(
            RoomRequest(
                room_id=_parse_int(room["room_id"], "room_id"),
                room_rate=room["room_rate"],
                adults=_parse_int(room.get("adults", 1), "adults"),
                children=_parse_int(room.get("children", 0), "children"),
                extra_beds=_parse_int(room.get("extra_beds", 0), "extra_beds"),
                check_in_time=_parse_optional_time(room.get("check_in_time"), "check_in_time"),
                check_out_time=_parse_optional_time(room.get("check_out_time"), "check_out_time"),
            )
            for room in rooms
        ),
        check_in_date=_parse_date(body.get("check_in_date"), "check_in_date"),
        check_out_date=_parse_date(body.get("check_out_date"), "check_out_date"),
        adults=_parse_int(body.get("adults", 1), "adults"),
        children=_parse_int(body.get("children", 0), "children"),
        extra_beds=_parse_int(body.get("extra_beds", 0), "extra_beds"),
        total_amount=body.get("total_amount"),
        advances=tuple(
            AdvancePayment(
                amount=advance["amount"],
                method=advance.get("method", "cash"),
                reference=advance.get("reference", ""),
            )
            for advance in body.get("advances", [])
        ),
        arrival_type=body.get("arrival_type", "walk_in"),
        meal_plan=body.get("meal_plan", "EP"),
        special_requests=body.get("special_requests", ""),
        confirm=bool(body.get("confirm", True)),
    )


def _checkout_request(booking_id: int, request: HttpRequest, body: dict[str, Any]) -> CheckoutRequest:
    room_id = body.get("room_id")
    return CheckoutRequest(
        booking_id=booking_id,
        actual_time=_parse_optional_datetime(body.get("actual_time"), "actual_time"),
        room_id=_parse_int(room_id, "room_id") if room_id is not None else None,
        adjustment=body.get("adjustment", 0),
        final_amount=body.get("final_amount"),
        remaining_balance=body.get("remaining_balance"),
        payment_method=body.get("payment_method", "cash"),
        staff_id=_staff_id(request, body),
        adjustment_reason=body.get("adjustment_reason", ""),
        notes=body.get("notes", ""),
    )


# ══════════════════════════════════════════════════════════════
# VIEWS
# ══════════════════════════════════════════════════════════════

@csrf_exempt
def availability_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()

    def _op():
        params = request.GET
        exclude = params.get("exclude_booking_id")
        result = build_service().check_availability(
            _parse_int(params.get("room_id"), "room_id"),
            _parse_date(params.get("from"), "from"),
            _parse_date(params.get("to"), "to"),
            times=(
                _parse_optional_time(params.get("check_in_time"), "check_in_time"),
                _parse_optional_time(params.get("check_out_time"), "check_out_time"),
            ),
            exclude_booking_id=_parse_int(exclude, "exclude_booking_id") if exclude else None,
        )
        return {
            "available": result.available,
            "message": result.message,
            "conflicting_assignment_id": result.conflict.reference if result.conflict else None,
        }

    return _run(_op)


@csrf_exempt
def available_rooms_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()

    def _op():
        params = request.GET
        room_type_id = params.get("room_type_id")
        rooms = build_service().available_rooms(
            _parse_date(params.get("from"), "from"),
            _parse_date(params.get("to"), "to"),
            room_type_id=_parse_int(room_type_id, "room_type_id") if room_type_id else None,
        )
        return [_room_to_dict(room) for room in rooms]

    return _run(_op)


@csrf_exempt
def bookings_create_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        booking = build_service().create_booking(
            _create_booking_request(body), staff_id=_staff_id(request, body)
        )
        return _booking_to_dict(booking)

    return _run(_op, status=201)


@csrf_exempt
def booking_detail_view(request: HttpRequest, booking_id: int) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _run(lambda: _booking_to_dict(build_service().get_booking(booking_id)))


@csrf_exempt
def booking_confirm_view(request: HttpRequest, booking_id: int) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        return _booking_to_dict(
            build_service().confirm_booking(booking_id, staff_id=_staff_id(request, body))
        )

    return _run(_op)


@csrf_exempt
def booking_check_in_view(request: HttpRequest, booking_id: int) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        booking = build_service().check_in(
            booking_id,
            actual_time=_parse_optional_datetime(body.get("actual_time"), "actual_time"),
            notes=body.get("notes"),
            staff_id=_staff_id(request, body),
        )
        return _booking_to_dict(booking)

    return _run(_op)


@csrf_exempt
def booking_checkout_view(request: HttpRequest, booking_id: int) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        result = build_service().checkout(_checkout_request(booking_id, request, body))
        return {
            "booking": _booking_to_dict(result.booking),
            "late_fee": str(result.late_fee),
            "grace_period_used": result.grace_period_used,
            "is_late": result.is_late,
            "late_minutes": result.late_minutes,
            "hours_charged": result.hours_charged,
            "is_early": result.is_early,
            "days_difference": result.days_difference,
            "grand_total": str(result.grand_total),
            "outstanding": str(result.outstanding),
        }

    return _run(_op)


@csrf_exempt
def booking_cancel_view(request: HttpRequest, booking_id: int) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        booking = build_service().cancel_booking(
            booking_id,
            body.get("reason", ""),
            staff_id=_staff_id(request, body),
            refund_amount=body.get("refund_amount", 0),
        )
        return _booking_to_dict(booking)

    return _run(_op)


@csrf_exempt
def booking_transfer_view(request: HttpRequest, booking_id: int) -> JsonResponse:
    if request.method == "GET":
        return _run(
            lambda: [_transfer_to_dict(r) for r in build_service().transfer_history(booking_id)]
        )
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        record = build_service().transfer_room(
            booking_id,
            _parse_int(body.get("from_room_id"), "from_room_id"),
            _parse_int(body.get("to_room_id"), "to_room_id"),
            body.get("reason", ""),
            staff_id=_staff_id(request, body),
            notify_guest=bool(body.get("notify_guest", True)),
            notify_housekeeping=bool(body.get("notify_housekeeping", True)),
            notes=body.get("notes", ""),
        )
        return _transfer_to_dict(record)

    return _run(_op, status=201)


@csrf_exempt
def booking_transfer_targets_view(request: HttpRequest, booking_id: int) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()

    def _op():
        exclude = request.GET.get("exclude_room_id")
        rooms = build_service().available_rooms_for_transfer(
            booking_id,
            exclude_room_id=_parse_int(exclude, "exclude_room_id") if exclude else None,
        )
        return [_room_to_dict(room) for room in rooms]

    return _run(_op)


@csrf_exempt
def booking_payments_view(request: HttpRequest, booking_id: int) -> JsonResponse:
    service = build_service()
    if request.method == "GET":
        return _run(lambda: {
            "breakdown": service.get_payment_breakdown(booking_id),
            "transactions": [
                _transaction_to_dict(t) for t in service.list_payment_transactions(booking_id)
            ],
        })
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        txn = service.record_payment(
            PaymentRequest(
                booking_id=booking_id,
                amount=body.get("amount"),
                method=body.get("method", "cash"),
                transaction_type=body.get("transaction_type", TransactionType.RECEIPT),
                staff_id=_staff_id(request, body),
                reference=body.get("reference", ""),
            )
        )
        return {
            "transaction": _transaction_to_dict(txn),
            "breakdown": service.get_payment_breakdown(booking_id),
        }

    return _run(_op, status=201)


@csrf_exempt
def assignment_tariff_view(request: HttpRequest, assignment_id: int) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        assignment = build_service().update_assignment_tariff(
            TariffUpdateRequest(
                assignment_id=assignment_id,
                room_rate=body.get("room_rate"),
                adults=body.get("adults"),
                children=body.get("children"),
                extra_beds=body.get("extra_beds"),
            ),
            staff_id=_staff_id(request, body),
        )
        return _assignment_to_dict(assignment)

    return _run(_op)


@csrf_exempt
def room_status_view(request: HttpRequest, room_id: int) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        room = build_service().update_room_status(
            room_id,
            body["status"],
            body.get("reason", ""),
            staff_id=_staff_id(request, body),
        )
        return _room_to_dict(room)

    return _run(_op)


@csrf_exempt
def room_status_bulk_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    try:
        body = _parse_json_body(request)
        room_ids = [_parse_int(room_id, "room_id") for room_id in body["room_ids"]]
        result = build_service().bulk_update_room_status(
            room_ids,
            body["status"],
            body.get("reason", ""),
            staff_id=_staff_id(request, body),
        )
    except (ValueError, KeyError, TypeError) as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    failure = result.as_partial_failure()
    if failure is not None:
        status, payload = map_engine_error(failure)
        return JsonResponse(payload, status=status)
    return JsonResponse(success_response([r.to_dict() for r in result.results]))


@csrf_exempt
def housekeeping_complete_view(request: HttpRequest, task_id: int) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()

    def _op():
        body = _parse_json_body(request)
        task = build_service().complete_housekeeping_task(
            task_id,
            staff_id=_staff_id(request, body),
            final_status=body.get("final_status", "available"),
        )
        return {
            "task_id": task.pk,
            "task_type": task.task_type,
            "status": task.status,
            "room": _room_to_dict(task.room),
        }

    return _run(_op)


@csrf_exempt
def transfer_statistics_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _run(lambda: build_service().transfer_statistics(
        _parse_date(request.GET.get("start"), "start"),
        _parse_date(request.GET.get("end"), "end"),
    ))
