"""
BOS Hotel Stay Engine — Request Commands
==========================================
Frozen request objects validated on construction. Anything that
crosses into the engine passes through one of these first, so the
service never sees an unnormalised payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Mapping, Optional

from engines.hotel_stay.booking_states import ArrivalType, MealPlan
from engines.hotel_stay.errors import ValidationError
from engines.hotel_stay.ledger import PaymentMethod, TransactionType, to_money


def _clean(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _require_text(value: Any, field_name: str) -> str:
    cleaned = _clean(value)
    if not cleaned:
        raise ValidationError(f"{field_name} must be a non-empty string.")
    return cleaned


def _non_negative_int(value: Any, field_name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ValidationError(f"{field_name} must be a non-negative int, got {value!r}.")
    return value


def _adult_count(value: Any, message: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValidationError(f"{message} Got {value!r}.")
    return value


# ══════════════════════════════════════════════════════════════
# GUEST
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Address:
    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    postal_code: str = ""

    @classmethod
    def from_value(cls, value: Any) -> "Address":
        """
        Normalise an address given either as free text or as a mapping.
        Free text lands in line1.
        """
        if value is None:
            return cls()
        if isinstance(value, Address):
            return value
        if isinstance(value, str):
            return cls(line1=value.strip())
        if isinstance(value, Mapping):
            return cls(
                line1=_clean(value.get("line1") or value.get("street")),
                line2=_clean(value.get("line2")),
                city=_clean(value.get("city")),
                state=_clean(value.get("state")),
                country=_clean(value.get("country")),
                postal_code=_clean(value.get("postal_code") or value.get("pincode")),
            )
        raise ValidationError(f"address must be text or an object, got {type(value).__name__}.")


@dataclass(frozen=True)
class GuestInfo:
    name: str
    phone: str = ""
    email: str = ""
    address: Address = field(default_factory=Address)
    id_type: str = ""
    id_number: str = ""

    def __post_init__(self):
        object.__setattr__(self, "name", _require_text(self.name, "guest name"))
        object.__setattr__(self, "phone", _clean(self.phone))
        object.__setattr__(self, "email", _clean(self.email).lower())
        if self.email and "@" not in self.email:
            raise ValidationError(f"guest email '{self.email}' is not an email address.")
        object.__setattr__(self, "address", Address.from_value(self.address))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GuestInfo":
        return cls(
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            email=data.get("email", ""),
            address=Address.from_value(data.get("address")),
            id_type=_clean(data.get("id_type")),
            id_number=_clean(data.get("id_number")),
        )


# ══════════════════════════════════════════════════════════════
# BOOKING
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RoomRequest:
    room_id: int
    room_rate: Decimal
    adults: int = 1
    children: int = 0
    extra_beds: int = 0
    check_in_time: Optional[time] = None
    check_out_time: Optional[time] = None

    def __post_init__(self):
        object.__setattr__(self, "room_rate", to_money(self.room_rate, "room_rate"))
        if self.room_rate < 0:
            raise ValidationError("room_rate must be >= 0.")
        _adult_count(self.adults, "Each room needs at least one adult.")
        _non_negative_int(self.children, "children")
        _non_negative_int(self.extra_beds, "extra_beds")


@dataclass(frozen=True)
class AdvancePayment:
    amount: Decimal
    method: str = PaymentMethod.CASH
    reference: str = ""

    def __post_init__(self):
        object.__setattr__(self, "amount", to_money(self.amount, "advance amount"))
        if self.amount <= 0:
            raise ValidationError("Advance amount must be greater than zero.")
        if self.method not in PaymentMethod.values:
            raise ValidationError(f"Unknown payment method '{self.method}'.")


@dataclass(frozen=True)
class CreateBookingRequest:
    guest: GuestInfo
    rooms: tuple[RoomRequest, ...]
    check_in_date: date
    check_out_date: date
    adults: int = 1
    children: int = 0
    extra_beds: int = 0
    # base amount before tax; derived from Σ rate × nights when omitted
    total_amount: Optional[Decimal] = None
    advances: tuple[AdvancePayment, ...] = ()
    arrival_type: str = ArrivalType.WALK_IN
    meal_plan: str = MealPlan.EP
    special_requests: str = ""
    confirm: bool = True

    def __post_init__(self):
        if not isinstance(self.guest, GuestInfo):
            raise ValidationError("guest must be GuestInfo.")
        if not self.rooms:
            raise ValidationError("A booking needs at least one room.")
        room_ids = [r.room_id for r in self.rooms]
        if len(set(room_ids)) != len(room_ids):
            raise ValidationError("The same room is listed twice in one booking.")
        if self.check_out_date < self.check_in_date:
            raise ValidationError(
                f"Check-out date {self.check_out_date} is before check-in date "
                f"{self.check_in_date}."
            )
        _adult_count(self.adults, "A booking needs at least one adult.")
        _non_negative_int(self.children, "children")
        _non_negative_int(self.extra_beds, "extra_beds")
        if self.total_amount is not None:
            object.__setattr__(self, "total_amount", to_money(self.total_amount, "total_amount"))
            if self.total_amount < 0:
                raise ValidationError("total_amount must be >= 0.")
        if self.arrival_type not in ArrivalType.values:
            raise ValidationError(f"Unknown arrival type '{self.arrival_type}'.")
        if self.meal_plan not in MealPlan.values:
            raise ValidationError(f"Unknown meal plan '{self.meal_plan}'.")
        object.__setattr__(self, "rooms", tuple(self.rooms))
        object.__setattr__(self, "advances", tuple(self.advances))


@dataclass(frozen=True)
class TariffUpdateRequest:
    assignment_id: int
    room_rate: Optional[Decimal] = None
    adults: Optional[int] = None
    children: Optional[int] = None
    extra_beds: Optional[int] = None

    def __post_init__(self):
        if self.room_rate is not None:
            object.__setattr__(self, "room_rate", to_money(self.room_rate, "room_rate"))
            if self.room_rate < 0:
                raise ValidationError("room_rate must be >= 0.")
        if self.adults is not None:
            _adult_count(self.adults, "A room needs at least one adult.")
        for name in ("children", "extra_beds"):
            value = getattr(self, name)
            if value is not None:
                _non_negative_int(value, name)


# ══════════════════════════════════════════════════════════════
# CHECKOUT / PAYMENTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CheckoutRequest:
    booking_id: int
    actual_time: Optional[datetime] = None
    room_id: Optional[int] = None
    adjustment: Decimal = Decimal("0")
    final_amount: Optional[Decimal] = None
    remaining_balance: Optional[Decimal] = None
    payment_method: str = PaymentMethod.CASH
    staff_id: Optional[str] = None
    adjustment_reason: str = ""
    notes: str = ""

    def __post_init__(self):
        if self.actual_time is not None and self.actual_time.tzinfo is None:
            raise ValidationError("actual_time must be timezone-aware.")
        object.__setattr__(self, "adjustment", to_money(self.adjustment, "adjustment"))
        if self.final_amount is not None:
            object.__setattr__(self, "final_amount", to_money(self.final_amount, "final_amount"))
        if self.remaining_balance is not None:
            object.__setattr__(
                self, "remaining_balance", to_money(self.remaining_balance, "remaining_balance")
            )
            if self.remaining_balance < 0:
                raise ValidationError("remaining_balance must be >= 0.")
        if self.payment_method not in PaymentMethod.values:
            raise ValidationError(f"Unknown payment method '{self.payment_method}'.")


@dataclass(frozen=True)
class PaymentRequest:
    booking_id: int
    amount: Decimal
    method: str
    transaction_type: str
    staff_id: Optional[str] = None
    reference: str = ""

    def __post_init__(self):
        object.__setattr__(self, "amount", to_money(self.amount, "amount"))
        if self.amount <= 0:
            raise ValidationError(f"Payment amount must be greater than zero, got {self.amount}.")
        if self.method not in PaymentMethod.values:
            raise ValidationError(
                f"Unknown payment method '{self.method}' (expected one of "
                f"{', '.join(PaymentMethod.values)})."
            )
        if self.transaction_type not in TransactionType.values:
            raise ValidationError(
                f"Unknown transaction type '{self.transaction_type}' (expected advance or receipt)."
            )
