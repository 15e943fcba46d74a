"""
BOS Core Config — Stay Policy Rules
=====================================
Admin-configurable rules consumed by the hotel stay engine:
tax-rate set, grace-period policy, room-transfer rules.

Doctrine: no hardcoded rates or fees in engine logic. Everything the
engine needs arrives as an immutable StayPolicy at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from core.time.clock import parse_wall_time


def _to_decimal(value: Any, field_name: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"{field_name} must be a number, got {value!r}.") from exc
    if not result.is_finite():
        raise ValueError(f"{field_name} must be finite.")
    return result


# ══════════════════════════════════════════════════════════════
# TAX RATES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TaxRateSet:
    """
    Ordered set of (component name, percent) pairs.

    Each component is charged on the base amount independently;
    components never compound on each other.
    """

    rates: tuple[tuple[str, Decimal], ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for name, rate in self.rates:
            if not name or not isinstance(name, str):
                raise ValueError("Tax component name must be a non-empty string.")
            if name in seen:
                raise ValueError(f"Duplicate tax component '{name}'.")
            seen.add(name)
            if not isinstance(rate, Decimal):
                raise ValueError(f"Tax rate for '{name}' must be Decimal.")
            if rate < 0 or rate > 100:
                raise ValueError(
                    f"Tax rate for '{name}' must be a percent between 0 and 100, got {rate}."
                )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "TaxRateSet":
        return cls(
            rates=tuple(
                (str(name), _to_decimal(rate, f"tax rate '{name}'"))
                for name, rate in mapping.items()
            )
        )

    def as_dict(self) -> dict[str, Decimal]:
        return dict(self.rates)

    @property
    def total_percent(self) -> Decimal:
        return sum((rate for _, rate in self.rates), Decimal("0"))


# ══════════════════════════════════════════════════════════════
# GRACE PERIOD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GracePeriodPolicy:
    enabled: bool = True
    duration_minutes: int = 60
    late_fee_per_hour: Decimal = Decimal("100")
    max_late_fee: Decimal = Decimal("500")

    def __post_init__(self) -> None:
        if not isinstance(self.duration_minutes, int) or self.duration_minutes < 0:
            raise ValueError("duration_minutes must be a non-negative int.")
        if self.late_fee_per_hour < 0:
            raise ValueError("late_fee_per_hour must be >= 0.")
        if self.max_late_fee < 0:
            raise ValueError("max_late_fee must be >= 0.")

    @property
    def effective_grace_minutes(self) -> int:
        """Minutes forgiven before the first fee tier (0 when disabled)."""
        return self.duration_minutes if self.enabled else 0

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "GracePeriodPolicy":
        return cls(
            enabled=bool(mapping.get("enabled", True)),
            duration_minutes=int(mapping.get("duration_minutes", 60)),
            late_fee_per_hour=_to_decimal(
                mapping.get("late_fee_per_hour", 100), "late_fee_per_hour"
            ),
            max_late_fee=_to_decimal(mapping.get("max_late_fee", 500), "max_late_fee"),
        )


# ══════════════════════════════════════════════════════════════
# TRANSFER RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferRules:
    max_transfers_per_booking: int = 3
    allow_different_room_type: bool = True
    # room type name -> room type names a guest may be moved into
    room_type_compatibility: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    notify_guest: bool = True
    notify_housekeeping: bool = True
    notify_management: bool = True

    def __post_init__(self) -> None:
        if (
            not isinstance(self.max_transfers_per_booking, int)
            or self.max_transfers_per_booking < 1
        ):
            raise ValueError("max_transfers_per_booking must be an int >= 1.")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "TransferRules":
        compatibility = {
            str(source): tuple(str(t) for t in targets)
            for source, targets in dict(mapping.get("room_type_compatibility", {})).items()
        }
        return cls(
            max_transfers_per_booking=int(mapping.get("max_transfers_per_booking", 3)),
            allow_different_room_type=bool(mapping.get("allow_different_room_type", True)),
            room_type_compatibility=compatibility,
            notify_guest=bool(mapping.get("notify_guest", True)),
            notify_housekeeping=bool(mapping.get("notify_housekeeping", True)),
            notify_management=bool(mapping.get("notify_management", True)),
        )


# ══════════════════════════════════════════════════════════════
# STAY POLICY (aggregate)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StayPolicy:
    tax_rates: TaxRateSet = field(
        default_factory=lambda: TaxRateSet(rates=(("GST", Decimal("12")),))
    )
    grace_period: GracePeriodPolicy = field(default_factory=GracePeriodPolicy)
    transfer_rules: TransferRules = field(default_factory=TransferRules)
    default_check_in_time: time = time(14, 0)
    default_check_out_time: time = time(11, 0)
    statement_timeout_ms: int = 5000

    @classmethod
    def from_settings(cls, hotel_settings: Mapping[str, Any]) -> "StayPolicy":
        """Build from the HOTEL_STAY settings dict."""
        return cls(
            tax_rates=TaxRateSet.from_mapping(hotel_settings.get("TAX_RATES", {"GST": 12})),
            grace_period=GracePeriodPolicy.from_mapping(
                hotel_settings.get("GRACE_PERIOD", {})
            ),
            transfer_rules=TransferRules.from_mapping(
                hotel_settings.get("TRANSFER_RULES", {})
            ),
            default_check_in_time=parse_wall_time(
                hotel_settings.get("DEFAULT_CHECK_IN_TIME", "14:00")
            ),
            default_check_out_time=parse_wall_time(
                hotel_settings.get("DEFAULT_CHECK_OUT_TIME", "11:00")
            ),
            statement_timeout_ms=int(hotel_settings.get("DB_STATEMENT_TIMEOUT_MS", 5000)),
        )
