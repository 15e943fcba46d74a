"""
BOS Hotel Stay Engine — Checkout Processor (pure part)
========================================================
Lateness against the grace-period policy, and early-departure facts.

Grace boundary, with a 60 minute window, ₹100/hour and a ₹500 cap,
scheduled 11:00:
    12:00 → 60 late minutes, grace used, fee 0
    12:01 → 61 late minutes, ceil(1/60) = 1 hour, fee 100
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Iterable, Optional

from core.config.rules import GracePeriodPolicy
from engines.hotel_stay.ledger import ZERO, quantize


class CheckoutKind:
    ON_TIME = "on_time"
    GRACE_PERIOD = "grace_period"
    LATE_CHARGES = "late_charges"


@dataclass(frozen=True)
class LatenessAssessment:
    is_late: bool
    late_minutes: int
    grace_period_used: bool
    late_fee: Decimal
    hours_charged: int

    @property
    def kind(self) -> str:
        if self.late_fee > 0:
            return CheckoutKind.LATE_CHARGES
        if self.grace_period_used:
            return CheckoutKind.GRACE_PERIOD
        return CheckoutKind.ON_TIME


ON_TIME = LatenessAssessment(
    is_late=False, late_minutes=0, grace_period_used=False, late_fee=ZERO, hours_charged=0
)


def assess_lateness(
    scheduled: datetime, actual: datetime, policy: GracePeriodPolicy
) -> LatenessAssessment:
    if scheduled.tzinfo is None or actual.tzinfo is None:
        raise ValueError("assess_lateness requires timezone-aware datetimes.")
    if actual <= scheduled:
        return ON_TIME

    late_minutes = math.floor((actual - scheduled).total_seconds() / 60)
    if late_minutes <= 0:
        return ON_TIME

    grace = policy.effective_grace_minutes
    if policy.enabled and late_minutes <= grace:
        return LatenessAssessment(
            is_late=True,
            late_minutes=late_minutes,
            grace_period_used=True,
            late_fee=ZERO,
            hours_charged=0,
        )

    hours = math.ceil((late_minutes - grace) / 60)
    fee = min(Decimal(hours) * policy.late_fee_per_hour, policy.max_late_fee)
    return LatenessAssessment(
        is_late=True,
        late_minutes=late_minutes,
        grace_period_used=False,
        late_fee=quantize(fee),
        hours_charged=hours,
    )


def scheduled_checkout_time(
    expected_check_out_time: Optional[time], default_check_out_time: time
) -> time:
    return expected_check_out_time or default_check_out_time


def latest_schedule(moments: Iterable[datetime]) -> datetime:
    """Lateness of a multi-room checkout is judged against the latest schedule."""
    return max(moments)


@dataclass(frozen=True)
class DepartureFacts:
    is_early: bool
    days_difference: int


def departure_facts(check_out_date: date, actual_date: date) -> DepartureFacts:
    """Early departure: the guest left on a calendar day before check_out_date."""
    diff = (check_out_date - actual_date).days
    return DepartureFacts(is_early=diff > 0, days_difference=diff)
