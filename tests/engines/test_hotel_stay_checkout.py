"""
Hotel stay: late-checkout and grace-period assessment.
"""

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest

from core.config.rules import GracePeriodPolicy
from engines.hotel_stay.checkout import (
    CheckoutKind,
    assess_lateness,
    departure_facts,
    latest_schedule,
    scheduled_checkout_time,
)


SCHEDULED = datetime(2025, 1, 12, 11, 0, tzinfo=timezone.utc)
POLICY = GracePeriodPolicy()


def _at(hour, minute=0, second=0):
    return SCHEDULED.replace(hour=hour, minute=minute, second=second)


class TestGraceBoundary:
    def test_on_time(self):
        result = assess_lateness(SCHEDULED, _at(10, 0), POLICY)
        assert not result.is_late
        assert result.late_fee == Decimal("0.00")
        assert result.kind == CheckoutKind.ON_TIME

    def test_exactly_scheduled(self):
        assert not assess_lateness(SCHEDULED, SCHEDULED, POLICY).is_late

    def test_within_grace(self):
        result = assess_lateness(SCHEDULED, _at(11, 30), POLICY)
        assert result.is_late
        assert result.grace_period_used
        assert result.late_fee == Decimal("0.00")
        assert result.kind == CheckoutKind.GRACE_PERIOD

    def test_last_grace_minute(self):
        result = assess_lateness(SCHEDULED, _at(12, 0), POLICY)
        assert result.late_minutes == 60
        assert result.grace_period_used
        assert result.late_fee == Decimal("0.00")

    def test_first_charged_minute(self):
        result = assess_lateness(SCHEDULED, _at(12, 1), POLICY)
        assert result.late_minutes == 61
        assert not result.grace_period_used
        assert result.hours_charged == 1
        assert result.late_fee == Decimal("100.00")
        assert result.kind == CheckoutKind.LATE_CHARGES

    def test_partial_minute_is_not_late(self):
        result = assess_lateness(SCHEDULED, _at(11, 0, 59), POLICY)
        assert result == assess_lateness(SCHEDULED, SCHEDULED, POLICY)

    def test_fee_per_started_hour(self):
        result = assess_lateness(SCHEDULED, _at(14, 30), POLICY)
        # 210 late minutes, 150 past grace → 3 hours
        assert result.hours_charged == 3
        assert result.late_fee == Decimal("300.00")

    def test_fee_capped(self):
        result = assess_lateness(SCHEDULED, _at(23, 0), POLICY)
        assert result.late_fee == Decimal("500.00")

    def test_grace_disabled_charges_from_first_minute(self):
        policy = GracePeriodPolicy(enabled=False)
        result = assess_lateness(SCHEDULED, _at(11, 1), policy)
        assert not result.grace_period_used
        assert result.hours_charged == 1
        assert result.late_fee == Decimal("100.00")

    def test_naive_datetimes_rejected(self):
        with pytest.raises(ValueError):
            assess_lateness(SCHEDULED.replace(tzinfo=None), SCHEDULED, POLICY)

    def test_other_timezone_same_instant(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        actual = datetime(2025, 1, 12, 17, 31, tzinfo=ist)  # 12:01 UTC
        assert assess_lateness(SCHEDULED, actual, POLICY).late_fee == Decimal("100.00")


class TestSchedule:
    def test_expected_time_wins(self):
        assert scheduled_checkout_time(time(12, 0), time(11, 0)) == time(12, 0)

    def test_default_when_missing(self):
        assert scheduled_checkout_time(None, time(11, 0)) == time(11, 0)

    def test_latest_schedule(self):
        later = SCHEDULED + timedelta(hours=2)
        assert latest_schedule([SCHEDULED, later]) == later


class TestDepartureFacts:
    def test_early(self):
        facts = departure_facts(date(2025, 1, 12), date(2025, 1, 11))
        assert facts.is_early
        assert facts.days_difference == 1

    def test_on_the_day(self):
        facts = departure_facts(date(2025, 1, 12), date(2025, 1, 12))
        assert not facts.is_early
        assert facts.days_difference == 0

    def test_overstay(self):
        assert departure_facts(date(2025, 1, 12), date(2025, 1, 13)).days_difference == -1
