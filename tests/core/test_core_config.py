"""
Tests for core.config — stay policy rules.
"""

import pytest
from datetime import time
from decimal import Decimal

from core.config.rules import (
    GracePeriodPolicy,
    StayPolicy,
    TaxRateSet,
    TransferRules,
)


# ── TaxRateSet Tests ─────────────────────────────────────────

class TestTaxRateSet:
    def test_from_mapping(self):
        rates = TaxRateSet.from_mapping({"CGST": 6, "SGST": "6"})
        assert rates.as_dict() == {"CGST": Decimal("6"), "SGST": Decimal("6")}
        assert rates.total_percent == Decimal("12")

    def test_empty_set_is_allowed(self):
        assert TaxRateSet().total_percent == Decimal("0")

    def test_rate_above_100_rejected(self):
        with pytest.raises(ValueError, match="between 0 and 100"):
            TaxRateSet.from_mapping({"GST": 120})

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError, match="between 0 and 100"):
            TaxRateSet.from_mapping({"GST": -1})

    def test_non_numeric_rate_rejected(self):
        with pytest.raises(ValueError, match="must be a number"):
            TaxRateSet.from_mapping({"GST": "twelve"})

    def test_duplicate_component_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            TaxRateSet(rates=(("GST", Decimal("6")), ("GST", Decimal("6"))))

    def test_frozen_immutability(self):
        rates = TaxRateSet.from_mapping({"GST": 12})
        with pytest.raises(AttributeError):
            rates.rates = ()


# ── GracePeriodPolicy Tests ──────────────────────────────────

class TestGracePeriodPolicy:
    def test_defaults(self):
        policy = GracePeriodPolicy()
        assert policy.enabled
        assert policy.duration_minutes == 60
        assert policy.late_fee_per_hour == Decimal("100")
        assert policy.max_late_fee == Decimal("500")
        assert policy.effective_grace_minutes == 60

    def test_disabled_has_no_grace(self):
        assert GracePeriodPolicy(enabled=False).effective_grace_minutes == 0

    def test_from_mapping(self):
        policy = GracePeriodPolicy.from_mapping(
            {"enabled": True, "duration_minutes": 30, "late_fee_per_hour": "250"}
        )
        assert policy.duration_minutes == 30
        assert policy.late_fee_per_hour == Decimal("250")
        assert policy.max_late_fee == Decimal("500")

    def test_negative_duration_rejected(self):
        with pytest.raises(ValueError):
            GracePeriodPolicy(duration_minutes=-5)


# ── TransferRules Tests ──────────────────────────────────────

class TestTransferRules:
    def test_from_mapping(self):
        rules = TransferRules.from_mapping({
            "max_transfers_per_booking": 2,
            "allow_different_room_type": False,
            "room_type_compatibility": {"Deluxe": ["Suite"]},
            "notify_guest": False,
        })
        assert rules.max_transfers_per_booking == 2
        assert not rules.allow_different_room_type
        assert rules.room_type_compatibility == {"Deluxe": ("Suite",)}
        assert not rules.notify_guest
        assert rules.notify_management

    def test_zero_max_transfers_rejected(self):
        with pytest.raises(ValueError, match="max_transfers_per_booking"):
            TransferRules(max_transfers_per_booking=0)


# ── StayPolicy Tests ─────────────────────────────────────────

class TestStayPolicy:
    def test_defaults(self):
        policy = StayPolicy()
        assert policy.tax_rates.total_percent == Decimal("12")
        assert policy.default_check_in_time == time(14, 0)
        assert policy.default_check_out_time == time(11, 0)

    def test_from_settings(self):
        policy = StayPolicy.from_settings({
            "TAX_RATES": {"VAT": 18},
            "GRACE_PERIOD": {"enabled": False},
            "DEFAULT_CHECK_OUT_TIME": "12:00",
            "DB_STATEMENT_TIMEOUT_MS": 2500,
        })
        assert policy.tax_rates.as_dict() == {"VAT": Decimal("18")}
        assert not policy.grace_period.enabled
        assert policy.default_check_out_time == time(12, 0)
        assert policy.default_check_in_time == time(14, 0)
        assert policy.statement_timeout_ms == 2500
