"""
Hotel stay: tax computation and payment ledger arithmetic.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from core.config.rules import TaxRateSet
from engines.hotel_stay.errors import ValidationError
from engines.hotel_stay.ledger import (
    ADVANCE_FIELDS,
    RECEIPT_FIELDS,
    breakdown_snapshot,
    bucket_field,
    compute_taxed_total,
    grand_total_of,
    ledger_is_balanced,
    recompute_outstanding,
    reconcile_final_amount,
    to_money,
)


GST_12 = TaxRateSet.from_mapping({"GST": 12})


def _row(**overrides):
    fields = {name: Decimal("0.00") for name in ADVANCE_FIELDS + RECEIPT_FIELDS}
    fields.update(
        base_amount=Decimal("5000.00"),
        tax_components={"GST": "600.00"},
        total_tax=Decimal("600.00"),
        taxed_total=Decimal("5600.00"),
        price_adjustment=Decimal("0.00"),
        late_fee=Decimal("0.00"),
        grand_total=Decimal("5600.00"),
        outstanding=Decimal("5600.00"),
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestTax:
    def test_single_component(self):
        tax = compute_taxed_total(Decimal("5000"), GST_12)
        assert tax.total_tax == Decimal("600.00")
        assert tax.grand_total == Decimal("5600.00")
        assert tax.components_as_dict() == {"GST": "600.00"}

    def test_components_round_independently(self):
        rates = TaxRateSet.from_mapping({"CGST": "2.5", "SGST": "2.5"})
        tax = compute_taxed_total(Decimal("99.99"), rates)
        # 2.49975 rounds half-up to 2.50 for each component
        assert tax.component_amounts == (("CGST", Decimal("2.50")), ("SGST", Decimal("2.50")))
        assert tax.total_tax == Decimal("5.00")
        assert tax.grand_total == Decimal("104.99")

    def test_no_tax(self):
        tax = compute_taxed_total(Decimal("1200"), TaxRateSet())
        assert tax.grand_total == Decimal("1200.00")

    def test_negative_base_rejected(self):
        with pytest.raises(ValidationError):
            compute_taxed_total(Decimal("-1"), GST_12)


class TestMoney:
    def test_to_money(self):
        assert to_money("2000") == Decimal("2000.00")
        assert to_money(0.1) == Decimal("0.10")
        assert to_money(Decimal("10.005")) == Decimal("10.01")

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError, match="must be a number"):
            to_money("two thousand", "amount")

    def test_rejects_infinity(self):
        with pytest.raises(ValidationError, match="finite"):
            to_money("Infinity")


class TestBuckets:
    def test_bucket_field(self):
        assert bucket_field("advance", "cash") == "advance_cash"
        assert bucket_field("receipt", "upi") == "receipt_upi"

    def test_unknown_method(self):
        with pytest.raises(ValidationError, match="Unknown payment method 'cheque'"):
            bucket_field("receipt", "cheque")

    def test_unknown_type(self):
        with pytest.raises(ValidationError, match="Unknown transaction type"):
            bucket_field("refund", "cash")


class TestIdentity:
    def test_outstanding(self):
        assert recompute_outstanding(
            Decimal("5600.00"), [Decimal("2000.00"), Decimal("0")], [Decimal("500.00")]
        ) == Decimal("3100.00")

    def test_overpayment_goes_negative(self):
        assert recompute_outstanding(Decimal("100"), [Decimal("150")], []) == Decimal("-50.00")

    def test_grand_total(self):
        assert grand_total_of(
            Decimal("5600.00"), Decimal("-100.00"), Decimal("200.00")
        ) == Decimal("5700.00")

    def test_balanced_row(self):
        assert ledger_is_balanced(_row(advance_cash=Decimal("2000.00"), outstanding=Decimal("3600.00")))

    def test_unbalanced_row(self):
        assert not ledger_is_balanced(_row(outstanding=Decimal("1.00")))
        assert not ledger_is_balanced(_row(late_fee=Decimal("100.00")))

    def test_snapshot_totals(self):
        snapshot = breakdown_snapshot(
            _row(advance_cash=Decimal("2000.00"), receipt_card=Decimal("1000.00"))
        )
        assert snapshot["total_advance"] == "2000.00"
        assert snapshot["total_received"] == "1000.00"
        assert snapshot["tax_components"] == {"GST": "600.00"}


class TestReconcile:
    def test_derived_when_omitted(self):
        assert reconcile_final_amount(
            Decimal("5600.00"), Decimal("-100.00"), None
        ) == Decimal("5500.00")

    def test_within_tolerance(self):
        assert reconcile_final_amount(
            Decimal("5600.00"), Decimal("0"), Decimal("5600.01")
        ) == Decimal("5600.00")

    def test_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="does not match ledger total 5600.00") as info:
            reconcile_final_amount(Decimal("5600.00"), Decimal("0"), Decimal("5000.00"))
        assert info.value.details["expected_final_amount"] == "5600.00"
