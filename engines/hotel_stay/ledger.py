"""
BOS Hotel Stay Engine — Payment Ledger & Tax Engine
=====================================================
Pure money arithmetic. All amounts are Decimal, quantised to 0.01.

The engine is the only place a taxed total is computed. Callers
supply base amounts; a taxed figure is never re-taxed.

Ledger identity (per booking, at all times):

    grand_total = taxed_total + price_adjustment + late_fee
    outstanding = grand_total − Σ advances − Σ receipts

outstanding may go negative: that is a refundable credit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

from django.db import models

from core.config.rules import TaxRateSet
from engines.hotel_stay.errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
RECONCILE_TOLERANCE = Decimal("0.01")


class PaymentMethod(models.TextChoices):
    CASH = "cash", "Cash"
    CARD = "card", "Card"
    UPI = "upi", "UPI"
    BANK = "bank", "Bank transfer"


class TransactionType(models.TextChoices):
    ADVANCE = "advance", "Advance"
    RECEIPT = "receipt", "Receipt"


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value: Any, field_name: str = "amount") -> Decimal:
    """Parse a caller-supplied amount into a 2dp Decimal."""
    if isinstance(value, float):
        value = repr(value)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field_name} must be a number, got {value!r}.") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be finite.")
    return quantize(amount)


# ══════════════════════════════════════════════════════════════
# TAX
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TaxComputation:
    base_amount: Decimal
    component_amounts: tuple[tuple[str, Decimal], ...]
    total_tax: Decimal
    grand_total: Decimal

    def components_as_dict(self) -> dict[str, str]:
        """JSON-friendly component map."""
        return {name: str(amount) for name, amount in self.component_amounts}


def compute_taxed_total(base_amount: Decimal, tax_rates: TaxRateSet) -> TaxComputation:
    """
    Each component is base × rate / 100, rounded half-up to the cent
    on its own; total_tax is the sum of the rounded components.
    """
    if base_amount < 0:
        raise ValidationError(f"Base amount must be >= 0, got {base_amount}.")
    base = quantize(base_amount)
    components = tuple(
        (name, quantize(base * rate / Decimal("100"))) for name, rate in tax_rates.rates
    )
    total_tax = sum((amount for _, amount in components), ZERO)
    return TaxComputation(
        base_amount=base,
        component_amounts=components,
        total_tax=total_tax,
        grand_total=base + total_tax,
    )


# ══════════════════════════════════════════════════════════════
# LEDGER
# ══════════════════════════════════════════════════════════════

def bucket_field(transaction_type: str, method: str) -> str:
    """Per-method running-total column, e.g. 'advance_cash'."""
    if transaction_type not in TransactionType.values:
        raise ValidationError(f"Unknown transaction type '{transaction_type}'.")
    if method not in PaymentMethod.values:
        raise ValidationError(
            f"Unknown payment method '{method}' (expected one of "
            f"{', '.join(PaymentMethod.values)})."
        )
    return f"{transaction_type}_{method}"


ADVANCE_FIELDS = tuple(f"advance_{m}" for m in PaymentMethod.values)
RECEIPT_FIELDS = tuple(f"receipt_{m}" for m in PaymentMethod.values)


def recompute_outstanding(
    grand_total: Decimal,
    advances: Iterable[Decimal],
    receipts: Iterable[Decimal],
) -> Decimal:
    return quantize(grand_total - sum(advances, ZERO) - sum(receipts, ZERO))


def grand_total_of(
    taxed_total: Decimal, price_adjustment: Decimal, late_fee: Decimal
) -> Decimal:
    return quantize(taxed_total + price_adjustment + late_fee)


def reconcile_final_amount(
    current_grand_total: Decimal,
    adjustment: Decimal,
    supplied_final: Decimal | None,
) -> Decimal:
    """
    Final amount a checkout settles on, before any late fee.

    The caller's figure must match the ledger's own (grand total plus
    the manual adjustment); when omitted it is derived.
    """
    expected = quantize(current_grand_total + adjustment)
    if supplied_final is None:
        return expected
    if abs(supplied_final - expected) > RECONCILE_TOLERANCE:
        raise ValidationError(
            f"Final amount {supplied_final} does not match ledger total "
            f"{expected} (grand total {current_grand_total} + adjustment {adjustment}).",
            details={
                "supplied_final_amount": str(supplied_final),
                "expected_final_amount": str(expected),
            },
        )
    return expected


def breakdown_snapshot(row: Any) -> dict[str, Any]:
    """Serialisable view of a PaymentBreakdown-like object."""
    snapshot: dict[str, Any] = {
        "base_amount": str(row.base_amount),
        "tax_components": dict(row.tax_components or {}),
        "total_tax": str(row.total_tax),
        "taxed_total": str(row.taxed_total),
        "price_adjustment": str(row.price_adjustment),
        "late_fee": str(row.late_fee),
        "grand_total": str(row.grand_total),
        "outstanding": str(row.outstanding),
    }
    for name in ADVANCE_FIELDS + RECEIPT_FIELDS:
        snapshot[name] = str(getattr(row, name))
    snapshot["total_advance"] = str(sum((getattr(row, f) for f in ADVANCE_FIELDS), ZERO))
    snapshot["total_received"] = str(sum((getattr(row, f) for f in RECEIPT_FIELDS), ZERO))
    return snapshot


def ledger_is_balanced(row: Any) -> bool:
    """grand_total and outstanding agree with the columns they derive from."""
    expected_grand = grand_total_of(row.taxed_total, row.price_adjustment, row.late_fee)
    expected_outstanding = recompute_outstanding(
        row.grand_total,
        (getattr(row, f) for f in ADVANCE_FIELDS),
        (getattr(row, f) for f in RECEIPT_FIELDS),
    )
    return (
        abs(expected_grand - row.grand_total) <= RECONCILE_TOLERANCE
        and abs(expected_outstanding - row.outstanding) <= RECONCILE_TOLERANCE
    )

