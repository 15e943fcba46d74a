"""
BOS Core Config — Public API
===============================
Admin-configurable stay rules (tax, grace period, transfers).
Doctrine: No hardcoded rates or fees in engine logic.
"""

from core.config.rules import (
    GracePeriodPolicy,
    StayPolicy,
    TaxRateSet,
    TransferRules,
)

__all__ = [
    "TaxRateSet",
    "GracePeriodPolicy",
    "TransferRules",
    "StayPolicy",
]
