"""
BOS Hotel Stay Engine — Room Transfer Business Rules
======================================================
Property-level limits on moving a guest between rooms.
"""

from __future__ import annotations

from typing import Optional

from core.config.rules import TransferRules

TRANSFER_REASONS = (
    "Guest request",
    "Room maintenance required",
    "Room upgrade",
    "Room downgrade",
    "Noise complaint",
    "Room service issue",
    "Plumbing issue",
    "Electrical issue",
    "AC/Heating issue",
    "Housekeeping issue",
    "Guest preference",
    "Operational requirement",
    "Other",
)


def max_transfers_rule(transfers_so_far: int, rules: TransferRules) -> Optional[str]:
    if transfers_so_far >= rules.max_transfers_per_booking:
        return (
            f"Booking has already been transferred {transfers_so_far} times "
            f"(maximum {rules.max_transfers_per_booking})."
        )
    return None


def room_type_rule(
    source_type: str, target_type: str, rules: TransferRules
) -> Optional[str]:
    if source_type == target_type:
        return None
    if not rules.allow_different_room_type:
        return (
            f"Transfers between room types are disabled "
            f"({source_type} → {target_type})."
        )
    compatible = rules.room_type_compatibility.get(source_type)
    if compatible is not None and target_type not in compatible:
        return f"Room type {target_type} is not compatible with {source_type}."
    return None


def evaluate_transfer_rules(
    *,
    transfers_so_far: int,
    source_type: str,
    target_type: str,
    rules: TransferRules,
) -> Optional[str]:
    """First violated rule, or None."""
    return max_transfers_rule(transfers_so_far, rules) or room_type_rule(
        source_type, target_type, rules
    )
