"""
BOS Hotel Stay Engine — Room State Machine
============================================
Physical room status and the transitions staff may request.

Targets maintenance and blocked are always permitted (soft force
override). Leaving occupied additionally needs the room to have no
checked-in guest; that guard is enforced by the service, which can
see the assignments, through room_may_leave_occupied_policy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from django.db import models

from engines.hotel_stay.errors import StateTransitionError


class RoomStatus(models.TextChoices):
    AVAILABLE = "available", "Available"
    RESERVED = "reserved", "Reserved"
    OCCUPIED = "occupied", "Occupied"
    UNCLEAN = "unclean", "Unclean"
    CLEANING = "cleaning", "Cleaning"
    MAINTENANCE = "maintenance", "Maintenance"
    BLOCKED = "blocked", "Blocked"


ROOM_TRANSITIONS: dict[str, frozenset[str]] = {
    RoomStatus.AVAILABLE: frozenset({
        RoomStatus.RESERVED, RoomStatus.OCCUPIED, RoomStatus.BLOCKED,
        RoomStatus.MAINTENANCE, RoomStatus.CLEANING,
    }),
    RoomStatus.OCCUPIED: frozenset({
        RoomStatus.UNCLEAN, RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE,
    }),
    RoomStatus.UNCLEAN: frozenset({
        RoomStatus.CLEANING, RoomStatus.MAINTENANCE, RoomStatus.AVAILABLE,
    }),
    RoomStatus.CLEANING: frozenset({
        RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE,
    }),
    RoomStatus.MAINTENANCE: frozenset({
        RoomStatus.AVAILABLE, RoomStatus.BLOCKED,
    }),
    RoomStatus.BLOCKED: frozenset({
        RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE,
    }),
    RoomStatus.RESERVED: frozenset({
        RoomStatus.BLOCKED, RoomStatus.MAINTENANCE, RoomStatus.AVAILABLE,
    }),
}

OVERRIDE_TARGETS = frozenset({RoomStatus.MAINTENANCE, RoomStatus.BLOCKED})

# out of sale for tonight; later nights are decided by assignments alone
OUT_OF_ORDER_STATUSES = frozenset({RoomStatus.MAINTENANCE, RoomStatus.BLOCKED})

# statuses that refuse a guest arriving
CHECK_IN_BLOCKING_STATUSES = frozenset({RoomStatus.OCCUPIED, RoomStatus.BLOCKED})


def is_valid_room_status(value: str) -> bool:
    return value in RoomStatus.values


def validate_room_transition(current: str, target: str) -> None:
    """Raise StateTransitionError unless current -> target is allowed."""
    if not is_valid_room_status(target):
        raise StateTransitionError(
            f"'{target}' is not a room status.",
            details={"current": current, "target": target},
        )
    if current == target:
        raise StateTransitionError(
            f"Room is already {current}.",
            details={"current": current, "target": target},
        )
    if target in OVERRIDE_TARGETS:
        return
    if target not in ROOM_TRANSITIONS.get(current, frozenset()):
        raise StateTransitionError(
            f"Invalid room status transition from {current} to {target}.",
            details={"current": current, "target": target},
        )


def is_transition_allowed(current: str, target: str) -> bool:
    try:
        validate_room_transition(current, target)
    except StateTransitionError:
        return False
    return True


# ══════════════════════════════════════════════════════════════
# HOUSEKEEPING WORK ITEMS
# ══════════════════════════════════════════════════════════════

class TaskPriority(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"


class TaskStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"


@dataclass(frozen=True)
class HousekeepingTaskSpec:
    task_type: str
    priority: str
    estimated_minutes: int


HOUSEKEEPING_TASKS: dict[str, HousekeepingTaskSpec] = {
    RoomStatus.CLEANING: HousekeepingTaskSpec("Room Cleaning", TaskPriority.HIGH, 45),
    RoomStatus.MAINTENANCE: HousekeepingTaskSpec("Maintenance", TaskPriority.MEDIUM, 120),
}

CHECKOUT_CLEANING_TASK = HousekeepingTaskSpec("Checkout Cleaning", TaskPriority.HIGH, 45)
TRANSFER_CLEANING_TASK = HOUSEKEEPING_TASKS[RoomStatus.CLEANING]

# statuses a room may be released into when a housekeeping task is closed
TASK_COMPLETION_STATUSES = frozenset({
    RoomStatus.AVAILABLE, RoomStatus.MAINTENANCE, RoomStatus.BLOCKED,
})


def housekeeping_task_for(target: str) -> Optional[HousekeepingTaskSpec]:
    """Work item raised when a room enters `target`, if any."""
    return HOUSEKEEPING_TASKS.get(target)
