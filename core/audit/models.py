"""
BOS Core Audit — Immutable Audit Models
==========================================
Append-only audit log entries. Frozen dataclasses: once created,
never modified. Persisted copies (e.g. the hotel staff log) are
written in the same transaction as the change they describe.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

AUDIT_STATUSES = ("EXECUTED", "REJECTED", "ERROR")


@dataclass(frozen=True)
class AuditEntry:
    """
    Immutable record of an action taken at a property.

    Every accepted state change produces an AuditEntry;
    rejections may be recorded with status REJECTED.
    """

    entry_id: uuid.UUID
    actor_id: str
    action: str
    resource_type: str
    resource_id: str
    property_id: uuid.UUID
    status: str  # EXECUTED | REJECTED | ERROR
    occurred_at: datetime
    details: str = ""
    event_id: Optional[uuid.UUID] = None
    metadata: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.status not in AUDIT_STATUSES:
            raise ValueError(
                f"AuditEntry status must be EXECUTED|REJECTED|ERROR, got '{self.status}'."
            )
        if not self.actor_id:
            raise ValueError("AuditEntry actor_id must be non-empty.")
        if not self.action:
            raise ValueError("AuditEntry action must be non-empty.")
