"""
BOS Core Audit — Pure Audit Functions
========================================
Factory for audit entries. Pure: returns new frozen objects.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from core.audit.models import AuditEntry


def create_audit_entry(
    actor_id: str,
    action: str,
    resource_type: str,
    resource_id: str,
    property_id: uuid.UUID,
    occurred_at: datetime,
    status: str = "EXECUTED",
    details: str = "",
    event_id: Optional[uuid.UUID] = None,
    metadata: Optional[dict] = None,
) -> AuditEntry:
    """Create an immutable audit entry."""
    return AuditEntry(
        entry_id=uuid.uuid4(),
        actor_id=actor_id,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id),
        property_id=property_id,
        status=status,
        occurred_at=occurred_at,
        details=details,
        event_id=event_id,
        metadata=dict(metadata or {}),
    )
