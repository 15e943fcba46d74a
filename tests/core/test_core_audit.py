"""
Tests for core.audit — immutable audit entries.
"""

import uuid
import pytest
from datetime import datetime, timezone

from core.audit.functions import create_audit_entry
from core.audit.models import AuditEntry


PROPERTY_ID = uuid.uuid4()
NOW = datetime(2025, 1, 10, 8, 30, 0, tzinfo=timezone.utc)


def _entry(**overrides):
    fields = dict(
        entry_id=uuid.uuid4(),
        actor_id="frontdesk-1",
        action="booking.created",
        resource_type="booking",
        resource_id="42",
        property_id=PROPERTY_ID,
        status="EXECUTED",
        occurred_at=NOW,
    )
    fields.update(overrides)
    return AuditEntry(**fields)


# ── AuditEntry Tests ─────────────────────────────────────────

class TestAuditEntry:
    def test_create_valid_entry(self):
        entry = _entry()
        assert entry.status == "EXECUTED"
        assert entry.property_id == PROPERTY_ID
        assert entry.metadata == {}

    def test_frozen_immutability(self):
        entry = _entry()
        with pytest.raises(AttributeError):
            entry.status = "REJECTED"

    def test_invalid_status_rejected(self):
        with pytest.raises(ValueError, match="EXECUTED|REJECTED|ERROR"):
            _entry(status="INVALID")

    def test_empty_actor_rejected(self):
        with pytest.raises(ValueError, match="actor_id"):
            _entry(actor_id="")

    def test_empty_action_rejected(self):
        with pytest.raises(ValueError, match="action"):
            _entry(action="")


# ── create_audit_entry Tests ─────────────────────────────────

class TestCreateAuditEntry:
    def test_factory_assigns_fresh_ids(self):
        first = create_audit_entry(
            actor_id="frontdesk-1",
            action="room.status_changed",
            resource_type="room",
            resource_id=7,
            property_id=PROPERTY_ID,
            occurred_at=NOW,
        )
        second = create_audit_entry(
            actor_id="frontdesk-1",
            action="room.status_changed",
            resource_type="room",
            resource_id=7,
            property_id=PROPERTY_ID,
            occurred_at=NOW,
        )
        assert first.entry_id != second.entry_id
        assert first.resource_id == "7"
        assert first.status == "EXECUTED"

    def test_metadata_is_copied(self):
        metadata = {"late_fee": "100.00"}
        entry = create_audit_entry(
            actor_id="system",
            action="booking.checked_out",
            resource_type="booking",
            resource_id="1",
            property_id=PROPERTY_ID,
            occurred_at=NOW,
            details="Checked out 101",
            metadata=metadata,
        )
        metadata["late_fee"] = "999"
        assert entry.metadata == {"late_fee": "100.00"}
        assert entry.details == "Checked out 101"
