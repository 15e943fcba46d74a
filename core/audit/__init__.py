"""
BOS Core Audit — Public API
==============================
Immutable audit logging.
"""

from core.audit.functions import create_audit_entry
from core.audit.models import AuditEntry

__all__ = [
    "AuditEntry",
    "create_audit_entry",
]
