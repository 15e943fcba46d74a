"""
BOS Context — Public API
=========================
Canonical tenant (property) context.
"""

from core.context.tenant_context import TenantContext

__all__ = [
    "TenantContext",
]
