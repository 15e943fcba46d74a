"""
BOS Hotel Stay Engine — Errors
================================
Every rejected operation raises one of these with a message naming
the invariant that failed, e.g. "Room 204 is not available (status: occupied)".

Validation and conflict errors are raised before any mutation.
PersistenceError wraps datastore failures inside a transactional step;
retryable tells the caller whether repeating the request may succeed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class HotelStayError(Exception):
    """Base error for hotel stay operations."""

    code = "HOTEL_STAY_ERROR"
    http_status = 500
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        retryable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        if retryable is not None:
            self.retryable = retryable


class ValidationError(HotelStayError, ValueError):
    """Malformed or missing input."""

    code = "VALIDATION_FAILED"
    http_status = 400


class ConflictError(HotelStayError):
    """Overlap detected, room unavailable, or another state conflict."""

    code = "CONFLICT"
    http_status = 409


class NotFoundError(HotelStayError):
    code = "NOT_FOUND"
    http_status = 404


class StateTransitionError(HotelStayError):
    """Transition outside the allowed graph."""

    code = "INVALID_TRANSITION"
    http_status = 409


InvalidTransition = StateTransitionError


class InvalidStateError(ConflictError):
    """Entity is in a state the operation does not accept."""

    code = "INVALID_STATE"


class PersistenceError(HotelStayError):
    code = "PERSISTENCE_FAILED"
    http_status = 503
    retryable = True


# ══════════════════════════════════════════════════════════════
# BULK OPERATIONS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ItemResult:
    item_id: Any
    ok: bool
    error_code: Optional[str] = None
    message: str = ""
    retryable: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "ok": self.ok,
            "error_code": self.error_code,
            "message": self.message,
            "retryable": self.retryable,
        }


class PartialFailure(HotelStayError):
    """Some items of a bulk operation succeeded, others failed."""

    code = "PARTIAL_FAILURE"
    http_status = 207

    def __init__(self, results: tuple[ItemResult, ...]):
        failed = [r for r in results if not r.ok]
        super().__init__(
            f"{len(failed)} of {len(results)} items failed.",
            details={"results": [r.to_dict() for r in results]},
        )
        self.results = tuple(results)


@dataclass(frozen=True)
class BulkResult:
    results: tuple[ItemResult, ...]

    @property
    def succeeded(self) -> tuple[ItemResult, ...]:
        return tuple(r for r in self.results if r.ok)

    @property
    def failed(self) -> tuple[ItemResult, ...]:
        return tuple(r for r in self.results if not r.ok)

    @property
    def all_ok(self) -> bool:
        return not self.failed

    def as_partial_failure(self) -> Optional[PartialFailure]:
        """PartialFailure describing this result, or None when every item succeeded."""
        if self.all_ok:
            return None
        return PartialFailure(self.results)
