"""
BOS HTTP API - Error Mapping
============================
Stable transport error mapping for engine rejections and failures.
"""

from __future__ import annotations

from typing import Any, Optional

from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
    retryable: bool = False,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
            retryable=retryable,
        ),
    ).to_dict()


def success_response(data: Any) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data).to_dict()


def map_engine_error(exc) -> tuple[int, dict[str, Any]]:
    """
    (status, body) for an engine error.

    Accepts anything exposing code, message, details, retryable and
    http_status so this layer does not import engine packages.
    """
    body = error_response(
        code=exc.code,
        message=exc.message,
        details=dict(getattr(exc, "details", None) or {}),
        retryable=bool(exc.retryable),
    )
    return int(exc.http_status), body
