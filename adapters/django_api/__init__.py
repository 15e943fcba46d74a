"""
BOS Django HTTP adapter.
Thin framework glue over the hotel stay service.
"""

from adapters.django_api.wiring import build_service, create_service, reset_service

__all__ = [
    "build_service",
    "create_service",
    "reset_service",
]
