"""
BOS Event Bus — Domain Event Envelope
=======================================
What the engines hand to the bus after a committed state change.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DomainEvent:
    """
    Immutable envelope for one committed engine fact.

    event_type follows engine.domain.action[.vN], e.g.
    'hotel_stay.room.transferred.v1'.
    """

    event_type: str
    property_id: uuid.UUID
    actor_id: str
    occurred_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        if not self.event_type or not isinstance(self.event_type, str):
            raise ValueError("event_type must be a non-empty string.")
        if self.occurred_at.tzinfo is None:
            raise ValueError("occurred_at must be timezone-aware.")

    @property
    def source_engine(self) -> str:
        return self.event_type.split(".")[0]
