"""
BOS Context — TenantContext
=============================
Immutable property context threaded through every engine call.

Replaces any notion of a default hotel: the property id, its timezone
and the actor used for system-initiated writes are always explicit.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time

from core.time.clock import local_date, local_datetime, resolve_timezone


@dataclass(frozen=True)
class TenantContext:
    """
    property_id is mandatory.
    timezone is an IANA name; wall-clock policy times are read in it.
    """

    property_id: uuid.UUID
    timezone: str = "UTC"
    system_actor_id: str = "system"

    def __post_init__(self):
        if not isinstance(self.property_id, uuid.UUID):
            raise ValueError("property_id must be UUID.")
        resolve_timezone(self.timezone)
        if not self.system_actor_id or not isinstance(self.system_actor_id, str):
            raise ValueError("system_actor_id must be a non-empty string.")

    @classmethod
    def from_settings(cls, hotel_settings) -> "TenantContext":
        raw = str(hotel_settings.get("PROPERTY_ID") or "").strip()
        if not raw:
            raise ValueError(
                "HOTEL_STAY PROPERTY_ID is not configured; set HOTEL_STAY_PROPERTY_ID."
            )
        try:
            property_id = uuid.UUID(raw)
        except ValueError:
            raise ValueError(f"HOTEL_STAY PROPERTY_ID '{raw}' is not a UUID.") from None
        return cls(
            property_id=property_id,
            timezone=hotel_settings.get("PROPERTY_TIMEZONE", "UTC"),
            system_actor_id=hotel_settings.get("SYSTEM_ACTOR_ID", "system"),
        )

    def actor_or_system(self, actor_id: str | None) -> str:
        return actor_id or self.system_actor_id

    def at(self, day: date, wall_time: time) -> datetime:
        """Property wall-clock moment."""
        return local_datetime(day, wall_time, self.timezone)

    def today(self, moment: datetime) -> date:
        return local_date(moment, self.timezone)
