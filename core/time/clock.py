"""
BOS Core Time — Explicit Clock Protocol
=========================================
Doctrine: NO datetime.now() inside engine logic.

Engines receive a Clock at construction time. Front desk operations
("now" for a check-in, the actual checkout moment) read it through the
clock so tests can pin a property to an exact minute.

Property-local helpers live here too: a hotel reasons in wall-clock
dates and times of its own timezone, the datastore stores UTC.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    """Production clock — real system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock — returns a pinned timestamp until moved.

    Usage:
        clock = FixedClock(datetime(2025, 1, 10, 8, 30, tzinfo=timezone.utc))
        clock.advance(minutes=90)
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt.astimezone(timezone.utc)

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def set(self, moment: datetime) -> None:
        """Jump to an explicit moment."""
        if moment.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = moment.astimezone(timezone.utc)

    def advance(self, seconds: float = 0, *, minutes: float = 0, days: float = 0) -> None:
        """Advance the fixed time (useful for multi-step stay scenarios)."""
        self._fixed_dt = self._fixed_dt + timedelta(
            seconds=seconds, minutes=minutes, days=days
        )


# ══════════════════════════════════════════════════════════════
# PROPERTY-LOCAL TIME
# ══════════════════════════════════════════════════════════════

def resolve_timezone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name, raising ValueError for unknown zones."""
    if not name or not isinstance(name, str):
        raise ValueError("timezone must be a non-empty IANA name.")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{name}'.") from exc


def local_datetime(day: date, at: time, tz_name: str) -> datetime:
    """Wall-clock date + time at the property, as an aware datetime."""
    return datetime.combine(day, at, tzinfo=resolve_timezone(tz_name))


def local_date(moment: datetime, tz_name: str) -> date:
    """Calendar date of an aware moment as seen at the property."""
    if moment.tzinfo is None:
        raise ValueError("local_date requires a timezone-aware datetime.")
    return moment.astimezone(resolve_timezone(tz_name)).date()


def parse_wall_time(value: str | time) -> time:
    """Parse 'HH:MM' (or 'HH:MM:SS') into a time."""
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"'{value}' is not a valid HH:MM time.") from exc


# ══════════════════════════════════════════════════════════════
# DEFAULT CLOCK (infrastructure use only)
# ══════════════════════════════════════════════════════════════

_default_clock: Clock = SystemClock()


def set_default_clock(clock: Clock) -> None:
    """Override the default clock (testing only)."""
    global _default_clock
    _default_clock = clock


def get_default_clock() -> Clock:
    """Get the current default clock."""
    return _default_clock


def now_utc() -> datetime:
    """Convenience: get current UTC time from default clock."""
    return _default_clock.now_utc()
