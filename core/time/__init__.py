"""
BOS Core Time — Public API
============================
Explicit clock protocol and property-local time helpers.
Doctrine: NO datetime.now() in engine logic.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    local_date,
    local_datetime,
    now_utc,
    parse_wall_time,
    resolve_timezone,
    set_default_clock,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "now_utc",
    "local_date",
    "local_datetime",
    "parse_wall_time",
    "resolve_timezone",
]
