"""
BOS Hotel Stay Engine — Date-Range Overlap Checker
====================================================
Pure functions. A room/date pair is available iff no active
assignment (reserved or checked_in) conflicts with it.

Date ranges are half-open [check_in, check_out): a checkout on day N
does not conflict with a check-in on day N.

Same-day stays (check_in == check_out) occupy their calendar day. Two
same-day stays on one date are compared by expected times; when any
time is missing the pair conflicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time, timedelta
from typing import Any, Iterable, Optional

ACTIVE_ASSIGNMENT_STATUSES = frozenset({"reserved", "checked_in"})


def overlaps(
    existing_start: date,
    existing_end: date,
    candidate_start: date,
    candidate_end: date,
) -> bool:
    """Half-open interval intersection."""
    return candidate_start < existing_end and existing_start < candidate_end


@dataclass(frozen=True)
class StayWindow:
    check_in_date: date
    check_out_date: date
    check_in_time: Optional[time] = None
    check_out_time: Optional[time] = None
    # opaque caller reference (assignment id), not part of equality
    reference: Any = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.check_out_date < self.check_in_date:
            raise ValueError(
                f"check_out_date {self.check_out_date} is before "
                f"check_in_date {self.check_in_date}."
            )

    @property
    def is_same_day(self) -> bool:
        return self.check_in_date == self.check_out_date

    @property
    def effective_end(self) -> date:
        """Exclusive end date used for calendar comparison."""
        if self.is_same_day:
            return self.check_out_date + timedelta(days=1)
        return self.check_out_date


def windows_conflict(existing: StayWindow, candidate: StayWindow) -> bool:
    if (
        existing.is_same_day
        and candidate.is_same_day
        and existing.check_in_date == candidate.check_in_date
    ):
        times = (
            existing.check_in_time,
            existing.check_out_time,
            candidate.check_in_time,
            candidate.check_out_time,
        )
        if any(t is None for t in times):
            return True
        return (
            candidate.check_in_time < existing.check_out_time
            and candidate.check_out_time > existing.check_in_time
        )

    return overlaps(
        existing.check_in_date,
        existing.effective_end,
        candidate.check_in_date,
        candidate.effective_end,
    )


def find_conflict(
    candidate: StayWindow, existing_windows: Iterable[StayWindow]
) -> Optional[StayWindow]:
    """First existing window that conflicts with the candidate, else None."""
    for window in existing_windows:
        if windows_conflict(window, candidate):
            return window
    return None


def stay_nights(check_in_date: date, check_out_date: date) -> int:
    """Chargeable nights; a same-day stay is charged as one."""
    return max((check_out_date - check_in_date).days, 1)
