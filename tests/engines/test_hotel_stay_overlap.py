"""
Hotel stay: date-range overlap checker.
"""

import random
from datetime import date, time, timedelta

import pytest

from engines.hotel_stay.overlap import (
    StayWindow,
    find_conflict,
    overlaps,
    stay_nights,
    windows_conflict,
)


D = date(2025, 1, 10)


def _day(offset: int) -> date:
    return D + timedelta(days=offset)


class TestHalfOpenIntervals:
    def test_back_to_back_stays_do_not_conflict(self):
        existing = StayWindow(_day(0), _day(2))
        candidate = StayWindow(_day(2), _day(4))
        assert not windows_conflict(existing, candidate)
        assert not windows_conflict(candidate, existing)

    def test_shared_night_conflicts(self):
        existing = StayWindow(_day(0), _day(2))
        candidate = StayWindow(_day(1), _day(3))
        assert windows_conflict(existing, candidate)

    def test_contained_range_conflicts(self):
        assert windows_conflict(StayWindow(_day(0), _day(10)), StayWindow(_day(3), _day(4)))

    def test_overlaps_primitive(self):
        assert overlaps(_day(0), _day(2), _day(1), _day(3))
        assert not overlaps(_day(0), _day(2), _day(2), _day(3))

    def test_reversed_window_rejected(self):
        with pytest.raises(ValueError, match="before"):
            StayWindow(_day(2), _day(1))


class TestSameDayStays:
    def test_same_day_occupies_its_day(self):
        day_use = StayWindow(_day(1), _day(1))
        assert day_use.effective_end == _day(2)
        assert windows_conflict(StayWindow(_day(0), _day(3)), day_use)

    def test_same_day_on_checkout_day_is_free(self):
        # guest leaving on day 2 does not block a day-use room on day 2
        assert not windows_conflict(StayWindow(_day(0), _day(2)), StayWindow(_day(2), _day(2)))

    def test_same_day_on_checkin_day_conflicts(self):
        assert windows_conflict(StayWindow(_day(2), _day(4)), StayWindow(_day(2), _day(2)))

    def test_two_same_day_stays_compare_times(self):
        morning = StayWindow(_day(1), _day(1), time(8, 0), time(12, 0))
        evening = StayWindow(_day(1), _day(1), time(14, 0), time(20, 0))
        midday = StayWindow(_day(1), _day(1), time(11, 0), time(15, 0))
        assert not windows_conflict(morning, evening)
        assert windows_conflict(morning, midday)
        assert windows_conflict(evening, midday)

    def test_touching_times_do_not_conflict(self):
        first = StayWindow(_day(1), _day(1), time(8, 0), time(12, 0))
        second = StayWindow(_day(1), _day(1), time(12, 0), time(16, 0))
        assert not windows_conflict(first, second)

    def test_missing_time_conflicts(self):
        timed = StayWindow(_day(1), _day(1), time(8, 0), time(12, 0))
        untimed = StayWindow(_day(1), _day(1))
        assert windows_conflict(timed, untimed)

    def test_same_day_stays_on_different_dates(self):
        assert not windows_conflict(StayWindow(_day(1), _day(1)), StayWindow(_day(2), _day(2)))


class TestFindConflict:
    def test_returns_first_conflict_with_reference(self):
        windows = [
            StayWindow(_day(0), _day(1), reference=11),
            StayWindow(_day(3), _day(5), reference=12),
            StayWindow(_day(4), _day(6), reference=13),
        ]
        conflict = find_conflict(StayWindow(_day(4), _day(5)), windows)
        assert conflict.reference == 12

    def test_none_when_free(self):
        assert find_conflict(StayWindow(_day(1), _day(3)), [StayWindow(_day(3), _day(5))]) is None

    def test_reference_not_part_of_equality(self):
        assert StayWindow(_day(0), _day(1), reference=1) == StayWindow(_day(0), _day(1), reference=2)


class TestStayNights:
    def test_nights(self):
        assert stay_nights(_day(0), _day(2)) == 2

    def test_same_day_is_one_night(self):
        assert stay_nights(_day(0), _day(0)) == 1


class TestAgainstNightByNightModel:
    """
    Multi-night stays conflict exactly when they share a night; a
    same-day stay is treated as holding its own calendar night.
    """

    @staticmethod
    def _nights(window: StayWindow) -> set:
        return {
            window.check_in_date + timedelta(days=i)
            for i in range((window.effective_end - window.check_in_date).days)
        }

    def test_random_ranges(self):
        rng = random.Random(20250110)
        for _ in range(500):
            a_start = rng.randint(0, 20)
            b_start = rng.randint(0, 20)
            a = StayWindow(_day(a_start), _day(a_start + rng.randint(1, 6)))
            b = StayWindow(_day(b_start), _day(b_start + rng.randint(0, 6)))
            expected = bool(self._nights(a) & self._nights(b))
            assert windows_conflict(a, b) == expected, (a, b)
            assert windows_conflict(b, a) == expected, (a, b)
