"""Tests for the calendar and time-slot arithmetic."""
from datetime import date, datetime, timedelta, timezone

import pytest

from clinic_portal.utils.calendar_utils import (
    add_months,
    add_years,
    calendar_grid,
    get_timezone,
    is_same_day,
    month_days,
    overlaps,
    parse_date,
    parse_datetime,
    time_slots,
    week_dates,
)


def _months(start_year, end_year):
    for year in range(start_year, end_year + 1):
        for month in range(1, 13):
            yield date(year, month, 1)


class TestCalendarGrid:
    """Sunday-first month grids padded to whole weeks."""

    def test_grid_is_whole_weeks_with_first_in_place(self):
        for first in _months(2023, 2026):
            grid = calendar_grid(first)
            assert len(grid) % 7 == 0
            assert grid[(first.weekday() + 1) % 7] == first

    def test_grid_contains_every_day_once(self):
        grid = calendar_grid(date(2024, 3, 20))
        days = [d for d in grid if d is not None]
        assert days == month_days(2024, 3)

    def test_march_2024_starts_on_friday_column(self):
        grid = calendar_grid(date(2024, 3, 1))
        assert grid[:5] == [None] * 5
        assert grid[5] == date(2024, 3, 1)

    def test_leap_february_includes_29th(self):
        grid = calendar_grid(date(2024, 2, 1))
        assert date(2024, 2, 29) in grid
        assert date(2023, 2, 28) in calendar_grid(date(2023, 2, 10))
        assert len([d for d in calendar_grid(date(2023, 2, 1)) if d]) == 28


class TestWeekDates:
    """Monday-start weeks."""

    def test_seven_consecutive_days_from_monday(self):
        start = date(2024, 1, 1)
        for offset in range(60):
            anchor = start + timedelta(days=offset)
            week = week_dates(anchor)
            assert len(week) == 7
            assert week[0].weekday() == 0
            assert anchor in week
            assert all(b - a == timedelta(days=1) for a, b in zip(week, week[1:]))

    def test_sunday_belongs_to_previous_monday(self):
        week = week_dates(date(2024, 3, 17))
        assert week[0] == date(2024, 3, 11)
        assert week[-1] == date(2024, 3, 17)


class TestOverlaps:
    """Half-open appointment/slot intersection."""

    APPT = datetime(2024, 3, 15, 9, 0)

    @pytest.mark.parametrize('hour,minute', [(9, 0), (9, 30), (10, 0)])
    def test_ninety_minute_appointment_hits_three_slots(self, hour, minute):
        slot = datetime(2024, 3, 15, hour, minute)
        assert overlaps(self.APPT, 90, slot, 30)

    @pytest.mark.parametrize('hour,minute', [(10, 30), (8, 30)])
    def test_touching_slots_do_not_overlap(self, hour, minute):
        slot = datetime(2024, 3, 15, hour, minute)
        assert not overlaps(self.APPT, 90, slot, 30)

    def test_symmetric(self):
        a = datetime(2024, 3, 15, 9, 15)
        b = datetime(2024, 3, 15, 9, 30)
        assert overlaps(a, 30, b, 30) == overlaps(b, 30, a, 30)

    def test_missing_start_never_overlaps(self):
        assert not overlaps(None, 60, self.APPT, 30)
        assert not overlaps(self.APPT, 60, None, 30)


class TestMonthArithmetic:
    """Explicit clamping instead of date rollover."""

    def test_end_of_month_clamps(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)

    def test_year_boundaries(self):
        assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 15)
        assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)
        assert add_months(date(2024, 3, 15), -15) == date(2022, 12, 15)

    def test_preferred_day_restores_long_month(self):
        assert add_months(date(2024, 2, 29), 1, preferred_day=31) == date(2024, 3, 31)

    def test_leap_day_year_step(self):
        assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)
        assert add_years(date(2025, 2, 28), -1, preferred_day=29) == date(2024, 2, 29)


class TestTimeSlots:

    def test_calendar_window_includes_closing_hour(self):
        slots = time_slots(8, 20, 30, include_end=True)
        assert len(slots) == 25
        assert slots[0] == (8, 0)
        assert slots[-1] == (20, 0)

    def test_booking_window_excludes_closing_hour(self):
        slots = time_slots(9, 17, 30)
        assert len(slots) == 16
        assert slots[-1] == (16, 30)

    def test_slots_partition_the_window(self):
        slots = time_slots(8, 20, 30)
        minutes = [h * 60 + m for h, m in slots]
        assert all(b - a == 30 for a, b in zip(minutes, minutes[1:]))

    def test_non_positive_step_rejected(self):
        with pytest.raises(ValueError):
            time_slots(8, 20, 0)


class TestParsing:

    def test_utc_suffix(self):
        assert parse_datetime('2024-03-15T09:00:00Z') == datetime(2024, 3, 15, 9, 0)
        assert parse_datetime('2024-03-15T09:00:00.000Z') == datetime(2024, 3, 15, 9, 0)

    def test_converted_into_display_timezone(self):
        nzdt = timezone(timedelta(hours=13))
        assert parse_datetime('2024-03-15T09:00:00Z', nzdt) == datetime(2024, 3, 15, 22, 0)

    def test_naive_values_are_local(self):
        assert parse_datetime('2024-03-15T09:00:00') == datetime(2024, 3, 15, 9, 0)

    @pytest.mark.parametrize('value', [None, '', 'not a date', '2024-13-45T00:00:00Z', 12345])
    def test_malformed_values_yield_none(self, value):
        assert parse_datetime(value) is None

    @pytest.mark.parametrize('value', ['9999-12-31T23:00:00-05:00', '0001-01-01T00:30:00+05:00'])
    def test_conversion_past_calendar_limits_yields_none(self, value):
        assert parse_datetime(value) is None

    def test_parse_date(self):
        assert parse_date('2024-03-15') == date(2024, 3, 15)
        assert parse_date('2024-03-15T22:00:00Z') == date(2024, 3, 15)
        assert parse_date(datetime(2024, 3, 15, 9)) == date(2024, 3, 15)
        assert parse_date('15/03/2024') is None
        assert parse_date(None) is None


class TestTimezones:

    def test_utc(self):
        assert get_timezone('UTC') is timezone.utc
        assert get_timezone(None) is timezone.utc

    def test_unknown_zone_falls_back_to_utc(self):
        assert get_timezone('Not/AZone') is timezone.utc


def test_is_same_day_ignores_time():
    assert is_same_day(datetime(2024, 3, 15, 23, 59), date(2024, 3, 15))
    assert not is_same_day(datetime(2024, 3, 15, 9), date(2024, 3, 16))
    assert not is_same_day(None, date(2024, 3, 15))
