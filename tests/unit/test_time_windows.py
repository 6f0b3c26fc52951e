"""Tests for time range resolution and day ranges."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
import pytz

from appstats.rollups.time_windows import (
    DayRange,
    Period,
    TimeRange,
    TimeRangeError,
    day_time_range,
    get_week_start,
    resolve_explicit_range,
    resolve_period,
)

UTC = pytz.UTC
NEW_YORK = pytz.timezone("America/New_York")

# Thursday afternoon
NOW = datetime(2024, 3, 14, 15, 30, tzinfo=timezone.utc)


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestTimeRange:
    def test_needs_a_bound(self):
        with pytest.raises(TimeRangeError):
            TimeRange()

    def test_open_ended_is_valid(self):
        assert TimeRange(start=utc(2024, 3, 1)).end is None
        assert TimeRange(end=utc(2024, 3, 1)).start is None

    def test_start_after_end(self):
        with pytest.raises(TimeRangeError, match="after end"):
            TimeRange(start=utc(2024, 3, 2), end=utc(2024, 3, 1))

    def test_time_range_error_is_value_error(self):
        assert issubclass(TimeRangeError, ValueError)


class TestWeekStart:
    def test_monday(self):
        assert get_week_start(date(2024, 3, 14)) == date(2024, 3, 11)

    def test_monday_is_its_own_start(self):
        assert get_week_start(date(2024, 3, 11)) == date(2024, 3, 11)

    def test_sunday_belongs_to_previous_monday(self):
        assert get_week_start(date(2024, 3, 17)) == date(2024, 3, 11)

    def test_sunday_start(self):
        assert get_week_start(date(2024, 3, 14), start_on=6) == date(2024, 3, 10)


class TestResolvePeriod:
    def test_today(self):
        time_range = resolve_period(Period.TODAY, UTC, now=NOW)
        assert time_range.start == utc(2024, 3, 14)
        assert time_range.end is None

    def test_yesterday(self):
        time_range = resolve_period("yesterday", UTC, now=NOW)
        assert time_range.start == utc(2024, 3, 13)
        assert time_range.end == utc(2024, 3, 14)

    def test_yesterday_across_month_boundary(self):
        time_range = resolve_period(Period.YESTERDAY, UTC, now=utc(2024, 3, 1, 8))
        assert time_range.start == utc(2024, 2, 29)

    def test_this_week_starts_monday(self):
        time_range = resolve_period(Period.THIS_WEEK, UTC, now=NOW)
        assert time_range.start == utc(2024, 3, 11)
        assert time_range.end is None

    def test_this_month(self):
        time_range = resolve_period(Period.THIS_MONTH, UTC, now=NOW)
        assert time_range.start == utc(2024, 3, 1)
        assert time_range.end is None

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            resolve_period("lastYear", UTC, now=NOW)

    def test_local_midnight_in_timezone(self):
        now = NEW_YORK.localize(datetime(2024, 3, 14, 9, 0))
        time_range = resolve_period(Period.TODAY, NEW_YORK, now=now)
        # Midnight EDT is 04:00 UTC
        assert time_range.start.astimezone(timezone.utc) == utc(2024, 3, 14, 4)

    def test_yesterday_spanning_dst_change_is_23_hours(self):
        now = NEW_YORK.localize(datetime(2025, 3, 10, 9, 0))
        time_range = resolve_period(Period.YESTERDAY, NEW_YORK, now=now)
        assert time_range.end - time_range.start == timedelta(hours=23)


class TestResolveExplicitRange:
    def test_both_bounds(self):
        time_range = resolve_explicit_range("2024-03-01", "2024-03-07", UTC, now=NOW)
        assert time_range.start == utc(2024, 3, 1)
        assert time_range.end == utc(2024, 3, 7)

    def test_only_end_parses(self):
        time_range = resolve_explicit_range("not a date", "2024-03-07", UTC, now=NOW)
        assert time_range.start is None
        assert time_range.end == utc(2024, 3, 7)

    def test_only_start_given(self):
        time_range = resolve_explicit_range("2024-03-01", None, UTC, now=NOW)
        assert time_range.start == utc(2024, 3, 1)
        assert time_range.end is None

    def test_neither_parses(self):
        with pytest.raises(TimeRangeError, match="Error parsing time range"):
            resolve_explicit_range("nope", "also nope", UTC, now=NOW)

    def test_neither_given(self):
        with pytest.raises(TimeRangeError):
            resolve_explicit_range(None, None, UTC, now=NOW)


class TestDayTimeRange:
    def test_covers_one_day(self):
        time_range = day_time_range(date(2024, 3, 5), UTC)
        assert time_range.start == utc(2024, 3, 5)
        assert time_range.end == utc(2024, 3, 6)

    def test_dst_day(self):
        time_range = day_time_range(date(2025, 11, 2), NEW_YORK)
        assert time_range.end - time_range.start == timedelta(hours=25)


class TestDayRange:
    @pytest.mark.parametrize("days", [1, 2, 7])
    def test_yields_every_day_once(self, days):
        end = date(2024, 3, 7)
        start = end - timedelta(days=days - 1)
        result = list(DayRange(start, end))

        assert len(result) == days
        assert len(set(result)) == days
        assert result[0] == end
        assert result[-1] == start

    def test_most_recent_first(self):
        result = list(DayRange(date(2024, 2, 28), date(2024, 3, 1)))
        assert result == [date(2024, 3, 1), date(2024, 2, 29), date(2024, 2, 28)]

    def test_restartable(self):
        days = DayRange(date(2024, 3, 1), date(2024, 3, 3))
        assert list(days) == list(days)

    def test_len(self):
        assert len(DayRange(date(2024, 3, 1), date(2024, 3, 31))) == 31

    def test_start_after_end(self):
        with pytest.raises(TimeRangeError):
            DayRange(date(2024, 3, 2), date(2024, 3, 1))

    @pytest.mark.parametrize("days", [1, 2, 7])
    def test_day_windows_are_disjoint_and_contiguous(self, days):
        end = date(2024, 3, 7)
        windows = [day_time_range(day, UTC) for day in DayRange(end - timedelta(days=days - 1), end)]

        for window in windows:
            assert window.end - window.start == timedelta(hours=24)
        for later, earlier in zip(windows, windows[1:]):
            assert earlier.end == later.start
