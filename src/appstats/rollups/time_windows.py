"""Time range resolution with DST awareness.

Turn named periods (today, yesterday, this week, this month) and free-text
date bounds into concrete ``TimeRange`` boundaries, and walk date ranges one
calendar day at a time for day-split reports.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

import pytz

from ..core.time import get_current_time, local_date, local_midnight, parse_datetime
from ..observability.loguru_config import get_logger

__all__ = [
    "DayRange",
    "Period",
    "TimeRange",
    "TimeRangeError",
    "day_time_range",
    "get_week_start",
    "resolve_explicit_range",
    "resolve_period",
]

logger = get_logger("rollups")


class TimeRangeError(ValueError):
    """Raised when a time range request cannot produce usable boundaries."""


class Period(str, Enum):
    """Named reporting periods."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    THIS_WEEK = "thisWeek"
    THIS_MONTH = "thisMonth"


@dataclass(frozen=True)
class TimeRange:
    """Half-open reporting window.

    Attributes
    ----------
    start : datetime | None
        Records must start at or after this instant (None = unbounded)
    end : datetime | None
        Records must end at or before this instant (None = unbounded)
    """

    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self) -> None:
        if self.start is None and self.end is None:
            raise TimeRangeError("Time range needs at least one bound")
        if self.start is not None and self.end is not None and self.start > self.end:
            raise TimeRangeError(f"Time range start {self.start.isoformat()} is after end {self.end.isoformat()}")


def get_week_start(day: date, start_on: int = 0) -> date:
    """Get start of week for a date.

    Parameters
    ----------
    day
        Date to get week start for
    start_on
        Day of week to start on (0=Monday, 6=Sunday)

    Returns
    -------
    date
        First day of the week containing ``day``
    """
    days_since_start = (day.weekday() - start_on) % 7
    return day - timedelta(days=days_since_start)


def resolve_period(
    period: Period | str,
    tz: pytz.BaseTzInfo | None = None,
    now: datetime | None = None,
) -> TimeRange:
    """Compute boundaries for a named period.

    Parameters
    ----------
    period
        Named period
    tz
        Timezone for calendar boundaries (default: system local)
    now
        Reference time (default: current time)

    Returns
    -------
    TimeRange
        Resolved range; only ``yesterday`` has an end bound
    """
    period = Period(period)
    today = local_date(now or get_current_time(tz), tz)

    if period is Period.TODAY:
        return TimeRange(start=local_midnight(today, tz))
    if period is Period.YESTERDAY:
        return TimeRange(
            start=local_midnight(today - timedelta(days=1), tz),
            end=local_midnight(today, tz),
        )
    if period is Period.THIS_WEEK:
        return TimeRange(start=local_midnight(get_week_start(today), tz))
    return TimeRange(start=local_midnight(today.replace(day=1), tz))


def _try_parse(text: str | None, tz: pytz.BaseTzInfo | None, now: datetime | None) -> datetime | None:
    if text is None:
        return None
    try:
        return parse_datetime(text, tz, now=now)
    except ValueError as exc:
        logger.warning("Ignoring unparsable bound {!r}: {}", text, exc)
        return None


def resolve_explicit_range(
    start_text: str | None,
    end_text: str | None,
    tz: pytz.BaseTzInfo | None = None,
    now: datetime | None = None,
) -> TimeRange:
    """Parse free-text bounds into a time range.

    Each bound is parsed independently; a bound that is missing or does not
    parse is left open.

    Raises
    ------
    TimeRangeError
        If neither bound parses
    """
    start = _try_parse(start_text, tz, now)
    end = _try_parse(end_text, tz, now)
    if start is None and end is None:
        raise TimeRangeError(f"Error parsing time range (start={start_text!r}, end={end_text!r})")
    return TimeRange(start=start, end=end)


def day_time_range(day: date, tz: pytz.BaseTzInfo | None = None) -> TimeRange:
    """Return ``[start-of-day, start-of-next-day)`` for a calendar day."""
    return TimeRange(
        start=local_midnight(day, tz),
        end=local_midnight(day + timedelta(days=1), tz),
    )


@dataclass(frozen=True)
class DayRange:
    """Calendar days between two dates, both inclusive, most recent first.

    Iterating twice yields the same days again.

    Example
    -------
    >>> [d.day for d in DayRange(date(2025, 3, 1), date(2025, 3, 3))]
    [3, 2, 1]
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise TimeRangeError(f"Day range start {self.start} is after end {self.end}")

    def __iter__(self) -> Iterator[date]:
        current = self.end
        while current >= self.start:
            yield current
            current -= timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1
