"""Time and timezone utilities for appstats.

Provides consistent timezone handling across the system with:
- Injectable clock for "now"
- Local midnight computation with DST awareness (pytz localize)
- Free-text date parsing for report ranges
"""

from __future__ import annotations

from datetime import date, datetime, time

import pytz

__all__ = [
    "get_current_time",
    "get_timezone",
    "local_date",
    "local_midnight",
    "localize",
    "parse_datetime",
    "to_epoch_seconds",
]

# Formats tried after ISO-8601, in order.
_DATE_FORMATS = ("%Y-%m", "%Y")
_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def get_timezone(timezone_name: str | None) -> pytz.BaseTzInfo | None:
    """Resolve a timezone name.

    Parameters
    ----------
    timezone_name
        IANA timezone name (e.g., "Europe/Berlin"), or None for system local time

    Returns
    -------
    pytz.BaseTzInfo | None
        Timezone object, or None for system local time

    Raises
    ------
    ValueError
        If timezone is unknown
    """
    if not timezone_name:
        return None
    try:
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError as exc:
        raise ValueError(f"Invalid timezone: {timezone_name}") from exc


def localize(naive: datetime, tz: pytz.BaseTzInfo | None = None) -> datetime:
    """Attach a timezone to a naive wall-clock datetime.

    With ``tz=None`` the system local timezone is used.
    """
    if naive.tzinfo is not None:
        return naive
    if tz is None:
        return naive.astimezone()
    return tz.localize(naive)


def get_current_time(tz: pytz.BaseTzInfo | None = None) -> datetime:
    """Get current time as an aware datetime in ``tz`` (system local if None)."""
    if tz is None:
        return datetime.now().astimezone()
    return datetime.now(tz)


def local_midnight(day: date, tz: pytz.BaseTzInfo | None = None) -> datetime:
    """Return the beginning of ``day`` in ``tz``.

    A local day may be 23, 24 or 25 hours long, so midnights are always
    localized individually instead of adding 24h to a previous one.
    """
    return localize(datetime.combine(day, time.min), tz)


def local_date(dt: datetime, tz: pytz.BaseTzInfo | None = None) -> date:
    """Calendar date of an aware datetime as seen in ``tz`` (system local if None)."""
    return dt.astimezone(tz).date()


def to_epoch_seconds(dt: datetime) -> int:
    """Convert an aware datetime to integer Unix seconds."""
    return int(dt.timestamp())


def parse_datetime(
    text: str | None,
    tz: pytz.BaseTzInfo | None = None,
    now: datetime | None = None,
) -> datetime:
    """Parse a free-text date or datetime.

    Supports:
    - ISO 8601: 2025-01-15, 2025-01-15T14:30, 2025-01-15 14:30:00+01:00
    - Month and year: 2025-01, 2025 (beginning of that period)
    - Time of day: 14:30, 14:30:15 (that time today)

    Naive results are interpreted in ``tz``.

    Parameters
    ----------
    text
        Text to parse
    tz
        Timezone for naive values (default: system local)
    now
        Reference time for time-of-day values (default: current time)

    Returns
    -------
    datetime
        Timezone-aware datetime

    Raises
    ------
    ValueError
        If parsing fails
    """
    if text is None or not text.strip():
        raise ValueError("Cannot parse datetime: empty value")
    value = text.strip()

    try:
        return localize(datetime.fromisoformat(value.replace("Z", "+00:00")), tz)
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return localize(datetime.strptime(value, fmt), tz)
        except ValueError:
            continue

    for fmt in _TIME_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt).time()
        except ValueError:
            continue
        today = local_date(now or get_current_time(tz), tz)
        return localize(datetime.combine(today, parsed), tz)

    raise ValueError(f"Cannot parse datetime: {text}")
