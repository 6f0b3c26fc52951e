"""Time ranges, aggregation and rendering of usage reports."""

from .aggregator import StatEntry, aggregate_totals, compute_stats
from .formatters import OutputFormat, render
from .time_windows import (
    DayRange,
    Period,
    TimeRange,
    TimeRangeError,
    day_time_range,
    get_week_start,
    resolve_explicit_range,
    resolve_period,
)

__all__ = [
    # Time windows
    "DayRange",
    "Period",
    "TimeRange",
    "TimeRangeError",
    "day_time_range",
    "get_week_start",
    "resolve_explicit_range",
    "resolve_period",
    # Aggregation
    "StatEntry",
    "aggregate_totals",
    "compute_stats",
    # Rendering
    "OutputFormat",
    "render",
]
