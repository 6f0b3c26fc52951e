"""Stats pipeline - thin orchestration for time usage reports.

Resolves the requested range, queries the interval store, aggregates and
renders each report, and emits it immediately. In day-split mode every
calendar day is an independent query/aggregate/render cycle, most recent
day first.

All input validation (time range, output format) happens before the store
is opened, so a bad request never runs a query.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path

import click

from ..core.time import get_current_time, get_timezone, local_date
from ..observability.loguru_config import get_logger, timing_context
from ..rollups.aggregator import StatEntry, compute_stats
from ..rollups.formatters import OutputFormat, render
from ..rollups.time_windows import (
    DayRange,
    Period,
    TimeRange,
    TimeRangeError,
    day_time_range,
    resolve_explicit_range,
    resolve_period,
)
from ..storage.query import GroupKey, StatsFilter, StoreSchema
from ..storage.store import IntervalStore

__all__ = [
    "DayReport",
    "StatsPipeline",
    "StatsPipelineConfig",
    "StatsPipelineResult",
    "StatsRequest",
]

logger = get_logger("pipeline")


@dataclass
class StatsPipelineConfig:
    """Configuration for the stats pipeline."""

    database_path: Path
    schema: StoreSchema = field(default_factory=StoreSchema)
    timezone: str | None = None


@dataclass
class StatsRequest:
    """One report request, as collected by the CLI.

    Either ``period`` or at least one of ``start``/``end`` is used; with
    neither the report covers today.
    """

    period: Period | str | None = None
    start: str | None = None
    end: str | None = None
    group_key: GroupKey = GroupKey.NAME
    name_filter: str | None = None
    window_filter: str | None = None
    output_format: OutputFormat | str = OutputFormat.PRETTY
    max_results: int = 20
    max_name_length: int = 40
    by_day: bool = False


@dataclass
class DayReport:
    """Entries of one emitted report (``day`` is None outside day-split mode)."""

    day: date | None
    entries: list[StatEntry]


@dataclass
class StatsPipelineResult:
    """Result of a pipeline run."""

    output_format: OutputFormat
    reports: list[DayReport] = field(default_factory=list)


class StatsPipeline:
    """Run stats reports against the interval store.

    Example:
        >>> pipeline = StatsPipeline(StatsPipelineConfig(database_path=Path("appstats.db")))
        >>> pipeline.run(StatsRequest(period="today", output_format="simple"))
    """

    def __init__(
        self,
        config: StatsPipelineConfig,
        *,
        emit: Callable[[str], None] = click.echo,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize stats pipeline.

        Parameters
        ----------
        config
            Pipeline configuration
        emit
            Receives each rendered report
        clock
            Returns the current time (default: wall clock in the configured timezone)
        """
        self.config = config
        self.emit = emit
        self.tz = get_timezone(config.timezone)
        self.clock = clock or (lambda: get_current_time(self.tz))

    def resolve_range(self, request: StatsRequest, now: datetime) -> TimeRange:
        """Resolve the request's overall time range."""
        if request.period is not None:
            if request.start is not None or request.end is not None:
                raise TimeRangeError("Use either a named period or start/end dates, not both")
            return resolve_period(request.period, self.tz, now=now)
        if request.start is None and request.end is None:
            return resolve_period(Period.TODAY, self.tz, now=now)
        return resolve_explicit_range(request.start, request.end, self.tz, now=now)

    def plan(self, request: StatsRequest) -> Iterable[tuple[date | None, TimeRange]]:
        """Return the (day, range) cycles to run, validating the request.

        Raises
        ------
        TimeRangeError
            If the range cannot be resolved or cannot be split into days
        """
        now = self.clock()
        time_range = self.resolve_range(request, now)
        if not request.by_day:
            return [(None, time_range)]

        if time_range.start is None:
            raise TimeRangeError("Splitting by day needs a start date")
        start_day = local_date(time_range.start, self.tz)
        if time_range.end is None:
            end_day = local_date(now, self.tz)
        elif request.period is not None:
            # Period ends are midnights that close the previous day
            end_day = local_date(time_range.end - timedelta(microseconds=1), self.tz)
        else:
            # Explicit end dates are inclusive
            end_day = local_date(time_range.end, self.tz)

        if start_day > end_day:
            # Open-ended range starting in the future
            logger.info("Start day {} is after {}, no days to report", start_day, end_day)
            return []

        days = DayRange(start_day, end_day)
        logger.debug("Splitting {} - {} into {} days", start_day, days.end, len(days))
        return ((day, day_time_range(day, self.tz)) for day in days)

    def run(self, request: StatsRequest) -> StatsPipelineResult:
        """Run the request and emit every report.

        Raises
        ------
        TimeRangeError
            On an unusable time range (before any query)
        ConfigError
            On an unknown output format (before any query)
        StorageError
            If the store cannot be opened or queried
        """
        output_format = OutputFormat.from_name(request.output_format)
        cycles = self.plan(request)
        group_key = GroupKey(request.group_key)
        name_length = None if output_format.is_structured else request.max_name_length
        result = StatsPipelineResult(output_format=output_format)

        with timing_context("stats_report", component="pipeline") as ctx:
            with IntervalStore(self.config.database_path, self.config.schema) as store:
                for day, time_range in cycles:
                    stats_filter = StatsFilter.from_time_range(
                        time_range,
                        name=request.name_filter,
                        window=request.window_filter,
                    )
                    entries = compute_stats(
                        store,
                        stats_filter,
                        group_key,
                        max_results=request.max_results,
                        max_name_length=name_length,
                    )
                    if day is not None and not output_format.is_structured:
                        self.emit(day.isoformat())
                    self.emit(render(output_format, entries))
                    result.reports.append(DayReport(day=day, entries=entries))
            ctx["reports"] = len(result.reports)

        logger.info("Emitted {} report(s) as {}", len(result.reports), output_format.value)
        return result
