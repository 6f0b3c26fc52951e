"""Query building for the interval store.

Filters are kept as a small tagged structure (``StatsFilter``) and only
turned into SQL here, with every user-supplied value bound as a parameter.
Table and column names come from ``StoreSchema`` and are validated as plain
SQL identifiers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..core.time import to_epoch_seconds

if TYPE_CHECKING:
    from ..rollups.time_windows import TimeRange

__all__ = [
    "GroupKey",
    "StatsFilter",
    "StoreSchema",
    "build_stats_query",
    "build_where",
    "escape_like",
]

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_LIKE_ESCAPE = "\\"


class GroupKey(str, Enum):
    """What a report groups records by."""

    NAME = "name"
    WINDOW = "window"


@dataclass(frozen=True)
class StoreSchema:
    """Table and column names of the interval store.

    Attributes
    ----------
    table : str
        Interval table
    name_column : str
        Entity (application) name
    window_column : str
        Window title
    duration_column : str
        Active seconds contributed by the record
    start_column : str
        Interval start, Unix seconds
    end_column : str
        Interval end, Unix seconds
    """

    table: str = "apps"
    name_column: str = "name"
    window_column: str = "windowName"
    duration_column: str = "runningTime"
    start_column: str = "startTime"
    end_column: str = "endTime"

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str) or not _IDENTIFIER_RE.match(value):
                raise ValueError(f"{f.name} must be a plain SQL identifier, got {value!r}")

    def group_column(self, group_key: GroupKey) -> str:
        """Column holding the grouping value for ``group_key``."""
        if GroupKey(group_key) is GroupKey.WINDOW:
            return self.window_column
        return self.name_column


@dataclass(frozen=True)
class StatsFilter:
    """Everything that narrows a stats query.

    Attributes
    ----------
    start : datetime | None
        Keep records starting at or after this instant
    end : datetime | None
        Keep records ending at or before this instant
    name : str | None
        Substring the entity name must contain
    window : str | None
        Substring the window title must contain
    """

    start: datetime | None = None
    end: datetime | None = None
    name: str | None = None
    window: str | None = None

    @classmethod
    def from_time_range(
        cls,
        time_range: TimeRange,
        *,
        name: str | None = None,
        window: str | None = None,
    ) -> StatsFilter:
        """Build a filter from a resolved time range plus substring filters."""
        return cls(start=time_range.start, end=time_range.end, name=name or None, window=window or None)


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so ``text`` matches literally."""
    return (
        text.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def build_where(stats_filter: StatsFilter, schema: StoreSchema | None = None) -> tuple[str, list[Any]]:
    """Compose the WHERE expression for a filter.

    Parameters
    ----------
    stats_filter
        Filter to translate
    schema
        Store layout (default: ``StoreSchema()``)

    Returns
    -------
    tuple[str, list]
        (expression, parameters); the expression is empty when the filter
        has no constraints

    Example
    -------
    >>> build_where(StatsFilter(name="term"))
    ("name LIKE ? ESCAPE '\\\\'", ['%term%'])
    """
    schema = schema or StoreSchema()
    clauses: list[str] = []
    params: list[Any] = []

    if stats_filter.start is not None:
        clauses.append(f"{schema.start_column} >= ?")
        params.append(to_epoch_seconds(stats_filter.start))
    if stats_filter.end is not None:
        clauses.append(f"{schema.end_column} <= ?")
        params.append(to_epoch_seconds(stats_filter.end))
    if stats_filter.name:
        clauses.append(f"{schema.name_column} LIKE ? ESCAPE '{_LIKE_ESCAPE}'")
        params.append(f"%{escape_like(stats_filter.name)}%")
    if stats_filter.window:
        clauses.append(f"{schema.window_column} LIKE ? ESCAPE '{_LIKE_ESCAPE}'")
        params.append(f"%{escape_like(stats_filter.window)}%")

    return " AND ".join(clauses), params


def build_stats_query(
    stats_filter: StatsFilter,
    group_key: GroupKey,
    schema: StoreSchema | None = None,
) -> tuple[str, list[Any]]:
    """Build the grouped-totals query.

    The filter is applied once, in the ``scoped`` CTE; both the per-group
    sums and the grand total are computed from it.

    Returns
    -------
    tuple[str, list]
        (sql, parameters); rows are (group_value, group_sum, grand_total)
        ordered by group value
    """
    schema = schema or StoreSchema()
    where, params = build_where(stats_filter, schema)
    where_sql = f"\n        WHERE {where}" if where else ""
    sql = f"""
    WITH scoped AS (
        SELECT {schema.group_column(group_key)} AS group_value,
               {schema.duration_column} AS duration
        FROM {schema.table}{where_sql}
    )
    SELECT group_value,
           SUM(duration) AS group_sum,
           (SELECT SUM(duration) FROM scoped) AS grand_total
    FROM scoped
    GROUP BY group_value
    ORDER BY group_value
    """
    return sql, params
