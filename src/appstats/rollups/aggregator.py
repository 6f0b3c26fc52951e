"""Time usage aggregation.

Turn grouped duration sums from the interval store into percentage shares,
sorted by running time and capped to the requested number of entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..observability.loguru_config import get_logger

if TYPE_CHECKING:
    from ..storage.query import GroupKey, StatsFilter
    from ..storage.store import GroupTotal, IntervalStore

__all__ = [
    "StatEntry",
    "aggregate_totals",
    "compute_stats",
]

logger = get_logger("rollups")


@dataclass(frozen=True)
class StatEntry:
    """Time spent on one entity.

    Attributes
    ----------
    name : str
        Entity name or window title (possibly truncated)
    running_time : int
        Active seconds
    percentage : float
        Share of the grand total of the same filter scope, 0-100
    """

    name: str
    running_time: int
    percentage: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON report object."""
        return {"Name": self.name, "RunningTime": self.running_time, "Percentage": self.percentage}


def aggregate_totals(
    totals: list[GroupTotal],
    *,
    max_results: int,
    max_name_length: int | None = None,
) -> list[StatEntry]:
    """Build the result set from grouped totals.

    Parameters
    ----------
    totals
        Grouped sums, in grouping order
    max_results
        Maximum number of entries returned
    max_name_length
        Cut names to this many characters (None keeps full names)

    Returns
    -------
    list[StatEntry]
        Entries sorted by running time descending (ties keep grouping
        order), at most ``max_results`` long; empty when the grand total is
        zero
    """
    if not totals:
        return []
    grand_total = totals[0].grand_total
    if not grand_total:
        logger.debug("Grand total is zero, nothing to report")
        return []

    entries = []
    for row in totals:
        name = row.group_value or ""
        if max_name_length is not None:
            name = name[:max_name_length]
        entries.append(
            StatEntry(
                name=name,
                running_time=int(row.group_sum),
                percentage=row.group_sum / grand_total * 100,
            )
        )

    entries.sort(key=lambda entry: entry.running_time, reverse=True)
    return entries[:max_results]


def compute_stats(
    store: IntervalStore,
    stats_filter: StatsFilter,
    group_key: GroupKey,
    *,
    max_results: int,
    max_name_length: int | None = None,
) -> list[StatEntry]:
    """Query the store and aggregate one report.

    Parameters
    ----------
    store
        Open interval store
    stats_filter
        Time range and substring filters shared by the grouped sums and the
        grand total
    group_key
        Group by entity name or window title
    max_results
        Maximum number of entries returned
    max_name_length
        Cut names to this many characters (None keeps full names)

    Returns
    -------
    list[StatEntry]
        Sorted, capped result set
    """
    totals = store.group_totals(stats_filter, group_key)
    return aggregate_totals(totals, max_results=max_results, max_name_length=max_name_length)
