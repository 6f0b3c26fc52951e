"""Read-only SQLite access to tracked interval records.

The store never writes: the database is opened through a ``mode=ro`` URI and
only aggregate queries are issued.

Usage:
    with IntervalStore(path) as store:
        rows = store.group_totals(stats_filter, GroupKey.NAME)
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

from ..observability.loguru_config import get_logger
from .query import GroupKey, StatsFilter, StoreSchema, build_stats_query

__all__ = [
    "GroupTotal",
    "IntervalStore",
    "StorageError",
    "StoreSchema",
]

logger = get_logger("storage")


class StorageError(Exception):
    """Raised when the interval database cannot be opened or queried."""


@dataclass(frozen=True)
class GroupTotal:
    """One row of a grouped-totals query.

    Attributes
    ----------
    group_value : str | None
        Entity name or window title
    group_sum : float
        Summed duration of the group, seconds
    grand_total : float
        Summed duration of every record in the same filter scope, seconds
    """

    group_value: str | None
    group_sum: float
    grand_total: float


class IntervalStore:
    """Read-only wrapper around the tracker database.

    Usage:
        store = IntervalStore(path)
        store.open()
        ...
        store.close()

    Or as a context manager:
        with IntervalStore(path) as store:
            ...
    """

    def __init__(self, path: Path | str, schema: StoreSchema | None = None) -> None:
        self.path = Path(path)
        self.schema = schema or StoreSchema()
        self._conn: sqlite3.Connection | None = None

    def __enter__(self) -> IntervalStore:
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Open the database read-only."""
        if not self.path.is_file():
            raise StorageError(f"Database not found: {self.path}")
        uri = f"{self.path.resolve().as_uri()}?mode=ro"
        try:
            self._conn = sqlite3.connect(uri, uri=True)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {self.path}: {exc}") from exc
        logger.debug("Opened interval store at {}", self.path)

    def close(self) -> None:
        """Close the connection; safe to call twice."""
        if self._conn is None:
            return
        try:
            self._conn.close()
        finally:
            self._conn = None
            logger.debug("Closed interval store")

    def _ensure_conn(self) -> sqlite3.Connection:
        """Return the active connection, raising if closed."""
        if self._conn is None:
            raise StorageError("Interval store is not open")
        return self._conn

    def group_totals(self, stats_filter: StatsFilter, group_key: GroupKey) -> list[GroupTotal]:
        """Sum durations per group within the filter scope.

        Parameters
        ----------
        stats_filter
            Time range and substring filters
        group_key
            Group by entity name or by window title

        Returns
        -------
        list[GroupTotal]
            One row per group, in ascending group order; empty when nothing
            matches

        Raises
        ------
        StorageError
            If the query fails
        """
        sql, params = build_stats_query(stats_filter, group_key, self.schema)
        conn = self._ensure_conn()
        try:
            rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Stats query failed: {exc}") from exc

        logger.debug("Grouped query returned {} rows", len(rows))
        return [
            GroupTotal(group_value=value, group_sum=group_sum or 0.0, grand_total=grand_total or 0.0)
            for value, group_sum, grand_total in rows
        ]
