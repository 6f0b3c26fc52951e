"""Read-only access to the interval store."""

from .query import GroupKey, StatsFilter, StoreSchema, build_stats_query, build_where
from .store import GroupTotal, IntervalStore, StorageError

__all__ = [
    "GroupKey",
    "GroupTotal",
    "IntervalStore",
    "StatsFilter",
    "StorageError",
    "StoreSchema",
    "build_stats_query",
    "build_where",
]
