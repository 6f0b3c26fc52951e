"""Shared fixtures: throwaway tracker databases."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path

import pytest

_APPS_TABLE = """
CREATE TABLE apps (
    id INTEGER PRIMARY KEY,
    name TEXT,
    windowName TEXT,
    runningTime REAL,
    startTime INTEGER,
    endTime INTEGER
)
"""


def utc_epoch(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> int:
    return int(datetime(year, month, day, hour, minute, tzinfo=timezone.utc).timestamp())


@pytest.fixture
def make_db(tmp_path: Path) -> Callable[..., Path]:
    """Create a tracker database holding the given records.

    Each record is ``(name, window, seconds, start_epoch)``; the record ends
    ``seconds`` after it starts.
    """

    def _make(records: Iterable[tuple[str | None, str | None, float, int]], filename: str = "appstats.db") -> Path:
        path = tmp_path / filename
        conn = sqlite3.connect(path)
        try:
            conn.execute(_APPS_TABLE)
            conn.executemany(
                "INSERT INTO apps (name, windowName, runningTime, startTime, endTime) VALUES (?, ?, ?, ?, ?)",
                [(name, window, seconds, start, start + int(seconds)) for name, window, seconds, start in records],
            )
            conn.commit()
        finally:
            conn.close()
        return path

    return _make


@pytest.fixture
def epoch() -> Callable[..., int]:
    """UTC wall-clock to Unix seconds."""
    return utc_epoch


@pytest.fixture
def sample_db(make_db, epoch) -> Path:
    """A=3600s and B=1200s on 2024-03-05, plus records on neighbouring days."""
    return make_db(
        [
            ("A", "A - main", 1800, epoch(2024, 3, 5, 9)),
            ("A", "A - docs", 1800, epoch(2024, 3, 5, 11)),
            ("B", "B - inbox", 1200, epoch(2024, 3, 5, 14)),
            ("A", "A - main", 600, epoch(2024, 3, 4, 10)),
            ("C", "C - chat", 300, epoch(2024, 3, 6, 8)),
        ]
    )
