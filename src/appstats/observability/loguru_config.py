"""Loguru configuration for appstats.

This module provides centralized loguru configuration with:
- Coloured console output on stderr (stdout is reserved for reports)
- Optional structured JSON log file with rotation
- Component-bound loggers
- Context manager for timing operations
"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "configure_loguru",
    "get_logger",
    "timing_context",
]

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_loguru(
    *,
    level: str = "WARNING",
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "10 days",
    enable_console: bool = True,
) -> None:
    """Configure loguru sinks.

    Parameters
    ----------
    level
        Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_file
        Optional file for structured JSON logs
    rotation
        Log rotation policy (e.g., "10 MB", "1 day")
    retention
        Log retention policy (e.g., "10 days", "1 week")
    enable_console
        Enable stderr output

    Example
    -------
    >>> from appstats.observability.loguru_config import configure_loguru
    >>> configure_loguru(level="DEBUG")
    """
    # Remove default handler
    logger.remove()
    logger.configure(extra={"component": "appstats"})

    if enable_console:
        logger.add(
            sys.stderr,
            format=_CONSOLE_FORMAT,
            level=level,
            colorize=None,
            backtrace=False,
            diagnose=False,
        )

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format="{message}",
            level=level,
            rotation=rotation,
            retention=retention,
            serialize=True,
            backtrace=True,
            diagnose=False,
        )

    logger.debug("Loguru configured", level=level, log_file=str(log_file) if log_file else None)


def get_logger(component: str = "appstats") -> Any:
    """Get logger instance bound to specific component.

    Parameters
    ----------
    component
        Component name (storage, rollups, pipeline, cli)

    Returns
    -------
    Logger
        Loguru logger bound to component
    """
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "appstats",
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Log the duration of an operation at DEBUG level.

    Parameters
    ----------
    operation
        Name of the operation being timed
    component
        Component name for filtering logs
    **metadata
        Additional metadata to log

    Yields
    ------
    dict
        Context dictionary that can be updated with additional data

    Example
    -------
    >>> with timing_context("stats_query", component="pipeline") as ctx:
    ...     rows = store.query(...)
    ...     ctx["rows"] = len(rows)
    """
    bound = logger.bind(component=component, operation=operation)
    context: dict[str, Any] = dict(metadata)
    start_ns = time.perf_counter_ns()
    bound.debug("START: {}", operation)

    try:
        yield context
    finally:
        duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        bound.debug("END: {} ({:.2f} ms) {}", operation, duration_ms, context)
