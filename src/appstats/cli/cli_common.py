"""Common CLI utilities: stable exit codes and error reporting."""

from __future__ import annotations

import traceback
from enum import IntEnum

import click

from ..config.settings import ConfigError
from ..observability.loguru_config import get_logger
from ..rollups.time_windows import TimeRangeError
from ..storage.store import StorageError

__all__ = ["CONTEXT_SETTINGS", "ExitCode", "exit_code_for", "handle_cli_error"]

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

logger = get_logger("cli")


class ExitCode(IntEnum):
    """Stable exit codes for CLI commands."""

    SUCCESS = 0  # Successful execution (including empty reports)
    USAGE_ERROR = 2  # Bad options or unusable time range
    STORAGE_ERROR = 5  # Database missing, unreadable or query failed
    CONFIG_ERROR = 6  # Configuration error (settings, output format)
    UNKNOWN_ERROR = 7  # Unknown/unexpected error


def exit_code_for(exc: BaseException) -> ExitCode:
    """Map an exception to its exit code."""
    if isinstance(exc, TimeRangeError | click.UsageError):
        return ExitCode.USAGE_ERROR
    if isinstance(exc, StorageError):
        return ExitCode.STORAGE_ERROR
    if isinstance(exc, ConfigError):
        return ExitCode.CONFIG_ERROR
    return ExitCode.UNKNOWN_ERROR


def handle_cli_error(exc: Exception, *, verbose: bool = False) -> int:
    """Report an error on stderr and return the matching exit code.

    Args:
        exc: Exception to handle
        verbose: Also print the traceback

    Returns:
        Exit code
    """
    exit_code = exit_code_for(exc)
    logger.debug("Command failed with {}: {}", type(exc).__name__, exc)

    click.echo(f"error: {exc}", err=True)
    if verbose:
        click.echo("\nTraceback:", err=True)
        click.echo("".join(traceback.format_exception(exc)), err=True)

    return int(exit_code)
