"""CLI command for time usage reports."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from ..config.settings import ConfigError, load_settings
from ..observability.loguru_config import configure_loguru
from ..pipelines.stats_pipeline import StatsPipeline, StatsPipelineConfig, StatsRequest
from ..rollups.time_windows import Period, TimeRangeError
from ..storage.query import GroupKey
from ..storage.store import StorageError
from .cli_common import CONTEXT_SETTINGS, ExitCode, handle_cli_error

EPILOG = """
Examples:
  appstats stats                          # today, grouped by application
  appstats stats -p yesterday -f simple   # yesterday, tab-separated
  appstats stats -p thisWeek -w           # this week, grouped by window title
  appstats stats -s 2024-03-01 -e 2024-03-07 --by-day
  appstats stats -s 2024-03-01 --name firefox -f json
""".strip()


@click.command(
    context_settings=CONTEXT_SETTINGS,
    help="Show time spent per application or window.",
    epilog=EPILOG,
)
@click.option(
    "--period",
    "-p",
    type=click.Choice([p.value for p in Period], case_sensitive=False),
    help="Named period (default: today when no --start/--end is given)",
)
@click.option("--start", "-s", help="Range start, e.g. 2024-03-01 or '2024-03-01 09:00'")
@click.option("--end", "-e", help="Range end, e.g. 2024-03-07")
@click.option("--group-by-window", "-w", is_flag=True, help="Group by window title instead of application")
@click.option("--name", "name_filter", help="Only applications whose name contains this text")
@click.option("--window", "window_filter", help="Only windows whose title contains this text")
@click.option("--format", "-f", "output_format", help="Output format: pretty, simple or json")
@click.option("--max-results", "-n", type=click.IntRange(min=1), help="Maximum number of rows")
@click.option("--max-name-length", type=click.IntRange(min=1), help="Cut names to this many characters")
@click.option("--by-day", "-d", is_flag=True, help="One report per day, most recent first")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Database file (default: <data_dir>/<database_name>)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML config file (default: appstats.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Debug logging and tracebacks")
def cli(
    period: str | None,
    start: str | None,
    end: str | None,
    group_by_window: bool,
    name_filter: str | None,
    window_filter: str | None,
    output_format: str | None,
    max_results: int | None,
    max_name_length: int | None,
    by_day: bool,
    db_path: Path | None,
    config_path: Path | None,
    verbose: bool,
) -> int:
    """Show time usage statistics."""
    # Console logging for errors raised while settings load
    configure_loguru(level="DEBUG" if verbose else "WARNING")
    try:
        settings = load_settings(config_path)
        configure_loguru(level="DEBUG" if verbose else settings.log_level, log_file=settings.log_file)

        pipeline = StatsPipeline(
            StatsPipelineConfig(
                database_path=db_path or settings.database_path,
                schema=settings.schema,
                timezone=settings.timezone,
            )
        )
        request = StatsRequest(
            period=period,
            start=start,
            end=end,
            group_key=GroupKey.WINDOW if group_by_window else GroupKey.NAME,
            name_filter=name_filter,
            window_filter=window_filter,
            output_format=output_format or settings.default_format,
            max_results=max_results or settings.max_results,
            max_name_length=max_name_length or settings.max_name_length,
            by_day=by_day,
        )
        pipeline.run(request)
        return int(ExitCode.SUCCESS)
    except (TimeRangeError, ConfigError, StorageError) as exc:
        return handle_cli_error(exc, verbose=verbose)


def main(args: list[str] | None = None) -> int:
    if args is None:
        args = sys.argv[1:]

    try:
        return cli.main(args=list(args), standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except SystemExit as exc:
        return int(exc.code) if exc.code is not None else 0


if __name__ == "__main__":
    sys.exit(main())
