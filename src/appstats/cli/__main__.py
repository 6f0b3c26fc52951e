#!/usr/bin/env python3
"""Main CLI module for appstats."""

import sys

import click

from ..config.settings import ConfigError, generate_example_config, load_settings
from ..observability.loguru_config import configure_loguru
from .appstats_stats import cli as stats_cli
from .cli_common import CONTEXT_SETTINGS, ExitCode, handle_cli_error

EPILOG = """
Examples:
  appstats stats                  # Time per application today
  appstats stats -p thisMonth -w  # Time per window title this month
  appstats config show            # Effective configuration
  appstats config example         # Example appstats.yaml
""".strip()


@click.group(
    context_settings=CONTEXT_SETTINGS,
    help="appstats - time usage reports from the tracker database",
    epilog=EPILOG,
)
def cli() -> None:
    """Root CLI command."""
    configure_loguru()


@cli.group("config")
def config_group() -> None:
    """Inspect configuration."""


@config_group.command("example")
def config_example() -> int:
    """Print an example appstats.yaml."""
    click.echo(generate_example_config().rstrip("\n"))
    return int(ExitCode.SUCCESS)


@config_group.command("show")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="YAML config file")
def config_show(config_path: str | None) -> int:
    """Print the effective configuration."""
    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        return handle_cli_error(exc)

    click.echo(f"database_path: {settings.database_path}")
    click.echo(f"timezone: {settings.timezone or 'local'}")
    click.echo(f"default_format: {settings.default_format}")
    click.echo(f"max_results: {settings.max_results}")
    click.echo(f"max_name_length: {settings.max_name_length}")
    click.echo(f"log_level: {settings.log_level}")
    click.echo(f"log_file: {settings.log_file or '-'}")
    click.echo(f"table: {settings.schema.table}")
    return int(ExitCode.SUCCESS)


cli.add_command(stats_cli, "stats")


def main(args: list[str] | None = None) -> int:
    """Main CLI entry point."""

    try:
        normalized_args = list(args) if args is not None else None
        return cli.main(args=normalized_args, standalone_mode=False) or 0
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except SystemExit as exc:  # pragma: no cover - click normalizes exit codes
        return int(exc.code) if exc.code is not None else 0
    except Exception as exc:
        return handle_cli_error(exc, verbose=True)


if __name__ == "__main__":  # pragma: no cover - executable module
    sys.exit(main())
