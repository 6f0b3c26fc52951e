"""Centralized configuration management for appstats.

Supports:
- Defaults baked into ``Settings``
- User overrides from appstats.yaml (or the file named by APPSTATS_CONFIG)
- .env file in the working directory
- Environment variable overrides (APPSTATS_*)

Missing or invalid config produces clear ``ConfigError`` messages.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..core.time import get_timezone
from ..storage.query import StoreSchema

__all__ = [
    "ConfigError",
    "Settings",
    "generate_example_config",
    "load_env_file",
    "load_settings",
]

DEFAULT_CONFIG_FILE = "appstats.yaml"

# Environment variable -> settings field
_ENV_MAPPINGS = {
    "APPSTATS_DATA_DIR": "data_dir",
    "APPSTATS_DATABASE_NAME": "database_name",
    "APPSTATS_TIMEZONE": "timezone",
    "APPSTATS_FORMAT": "default_format",
    "APPSTATS_MAX_RESULTS": "max_results",
    "APPSTATS_MAX_NAME_LENGTH": "max_name_length",
    "APPSTATS_LOG_LEVEL": "log_level",
    "APPSTATS_LOG_FILE": "log_file",
}

_INT_FIELDS = ("max_results", "max_name_length")
_LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration is missing or invalid."""


@dataclass
class Settings:
    """Settings for appstats.

    Attributes
    ----------
    data_dir : Path
        Working directory holding the tracker database
    database_name : str
        Database file name inside ``data_dir``
    timezone : str | None
        IANA timezone for day boundaries (None = system local time)
    default_format : str
        Output format used when the CLI gets no --format
    max_results : int
        Maximum number of entries per report
    max_name_length : int
        Names longer than this are cut in human-readable output
    log_level : str
        Logging level
    log_file : Path | None
        Log file path
    schema : StoreSchema
        Table and column names of the interval store
    """

    data_dir: Path = field(default_factory=lambda: Path.home() / ".appstats")
    database_name: str = "appstats.db"
    timezone: str | None = None
    default_format: str = "pretty"
    max_results: int = 20
    max_name_length: int = 40
    log_level: str = "WARNING"
    log_file: Path | None = None
    schema: StoreSchema = field(default_factory=StoreSchema)

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not isinstance(self.data_dir, str | Path):
            raise ConfigError(f"data_dir must be a path, got {self.data_dir!r}")
        self.data_dir = Path(self.data_dir).expanduser()
        if self.log_file == "":
            self.log_file = None
        if self.log_file is not None:
            if not isinstance(self.log_file, str | Path):
                raise ConfigError(f"log_file must be a path, got {self.log_file!r}")
            self.log_file = Path(self.log_file).expanduser()

        if isinstance(self.schema, dict):
            try:
                self.schema = StoreSchema(**self.schema)
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"Invalid schema configuration: {exc}") from exc
        elif not isinstance(self.schema, StoreSchema):
            raise ConfigError(f"schema must be a mapping of table and column names, got {self.schema!r}")

        if not isinstance(self.database_name, str):
            raise ConfigError(f"database_name must be a file name, got {self.database_name!r}")
        if not self.database_name:
            raise ConfigError("database_name must not be empty")

        if self.timezone is not None and not isinstance(self.timezone, str):
            raise ConfigError(f"timezone must be a timezone name, got {self.timezone!r}")
        try:
            get_timezone(self.timezone)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

        # Import at runtime to avoid circular imports
        from ..rollups.formatters import OutputFormat

        OutputFormat.from_name(self.default_format)

        for name in _INT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

        if not isinstance(self.log_level, str):
            raise ConfigError(f"log_level must be a level name, got {self.log_level!r}")
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ConfigError(f"Unknown log level {self.log_level!r}")

    @property
    def database_path(self) -> Path:
        """Full path to the interval database."""
        return self.data_dir / self.database_name

    @classmethod
    def load(
        cls,
        config_path: Path | str | None = None,
        env_file: Path | str | None = None,
    ) -> Settings:
        """Load settings from YAML, .env and environment.

        Configuration priority (highest to lowest):
        1. Environment variables (APPSTATS_*), including those set by .env
        2. User config (appstats.yaml)
        3. Defaults

        Parameters
        ----------
        config_path
            Path to YAML config (default: $APPSTATS_CONFIG or appstats.yaml)
        env_file
            Path to .env file (default: .env in current directory)

        Returns
        -------
        Settings
            Loaded settings

        Raises
        ------
        ConfigError
            If a config file is malformed or a value is invalid
        """
        env_file = Path(env_file) if env_file is not None else Path(".env")
        if env_file.exists():
            load_env_file(env_file)

        explicit = config_path is not None or "APPSTATS_CONFIG" in os.environ
        if config_path is None:
            config_path = os.environ.get("APPSTATS_CONFIG", DEFAULT_CONFIG_FILE)
        config_path = Path(config_path)

        values: dict[str, Any] = {}
        if config_path.exists():
            values.update(_load_yaml_file(config_path))
        elif explicit:
            raise ConfigError(f"Config file not found: {config_path}")

        values.update(_env_overrides())

        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        try:
            for name in _INT_FIELDS:
                if name in values:
                    values[name] = int(values[name])
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc

        return cls(**values)


def _load_yaml_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to load config from {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides() -> dict[str, Any]:
    return {key: os.environ[env] for env, key in _ENV_MAPPINGS.items() if os.environ.get(env)}


def load_env_file(env_file: Path) -> None:
    """Load environment variables from .env file.

    Variables already present in the environment win over the file.

    Parameters
    ----------
    env_file
        Path to .env file
    """
    with open(env_file, encoding="utf-8") as f:
        for line in f:
            line = line.strip()

            # Skip comments and empty lines
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()

            # Remove quotes
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
                value = value[1:-1]

            os.environ.setdefault(key, value)


def load_settings(config_path: Path | str | None = None, env_file: Path | str | None = None) -> Settings:
    """Load settings (shortcut for ``Settings.load``)."""
    return Settings.load(config_path=config_path, env_file=env_file)


def generate_example_config(output_path: Path | None = None) -> str:
    """Generate example appstats.yaml with all settings.

    Parameters
    ----------
    output_path
        Optional path to write the file to

    Returns
    -------
    str
        Example YAML contents
    """
    example = """# appstats configuration
# Every key is optional; environment variables (APPSTATS_*) override this file.

# Directory holding the tracker database (APPSTATS_DATA_DIR)
data_dir: ~/.appstats

# Database file inside data_dir (APPSTATS_DATABASE_NAME)
database_name: appstats.db

# Timezone for day/week/month boundaries (APPSTATS_TIMEZONE)
# Leave empty to use the system local time. Examples: UTC, Europe/Berlin
timezone:

# Report defaults
default_format: pretty     # pretty | simple | json (APPSTATS_FORMAT)
max_results: 20            # APPSTATS_MAX_RESULTS
max_name_length: 40        # APPSTATS_MAX_NAME_LENGTH

# Logging (stderr), optional JSON log file
log_level: WARNING         # APPSTATS_LOG_LEVEL
# log_file: ~/.appstats/appstats.log

# Interval table layout
schema:
  table: apps
  name_column: name
  window_column: windowName
  duration_column: runningTime
  start_column: startTime
  end_column: endTime
"""

    if output_path:
        output_path.write_text(example, encoding="utf-8")

    return example
