"""Tests for configuration loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from appstats.config.settings import (
    ConfigError,
    Settings,
    generate_example_config,
    load_env_file,
    load_settings,
)
from appstats.storage.query import StoreSchema


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate from the user's environment and working directory."""
    for key in list(os.environ):
        if key.startswith("APPSTATS_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    yield
    # .env loading writes straight into os.environ
    for key in list(os.environ):
        if key.startswith("APPSTATS_"):
            del os.environ[key]


def test_defaults():
    settings = load_settings()

    assert settings.database_path == Path.home() / ".appstats" / "appstats.db"
    assert settings.timezone is None
    assert settings.default_format == "pretty"
    assert settings.max_results == 20
    assert settings.max_name_length == 40
    assert settings.log_level == "WARNING"
    assert settings.schema == StoreSchema()


def test_yaml_file(tmp_path):
    (tmp_path / "appstats.yaml").write_text(
        "data_dir: /var/lib/tracker\ntimezone: UTC\nmax_results: 5\nschema:\n  table: usage\n",
        encoding="utf-8",
    )

    settings = load_settings()

    assert settings.database_path == Path("/var/lib/tracker/appstats.db")
    assert settings.timezone == "UTC"
    assert settings.max_results == 5
    assert settings.schema.table == "usage"
    assert settings.schema.name_column == "name"


def test_explicit_config_path(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text("default_format: json\n", encoding="utf-8")
    assert load_settings(path).default_format == "json"


def test_config_path_from_env(tmp_path, monkeypatch):
    path = tmp_path / "other.yaml"
    path.write_text("max_name_length: 12\n", encoding="utf-8")
    monkeypatch.setenv("APPSTATS_CONFIG", str(path))
    assert load_settings().max_name_length == 12


def test_missing_explicit_config(tmp_path):
    with pytest.raises(ConfigError, match="Config file not found"):
        load_settings(tmp_path / "missing.yaml")


def test_env_overrides_yaml(tmp_path, monkeypatch):
    (tmp_path / "appstats.yaml").write_text("max_results: 5\ndefault_format: simple\n", encoding="utf-8")
    monkeypatch.setenv("APPSTATS_MAX_RESULTS", "7")
    monkeypatch.setenv("APPSTATS_FORMAT", "json")

    settings = load_settings()

    assert settings.max_results == 7
    assert settings.default_format == "json"


def test_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text(
        "# tracker\nAPPSTATS_TIMEZONE='Europe/Berlin'\nAPPSTATS_DATABASE_NAME=\"tracker.db\"\n",
        encoding="utf-8",
    )

    settings = load_settings()

    assert settings.timezone == "Europe/Berlin"
    assert settings.database_name == "tracker.db"


def test_environment_wins_over_dotenv(tmp_path, monkeypatch):
    env_file = tmp_path / "custom.env"
    env_file.write_text("APPSTATS_LOG_LEVEL=debug\n", encoding="utf-8")
    monkeypatch.setenv("APPSTATS_LOG_LEVEL", "error")

    load_env_file(env_file)

    assert os.environ["APPSTATS_LOG_LEVEL"] == "error"


def test_log_level_is_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"


@pytest.mark.parametrize(
    ("yaml_text", "message"),
    [
        ("timezone: Mars/Base\n", "Invalid timezone"),
        ("default_format: xml\n", "Unknown output format"),
        ("max_results: 0\n", "max_results must be a positive integer"),
        ("max_name_length: many\n", "Invalid configuration"),
        ("log_level: LOUD\n", "Unknown log level"),
        ("database_name: ''\n", "database_name must not be empty"),
        ("colour: blue\n", "Unknown configuration keys: colour"),
        ("schema:\n  table: 'apps; DROP'\n", "Invalid schema configuration"),
        ("schema:\n  tables: apps\n", "Invalid schema configuration"),
        ("- a\n- b\n", "must contain a mapping"),
        ("max_results: [1\n", "Failed to load config"),
        ("log_level: 10\n", "log_level must be a level name"),
        ("schema: apps\n", "schema must be a mapping"),
        ("data_dir: 5\n", "data_dir must be a path"),
        ("log_file: [a, b]\n", "log_file must be a path"),
        ("database_name: 7\n", "database_name must be a file name"),
        ("timezone: true\n", "timezone must be a timezone name"),
    ],
)
def test_invalid_values(tmp_path, yaml_text, message):
    (tmp_path / "appstats.yaml").write_text(yaml_text, encoding="utf-8")
    with pytest.raises(ConfigError, match=message):
        load_settings()


def test_invalid_env_value(monkeypatch):
    monkeypatch.setenv("APPSTATS_MAX_RESULTS", "lots")
    with pytest.raises(ConfigError, match="Invalid configuration"):
        load_settings()


def test_example_config_loads(tmp_path):
    text = generate_example_config(tmp_path / "appstats.yaml")
    assert text.startswith("# appstats configuration")

    settings = load_settings(tmp_path / "appstats.yaml")

    assert settings.max_results == 20
    assert settings.schema == StoreSchema()
    assert settings.data_dir == Path("~/.appstats").expanduser()


def test_direct_construction_checks_types():
    with pytest.raises(ConfigError, match="max_results must be a positive integer"):
        Settings(max_results="5")


def test_empty_log_file_means_no_file():
    assert Settings(log_file="").log_file is None
