"""Configuration for appstats."""

from .settings import ConfigError, Settings, generate_example_config, load_settings

__all__ = ["ConfigError", "Settings", "generate_example_config", "load_settings"]
