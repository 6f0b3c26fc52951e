"""appstats - time usage reports from a local activity tracker database."""

__version__ = "0.1.0"
