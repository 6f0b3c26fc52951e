"""Command line interface for appstats."""
