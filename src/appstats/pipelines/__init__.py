"""Report pipelines."""
