"""Command line interface for version-lens."""
