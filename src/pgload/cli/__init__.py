"""Command line interface for pgload."""
