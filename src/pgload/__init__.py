"""pgload - stream PostgreSQL query results into a tabular host."""

from pgload.__about__ import __version__

__all__ = ["__version__"]
