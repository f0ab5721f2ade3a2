"""Output formatters for pgload."""

from pgload.formatters.base import Formatter, FormatterRegistry, registry
from pgload.formatters.csv import CSVFormatter
from pgload.formatters.json import JSONFormatter

__all__ = ["CSVFormatter", "Formatter", "FormatterRegistry", "JSONFormatter", "registry"]
