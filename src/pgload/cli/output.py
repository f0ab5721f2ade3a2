"""Output format selection."""

from __future__ import annotations

import sys
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pgload.core.models import ExportResult
    from pgload.formatters.base import Formatter


class OutputFormat(StrEnum):
    CSV = "csv"
    JSON = "json"


def get_formatter(
    format_name: str = "csv",
    *,
    compact: bool = False,
    no_header: bool = False,
) -> Formatter:
    """Build the formatter registered under format_name."""
    from pgload.formatters import registry

    kwargs: dict[str, object] = {}
    if format_name == "json":
        kwargs["compact"] = compact
    elif format_name == "csv":
        kwargs["no_header"] = no_header
    return registry.get(format_name, **kwargs)


def write_output(formatter: Formatter, result: ExportResult) -> None:
    """Write formatted output to stdout."""
    for line in formatter.format(result):
        sys.stdout.write(line + "\n")
