"""CSV formatter (RFC 4180). Missing values are written as empty fields."""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING, Any

from pgload.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pgload.core.models import ExportResult


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _write_row(values: list[str]) -> str:
    buf = StringIO()
    csv.writer(buf).writerow(values)
    return buf.getvalue().rstrip("\r\n")


class CSVFormatter:
    def __init__(self, no_header: bool = False) -> None:
        self.no_header = no_header

    def format(self, result: ExportResult) -> Iterator[str]:
        if not self.no_header:
            yield _write_row([col.name for col in result.columns])
        for row in result.rows:
            yield _write_row([_cell(v) for v in row])


registry.register("csv", CSVFormatter)
