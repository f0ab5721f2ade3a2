"""JSON formatter: one object per observation, keyed by variable name."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from pgload.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pgload.core.models import ExportResult


class JSONFormatter:
    def __init__(self, compact: bool = False) -> None:
        self.compact = compact

    def format(self, result: ExportResult) -> Iterator[str]:
        records = [
            {col.name: val for col, val in zip(result.columns, row, strict=True)}
            for row in result.rows
        ]
        yield json.dumps(records, indent=None if self.compact else 2)


registry.register("json", JSONFormatter)
