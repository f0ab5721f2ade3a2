"""Export result models.

Pydantic models describing what a completed run left in a MemoryHost, in a
shape the output formatters can consume.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from pgload.core.dates import day_count_to_date
from pgload.core.types import DATE_FORMAT

if TYPE_CHECKING:
    from pgload.core.host import MemoryHost


class ExportColumn(BaseModel):
    """One host variable."""

    name: str
    storage: str
    display_format: str


class ExportResult(BaseModel):
    """Contents of the host workspace after the last page."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    columns: list[ExportColumn]
    rows: list[tuple[Any, ...]]
    row_count: int

    @classmethod
    def from_host(cls, host: MemoryHost) -> ExportResult:
        """Snapshot host storage, rendering day counts as ISO dates."""
        columns = [
            ExportColumn(name=v.name, storage=v.storage, display_format=v.display_format)
            for v in host.variables
        ]
        dated = [c.display_format == DATE_FORMAT for c in columns]
        rows = [
            tuple(
                day_count_to_date(int(val)).isoformat() if is_date and val is not None else val
                for val, is_date in zip(row, dated, strict=True)
            )
            for row in host.rows()
        ]
        return cls(columns=columns, rows=rows, row_count=len(rows))
