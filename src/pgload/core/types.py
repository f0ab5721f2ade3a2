"""Wire types, host storage kinds and per-query column metadata.

Each StorageKind carries the host keyword it is declared with and the
converter that turns a textual wire value into the value stored in the
host. Converters raise ValueError on unparsable input; the materializer
turns that into the appropriate error with row/column context.
"""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from pgload.core.dates import date_to_day_count

if TYPE_CHECKING:
    from collections.abc import Callable

# PostgreSQL type OIDs (catalog/pg_type.h).
BOOLOID = 16
INT8OID = 20
INT2OID = 21
INT4OID = 23
TEXTOID = 25
FLOAT4OID = 700
FLOAT8OID = 701
CASHOID = 790
BPCHAROID = 1042
VARCHAROID = 1043
DATEOID = 1082
TIMEOID = 1083
TIMESTAMPOID = 1114
TIMESTAMPTZOID = 1184
INTERVALOID = 1186
TIMETZOID = 1266
NUMERICOID = 1700

# Length word that prefixes varlena values; a char(N)/varchar(N) column
# reports a type modifier of VARHDRSZ + N.
VARHDRSZ = 4

# Widest fixed string the host can declare.
MAX_STRING_WIDTH = 244

DATE_FORMAT = "%d"
DEFAULT_FORMAT = "default"

_WIRE_DATE = re.compile(r"(\d{4,})-(\d{2})-(\d{2})")


def _to_flag(text: str) -> int:
    return 1 if text[:1].lower() == "t" else 0


def _to_copy(text: str) -> str:
    return text


def _to_bounded(text: str) -> str:
    return text[:MAX_STRING_WIDTH]


def _to_day_count(text: str) -> int:
    # Only the leading YYYY-MM-DD is read; a timestamp's time of day and
    # zone are ignored.
    m = _WIRE_DATE.match(text)
    if m is None or text.endswith(" BC"):
        raise ValueError(f"not a date: {text!r}")
    year, month, day = (int(g) for g in m.groups())
    return date_to_day_count(datetime.date(year, month, day))


class StorageKind(Enum):
    """Host storage types a wire type can be mapped onto."""

    SMALL_INT = ("byte", _to_flag)
    WIDE_INT = ("long", int)
    DOUBLE = ("double", float)
    FIXED_STRING = ("str", _to_copy)
    BOUNDED_TEXT = ("str244", _to_bounded)
    DAY_COUNT = ("long", _to_day_count)

    def __init__(self, keyword: str, converter: Callable[[str], Any]) -> None:
        self.keyword = keyword
        self.converter = converter

    @property
    def is_string(self) -> bool:
        return self in (StorageKind.FIXED_STRING, StorageKind.BOUNDED_TEXT)


class WireField(BaseModel):
    """Field metadata reported by the driver for one result column."""

    model_config = ConfigDict(frozen=True)

    name: str
    type_oid: int
    size: int
    modifier: int


class ColumnDescriptor(BaseModel):
    """Resolved metadata for one column of the active query."""

    model_config = ConfigDict(frozen=True)

    name: str
    type_oid: int
    size: int
    modifier: int
    kind: StorageKind
    width: int = MAX_STRING_WIDTH
    display_format: str = DEFAULT_FORMAT

    @property
    def keyword(self) -> str:
        if self.kind is StorageKind.FIXED_STRING:
            return f"str{self.width}"
        return self.kind.keyword

    def convert(self, text: str) -> Any:
        return self.kind.converter(text)


@dataclass
class Batch:
    """One page of rows fetched from the cursor, as nullable wire text."""

    fields: tuple[WireField, ...]
    rows: list[tuple[str | None, ...]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)
