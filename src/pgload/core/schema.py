"""Schema resolution: wire field metadata -> host column descriptors.

Runs once per query, on the fields of the first fetched page.
"""

from __future__ import annotations

import warnings
from typing import TYPE_CHECKING

import structlog

from pgload.core.exceptions import DegradedTypeWarning, QueryError
from pgload.core.types import (
    BOOLOID,
    BPCHAROID,
    DATE_FORMAT,
    DATEOID,
    FLOAT4OID,
    FLOAT8OID,
    INT2OID,
    INT4OID,
    INT8OID,
    MAX_STRING_WIDTH,
    NUMERICOID,
    TEXTOID,
    TIMESTAMPOID,
    TIMESTAMPTZOID,
    VARCHAROID,
    VARHDRSZ,
    ColumnDescriptor,
    StorageKind,
    WireField,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

_DIRECT: dict[int, StorageKind] = {
    BOOLOID: StorageKind.SMALL_INT,
    # A host int is a little too narrow for int2 once missing-value codes
    # are reserved, so int2 goes to long.
    INT2OID: StorageKind.WIDE_INT,
    INT4OID: StorageKind.DOUBLE,
    INT8OID: StorageKind.DOUBLE,
    FLOAT4OID: StorageKind.DOUBLE,
    FLOAT8OID: StorageKind.DOUBLE,
    NUMERICOID: StorageKind.DOUBLE,
    TEXTOID: StorageKind.BOUNDED_TEXT,
    DATEOID: StorageKind.DAY_COUNT,
    TIMESTAMPOID: StorageKind.DAY_COUNT,
    TIMESTAMPTZOID: StorageKind.DAY_COUNT,
}

_CHARACTER_TYPES = (BPCHAROID, VARCHAROID)


def resolve_column(
    wire: WireField, type_name: Callable[[int], str]
) -> ColumnDescriptor:
    """Map one wire field onto a host storage kind, width and format."""
    base = wire.model_dump()

    if wire.type_oid in _CHARACTER_TYPES:
        width = wire.modifier - VARHDRSZ
        if 0 < width <= MAX_STRING_WIDTH:
            return ColumnDescriptor(**base, kind=StorageKind.FIXED_STRING, width=width)
        # Undeclared or too wide: read as bounded text, truncating.
        return ColumnDescriptor(**base, kind=StorageKind.BOUNDED_TEXT)

    kind = _DIRECT.get(wire.type_oid)
    if kind is StorageKind.DAY_COUNT:
        return ColumnDescriptor(**base, kind=kind, display_format=DATE_FORMAT)
    if kind is not None:
        return ColumnDescriptor(**base, kind=kind)

    # money, interval, time, timetz and anything unrecognised
    name = type_name(wire.type_oid)
    warnings.warn(
        f'Type "{name}" (column {wire.name}) is only partially supported: '
        f"treating it as str{MAX_STRING_WIDTH}",
        DegradedTypeWarning,
        stacklevel=2,
    )
    return ColumnDescriptor(**base, kind=StorageKind.BOUNDED_TEXT)


def resolve_columns(
    fields: Sequence[WireField],
    lookup_type_name: Callable[[int], str],
    debug: bool = False,
) -> tuple[ColumnDescriptor, ...]:
    """Resolve every field of a page.

    lookup_type_name is only called for unsupported types; a QueryError
    from it is logged and the name "unknown" is used instead.
    """
    log = structlog.get_logger()

    def type_name(oid: int) -> str:
        try:
            return lookup_type_name(oid)
        except QueryError as e:
            log.error("type-name lookup failed", type_oid=oid, error=e.message)
            return "unknown"

    descriptors = []
    for wire in fields:
        desc = resolve_column(wire, type_name)
        if debug:
            log.info(
                "column",
                name=desc.name,
                size=desc.size,
                oid=desc.type_oid,
                mod=desc.modifier,
                storage=desc.keyword,
            )
        descriptors.append(desc)
    return tuple(descriptors)


def schema_macros(descriptors: Sequence[ColumnDescriptor]) -> dict[str, str]:
    """The metadata the host reads to allocate its storage (minus _obs)."""
    return {
        "_vars": " ".join(d.name for d in descriptors),
        "_types": " ".join(d.keyword for d in descriptors),
        "_fmts": " ".join(d.display_format for d in descriptors),
    }
