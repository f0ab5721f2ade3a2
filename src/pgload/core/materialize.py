"""Row materialization: one page of wire text -> typed host writes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pgload.core.exceptions import DateParseError, HostWriteError
from pgload.core.types import StorageKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pgload.core.host import Host
    from pgload.core.types import Batch, ColumnDescriptor


def materialize_batch(
    batch: Batch,
    descriptors: Sequence[ColumnDescriptor],
    host: Host,
    loaded: int,
) -> int:
    """Write every non-null cell of batch into host storage.

    Row i of the batch lands on host observation loaded + i + 1 and column j
    on host variable j + 1. Null cells are skipped so the host's missing
    value stands. Returns the number of rows written.

    Raises DateParseError for an unparsable date and HostWriteError for any
    other value the host cannot take; either aborts the whole batch.
    """
    for i, row in enumerate(batch.rows):
        obs = loaded + i + 1
        for j, (text, desc) in enumerate(zip(row, descriptors, strict=True)):
            if text is None:
                continue
            var = j + 1
            try:
                value = desc.convert(text)
            except ValueError as e:
                if desc.kind is StorageKind.DAY_COUNT:
                    raise DateParseError(
                        f"failed to parse date at ({obs}, {var}): {text!r}", obs, var
                    ) from e
                msg = f"failed to parse {text!r} as {desc.keyword} at ({obs}, {var})"
                raise HostWriteError(msg) from e

            try:
                if desc.kind.is_string:
                    host.store_string(var, obs, value)
                else:
                    host.store_number(var, obs, value)
            except HostWriteError as e:
                msg = f"failed to store oid:{desc.type_oid} at ({obs},{var}): {e.message}"
                raise HostWriteError(msg) from e
    return len(batch.rows)
