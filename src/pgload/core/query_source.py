"""Where the export command gets its SQL from.

An inline query (-e) wins over a file, and a file wins over stdin.
"""

from __future__ import annotations

import sys
from pathlib import Path

from pgload.core.exceptions import InputError


def _read_source(inline: str | None, file_path: str | None) -> str:
    if inline is not None:
        return inline
    if file_path is not None:
        path = Path(file_path)
        if not path.is_file():
            raise InputError(
                f"Query file not found: {file_path}\n"
                "Use -e for inline queries or pipe query via stdin."
            )
        return path.read_text()
    if sys.stdin.isatty():
        raise InputError("No query provided. Use -e, file path, or pipe to stdin.")
    return sys.stdin.read()


def resolve_query_source(inline: str | None, file_path: str | None) -> str:
    """Return the query text; raises InputError if there is none or it is blank."""
    sql = _read_source(inline, file_path)
    if not sql.strip():
        raise InputError("Query is empty.")
    return sql
