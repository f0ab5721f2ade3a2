"""Server-side cursor paging.

A query is read through a named cursor declared inside an explicit
transaction, FETCH FORWARD one bounded page at a time. Values are kept as
the driver's text representation; conversion happens in the materializer.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import psycopg
import sentry_sdk
import structlog

from pgload.core.config import DEFAULT_PAGE_SIZE
from pgload.core.exceptions import (
    ConnectionError,
    QueryError,
    SchemaResolutionError,
)
from pgload.core.logging import trace
from pgload.core.schema import resolve_columns
from pgload.core.session import OpenQuery
from pgload.core.types import Batch, WireField

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pgload.core.session import Session

CURSOR_NAME = "pgload_cursor"
_TYPNAME_SAVEPOINT = "pgload_typname"


def batch_from_result(res: Any, encoding: str) -> Batch:
    """Copy a libpq result (text format) into a Batch."""
    nfields = res.nfields
    fields = tuple(
        WireField(
            name=(res.fname(j) or b"").decode(encoding),
            type_oid=res.ftype(j),
            size=res.fsize(j),
            modifier=res.fmod(j),
        )
        for j in range(nfields)
    )
    rows = []
    for i in range(res.ntuples):
        row = []
        for j in range(nfields):
            value = res.get_value(i, j)
            try:
                row.append(None if value is None else value.decode(encoding))
            except UnicodeDecodeError as e:
                msg = f"Database error: cannot decode value at row {i + 1}, column {j + 1}: {e}"
                raise QueryError(msg) from e
        rows.append(tuple(row))
    return Batch(fields=fields, rows=rows)


def _strip_terminator(sql: str) -> str:
    return sql.strip().rstrip(";").rstrip()


class CursorPager:
    """Opens the query cursor and fetches pages into the session."""

    def __init__(
        self,
        session: Session,
        page_size: int = DEFAULT_PAGE_SIZE,
        cursor_name: str = CURSOR_NAME,
    ) -> None:
        self.session = session
        self.page_size = page_size
        self.cursor_name = cursor_name

    @contextmanager
    def _driver_errors(self, error_cls: type[QueryError] = QueryError) -> Iterator[None]:
        try:
            yield
        except psycopg.Error as e:
            conn = self.session.connection
            if conn.closed or conn.broken:
                raise ConnectionError(f"Database error: connection failed. {e}") from e
            raise error_cls(f"Database error: {e}") from e

    def _fetch(self) -> Batch:
        log = structlog.get_logger()
        statement = f"FETCH FORWARD {self.page_size} FROM {self.cursor_name}"
        trace(log, self.session.debug, "statement", sql=statement)
        conn = self.session.connection
        with sentry_sdk.start_span(op="db.fetch", name=statement) as span:
            start_time = time.monotonic()
            with conn.cursor() as cur:
                cur.execute(statement)
                batch = batch_from_result(cur.pgresult, conn.info.encoding)
            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("row_count", len(batch))
            span.set_data("duration_ms", duration_ms)
        log.debug("page fetched", rows=len(batch), duration_ms=f"{duration_ms:.1f}")
        return batch

    def open_query(self, sql: str) -> OpenQuery:
        """Begin a transaction, declare the cursor and fetch the first page.

        Resolves the column schema from the first page and moves the session
        to OpenQuery. The caller runs this under Session.guard(), which rolls
        back on failure.
        """
        self.session.require_idle()

        with self._driver_errors():
            self.session.execute("BEGIN TRANSACTION")
        self.session.in_transaction = True

        declare = f"DECLARE {self.cursor_name} CURSOR FOR {_strip_terminator(sql)}"
        with self._driver_errors():
            self.session.execute(declare)

        with self._driver_errors(SchemaResolutionError):
            batch = self._fetch()

        descriptors = resolve_columns(batch.fields, self.type_name, self.session.debug)
        state = OpenQuery(
            descriptors=descriptors, batch=batch, known=len(batch), exhausted=not batch
        )
        self.session.phase = state
        return state

    def fetch_next(self) -> bool:
        """Replace the current page with the next one.

        Returns False once the cursor is exhausted; that is the normal end of
        the query, not an error.
        """
        state = self.session.require_open_query()
        state.batch = None
        with self._driver_errors():
            batch = self._fetch()
        state.batch = batch
        state.known += len(batch)
        if not batch:
            state.exhausted = True
        return len(batch) > 0

    def type_name(self, type_oid: int) -> str:
        """Look up a type's name in pg_type, inside a savepoint.

        Raises QueryError if the lookup fails; the savepoint keeps the
        query's transaction usable.
        """
        conn = self.session.connection
        statement = f"SELECT typname FROM pg_type WHERE oid = {int(type_oid)} LIMIT 1"
        with self._driver_errors():
            self.session.execute(f"SAVEPOINT {_TYPNAME_SAVEPOINT}")
        try:
            with self._driver_errors():
                trace(structlog.get_logger(), self.session.debug, "statement", sql=statement)
                with conn.cursor() as cur:
                    cur.execute(statement)
                    batch = batch_from_result(cur.pgresult, conn.info.encoding)
        except QueryError:
            with self._driver_errors():
                self.session.execute(f"ROLLBACK TO SAVEPOINT {_TYPNAME_SAVEPOINT}")
            raise
        with self._driver_errors():
            self.session.execute(f"RELEASE SAVEPOINT {_TYPNAME_SAVEPOINT}")
        if not batch.rows or batch.rows[0][0] is None:
            return "unknown"
        return batch.rows[0][0]
