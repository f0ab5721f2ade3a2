"""Session state shared across host invocations.

The session owns the one live connection and a phase object that is
exactly one of Disconnected, Idle or OpenQuery. Only OpenQuery carries
per-query state, so nothing about a query can outlive cleanup().
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import psycopg
import structlog

from pgload.core.exceptions import ConnectionError, PgLoadError, UsageError
from pgload.core.logging import trace

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from pgload.core.types import Batch, ColumnDescriptor


@dataclass
class Disconnected:
    pass


@dataclass
class Idle:
    pass


@dataclass
class OpenQuery:
    descriptors: tuple[ColumnDescriptor, ...]
    batch: Batch | None
    loaded: int = 0
    known: int = 0
    exhausted: bool = False


Phase = Disconnected | Idle | OpenQuery


class Session:
    """Connection plus the phase of the current query, if any."""

    def __init__(self, connect: Callable[..., Any] | None = None) -> None:
        self._connect = connect or psycopg.connect
        self._conn: psycopg.Connection[Any] | None = None
        self.phase: Phase = Disconnected()
        self.in_transaction = False
        self.debug = False

    @property
    def connection(self) -> psycopg.Connection[Any]:
        if self._conn is None:
            raise ConnectionError("Database error: not connected.")
        return self._conn

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def connect(self, conninfo: str) -> None:
        """Open the connection, tearing down any existing one first."""
        log = structlog.get_logger()
        if self._conn is not None:
            log.warning("already connected: closing existing connection first")
            self.teardown()

        try:
            self._conn = self._connect(conninfo, autocommit=True)
        except psycopg.Error as e:
            self._conn = None
            self.phase = Disconnected()
            raise ConnectionError(f"Database error: connection failed. {e}") from e

        self.phase = Idle()
        trace(log, self.debug, "connected successfully")

    def disconnect(self) -> None:
        self.teardown()

    def check_connection(self) -> None:
        """Raise ConnectionError, after a teardown, unless the link is usable."""
        conn = self._conn
        if conn is None or conn.closed or conn.broken:
            self.teardown()
            raise ConnectionError("Database error: connection failed.")

    def require_idle(self) -> None:
        if not isinstance(self.phase, Idle):
            name = type(self.phase).__name__
            raise UsageError(f"Operation requires an idle connection (session is {name})")

    def require_open_query(self) -> OpenQuery:
        if not isinstance(self.phase, OpenQuery):
            raise UsageError('Must call "prepare" before calling "populate_next"')
        return self.phase

    def execute(self, statement: str, params: Any = None) -> None:
        trace(structlog.get_logger(), self.debug, "statement", sql=statement)
        with self.connection.cursor() as cur:
            cur.execute(statement, params)

    def cleanup(self) -> None:
        """Drop per-query state and roll back any open transaction.

        Leaves the session Idle (or Disconnected if there is no connection).
        Never raises.
        """
        log = structlog.get_logger()
        if self.in_transaction:
            trace(log, self.debug, "cleanup(): rolling back transaction")
            try:
                self.execute("ROLLBACK TRANSACTION")
            except (psycopg.Error, PgLoadError) as e:
                log.error("rollback failed", error=str(e))
            self.in_transaction = False
        if isinstance(self.phase, OpenQuery):
            trace(log, self.debug, "cleanup(): freeing query results")
        self.phase = Idle() if self._conn is not None else Disconnected()

    def teardown(self) -> None:
        """cleanup(), then close the connection. Never raises."""
        log = structlog.get_logger()
        self.cleanup()
        if self._conn is not None:
            trace(log, self.debug, "teardown(): ending connection")
            try:
                self._conn.close()
            except psycopg.Error as e:
                log.error("close failed", error=str(e))
            self._conn = None
        self.phase = Disconnected()

    @contextmanager
    def guard(self) -> Iterator[None]:
        """Run cleanup (or teardown, for connection loss) before any error propagates."""
        try:
            yield
        except ConnectionError:
            self.teardown()
            raise
        except Exception:
            self.cleanup()
            raise
