"""Host-facing operations: connect, disconnect, prepare, populate_next.

Each operation is one independent host invocation. State carries over
between them only through the Session. The usual sequence is:

    connect -> prepare -> populate_next ... (until it returns False) -> disconnect

After prepare() and after every populate_next() the host reads the
published _obs (and, after prepare, _vars/_types/_fmts) to allocate the
storage the next populate_next() writes into.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pgload.core.config import DEFAULT_PAGE_SIZE
from pgload.core.exceptions import DataInMemoryError, PgLoadError, UsageError
from pgload.core.exit_codes import ReturnCode
from pgload.core.logging import trace
from pgload.core.materialize import materialize_batch
from pgload.core.pager import CursorPager
from pgload.core.schema import schema_macros
from pgload.core.session import OpenQuery, Session

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pgload.core.host import Host

# command -> (min args, max args, usage)
_COMMANDS: dict[str, tuple[int, int, str]] = {
    "connect": (1, 2, 'connect CONNINFO ["debug"]'),
    "disconnect": (0, 1, 'disconnect ["debug"]'),
    "prepare": (1, 2, 'prepare SQLQUERY ["debug"]'),
    "populate_next": (0, 1, "populate_next [debug]"),
}


def _is_debug(flag: str) -> bool:
    return flag[:5].lower() == "debug"


class Bridge:
    """Streams one query at a time from PostgreSQL into a host workspace."""

    def __init__(
        self,
        host: Host,
        session: Session | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.host = host
        self.session = session if session is not None else Session()
        self.pager = CursorPager(self.session, page_size=page_size)

    def connect(self, conninfo: str, debug: bool = False) -> None:
        self.session.debug = debug
        self.session.connect(conninfo)

    def disconnect(self, debug: bool = False) -> None:
        self.session.debug = debug
        self.session.disconnect()

    def _publish(self, name: str, value: str) -> None:
        trace(structlog.get_logger(), self.session.debug, "publish", name=name, value=value)
        self.host.publish(name, value)

    def prepare(self, query: str, debug: bool = False) -> None:
        """Open query and publish the metadata the host needs to allocate storage."""
        log = structlog.get_logger()
        self.session.debug = debug
        self.session.check_connection()
        if self.host.observation_count() != 0:
            raise DataInMemoryError("no; data in memory would be lost")
        if isinstance(self.session.phase, OpenQuery):
            log.warning("discarding the previous query before preparing a new one")
            self.session.cleanup()

        with self.session.guard():
            state = self.pager.open_query(query)
            self._publish("_obs", str(state.known))
            for name, value in schema_macros(state.descriptors).items():
                self._publish(name, value)

    def populate_next(self, debug: bool = False) -> bool:
        """Materialize the buffered page and fetch the next one.

        Returns True if more rows are buffered for another call, False once
        the query is finished.
        """
        log = structlog.get_logger()
        self.session.debug = debug
        self.session.check_connection()

        with self.session.guard():
            state = self.session.require_open_query()
            if state.exhausted or not state.batch:
                return False
            try:
                rows = materialize_batch(
                    state.batch, state.descriptors, self.host, state.loaded
                )
            except Exception:
                log.error("*error* cleaning up")
                raise
            state.loaded += rows
            more = self.pager.fetch_next()
            self._publish("_obs", str(state.known))

        trace(log, debug, "more data" if more else "no more data")
        return more

    def call(self, argv: Sequence[str]) -> ReturnCode:
        """Dispatch one host invocation: argv[0] is the command name.

        Errors are logged and mapped to their return code; anything unexpected
        maps to DB_ERROR. Nothing is raised.
        """
        log = structlog.get_logger()
        try:
            return self._dispatch(argv)
        except PgLoadError as e:
            log.error(e.message)
            return ReturnCode(e.return_code)
        except Exception as e:
            log.exception("unexpected error", error=str(e))
            return ReturnCode.DB_ERROR

    def _dispatch(self, argv: Sequence[str]) -> ReturnCode:
        if not argv:
            raise UsageError("usage: pg COMMAND [OPTS...]")
        command, args = argv[0], list(argv[1:])
        if command not in _COMMANDS:
            raise UsageError("unrecognised command option")
        min_args, max_args, usage = _COMMANDS[command]
        if not (min_args <= len(args) <= max_args):
            raise UsageError(f"usage: {usage}")
        debug = len(args) > min_args and _is_debug(args[min_args])

        if command == "connect":
            self.connect(args[0], debug)
        elif command == "disconnect":
            self.disconnect(debug)
        elif command == "prepare":
            self.prepare(args[0], debug)
        elif not self.populate_next(debug):
            return ReturnCode.FINISHED
        return ReturnCode.OK


_default_bridge: Bridge | None = None


def default_bridge(host: Host) -> Bridge:
    """The process-wide bridge; its session persists across invocations."""
    global _default_bridge
    if _default_bridge is None:
        _default_bridge = Bridge(host)
    else:
        _default_bridge.host = host
    return _default_bridge


def call(argv: Sequence[str], host: Host) -> ReturnCode:
    """Entry point for a host plugin: run one command on the shared session."""
    return default_bridge(host).call(argv)
