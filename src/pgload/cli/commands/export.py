"""The export command: run a query through the bridge into memory, then print it."""

from __future__ import annotations

import math
from typing import Annotated

import structlog
import typer

from pgload.cli.commands._shared import get_config
from pgload.cli.output import get_formatter, write_output
from pgload.core.bridge import Bridge
from pgload.core.host import MemoryHost
from pgload.core.models import ExportResult
from pgload.core.query_source import resolve_query_source


def run_export(bridge: Bridge, host: MemoryHost, conninfo: str, sql: str, debug: bool) -> None:
    """Drive connect/prepare/populate_next to completion, then disconnect."""
    bridge.connect(conninfo, debug)
    try:
        bridge.prepare(sql, debug)
        host.apply_metadata()
        more = True
        while more:
            more = bridge.populate_next(debug)
            host.apply_metadata()
    finally:
        bridge.disconnect(debug)


def export_command(
    ctx: typer.Context,
    file: Annotated[
        str | None,
        typer.Argument(help="SQL file to run"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Run inline SQL query"),
    ] = None,
    page_size: Annotated[
        int | None,
        typer.Option("--page-size", help="Rows fetched from the cursor per page"),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Trace every statement issued"),
    ] = False,
) -> None:
    """Stream a query's result set page by page and write it to stdout."""
    log = structlog.get_logger()
    sql = resolve_query_source(inline=execute, file_path=file)
    config = get_config(ctx, page_size=page_size)

    host = MemoryHost()
    bridge = Bridge(host, page_size=config.page_size)
    run_export(bridge, host, config.conninfo, sql, debug)

    result = ExportResult.from_host(host)
    log.info(
        "export complete",
        rows=result.row_count,
        pages=math.ceil(result.row_count / config.page_size),
    )

    obj = ctx.ensure_object(dict)
    formatter = get_formatter(
        obj.get("format") or config.default_format,
        compact=obj.get("compact", False),
        no_header=obj.get("no_header", False),
    )
    write_output(formatter, result)
