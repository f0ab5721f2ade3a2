"""Shared CLI plumbing for command modules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pgload.core.config import load_config, resolve_config

if TYPE_CHECKING:
    import typer

    from pgload.core.config import ResolvedConfig


def get_config(ctx: typer.Context, page_size: int | None = None) -> ResolvedConfig:
    """Resolve connection and paging settings from the global options."""
    obj = ctx.ensure_object(dict)
    config = load_config(obj.get("config_file"))

    cli_overrides: dict[str, Any] = {}
    for key in ("host", "port", "database", "user", "password"):
        val = obj.get(key)
        if val is not None:
            cli_overrides[key] = val
    if page_size is not None:
        cli_overrides["page_size"] = page_size

    return resolve_config(
        config,
        profile_name=obj.get("profile"),
        dsn=obj.get("dsn"),
        **cli_overrides,
    )
