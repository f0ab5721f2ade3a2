"""Configuration management for pgload.

Settings come from a TOML file, named connection profiles, the libpq
environment variables and the command line.

Precedence order (highest to lowest):
1. CLI flags (--host, --port, --page-size, etc.)
2. --dsn flag (parsed into components)
3. Environment variables (PGHOST, PGPORT, PGDATABASE, PGUSER, PGPASSWORD)
4. Named profile (--profile or PGLOAD_PROFILE env var)
5. Config file defaults
6. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Annotated, Any, Literal
from urllib.parse import parse_qs, quote, urlparse

from pydantic import BaseModel, Field, ValidationError, computed_field, model_validator

from pgload.core.exceptions import ConfigError

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "pgload" / "config.toml"

# Rows per FETCH FORWARD. Throughput over a network is largely insensitive
# to this value; it bounds the memory held by one page.
DEFAULT_PAGE_SIZE = 10000
MAX_PAGE_SIZE = 1_000_000

APPLICATION_NAME = "pgload"

PageSize = Annotated[int, Field(ge=1, le=MAX_PAGE_SIZE)]
SslMode = Literal["disable", "allow", "prefer", "require", "verify-ca", "verify-full"]

# libpq environment variable -> connection field
_PG_ENV_VARS: dict[str, str] = {
    "PGHOST": "host",
    "PGPORT": "port",
    "PGDATABASE": "dbname",
    "PGUSER": "user",
    "PGPASSWORD": "password",  # pragma: allowlist secret
}

# CLI option -> connection or paging field
_CLI_FIELDS: dict[str, str] = {
    "host": "host",
    "port": "port",
    "database": "dbname",
    "user": "user",
    "password": "password",  # pragma: allowlist secret
    "sslmode": "sslmode",
    "page_size": "page_size",
}

_DSN_INT_PARAMS = ("connect_timeout",)
_DSN_STR_PARAMS = ("sslmode",)


def parse_dsn(dsn: str) -> dict[str, Any]:
    """Split a postgresql:// (or postgres://) URL into connection fields.

    Only the parts present in the URL are returned.
    """
    url = urlparse(dsn)
    if url.scheme not in ("postgresql", "postgres"):
        msg = f"Invalid DSN scheme: '{url.scheme}'. Expected 'postgresql' or 'postgres'"
        raise ConfigError(msg)

    parts = {
        "host": url.hostname,
        "port": url.port,
        "dbname": url.path.strip("/") or None,
        "user": url.username,
        "password": url.password,
    }
    fields = {k: v for k, v in parts.items() if v}

    params = parse_qs(url.query)
    for name in _DSN_STR_PARAMS:
        if name in params:
            fields[name] = params[name][0]
    for name in _DSN_INT_PARAMS:
        if name in params:
            try:
                fields[name] = int(params[name][0])
            except ValueError:
                raise ConfigError(f"Invalid {name} in DSN: '{params[name][0]}'") from None
    return fields


class ConnectionSettings(BaseModel):
    """libpq connection parameters shared by profiles and the resolved config."""

    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    dbname: str = "postgres"
    user: str | None = None
    password: str | None = None
    sslmode: SslMode = "prefer"
    connect_timeout: int = Field(default=10, ge=0)


class PgProfile(ConnectionSettings):
    """A named profile; `dsn` fills any field not given explicitly."""

    dsn: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _expand_dsn(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("dsn"):
            return {**parse_dsn(data["dsn"]), **data}
        return data


class AppConfig(BaseModel):
    page_size: PageSize = DEFAULT_PAGE_SIZE
    default_format: str = "csv"
    default_profile: str | None = None
    sentry_dsn: str | None = None
    profiles: dict[str, PgProfile] = {}


class ResolvedConfig(ConnectionSettings):
    page_size: PageSize = DEFAULT_PAGE_SIZE
    default_format: str = "csv"
    active_profile: str | None = None
    sources: dict[str, str] = {}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def conninfo(self) -> str:
        """Connection URL handed to the driver."""
        userinfo = ""
        if self.user:
            userinfo = quote(self.user, safe="")
            if self.password:
                userinfo += ":" + quote(self.password, safe="")
            userinfo += "@"
        return (
            f"postgresql://{userinfo}{self.host}:{self.port}/{self.dbname}"
            f"?sslmode={self.sslmode}&connect_timeout={self.connect_timeout}"
            f"&application_name={APPLICATION_NAME}"
        )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Read the TOML config file; a missing file gives the defaults.

    Raises ConfigError on malformed TOML or invalid settings.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return AppConfig()

    try:
        data = tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML in {path}: {e}") from e

    try:
        return AppConfig.model_validate(data)
    except (ValidationError, ConfigError) as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def _select_profile(config: AppConfig, profile_name: str | None) -> str | None:
    name = profile_name or os.environ.get("PGLOAD_PROFILE") or config.default_profile
    if name and name not in config.profiles:
        available = ", ".join(sorted(config.profiles)) or "none"
        raise ConfigError(f"Unknown profile: '{name}'. Available profiles: {available}")
    return name


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    dsn: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Merge every settings layer; `sources` records where each value came from."""
    values: dict[str, Any] = {}
    sources: dict[str, str] = {}

    def apply(layer: dict[str, Any], source: str) -> None:
        for key, value in layer.items():
            values[key] = value
            sources[key] = source

    apply(ConnectionSettings().model_dump(), "default")
    apply({"page_size": DEFAULT_PAGE_SIZE, "default_format": "csv"}, "default")

    file_defaults = config.model_dump(include={"page_size", "default_format"})
    apply(
        {k: v for k, v in file_defaults.items() if v != values[k]},
        "config",
    )

    active = _select_profile(config, profile_name)
    if active:
        profile = config.profiles[active]
        explicit = profile.model_fields_set - {"dsn"}
        apply(profile.model_dump(include=explicit), f"profile: {active}")

    for env_var, field_name in _PG_ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        if field_name == "port" and not value.isdigit():
            raise ConfigError(f"Invalid {env_var} value: '{value}'. Must be an integer")
        apply({field_name: value}, f"env: {env_var}")

    if dsn:
        apply(parse_dsn(dsn), "dsn")

    for cli_name, field_name in _CLI_FIELDS.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            apply({field_name: value}, f"cli: --{cli_name.replace('_', '-')}")

    try:
        return ResolvedConfig(**values, active_profile=active, sources=sources)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
