"""Sentry integration for error tracking and performance monitoring.

Sentry is only initialized when a DSN is configured, either in the config
file (sentry_dsn) or through PGLOAD_SENTRY_DSN.
"""

from __future__ import annotations

import os

import sentry_sdk

from pgload.__about__ import __version__


def setup_sentry(dsn: str | None = None, environment: str = "local") -> bool:
    """Initialize Sentry. Returns False when no DSN is configured."""
    dsn = dsn or os.environ.get("PGLOAD_SENTRY_DSN")
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=0.03,
        environment=environment,
        release=__version__,
        attach_stacktrace=True,
        send_default_pii=False,
    )
    return True
