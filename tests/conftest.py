"""Shared test fixtures for pgload."""

import os
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest
import structlog
from typer.testing import CliRunner

from pgload.core.bridge import Bridge
from pgload.core.host import MemoryHost
from pgload.core.session import Session
from pgload.core.types import BOOLOID, INT4OID, TEXTOID
from tests.fakes import FakeConnect, FakeConnection

TEST_DSN = os.environ.get("PGLOAD_TEST_DSN")


def pytest_collection_modifyitems(config, items):
    if TEST_DSN:
        return
    skip = pytest.mark.skip(reason="set PGLOAD_TEST_DSN to run integration tests")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Keep setup_logging()'s global structlog config from leaking between tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_conn():
    """Three-column result (int4, text, bool) in two pages."""
    return FakeConnection(
        fields=[("id", INT4OID, 4, -1), ("name", TEXTOID, -1, -1), ("ok", BOOLOID, 1, -1)],
        pages=[
            [("1", "alice", "t"), ("2", "bob", "f")],
            [("3", None, None)],
        ],
    )


@pytest.fixture
def host():
    return MemoryHost()


@pytest.fixture
def bridge(fake_conn, host):
    """A bridge whose session connects to fake_conn."""
    return Bridge(host, session=Session(connect=FakeConnect(fake_conn)), page_size=2)
