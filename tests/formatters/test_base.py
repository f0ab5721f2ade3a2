"""Tests for Formatter protocol and registry."""

import pytest

from pgload.core.models import ExportColumn, ExportResult
from pgload.formatters.base import Formatter, FormatterRegistry, registry


def _make_result(rows=None):
    if rows is None:
        rows = [(1.0,)]
    return ExportResult(
        columns=[ExportColumn(name="id", storage="double", display_format="default")],
        rows=rows,
        row_count=len(rows),
    )


class _StubFormatter:
    def format(self, result):
        for row in result.rows:
            yield str(row)


class _BadFormatter:
    """Missing format method."""


@pytest.mark.unit
def test_stub_formatter_implements_protocol():
    assert isinstance(_StubFormatter(), Formatter)


@pytest.mark.unit
def test_bad_formatter_does_not_implement_protocol():
    assert not isinstance(_BadFormatter(), Formatter)


@pytest.mark.unit
def test_registry_register_and_get():
    reg = FormatterRegistry()
    reg.register("stub", _StubFormatter)
    assert isinstance(reg.get("stub"), _StubFormatter)
    assert list(reg.get("stub").format(_make_result([(1.0,), (2.0,)]))) == ["(1.0,)", "(2.0,)"]


@pytest.mark.unit
def test_registry_get_unknown_lists_available():
    reg = FormatterRegistry()
    reg.register("csv", _StubFormatter)
    reg.register("json", _StubFormatter)
    with pytest.raises(KeyError, match="Unknown format 'nope'. Available: csv, json"):
        reg.get("nope")


@pytest.mark.unit
def test_registry_passes_kwargs_to_constructor():
    class _WidthFormatter:
        def __init__(self, width=40):
            self.width = width

        def format(self, result):
            yield f"width={self.width}"

    reg = FormatterRegistry()
    reg.register("width", _WidthFormatter)
    assert list(reg.get("width", width=80).format(_make_result())) == ["width=80"]


@pytest.mark.unit
def test_builtin_formats_registered():
    import pgload.formatters  # noqa: F401

    assert registry.available == ["csv", "json"]
