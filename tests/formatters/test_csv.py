"""Tests for CSVFormatter."""

import csv
from io import StringIO

import pytest

from pgload.core.models import ExportColumn, ExportResult
from pgload.formatters.base import Formatter
from pgload.formatters.csv import CSVFormatter


def _make_result(rows=None):
    columns = [
        ExportColumn(name="id", storage="double", display_format="default"),
        ExportColumn(name="name", storage="str244", display_format="default"),
    ]
    if rows is None:
        rows = [(1.0, "alice"), (2.0, "bob")]
    return ExportResult(columns=columns, rows=rows, row_count=len(rows))


@pytest.mark.unit
def test_csv_formatter_implements_protocol():
    assert isinstance(CSVFormatter(), Formatter)


@pytest.mark.unit
def test_header_and_integral_doubles():
    lines = list(CSVFormatter().format(_make_result()))
    assert lines == ["id,name", "1,alice", "2,bob"]


@pytest.mark.unit
def test_fractional_doubles_kept():
    lines = list(CSVFormatter().format(_make_result(rows=[(2.5, "x")])))
    assert lines[1] == "2.5,x"


@pytest.mark.unit
def test_no_header():
    lines = list(CSVFormatter(no_header=True).format(_make_result()))
    assert lines == ["1,alice", "2,bob"]


@pytest.mark.unit
def test_missing_values_are_empty():
    lines = list(CSVFormatter().format(_make_result(rows=[(None, "")])))
    assert lines[1] == ","


@pytest.mark.unit
def test_empty_result_header_only():
    assert list(CSVFormatter().format(_make_result(rows=[]))) == ["id,name"]


@pytest.mark.unit
def test_rfc4180_valid():
    result = _make_result(rows=[(1.0, "bob, jr"), (2.0, 'say "hi"')])
    output = "\n".join(CSVFormatter().format(result))
    rows = list(csv.reader(StringIO(output)))
    assert rows == [["id", "name"], ["1", "bob, jr"], ["2", 'say "hi"']]
