"""Tests for storage kinds and their converters."""

import pytest

from pgload.core.types import (
    TEXTOID,
    VARCHAROID,
    Batch,
    ColumnDescriptor,
    StorageKind,
    WireField,
)


def _desc(kind, **kw):
    base = {"name": "c", "type_oid": TEXTOID, "size": -1, "modifier": -1}
    base.update(kw)
    return ColumnDescriptor(**base, kind=kind)


@pytest.mark.unit
class TestKeywords:
    def test_host_keywords(self):
        assert StorageKind.SMALL_INT.keyword == "byte"
        assert StorageKind.WIDE_INT.keyword == "long"
        assert StorageKind.DOUBLE.keyword == "double"
        assert StorageKind.BOUNDED_TEXT.keyword == "str244"
        assert StorageKind.DAY_COUNT.keyword == "long"

    def test_day_count_and_wide_int_are_distinct(self):
        assert StorageKind.DAY_COUNT is not StorageKind.WIDE_INT

    def test_fixed_string_keyword_carries_width(self):
        desc = _desc(StorageKind.FIXED_STRING, type_oid=VARCHAROID, modifier=14, width=10)
        assert desc.keyword == "str10"

    def test_is_string(self):
        assert StorageKind.FIXED_STRING.is_string
        assert StorageKind.BOUNDED_TEXT.is_string
        assert not StorageKind.DOUBLE.is_string
        assert not StorageKind.DAY_COUNT.is_string


@pytest.mark.unit
class TestConverters:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("t", 1), ("true", 1), ("T", 1), ("f", 0), ("false", 0), ("yes", 0)],
    )
    def test_flag(self, text, expected):
        assert _desc(StorageKind.SMALL_INT).convert(text) == expected

    def test_wide_int(self):
        assert _desc(StorageKind.WIDE_INT).convert("-32768") == -32768

    def test_double(self):
        value = _desc(StorageKind.DOUBLE).convert("12345.678")
        assert isinstance(value, float)
        assert value == 12345.678

    def test_double_parses_integer_text(self):
        assert _desc(StorageKind.DOUBLE).convert("9007199254740993") == 9007199254740992.0

    def test_double_rejects_garbage(self):
        with pytest.raises(ValueError):
            _desc(StorageKind.DOUBLE).convert("$1.00")

    def test_bounded_text_truncates_to_244(self):
        value = _desc(StorageKind.BOUNDED_TEXT).convert("x" * 300)
        assert value == "x" * 244

    def test_fixed_string_copies(self):
        desc = _desc(StorageKind.FIXED_STRING, width=5)
        assert desc.convert("abc  ") == "abc  "

    def test_day_count_from_date(self):
        assert _desc(StorageKind.DAY_COUNT).convert("1960-01-02") == 1

    def test_day_count_ignores_time_of_day(self):
        assert _desc(StorageKind.DAY_COUNT).convert("2000-01-01 23:59:59") == 14610

    def test_day_count_ignores_zone(self):
        assert _desc(StorageKind.DAY_COUNT).convert("2000-01-01 00:00:00+05:30") == 14610

    @pytest.mark.parametrize("text", ["infinity", "01/02/2000", "2000-13-01", "0044-03-15 BC"])
    def test_day_count_rejects(self, text):
        with pytest.raises(ValueError):
            _desc(StorageKind.DAY_COUNT).convert(text)


@pytest.mark.unit
class TestModels:
    def test_descriptor_is_frozen(self):
        desc = _desc(StorageKind.DOUBLE)
        with pytest.raises(ValueError):
            desc.name = "other"

    def test_batch_len(self):
        field = WireField(name="a", type_oid=TEXTOID, size=-1, modifier=-1)
        assert len(Batch(fields=(field,))) == 0
        assert len(Batch(fields=(field,), rows=[("x",), (None,)])) == 2
