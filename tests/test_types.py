"""Tests for request types: ColumnSelector, TimeRange, Mutation."""

from __future__ import annotations

import pytest

from hbase_service.types import MAX_TIMESTAMP, ColumnSelector, Mutation, TimeRange, WriteRequest

# --- ColumnSelector ---


class TestColumnSelector:
    def test_parse_family(self):
        sel = ColumnSelector.parse("cf")
        assert sel == ColumnSelector("cf")
        assert sel.qualifier is None
        assert sel.to_column_key() == b"cf"

    def test_parse_family_and_qualifier(self):
        sel = ColumnSelector.parse("cf:name")
        assert sel == ColumnSelector("cf", "name")
        assert sel.to_column_key() == b"cf:name"

    def test_qualifier_may_contain_colon(self):
        sel = ColumnSelector.parse("cf:a:b")
        assert sel.qualifier == "a:b"

    @pytest.mark.parametrize("text", ["", ":q"])
    def test_empty_family_rejected(self, text):
        with pytest.raises(ValueError, match="family must not be empty"):
            ColumnSelector.parse(text)

    def test_trailing_colon_rejected(self):
        with pytest.raises(ValueError, match="qualifier must not be empty"):
            ColumnSelector.parse("cf:")

    def test_non_ascii_key_is_utf8(self):
        assert ColumnSelector("f", "é").to_column_key() == "f:é".encode("utf-8")


# --- TimeRange ---


class TestTimeRange:
    def test_open_upper_bound(self):
        tr = TimeRange(100)
        assert tr.max_timestamp == MAX_TIMESTAMP
        assert tr.contains(100)
        assert not tr.contains(99)

    def test_upper_bound_exclusive(self):
        tr = TimeRange(0, 10)
        assert tr.contains(9)
        assert not tr.contains(10)

    def test_negative_min_rejected(self):
        with pytest.raises(ValueError, match="min_timestamp"):
            TimeRange(-1)

    def test_inverted_range_rejected(self):
        with pytest.raises(ValueError, match="before min_timestamp"):
            TimeRange(10, 5)

    def test_empty_range_allowed(self):
        tr = TimeRange(5, 5)
        assert not tr.contains(5)


# --- Mutation ---


class TestMutation:
    def test_last_assignment_wins(self):
        m = Mutation(b"r1")
        m.add_column(b"f", b"q", b"a")
        m.add_column(b"f", b"q", b"b")
        assert len(m) == 1
        assert m.column_map() == {b"f:q": b"b"}

    def test_column_map_preserves_order(self):
        m = Mutation(b"r1")
        m.add_column(b"f", b"q2", b"2")
        m.add_column(b"g", b"q1", b"1")
        assert list(m.column_map()) == [b"f:q2", b"g:q1"]

    def test_separate_instances_do_not_share_columns(self):
        a = Mutation(b"a")
        a.add_column(b"f", b"q", b"v")
        assert Mutation(b"b").columns == {}


def test_write_request_is_frozen():
    req = WriteRequest("r", "f", "q", b"v")
    with pytest.raises(AttributeError):
        req.row = "other"  # type: ignore[misc]
