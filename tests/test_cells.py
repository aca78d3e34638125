"""Tests for borrowed cell views."""

from __future__ import annotations

from hbase_service.cells import EMPTY_VIEW, BorrowedBytes, CellType, to_cell_record, to_cell_records
from tests.conftest import make_cell


def test_borrowed_bytes_views_into_backing_array() -> None:
    buf = bytearray(b"xxrow1yy")
    view = BorrowedBytes(buf, 2, 4)

    assert view.tobytes() == b"row1"
    assert len(view) == 4
    assert view == b"row1"

    # A view is not a copy: it reflects the backing buffer.
    buf[2:6] = b"ROW2"
    assert view == b"ROW2"


def test_borrowed_bytes_tobytes_is_a_copy() -> None:
    buf = bytearray(b"abc")
    copied = BorrowedBytes(buf, 0, 3).tobytes()
    buf[0:3] = b"xyz"
    assert copied == b"abc"


def test_borrowed_bytes_equality_and_hash() -> None:
    a = BorrowedBytes(b"__key__", 2, 3)
    b = BorrowedBytes(b"key", 0, 3)
    assert a == b
    assert hash(a) == hash(b)
    assert a.decode() == "key"


def test_to_cell_record_keeps_offsets() -> None:
    cell = make_cell(b"row1", b"f", b"q1", b"value", 150)

    record = to_cell_record(cell)

    assert record.row.array is cell.row_array
    assert record.row.offset == 1
    assert record.row == b"row1"
    assert record.family == b"f"
    assert record.qualifier == b"q1"
    assert record.value == b"value"
    assert record.value.array is cell.value_array
    assert record.timestamp == 150
    assert record.sequence_id == 1500
    assert record.cell_type is CellType.PUT
    assert record.tags is EMPTY_VIEW
    assert record.column_key() == b"f:q1"


def test_to_cell_records_preserves_order() -> None:
    cells = [make_cell(b"r", b"f", q, b"v", 1) for q in (b"a", b"b", b"c")]
    assert [r.qualifier.tobytes() for r in to_cell_records(cells)] == [b"a", b"b", b"c"]


def test_unknown_type_marker_has_no_cell_type() -> None:
    from dataclasses import replace

    record = to_cell_record(replace(make_cell(b"r", b"f", b"q", b"v", 1), type_byte=99))
    assert record.type_marker == 99
    assert record.cell_type is None
