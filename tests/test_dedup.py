"""Tests for BoundaryTracker across consecutive incremental scans."""

from __future__ import annotations

from hbase_service.cells import to_cell_records
from hbase_service.dedup import BoundaryTracker
from hbase_service.scanner import ScanExecutor
from tests.conftest import make_cell


def _scan(store, tracker: BoundaryTracker) -> list[tuple[bytes, list[int]]]:
    out: list[tuple[bytes, list[int]]] = []

    def handle(row_key, cells):
        fresh = tracker.observe(row_key, cells)
        if fresh:
            out.append((bytes(row_key), [c.timestamp for c in fresh]))

    ScanExecutor().scan(store, "t", None, None, tracker.begin_scan(), handle)
    return out


def test_first_scan_delivers_everything(store):
    store.seed("t", b"r1", b"f", b"q", b"a", 10)
    store.seed("t", b"r2", b"f", b"q", b"b", 20)
    tracker = BoundaryTracker()

    assert _scan(store, tracker) == [(b"r1", [10]), (b"r2", [20])]
    assert tracker.next_min_time == 20


def test_boundary_row_suppressed_on_resume(store):
    store.seed("t", b"r1", b"f", b"q", b"a", 10)
    store.seed("t", b"r2", b"f", b"q", b"b", 20)
    tracker = BoundaryTracker()
    _scan(store, tracker)

    assert _scan(store, tracker) == []
    assert tracker.next_min_time == 20


def test_new_cells_at_boundary_timestamp_still_delivered(store):
    store.seed("t", b"r1", b"f", b"q", b"a", 20)
    tracker = BoundaryTracker()
    _scan(store, tracker)

    store.seed("t", b"r2", b"f", b"q", b"b", 20)
    store.seed("t", b"r3", b"f", b"q", b"c", 30)

    assert _scan(store, tracker) == [(b"r2", [20]), (b"r3", [30])]
    assert tracker.next_min_time == 30


def test_boundary_is_frozen_for_the_whole_scan():
    tracker = BoundaryTracker(next_min_time=5)
    assert tracker.begin_scan() == 5

    first = to_cell_records([make_cell(b"r1", b"f", b"q", b"v", 7)])
    again = to_cell_records([make_cell(b"r1", b"f", b"q", b"v", 7)])

    assert tracker.observe(b"r1", first) == first
    # Only cells frozen by begin_scan are suppressed, not ones seen mid-scan.
    assert tracker.observe(b"r1", again) == again


def test_tracker_keeps_copies_not_views():
    tracker = BoundaryTracker()
    tracker.begin_scan()
    row = bytearray(b"r1")
    tracker.observe(memoryview(row), to_cell_records([make_cell(b"r1", b"f", b"q", b"v", 3)]))
    row[:] = b"zz"

    tracker.begin_scan()
    cells = to_cell_records([make_cell(b"r1", b"f", b"q", b"v", 3)])
    assert tracker.observe(b"r1", cells) == []
