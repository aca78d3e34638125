"""Caller-side suppression of boundary duplicates across incremental scans.

Scans use an inclusive lower time bound, so resuming from the newest
timestamp seen re-delivers every row carrying exactly that timestamp.
:class:`BoundaryTracker` remembers the ``(row, timestamp, sequence_id)``
tuples at the current boundary and reports them as already seen.

Usage::

    tracker = BoundaryTracker()

    def handle(row_key, cells):
        fresh = tracker.observe(row_key, cells)
        if fresh:
            process(row_key, fresh)

    service.scan("events", None, None, tracker.begin_scan(), handle)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from hbase_service.cells import CellRecord

CellKey = tuple[bytes, int, int]


@dataclass
class BoundaryTracker:
    """Tracks the newest timestamp seen and the cells that carry it."""

    next_min_time: int = 0
    _boundary: set[CellKey] = field(default_factory=set, init=False, repr=False)
    _previous_boundary: set[CellKey] = field(default_factory=set, init=False, repr=False)

    def begin_scan(self) -> int:
        """Freeze the current boundary as the set to suppress; return the scan's min time."""
        self._previous_boundary = set(self._boundary)
        return self.next_min_time

    def observe(self, row_key: bytes, cells: Sequence[CellRecord]) -> list[CellRecord]:
        """Return cells not seen at the previous boundary and advance the boundary.

        Keys are copied out of the borrowed views, so the tracker never holds
        store buffers.
        """
        fresh: list[CellRecord] = []
        row = bytes(row_key)
        for cell in cells:
            key = (row, cell.timestamp, cell.sequence_id)
            if key in self._previous_boundary:
                continue
            fresh.append(cell)
            if cell.timestamp > self.next_min_time:
                self.next_min_time = cell.timestamp
                self._boundary = {key}
            elif cell.timestamp == self.next_min_time:
                self._boundary.add(key)
        return fresh
