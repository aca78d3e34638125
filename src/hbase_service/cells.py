"""Zero-copy cell records handed to scan result handlers.

A :class:`CellRecord` never owns its bytes. Each byte field is a
:class:`BorrowedBytes` view ``(array, offset, length)`` into buffers that
belong to the store client. Those buffers are only guaranteed valid and
unmodified while the scan call that produced them is running, so handlers
that keep data past their own invocation must call :meth:`BorrowedBytes.tobytes`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

_EMPTY = b""


class CellType(IntEnum):
    """Type marker byte carried by every HBase cell."""

    MINIMUM = 0
    PUT = 4
    DELETE = 8
    DELETE_FAMILY_VERSION = 10
    DELETE_COLUMN = 12
    DELETE_FAMILY = 14
    MAXIMUM = 255


@dataclass(frozen=True, slots=True)
class BorrowedBytes:
    """A view of ``length`` bytes starting at ``offset`` in ``array``."""

    array: bytes | bytearray | memoryview
    offset: int
    length: int

    def view(self) -> memoryview:
        """Zero-copy slice. Same lifetime as the backing array."""
        return memoryview(self.array)[self.offset : self.offset + self.length]

    def tobytes(self) -> bytes:
        """Copy the viewed bytes out of the backing array."""
        return bytes(self.view())

    def decode(self, encoding: str = "utf-8") -> str:
        return str(self.view(), encoding)

    def __len__(self) -> int:
        return self.length

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BorrowedBytes):
            return self.view() == other.view()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.view() == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.tobytes())

    def __repr__(self) -> str:
        return f"BorrowedBytes({self.tobytes()!r})"


EMPTY_VIEW = BorrowedBytes(_EMPTY, 0, 0)


class NativeCell(Protocol):
    """Accessor surface of a store-native cell (mirrors HBase's ``Cell``)."""

    row_array: bytes
    row_offset: int
    row_length: int
    family_array: bytes
    family_offset: int
    family_length: int
    qualifier_array: bytes
    qualifier_offset: int
    qualifier_length: int
    timestamp: int
    type_byte: int
    sequence_id: int
    value_array: bytes
    value_offset: int
    value_length: int
    tags_array: bytes
    tags_offset: int
    tags_length: int


@dataclass(frozen=True, slots=True)
class CellRecord:
    """One scanned cell. Byte fields are borrowed; numeric fields are copies."""

    row: BorrowedBytes
    family: BorrowedBytes
    qualifier: BorrowedBytes
    timestamp: int
    type_marker: int
    sequence_id: int
    value: BorrowedBytes
    tags: BorrowedBytes

    @property
    def cell_type(self) -> CellType | None:
        try:
            return CellType(self.type_marker)
        except ValueError:
            return None

    def column_key(self) -> bytes:
        """Copy out ``b"family:qualifier"``."""
        return self.family.tobytes() + b":" + self.qualifier.tobytes()


def to_cell_record(cell: NativeCell) -> CellRecord:
    """Wrap a native cell without copying any of its byte fields."""
    return CellRecord(
        row=BorrowedBytes(cell.row_array, cell.row_offset, cell.row_length),
        family=BorrowedBytes(cell.family_array, cell.family_offset, cell.family_length),
        qualifier=BorrowedBytes(
            cell.qualifier_array, cell.qualifier_offset, cell.qualifier_length
        ),
        timestamp=int(cell.timestamp),
        type_marker=int(cell.type_byte),
        sequence_id=int(cell.sequence_id),
        value=BorrowedBytes(cell.value_array, cell.value_offset, cell.value_length),
        tags=(
            BorrowedBytes(cell.tags_array, cell.tags_offset, cell.tags_length)
            if cell.tags_length
            else EMPTY_VIEW
        ),
    )


def to_cell_records(cells: Iterable[NativeCell]) -> list[CellRecord]:
    """Convert one row's native cells, preserving their order."""
    return [to_cell_record(cell) for cell in cells]
