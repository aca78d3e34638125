"""Store client contract the core depends on.

The client service never talks to a wire protocol directly. It is given a
:data:`ConnectionFactory` that turns resolved settings into a
:class:`StoreConnection`; per-call :class:`StoreTable` handles and
:class:`StoreScanner` iterators hang off that connection.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from hbase_service.cells import CellType, NativeCell
from hbase_service.types import ColumnSelector, Mutation, TimeRange


@dataclass(frozen=True)
class ScanSpec:
    """Everything a store needs to open one scanner."""

    time_range: TimeRange
    columns: tuple[ColumnSelector, ...] = ()
    filter_expression: str | None = None


@dataclass(frozen=True, slots=True)
class StoreCell:
    """Concrete :class:`~hbase_service.cells.NativeCell` for adapters that build their own cells."""

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
    value_array: bytes
    value_offset: int
    value_length: int
    type_byte: int = int(CellType.PUT)
    sequence_id: int = 0
    tags_array: bytes = b""
    tags_offset: int = 0
    tags_length: int = 0


# (row key, cells in store order). Cells may be empty.
RawRow = tuple[bytes, Sequence[NativeCell]]


@runtime_checkable
class StoreScanner(Protocol):
    """Lazy row iterator that must be closed to release server-side state."""

    def __iter__(self) -> Iterator[RawRow]: ...

    def close(self) -> None: ...


@runtime_checkable
class StoreTable(Protocol):
    """Per-call table handle."""

    def put_mutations(self, mutations: Sequence[Mutation]) -> None: ...

    def open_scanner(self, spec: ScanSpec) -> StoreScanner: ...

    def close(self) -> None: ...


@runtime_checkable
class StoreConnection(Protocol):
    """A live session; safe for concurrent ``table()`` calls."""

    def list_table_names(self) -> list[str]: ...

    def table(self, name: str) -> StoreTable: ...

    def close(self) -> None: ...


ConnectionFactory = Callable[[Mapping[str, str]], StoreConnection]
