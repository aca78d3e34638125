"""Request and mutation types shared by the put and scan paths."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from hbase_service.cells import CellRecord

# Largest timestamp HBase accepts; upper bound of an open time range.
MAX_TIMESTAMP = 2**63 - 1


@dataclass(frozen=True)
class WriteRequest:
    """A single cell write: value for (row, family, qualifier)."""

    row: str
    family: str
    qualifier: str
    value: bytes


@dataclass(frozen=True)
class ColumnSelector:
    """Restricts a scan to a whole family, or to one family:qualifier column."""

    family: str
    qualifier: str | None = None

    @classmethod
    def parse(cls, text: str) -> ColumnSelector:
        """Parse ``family`` or ``family:qualifier``."""
        family, sep, qualifier = text.partition(":")
        if not family:
            raise ValueError(f"Invalid column '{text}': family must not be empty")
        if sep and not qualifier:
            raise ValueError(f"Invalid column '{text}': qualifier must not be empty after ':'")
        return cls(family=family, qualifier=qualifier if sep else None)

    def to_column_key(self) -> bytes:
        """Render as the ``family`` / ``family:qualifier`` byte key used by the store."""
        if self.qualifier is None:
            return self.family.encode("utf-8")
        return f"{self.family}:{self.qualifier}".encode("utf-8")


@dataclass(frozen=True)
class TimeRange:
    """Interval [min_timestamp, max_timestamp). The lower bound is inclusive."""

    min_timestamp: int
    max_timestamp: int = MAX_TIMESTAMP

    def __post_init__(self) -> None:
        if self.min_timestamp < 0:
            raise ValueError(f"min_timestamp must be >= 0, got {self.min_timestamp}")
        if self.max_timestamp < self.min_timestamp:
            raise ValueError(
                f"max_timestamp {self.max_timestamp} is before min_timestamp {self.min_timestamp}"
            )

    def contains(self, timestamp: int) -> bool:
        return self.min_timestamp <= timestamp < self.max_timestamp


@dataclass
class Mutation:
    """All column writes for one row within one batch.

    Columns are keyed by (family, qualifier); assigning the same pair twice
    keeps the later value.
    """

    row: bytes
    columns: dict[tuple[bytes, bytes], bytes] = field(default_factory=dict)

    def add_column(self, family: bytes, qualifier: bytes, value: bytes) -> None:
        self.columns[(family, qualifier)] = value

    def column_map(self) -> dict[bytes, bytes]:
        """Columns keyed ``b"family:qualifier"``."""
        return {family + b":" + qualifier: value for (family, qualifier), value in self.columns.items()}

    def __len__(self) -> int:
        return len(self.columns)


class ResultHandler(Protocol):
    """Caller callback invoked once per scanned row, before the scan advances."""

    def __call__(self, row_key: bytes, cells: Sequence[CellRecord]) -> None: ...
