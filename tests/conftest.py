"""Shared test fixtures: an in-memory fake of the store client contract."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import pytest

from hbase_service import ClientServiceConfig, HBaseClientService
from hbase_service.store import RawRow, ScanSpec, StoreCell
from hbase_service.types import Mutation


def make_cell(row: bytes, family: bytes, qualifier: bytes, value: bytes, ts: int) -> StoreCell:
    """Cell whose views sit at non-zero offsets inside one shared buffer, like HBase KeyValues."""
    buf = b"\x00" + row + family + qualifier + value + b"\xff"
    row_off = 1
    fam_off = row_off + len(row)
    qual_off = fam_off + len(family)
    val_off = qual_off + len(qualifier)
    return StoreCell(
        row_array=buf,
        row_offset=row_off,
        row_length=len(row),
        family_array=buf,
        family_offset=fam_off,
        family_length=len(family),
        qualifier_array=buf,
        qualifier_offset=qual_off,
        qualifier_length=len(qualifier),
        timestamp=ts,
        value_array=buf,
        value_offset=val_off,
        value_length=len(value),
        sequence_id=ts * 10,
    )


class FakeScanner:
    def __init__(self, rows: list[RawRow], fail_after: int | None = None) -> None:
        self._rows = rows
        self._fail_after = fail_after
        self.fetched = 0
        self.closed = False

    def __iter__(self) -> Iterator[RawRow]:
        for i, row in enumerate(self._rows):
            if self._fail_after is not None and i >= self._fail_after:
                raise OSError("region server went away")
            self.fetched += 1
            yield row

    def close(self) -> None:
        self.closed = True


class FakeTable:
    def __init__(self, store: FakeStore, name: str) -> None:
        self.store = store
        self.name = name
        self.closed = False

    def put_mutations(self, mutations: Sequence[Mutation]) -> None:
        if self.store.fail_put:
            raise OSError("batch rejected")
        self.store.batches.append((self.name, list(mutations)))
        table = self.store.tables.setdefault(self.name, {})
        for mutation in mutations:
            for (family, qualifier), value in mutation.columns.items():
                table.setdefault(mutation.row, []).append(
                    (family, qualifier, value, self.store.next_timestamp)
                )
        self.store.next_timestamp += 1

    def open_scanner(self, spec: ScanSpec) -> FakeScanner:
        self.store.scan_specs.append(spec)
        if self.store.fail_open_scanner:
            raise OSError("scanner lease refused")
        rows: list[RawRow] = []
        for row_key in sorted(self.store.tables.get(self.name, {})):
            cells = []
            for family, qualifier, value, ts in self.store.tables[self.name][row_key]:
                if not spec.time_range.contains(ts):
                    continue
                if spec.columns and not any(
                    c.family.encode() == family
                    and (c.qualifier is None or c.qualifier.encode() == qualifier)
                    for c in spec.columns
                ):
                    continue
                cells.append(make_cell(row_key, family, qualifier, value, ts))
            rows.append((row_key, cells))
        scanner = FakeScanner(rows, self.store.fail_scan_after)
        self.store.scanners.append(scanner)
        return scanner

    def close(self) -> None:
        self.closed = True


class FakeStore:
    """Connection double recording every table handle, batch and scan."""

    def __init__(self, settings: Mapping[str, str] | None = None) -> None:
        self.settings = dict(settings or {})
        self.tables: dict[str, dict[bytes, list[tuple[bytes, bytes, bytes, int]]]] = {}
        self.handles: list[FakeTable] = []
        self.batches: list[tuple[str, list[Mutation]]] = []
        self.scan_specs: list[ScanSpec] = []
        self.scanners: list[FakeScanner] = []
        self.next_timestamp = 1
        self.fail_put = False
        self.fail_open_scanner = False
        self.fail_scan_after: int | None = None
        self.fail_list = False
        self.fail_close = False
        self.closed = False

    def seed(self, table: str, row: bytes, family: bytes, qualifier: bytes, value: bytes, ts: int):
        self.tables.setdefault(table, {}).setdefault(row, []).append((family, qualifier, value, ts))

    def list_table_names(self) -> list[str]:
        if self.fail_list:
            raise OSError("master unreachable")
        return sorted(self.tables)

    def table(self, name: str) -> FakeTable:
        handle = FakeTable(self, name)
        self.handles.append(handle)
        return handle

    def close(self) -> None:
        if self.fail_close:
            raise OSError("close timed out")
        self.closed = True


class FakeFactory:
    """Connection factory double; remembers the settings it was called with."""

    def __init__(self, store: FakeStore | None = None, error: Exception | None = None) -> None:
        self.store = store or FakeStore()
        self.error = error
        self.calls: list[dict[str, str]] = []

    def __call__(self, settings: Mapping[str, str]) -> FakeStore:
        self.calls.append(dict(settings))
        if self.error is not None:
            raise self.error
        self.store.settings = dict(settings)
        return self.store


class RecordingHandler:
    """Result handler that copies rows out of the borrowed views."""

    def __init__(self) -> None:
        self.rows: list[tuple[bytes, list[tuple[bytes, int, bytes]]]] = []

    def __call__(self, row_key: bytes, cells: Sequence[Any]) -> None:
        self.rows.append(
            (bytes(row_key), [(c.column_key(), c.timestamp, c.value.tobytes()) for c in cells])
        )


@pytest.fixture
def explicit_config() -> ClientServiceConfig:
    return ClientServiceConfig(
        zookeeper_quorum="zk1.example.com,zk2.example.com",
        zookeeper_client_port=2181,
        zookeeper_znode_parent="/hbase",
        client_retries=3,
    )


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def factory(store: FakeStore) -> FakeFactory:
    return FakeFactory(store)


@pytest.fixture
def service(factory: FakeFactory, explicit_config: ClientServiceConfig):
    svc = HBaseClientService(factory)
    svc.enable(explicit_config)
    yield svc
    svc.disable()


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()
