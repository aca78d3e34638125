"""HBase Thrift store backend built on happybase.

happybase connections are not thread-safe, so :class:`HappyBaseConnection`
keeps a small lease pool: every table handle borrows its own
``happybase.Connection`` for the duration of one put or scan call and hands
it back on ``close()``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Any

import happybase

from hbase_service.config import HBASE_CONF_CLIENT_RETRIES, HBASE_CONF_ZK_QUORUM
from hbase_service.store import RawRow, ScanSpec, StoreCell
from hbase_service.types import MAX_TIMESTAMP, Mutation

logger = logging.getLogger(__name__)

THRIFT_HOST = "hbase.thrift.host"
THRIFT_PORT = "hbase.thrift.port"
THRIFT_POOL_SIZE = "hbase.thrift.pool.size"
THRIFT_TABLE_PREFIX = "hbase.thrift.table.prefix"
THRIFT_FRAMED = "hbase.regionserver.thrift.framed"
THRIFT_COMPACT = "hbase.regionserver.thrift.compact"
CLIENT_OPERATION_TIMEOUT = "hbase.client.operation.timeout"
CLIENT_PAUSE = "hbase.client.pause"

DEFAULT_THRIFT_PORT = 9090
DEFAULT_POOL_SIZE = 10
DEFAULT_CLIENT_PAUSE_MS = 100

ConnectFn = Callable[..., Any]


def _as_bool(value: str | None) -> bool:
    return value is not None and value.strip().lower() == "true"


def _as_int(settings: Mapping[str, str], key: str, default: int) -> int:
    raw = settings.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError as e:
        raise ValueError(f"Setting '{key}' must be an integer, got {raw!r}") from e


def thrift_host(settings: Mapping[str, str]) -> str:
    """Thrift gateway host: explicit setting, else the first quorum member."""
    explicit = settings.get(THRIFT_HOST, "").strip()
    if explicit:
        return explicit
    quorum = settings.get(HBASE_CONF_ZK_QUORUM, "")
    for member in quorum.split(","):
        member = member.strip()
        if member:
            return member.split(":", 1)[0]
    return "localhost"


def connection_kwargs(settings: Mapping[str, str]) -> dict[str, Any]:
    """Translate HBase settings into ``happybase.Connection`` keyword arguments."""
    kwargs: dict[str, Any] = {
        "host": thrift_host(settings),
        "port": _as_int(settings, THRIFT_PORT, DEFAULT_THRIFT_PORT),
        "transport": "framed" if _as_bool(settings.get(THRIFT_FRAMED)) else "buffered",
        "protocol": "compact" if _as_bool(settings.get(THRIFT_COMPACT)) else "binary",
    }
    timeout = _as_int(settings, CLIENT_OPERATION_TIMEOUT, 0)
    if timeout > 0:
        kwargs["timeout"] = timeout
    prefix = settings.get(THRIFT_TABLE_PREFIX, "").strip()
    if prefix:
        kwargs["table_prefix"] = prefix
    return kwargs


def _cells_from_happybase(
    row_key: bytes, data: Mapping[bytes, tuple[bytes, int]], min_timestamp: int
) -> list[StoreCell]:
    """Build cells whose family/qualifier views point into the ``b"f:q"`` column keys."""
    cells: list[StoreCell] = []
    for column, (value, timestamp) in data.items():
        if timestamp < min_timestamp:
            continue
        sep = column.find(b":")
        if sep < 0:
            sep = len(column)
        cells.append(
            StoreCell(
                row_array=row_key,
                row_offset=0,
                row_length=len(row_key),
                family_array=column,
                family_offset=0,
                family_length=sep,
                qualifier_array=column,
                qualifier_offset=min(sep + 1, len(column)),
                qualifier_length=max(len(column) - sep - 1, 0),
                timestamp=timestamp,
                value_array=value,
                value_offset=0,
                value_length=len(value),
            )
        )
    return cells


class HappyBaseScanner:
    """Wraps the happybase scan generator; ``close()`` releases the server scanner.

    ``on_error`` is called once if fetching rows raises, before the error
    propagates.
    """

    def __init__(
        self,
        rows: Iterator[tuple[bytes, Mapping[bytes, Any]]],
        min_timestamp: int,
        on_error: Callable[[], None] | None = None,
    ):
        self._rows = rows
        self._min_timestamp = min_timestamp
        self._on_error = on_error

    def __iter__(self) -> Iterator[RawRow]:
        try:
            for row_key, data in self._rows:
                yield row_key, _cells_from_happybase(row_key, data, self._min_timestamp)
        except Exception:
            if self._on_error is not None:
                self._on_error()
            raise

    def close(self) -> None:
        close = getattr(self._rows, "close", None)
        if close is not None:
            close()


class HappyBaseTable:
    """Per-call table handle holding a leased connection until closed.

    A handle whose batch send or scan fails gives its connection up to be
    discarded instead of returning it to the pool.
    """

    def __init__(self, pool: HappyBaseConnection, connection: Any, name: str) -> None:
        self._pool = pool
        self._connection = connection
        self._table = connection.table(name)
        self.name = name
        self._closed = False

    def _discard(self) -> None:
        if not self._closed:
            self._closed = True
            self._pool.discard(self._connection)

    def put_mutations(self, mutations: Sequence[Mutation]) -> None:
        batch = self._table.batch()
        for mutation in mutations:
            batch.put(mutation.row, mutation.column_map())
        try:
            batch.send()
        except Exception:
            self._discard()
            raise

    def open_scanner(self, spec: ScanSpec) -> HappyBaseScanner:
        """Start a Thrift scan for ``spec``.

        Thrift scans only carry an upper time bound, so cells older than
        ``spec.time_range.min_timestamp`` are dropped after the server has
        applied the filter. Filters that stop at the first cell or count
        cells (``FirstKeyOnlyFilter``, ``PageFilter``, ``ColumnCountGetFilter``,
        ``ColumnPaginationFilter``) therefore see the older cells too, and a
        row can come back empty where a native HBase scan would have returned
        a newer cell.
        """
        kwargs: dict[str, Any] = {"include_timestamp": True, "sorted_columns": True}
        if spec.columns:
            kwargs["columns"] = [c.to_column_key() for c in spec.columns]
        if spec.filter_expression:
            kwargs["filter"] = spec.filter_expression.encode("utf-8")
        if spec.time_range.max_timestamp < MAX_TIMESTAMP:
            kwargs["timestamp"] = spec.time_range.max_timestamp
        try:
            rows = self._table.scan(**kwargs)
        except Exception:
            self._discard()
            raise
        return HappyBaseScanner(rows, spec.time_range.min_timestamp, on_error=self._discard)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._pool.release(self._connection)


class HappyBaseConnection:
    """Thread-safe store session backed by a lease pool of happybase connections.

    At most ``pool_size`` connections exist at once. Callers arriving at a
    full pool wait until a connection is released, a broken one is discarded
    (freeing a slot to open a new one), or the pool is closed.
    """

    def __init__(
        self,
        connect_kwargs: dict[str, Any],
        *,
        pool_size: int = DEFAULT_POOL_SIZE,
        connect_attempts: int = 1,
        pause_ms: int = DEFAULT_CLIENT_PAUSE_MS,
        connect: ConnectFn = happybase.Connection,
    ) -> None:
        if pool_size < 1:
            raise ValueError(f"pool_size must be >= 1, got {pool_size}")
        self._connect_kwargs = connect_kwargs
        self._connect = connect
        self._connect_attempts = max(connect_attempts, 1)
        self._pause_ms = pause_ms
        self._pool_size = pool_size
        # LIFO stack of idle connections; guarded by _available.
        self._idle: list[Any] = []
        self._available = threading.Condition()
        self._created = 0
        self._closed = False
        # Open one connection up front so unreachable clusters fail at enable time.
        self._idle.append(self._open_with_retries())
        self._created = 1

    def _open_with_retries(self) -> Any:
        delay = self._pause_ms / 1000.0
        for attempt in range(1, self._connect_attempts + 1):
            try:
                return self._connect(**self._connect_kwargs)
            except Exception as e:
                if attempt >= self._connect_attempts:
                    raise
                logger.debug(
                    "Connect attempt %d/%d to %s:%s failed: %s",
                    attempt,
                    self._connect_attempts,
                    self._connect_kwargs.get("host"),
                    self._connect_kwargs.get("port"),
                    e,
                )
                time.sleep(delay)
                delay *= 2
        raise AssertionError("unreachable")

    def _acquire(self) -> Any:
        with self._available:
            while True:
                if self._closed:
                    raise RuntimeError("Connection is closed")
                if self._idle:
                    return self._idle.pop()
                if self._created < self._pool_size:
                    self._created += 1
                    break
                self._available.wait()
        try:
            return self._open_with_retries()
        except Exception:
            with self._available:
                self._created -= 1
                self._available.notify()
            raise

    def release(self, connection: Any) -> None:
        with self._available:
            if not self._closed:
                self._idle.append(connection)
                self._available.notify()
                return
            self._created -= 1
        connection.close()

    def discard(self, connection: Any) -> None:
        """Drop a connection whose transport may be broken, freeing its slot."""
        with self._available:
            self._created -= 1
            self._available.notify()
        try:
            connection.close()
        except Exception as e:
            logger.debug("Ignoring close failure on discarded connection: %s", e)

    def list_table_names(self) -> list[str]:
        connection = self._acquire()
        try:
            names = connection.tables()
        except Exception:
            self.discard(connection)
            raise
        self.release(connection)
        return [n.decode("utf-8") if isinstance(n, bytes) else str(n) for n in names]

    def table(self, name: str) -> HappyBaseTable:
        connection = self._acquire()
        try:
            return HappyBaseTable(self, connection, name)
        except Exception:
            self.release(connection)
            raise

    def close(self) -> None:
        """Close idle connections and wake every waiter; leased ones close on release."""
        with self._available:
            self._closed = True
            idle, self._idle = self._idle, []
            self._created -= len(idle)
            self._available.notify_all()
        errors: list[Exception] = []
        for connection in idle:
            try:
                connection.close()
            except Exception as e:
                errors.append(e)
        if errors:
            raise OSError(f"Failed to close {len(errors)} connection(s): {errors[0]}") from errors[0]


def open_happybase_connection(
    settings: Mapping[str, str], *, connect: ConnectFn = happybase.Connection
) -> HappyBaseConnection:
    """Default connection factory: resolved HBase settings to a pooled happybase session."""
    kwargs = connection_kwargs(settings)
    logger.debug("Opening HBase Thrift connection to %s:%s", kwargs["host"], kwargs["port"])
    return HappyBaseConnection(
        kwargs,
        pool_size=_as_int(settings, THRIFT_POOL_SIZE, DEFAULT_POOL_SIZE),
        connect_attempts=_as_int(settings, HBASE_CONF_CLIENT_RETRIES, 1),
        pause_ms=_as_int(settings, CLIENT_PAUSE, DEFAULT_CLIENT_PAUSE_MS),
        connect=connect,
    )
