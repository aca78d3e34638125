"""HBase client service: the object a pipeline host holds."""

from __future__ import annotations

from collections.abc import Iterable

from hbase_service.batcher import PutBatcher
from hbase_service.config import ClientServiceConfig
from hbase_service.connection import ConnectionManager, ServiceState
from hbase_service.filters import FilterParser
from hbase_service.scanner import ScanExecutor
from hbase_service.store import ConnectionFactory
from hbase_service.types import ColumnSelector, ResultHandler, WriteRequest


def _default_factory() -> ConnectionFactory:
    from hbase_service.store_happybase import open_happybase_connection

    return open_happybase_connection


class HBaseClientService:
    """Batched writes and incremental scans over one shared store connection.

    Usage::

        service = HBaseClientService()
        service.enable(ClientServiceConfig(config_files="/etc/hbase/conf/hbase-site.xml"))
        service.put("events", [WriteRequest("r1", "f", "q1", b"a")])
        service.scan("events", [ColumnSelector("f")], None, 0, handler)
        service.disable()

    ``put`` and ``scan`` may be called concurrently from many threads. Each
    call takes its own table handle (and scanner) from the shared
    connection and releases it before returning.
    """

    def __init__(
        self,
        connection_factory: ConnectionFactory | None = None,
        *,
        filter_parser: FilterParser | None = None,
    ) -> None:
        self._connections = ConnectionManager(connection_factory or _default_factory())
        self._batcher = PutBatcher()
        self._scanner = ScanExecutor(filter_parser)

    @property
    def state(self) -> ServiceState:
        return self._connections.state

    @property
    def is_enabled(self) -> bool:
        return self._connections.is_enabled

    def enable(self, config: ClientServiceConfig) -> None:
        self._connections.enable(config)

    def disable(self) -> None:
        self._connections.disable()

    def list_tables(self) -> list[str]:
        return self._connections.current().list_table_names()

    def put(self, table_name: str, writes: Iterable[WriteRequest]) -> None:
        """Write all requests as one batch, one mutation per distinct row."""
        self._batcher.put(self._connections.current(), table_name, writes)

    def scan(
        self,
        table_name: str,
        columns: Iterable[ColumnSelector] | None,
        filter_expression: str | None,
        min_time: int,
        handler: ResultHandler,
    ) -> int:
        """Scan cells with timestamp >= ``min_time``, calling ``handler`` once per row."""
        return self._scanner.scan(
            self._connections.current(),
            table_name,
            columns,
            filter_expression,
            min_time,
            handler,
        )

    def __enter__(self) -> HBaseClientService:
        return self

    def __exit__(self, *exc: object) -> None:
        self.disable()
