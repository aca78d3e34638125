"""hbase-service: batched writes and incremental scans over HBase."""

__version__ = "0.1.0"

from hbase_service.cells import BorrowedBytes, CellRecord, CellType
from hbase_service.config import ClientServiceConfig
from hbase_service.dedup import BoundaryTracker
from hbase_service.errors import (
    CloseWarning,
    ConfigValidationError,
    FilterParseError,
    HBaseServiceError,
    ScanIterationError,
    ServiceNotEnabledError,
    ServiceStateError,
    StoreConnectionError,
    WriteError,
)
from hbase_service.filters import FilterParser, HBaseFilterParser, ParsedFilter, parse_filter
from hbase_service.service import HBaseClientService
from hbase_service.types import ColumnSelector, Mutation, TimeRange, WriteRequest

__all__ = [
    "__version__",
    "HBaseClientService",
    "ClientServiceConfig",
    "WriteRequest",
    "ColumnSelector",
    "TimeRange",
    "Mutation",
    "CellRecord",
    "CellType",
    "BorrowedBytes",
    "BoundaryTracker",
    "FilterParser",
    "HBaseFilterParser",
    "ParsedFilter",
    "parse_filter",
    "HBaseServiceError",
    "ConfigValidationError",
    "StoreConnectionError",
    "ServiceNotEnabledError",
    "ServiceStateError",
    "FilterParseError",
    "WriteError",
    "ScanIterationError",
    "CloseWarning",
]
