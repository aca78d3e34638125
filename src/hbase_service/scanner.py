"""Time-bounded incremental scans.

Scans are bounded below by an inclusive minimum timestamp. A caller that
re-scans from the largest timestamp it has seen will receive the rows at
that timestamp again; this module never suppresses them (see
:mod:`hbase_service.dedup` for a caller-side helper).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from contextlib import closing

from hbase_service.cells import to_cell_records
from hbase_service.errors import ScanIterationError
from hbase_service.filters import FilterParser, HBaseFilterParser, ParsedFilter
from hbase_service.store import ScanSpec, StoreConnection
from hbase_service.types import ColumnSelector, ResultHandler, TimeRange

logger = logging.getLogger(__name__)


def build_scan_spec(
    columns: Iterable[ColumnSelector] | None,
    parsed_filter: ParsedFilter | None,
    min_time: int,
) -> ScanSpec:
    return ScanSpec(
        time_range=TimeRange(min_timestamp=min_time),
        columns=tuple(columns) if columns is not None else (),
        filter_expression=parsed_filter.expression if parsed_filter is not None else None,
    )


class ScanExecutor:
    """Runs scans over a shared connection and streams rows to a handler."""

    def __init__(self, filter_parser: FilterParser | None = None) -> None:
        self._filter_parser = filter_parser or HBaseFilterParser()

    def parse_filter(self, filter_expression: str | None) -> ParsedFilter | None:
        if filter_expression is None or not filter_expression.strip():
            return None
        return self._filter_parser.parse(filter_expression)

    def scan(
        self,
        connection: StoreConnection,
        table_name: str,
        columns: Iterable[ColumnSelector] | None,
        filter_expression: str | None,
        min_time: int,
        handler: ResultHandler,
    ) -> int:
        """Stream every matching row to ``handler``; return the number of rows delivered.

        Raises:
            FilterParseError: before any scan is issued, for malformed filters
            ScanIterationError: opening the scanner or fetching a row failed

        Exceptions raised by ``handler`` propagate unchanged. The table handle
        and scanner are released on every exit path.
        """
        parsed = self.parse_filter(filter_expression)
        spec = build_scan_spec(columns, parsed, min_time)
        logger.debug(
            "Scanning %s from ts=%d columns=%s filters=%s",
            table_name,
            min_time,
            [c.to_column_key() for c in spec.columns],
            parsed.filter_names() if parsed is not None else [],
        )

        try:
            table = connection.table(table_name)
        except Exception as e:
            raise ScanIterationError(table_name, f"unable to open table: {e}") from e

        delivered = 0
        with closing(table):
            try:
                scanner = table.open_scanner(spec)
            except Exception as e:
                raise ScanIterationError(table_name, f"unable to open scanner: {e}") from e

            with closing(scanner):
                try:
                    rows = iter(scanner)
                except Exception as e:
                    raise ScanIterationError(table_name, str(e)) from e

                while True:
                    try:
                        row_key, cells = next(rows)
                    except StopIteration:
                        break
                    except Exception as e:
                        raise ScanIterationError(table_name, str(e)) from e

                    if not cells:
                        continue
                    handler(row_key, to_cell_records(cells))
                    delivered += 1

        logger.debug("Scan of %s delivered %d row(s)", table_name, delivered)
        return delivered
