"""hbsvc scan: time-bounded scan printed one row per line."""

from __future__ import annotations

import base64
from collections.abc import Sequence
from typing import Any, Optional

import typer

from hbase_service.cells import CellRecord
from hbase_service.cli import _exitcodes as ec
from hbase_service.cli._output import print_error, print_json_line
from hbase_service.cli._service import open_service_or_exit
from hbase_service.errors import FilterParseError, ScanIterationError
from hbase_service.filters import parse_filter
from hbase_service.types import ColumnSelector


def _render_bytes(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return "base64:" + base64.b64encode(data).decode("ascii")


def _cell_to_dict(cell: CellRecord) -> dict[str, Any]:
    # Copies out of the borrowed views; the handler returns before the scan advances.
    return {
        "column": _render_bytes(cell.column_key()),
        "timestamp": cell.timestamp,
        "value": _render_bytes(cell.value.tobytes()),
    }


def scan_cmd(
    table: str = typer.Argument(..., help="Table name"),
    columns: Optional[list[str]] = typer.Option(
        None, "--column", help="family or family:qualifier (repeatable)"
    ),
    filter_expression: Optional[str] = typer.Option(
        None, "--filter", help="HBase filter language expression"
    ),
    min_time: int = typer.Option(0, "--min-time", help="Inclusive minimum cell timestamp (ms)"),
    limit: Optional[int] = typer.Option(
        None, "--limit-output", help="Stop printing after N rows"
    ),
) -> None:
    """Scan cells with timestamp >= --min-time."""
    from hbase_service.cli import state

    json_mode = state.json_output

    try:
        selectors = [ColumnSelector.parse(c) for c in columns or []]
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    if filter_expression and filter_expression.strip():
        try:
            parse_filter(filter_expression)
        except FilterParseError as e:
            print_error(str(e))
            raise typer.Exit(ec.FILTER_ERROR)

    printed = 0
    max_ts = min_time

    def handle(row_key: bytes, cells: Sequence[CellRecord]) -> None:
        nonlocal printed, max_ts
        max_ts = max([max_ts] + [c.timestamp for c in cells])
        if limit is not None and printed >= limit:
            return
        printed += 1
        row = _render_bytes(bytes(row_key))
        rendered = [_cell_to_dict(c) for c in cells]
        if json_mode:
            print_json_line({"row": row, "cells": rendered})
            return
        columns_text = ", ".join(
            f"{c['column']}@{c['timestamp']}={c['value']}" for c in rendered
        )
        print(f"{row}: {columns_text}")

    service = open_service_or_exit()
    try:
        rows = service.scan(table, selectors or None, filter_expression, min_time, handle)
    except FilterParseError as e:
        print_error(str(e))
        raise typer.Exit(ec.FILTER_ERROR)
    except ScanIterationError as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        service.disable()

    if not json_mode:
        print(f"-- {rows} row(s); next --min-time {max_ts}")
