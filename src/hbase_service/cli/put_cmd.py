"""hbsvc put: batched write from JSONL records."""

from __future__ import annotations

import typer

from hbase_service.batcher import build_mutations
from hbase_service.cli import _exitcodes as ec
from hbase_service.cli._output import print_error, print_object
from hbase_service.cli._records import read_write_requests
from hbase_service.cli._service import open_service_or_exit
from hbase_service.errors import WriteError


def put_cmd(
    table: str = typer.Argument(..., help="Table name"),
    input_path: str = typer.Option(..., "--input", help="JSONL file or directory"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show merged mutations without writing"),
) -> None:
    """Write JSONL records as one batch, one mutation per row."""
    from hbase_service.cli import state

    json_mode = state.json_output

    try:
        writes = read_write_requests(input_path)
    except (OSError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    if not writes:
        print("No records to write.")
        return

    mutations = build_mutations(writes)
    summary = {
        "table": table,
        "records": len(writes),
        "rows": len(mutations),
        "columns": sum(len(m) for m in mutations),
    }

    if dry_run:
        summary["status"] = "dry_run"
        summary["mutations"] = {
            m.row.decode("utf-8"): sorted(k.decode("utf-8") for k in m.column_map())
            for m in mutations
        }
        print_object(summary, json_mode=json_mode)
        return

    service = open_service_or_exit()
    try:
        service.put(table, writes)
    except WriteError as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        service.disable()

    summary["status"] = "written"
    print_object(summary, json_mode=json_mode)
