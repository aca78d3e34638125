"""hbsvc check / tables: connectivity and table listing."""

from __future__ import annotations

import typer

from hbase_service.cli import _exitcodes as ec
from hbase_service.cli._output import print_error, print_object, print_table
from hbase_service.cli._service import build_config, open_service_or_exit


def check_cmd() -> None:
    """Enable the service, run the liveness check, and disable it again."""
    from hbase_service.cli import state

    service = open_service_or_exit()
    try:
        tables = service.list_tables()
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.CONNECTION_ERROR)
    finally:
        service.disable()

    config = build_config()
    data = {
        "status": "ok",
        "config_files": config.config_files,
        "settings": sorted(config.named_settings()),
        "overrides": sorted(config.overrides),
        "table_count": len(tables),
    }
    print_object(data, json_mode=state.json_output)


def tables_cmd() -> None:
    """List table names."""
    from hbase_service.cli import state

    service = open_service_or_exit()
    try:
        tables = service.list_tables()
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)
    finally:
        service.disable()

    print_table(["table"], [[t] for t in sorted(tables)], json_mode=state.json_output)
