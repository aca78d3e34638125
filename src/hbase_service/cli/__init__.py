"""hbsvc CLI: operator console for the HBase client service."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from hbase_service.cli import check, put_cmd, scan
from hbase_service.store import ConnectionFactory

app = typer.Typer(
    name="hbsvc",
    help="hbsvc: batched writes and incremental scans against HBase.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    config: str | None = None
    config_files: str | None = None
    quorum: str | None = None
    port: str | None = None
    znode_parent: str | None = None
    retries: str | None = None
    overrides: dict[str, str] = {}
    json_output: bool = False
    # None selects the happybase backend; tests substitute a fake factory.
    connection_factory: ConnectionFactory | None = None


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        try:
            from importlib.metadata import version

            v = version("hbase-service")
        except Exception:
            v = "unknown"
        print(f"hbsvc {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None, "--config", "-c", envvar="HBSVC_CONFIG", help="YAML config file path"
    ),
    config_files: Optional[str] = typer.Option(
        None,
        "--config-files",
        envvar="HBSVC_CONFIG_FILES",
        help="Comma-separated Hadoop configuration files (hbase-site.xml, ...)",
    ),
    quorum: Optional[str] = typer.Option(
        None, "--quorum", envvar="HBSVC_ZK_QUORUM", help="ZooKeeper quorum"
    ),
    port: Optional[str] = typer.Option(
        None, "--port", envvar="HBSVC_ZK_PORT", help="ZooKeeper client port"
    ),
    znode_parent: Optional[str] = typer.Option(
        None, "--znode-parent", envvar="HBSVC_ZNODE_PARENT", help="ZooKeeper znode parent"
    ),
    retries: Optional[str] = typer.Option(
        None, "--retries", envvar="HBSVC_CLIENT_RETRIES", help="HBase client retries"
    ),
    set_args: Optional[list[str]] = typer.Option(
        None, "--set", help="KEY=VALUE HBase property override (repeatable)"
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all hbsvc commands."""
    from hbase_service.cli._service import parse_overrides

    try:
        overrides = parse_overrides(set_args)
    except ValueError as e:
        raise typer.BadParameter(str(e))

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    state.config = config
    state.config_files = config_files
    state.quorum = quorum
    state.port = port
    state.znode_parent = znode_parent
    state.retries = retries
    state.overrides = overrides
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.command(name="check")(check.check_cmd)
app.command(name="tables")(check.tables_cmd)
app.command(name="put")(put_cmd.put_cmd)
app.command(name="scan")(scan.scan_cmd)


def main() -> None:
    """Entry point for the hbsvc CLI."""
    app()
