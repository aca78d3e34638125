"""Tests for hbsvc check / tables."""

import json

from hbase_service.cli import _exitcodes as ec
from hbase_service.cli import state
from tests.cli.conftest import invoke


def test_check_ok(runner, seeded_store):
    result = invoke(runner, ["check"])
    assert result.exit_code == 0
    assert "status: ok" in result.output
    assert "table_count: 2" in result.output
    assert seeded_store.closed


def test_check_json(runner, seeded_store):
    result = invoke(runner, ["--json", "check"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["status"] == "ok"
    assert "hbase.zookeeper.quorum" in data["settings"]


def test_check_passes_overrides(runner, cli_store):
    result = invoke(runner, ["--set", "hbase.rpc.timeout=5000", "check"])
    assert result.exit_code == 0
    factory = state.connection_factory
    assert factory.calls[0]["hbase.rpc.timeout"] == "5000"


def test_check_missing_settings_is_config_error(runner, cli_store):
    result = invoke(runner, ["--quorum", "zk1", "check"], connect=False)
    assert result.exit_code == ec.CONFIG_ERROR
    assert "are required when Hadoop Configuration Files are not provided" in result.output


def test_check_bad_port_is_config_error(runner, cli_store):
    result = invoke(runner, ["--port", "abc", "check"])
    assert result.exit_code == ec.CONFIG_ERROR
    assert "zookeeper_client_port must be an integer" in result.output


def test_check_unreachable_is_connection_error(runner, cli_store):
    cli_store.fail_list = True
    result = invoke(runner, ["check"])
    assert result.exit_code == ec.CONNECTION_ERROR
    assert "liveness check failed" in result.output


def test_bad_set_syntax_is_usage_error(runner, cli_store):
    result = invoke(runner, ["--set", "novalue", "check"])
    assert result.exit_code == ec.USAGE_ERROR


def test_tables_lists_sorted(runner, seeded_store):
    result = invoke(runner, ["tables"])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0].strip() == "table"
    assert [line.strip() for line in lines[2:]] == ["events", "users"]


def test_tables_json(runner, seeded_store):
    result = invoke(runner, ["--json", "tables"])
    assert json.loads(result.output) == [{"table": "events"}, {"table": "users"}]


def test_config_files_from_resource(runner, cli_store, tmp_path):
    site = tmp_path / "hbase-site.xml"
    site.write_text(
        "<configuration>"
        "<property><name>hbase.zookeeper.quorum</name><value>zk-site</value></property>"
        "</configuration>"
    )
    result = invoke(runner, ["--config-files", str(site), "check"], connect=False)
    assert result.exit_code == 0
    factory = state.connection_factory
    assert factory.calls[0]["hbase.zookeeper.quorum"] == "zk-site"
