"""Shared fixtures for CLI tests."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest
from typer.testing import CliRunner

from hbase_service.cli import app, state
from tests.conftest import FakeFactory, FakeStore

if TYPE_CHECKING:
    from click.testing import Result

CONNECTION_ARGS = [
    "--quorum",
    "zk1.example.com",
    "--port",
    "2181",
    "--znode-parent",
    "/hbase",
    "--retries",
    "3",
]


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_store(monkeypatch) -> FakeStore:
    """Route the CLI's connection factory to an in-memory store."""
    store = FakeStore()
    monkeypatch.setattr(state, "connection_factory", FakeFactory(store))
    return store


@pytest.fixture
def seeded_store(cli_store):
    cli_store.seed("events", b"r1", b"f", b"q1", b"old", 90)
    cli_store.seed("events", b"r1", b"f", b"q2", b"edge", 100)
    cli_store.seed("events", b"r2", b"f", b"q1", b"new", 150)
    cli_store.seed("events", b"r3", b"g", b"bin", b"\xff\x00", 200)
    cli_store.seed("users", b"u1", b"p", b"name", b"Alice", 1)
    return cli_store


def write_jsonl(path, records: list[dict[str, Any]]) -> str:
    with open(path, "w") as f:
        for rec in records:
            f.write(json.dumps(rec) + "\n")
    return str(path)


def invoke(runner: CliRunner, args: list[str], connect: bool = True) -> "Result":
    """Invoke CLI with connection options injected before the subcommand."""
    if connect:
        args = CONNECTION_ARGS + args
    return runner.invoke(app, args, catch_exceptions=False)
