"""CLI helpers for building configuration and opening the client service."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
import yaml

from hbase_service.cli import _exitcodes as ec
from hbase_service.cli._output import print_error
from hbase_service.config import ClientServiceConfig
from hbase_service.errors import ConfigValidationError, StoreConnectionError
from hbase_service.service import HBaseClientService

_YAML_KEYS = {
    "config_files",
    "zookeeper_quorum",
    "zookeeper_client_port",
    "zookeeper_znode_parent",
    "client_retries",
    "overrides",
}


def parse_overrides(pairs: list[str] | None) -> dict[str, str]:
    """Parse repeated ``KEY=VALUE`` options."""
    overrides: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid --set '{pair}': expected KEY=VALUE")
        overrides[key.strip()] = value
    return overrides


def load_config_file(path: str) -> dict[str, Any]:
    """Read a YAML config file holding ClientServiceConfig fields."""
    with open(Path(path)) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    unknown = sorted(set(data) - _YAML_KEYS)
    if unknown:
        raise ValueError(f"{path}: unknown config keys {unknown}")
    overrides = data.get("overrides") or {}
    if not isinstance(overrides, dict):
        raise ValueError(f"{path}: 'overrides' must be a mapping")
    data["overrides"] = {str(k): str(v) for k, v in overrides.items()}
    if isinstance(data.get("config_files"), list):
        data["config_files"] = ",".join(str(p) for p in data["config_files"])
    return data


def build_config() -> ClientServiceConfig:
    """Combine the config file (if any) with command-line options, options winning."""
    from hbase_service.cli import state

    values: dict[str, Any] = load_config_file(state.config) if state.config else {}
    explicit = {
        "config_files": state.config_files,
        "zookeeper_quorum": state.quorum,
        "zookeeper_client_port": state.port,
        "zookeeper_znode_parent": state.znode_parent,
        "client_retries": state.retries,
    }
    values.update({k: v for k, v in explicit.items() if v is not None})
    overrides = dict(values.get("overrides", {}))
    overrides.update(state.overrides)
    values["overrides"] = overrides
    return ClientServiceConfig(**values)


def open_service() -> HBaseClientService:
    """Build config from CLI state and return an enabled service."""
    from hbase_service.cli import state

    config = build_config()
    service = HBaseClientService(state.connection_factory)
    service.enable(config)
    return service


def open_service_or_exit() -> HBaseClientService:
    """``open_service`` with configuration and connection failures mapped to exit codes."""
    try:
        return open_service()
    except ConfigValidationError as e:
        print_error(str(e))
        raise typer.Exit(ec.CONFIG_ERROR)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print_error(f"Cannot load configuration: {e}")
        raise typer.Exit(ec.CONFIG_ERROR)
    except StoreConnectionError as e:
        print_error(str(e))
        raise typer.Exit(ec.CONNECTION_ERROR)
