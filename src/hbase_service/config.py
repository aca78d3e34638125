"""Configuration for the HBase client service.

Settings are resolved as ordered layers, later layers replacing earlier
values for the same key:

1. Hadoop-style resource files (``hbase-site.xml`` and friends), in order
2. Explicit named settings (quorum, client port, znode parent, retries)
3. Arbitrary overrides
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from hbase_service.errors import ConfigValidationError, StoreConnectionError

HBASE_CONF_ZK_QUORUM = "hbase.zookeeper.quorum"
HBASE_CONF_ZK_PORT = "hbase.zookeeper.property.clientPort"
HBASE_CONF_ZNODE_PARENT = "zookeeper.znode.parent"
HBASE_CONF_CLIENT_RETRIES = "hbase.client.retries.number"

MISSING_SETTINGS_PROBLEM = (
    "ZooKeeper Quorum, ZooKeeper Client Port, ZooKeeper ZNode Parent, and HBase Client "
    "Retries are required when Hadoop Configuration Files are not provided."
)


def _is_set(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


@dataclass
class ClientServiceConfig:
    """Resolved configuration handed to ``enable()`` by the host.

    Attributes:
        config_files: Comma-separated list of Hadoop configuration file paths
        zookeeper_quorum: Value for ``hbase.zookeeper.quorum``
        zookeeper_client_port: Value for ``hbase.zookeeper.property.clientPort``
        zookeeper_znode_parent: Value for ``zookeeper.znode.parent``
        client_retries: Value for ``hbase.client.retries.number``
        overrides: Arbitrary HBase properties, applied last
    """

    config_files: str | None = None
    zookeeper_quorum: str | None = None
    zookeeper_client_port: int | str | None = None
    zookeeper_znode_parent: str | None = None
    client_retries: int | str | None = None
    overrides: dict[str, str] = field(default_factory=dict)

    def resource_paths(self) -> list[Path]:
        if not _is_set(self.config_files):
            return []
        assert self.config_files is not None
        return [Path(p.strip()) for p in self.config_files.split(",") if p.strip()]

    def named_settings(self) -> dict[str, str]:
        """Explicit named settings that are set, keyed by HBase property name."""
        named = {
            HBASE_CONF_ZK_QUORUM: self.zookeeper_quorum,
            HBASE_CONF_ZK_PORT: self.zookeeper_client_port,
            HBASE_CONF_ZNODE_PARENT: self.zookeeper_znode_parent,
            HBASE_CONF_CLIENT_RETRIES: self.client_retries,
        }
        return {key: str(value).strip() for key, value in named.items() if _is_set(value)}

    def validate(self) -> None:
        """Reject configurations that cannot possibly connect.

        Either resource files are provided, or all four named settings are.
        """
        problems: list[str] = []
        if not self.resource_paths() and len(self.named_settings()) < 4:
            problems.append(MISSING_SETTINGS_PROBLEM)
        for key, value in self.overrides.items():
            if not key or not key.strip():
                problems.append("Override property names must not be empty")
            elif not _is_set(value):
                problems.append(f"Override '{key}' must have a non-empty value")
        for name, value in (
            ("zookeeper_client_port", self.zookeeper_client_port),
            ("client_retries", self.client_retries),
        ):
            if _is_set(value):
                try:
                    int(str(value).strip())
                except ValueError:
                    problems.append(f"{name} must be an integer, got {value!r}")
        if problems:
            raise ConfigValidationError(problems)


def load_resource_file(path: Path) -> dict[str, str]:
    """Read ``<configuration><property><name/><value/></property>`` pairs."""
    try:
        tree = ET.parse(path)
    except FileNotFoundError as e:
        raise StoreConnectionError(f"Configuration file not found: {path}") from e
    except ET.ParseError as e:
        raise StoreConnectionError(f"Malformed configuration file {path}: {e}") from e

    settings: dict[str, str] = {}
    for prop in tree.getroot().iter("property"):
        name = prop.findtext("name")
        if name is None or not name.strip():
            continue
        settings[name.strip()] = (prop.findtext("value") or "").strip()
    return settings


def resolve_settings(config: ClientServiceConfig) -> dict[str, str]:
    """Merge resource files < named settings < overrides into one map."""
    layers: list[Mapping[str, str]] = [load_resource_file(p) for p in config.resource_paths()]
    layers.append(config.named_settings())
    layers.append({k: str(v) for k, v in config.overrides.items()})

    settings: dict[str, str] = {}
    for layer in layers:
        settings.update(layer)
    return settings
