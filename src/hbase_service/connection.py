"""Connection lifecycle: one live store session per enable cycle."""

from __future__ import annotations

import logging
import threading
import warnings
from enum import Enum

from hbase_service.config import ClientServiceConfig, resolve_settings
from hbase_service.errors import (
    CloseWarning,
    HBaseServiceError,
    ServiceNotEnabledError,
    ServiceStateError,
    StoreConnectionError,
)
from hbase_service.store import ConnectionFactory, StoreConnection

logger = logging.getLogger(__name__)


class ServiceState(str, Enum):
    DISABLED = "disabled"
    ENABLING = "enabling"
    ENABLED = "enabled"
    DISABLING = "disabling"


class ConnectionManager:
    """Owns the single :class:`StoreConnection` shared by put and scan calls.

    ``enable`` and ``disable`` are serialized by a transition lock. The
    connection reference itself is published with a single attribute
    assignment, so readers calling :meth:`current` observe either no
    connection or a fully verified one.
    """

    def __init__(self, connection_factory: ConnectionFactory) -> None:
        self._factory = connection_factory
        self._transition_lock = threading.Lock()
        self._connection: StoreConnection | None = None
        self._state = ServiceState.DISABLED

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def is_enabled(self) -> bool:
        return self._connection is not None

    def current(self) -> StoreConnection:
        """Snapshot of the published connection."""
        connection = self._connection
        if connection is None:
            raise ServiceNotEnabledError()
        return connection

    def enable(self, config: ClientServiceConfig) -> None:
        """Validate, connect, and verify liveness; publish only on success."""
        config.validate()

        with self._transition_lock:
            if self._state is not ServiceState.DISABLED:
                raise ServiceStateError("enable", self._state.value)
            self._state = ServiceState.ENABLING
            try:
                connection = self._connect(config)
            except BaseException:
                self._state = ServiceState.DISABLED
                raise
            self._connection = connection
            self._state = ServiceState.ENABLED
        logger.info("HBase client service enabled")

    def _connect(self, config: ClientServiceConfig) -> StoreConnection:
        try:
            settings = resolve_settings(config)
            connection = self._factory(settings)
        except HBaseServiceError:
            raise
        except Exception as e:
            raise StoreConnectionError(str(e)) from e

        try:
            tables = connection.list_table_names()
        except Exception as e:
            self._close_quietly(connection)
            raise StoreConnectionError(f"liveness check failed: {e}") from e
        logger.debug("Liveness check listed %d table(s)", len(tables))
        return connection

    def disable(self) -> None:
        """Close and clear the connection. Never raises on close failure."""
        with self._transition_lock:
            connection = self._connection
            self._state = ServiceState.DISABLING
            self._connection = None
            try:
                if connection is not None:
                    self._close_quietly(connection)
            finally:
                self._state = ServiceState.DISABLED
        logger.info("HBase client service disabled")

    @staticmethod
    def _close_quietly(connection: StoreConnection) -> None:
        try:
            connection.close()
        except Exception as e:
            message = f"Failed to close connection to HBase due to {e!r}"
            logger.warning(message)
            try:
                warnings.warn(message, CloseWarning, stacklevel=3)
            except CloseWarning:
                # Warnings filtered to errors; disable() still must not fail.
                logger.debug("CloseWarning escalated to an error by the warnings filter")
