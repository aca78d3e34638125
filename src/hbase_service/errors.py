"""Structured error types for the HBase client service."""

from __future__ import annotations


class HBaseServiceError(Exception):
    """Base error for all HBase client service errors."""


class ConfigValidationError(HBaseServiceError):
    """Raised when configuration is incomplete, before any connection attempt."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("Invalid client service configuration: " + "; ".join(problems))


class StoreConnectionError(HBaseServiceError):
    """Raised when the store connection cannot be created or fails its liveness check."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Unable to connect to HBase: {detail}")


class ServiceNotEnabledError(HBaseServiceError):
    """Raised when put/scan is called while no connection is published."""

    def __init__(self) -> None:
        super().__init__("Client service is not enabled. Call enable() first.")


class ServiceStateError(HBaseServiceError):
    """Raised when a lifecycle transition is requested from the wrong state."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while service is {state}")


class FilterParseError(HBaseServiceError):
    """Raised when a filter expression does not match the filter language."""

    def __init__(self, expression: str, position: int, reason: str) -> None:
        self.expression = expression
        self.position = position
        self.reason = reason
        super().__init__(f"Invalid filter expression at position {position}: {reason}")


class WriteError(HBaseServiceError):
    """Raised when a batch submission fails. The whole batch is considered failed."""

    def __init__(self, table_name: str, detail: str) -> None:
        self.table_name = table_name
        self.detail = detail
        super().__init__(f"Batch write to '{table_name}' failed: {detail}")


class ScanIterationError(HBaseServiceError):
    """Raised when opening a scanner or fetching rows fails mid-scan."""

    def __init__(self, table_name: str, detail: str) -> None:
        self.table_name = table_name
        self.detail = detail
        super().__init__(f"Scan of '{table_name}' failed: {detail}")


class CloseWarning(UserWarning):
    """Emitted when disable() cannot close the connection cleanly. Never raised."""
