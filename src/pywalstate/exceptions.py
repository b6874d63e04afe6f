"""Custom exception hierarchy for pywalstate."""

from __future__ import annotations


class PywalStateError(Exception):
    """Base exception for all pywalstate errors."""


class StateConfigError(PywalStateError):
    """Invalid or missing configuration."""


class StorageError(PywalStateError):
    """Persistent backend failure (read, write or clear)."""

    def __init__(
        self,
        message: str,
        *,
        operation: str = "",
    ) -> None:
        self.operation = operation
        super().__init__(message)


class UnsupportedStateVersionError(PywalStateError):
    """Stored ``stateVersion`` has no migration path to the current schema.

    Only raised when ``StoreConfig.strict_state_version`` is enabled;
    otherwise the mismatch is logged and the stored data is used as-is.
    """

    def __init__(self, found: float, expected: float) -> None:
        self.found = found
        self.expected = expected
        super().__init__(f"No migration from stateVersion {found} to {expected}")
