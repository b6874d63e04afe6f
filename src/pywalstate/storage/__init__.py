"""Persistent key-value backends for the state store."""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator

from pywalstate.config import StoreConfig
from pywalstate.storage.base import ChangeListener, ChangeNotifier, StorageBackend, StorageChange
from pywalstate.storage.memory import MemoryStorage
from pywalstate.storage.sqlite import SqliteStorage

__all__ = [
    "ChangeListener",
    "ChangeNotifier",
    "MemoryStorage",
    "SqliteStorage",
    "StorageBackend",
    "StorageChange",
    "open_storage",
]


@contextlib.asynccontextmanager
async def open_storage(config: StoreConfig) -> AsyncIterator[StorageBackend]:
    """Open the backend selected by *config* for the duration of the block."""
    if config.storage_path is None:
        yield MemoryStorage()
        return
    async with SqliteStorage(config.storage_path) as storage:
        yield storage
