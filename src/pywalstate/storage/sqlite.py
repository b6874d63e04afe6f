"""SQLite storage backend (aiosqlite).

One row per top-level key, values stored as JSON text. Change
notifications are emitted for writes made through this instance only;
writes from other processes sharing the file are not observed.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from pywalstate._constants import DEFAULT_AREA_NAME
from pywalstate.exceptions import StorageError
from pywalstate.storage.base import ChangeNotifier, StorageChange

_logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class SqliteStorage(ChangeNotifier):
    """Durable storage in a single SQLite file.

    Usage::

        async with SqliteStorage(path) as storage:
            store = ThemeStateStore(storage)
            await store.load()
    """

    def __init__(self, path: Path | str, *, area_name: str = DEFAULT_AREA_NAME) -> None:
        super().__init__(area_name)
        self._path = Path(path)
        self._db: aiosqlite.Connection | None = None

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        if self._db is not None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self._path)
            await self._db.execute(_SCHEMA)
            await self._db.commit()
        except (OSError, sqlite3.Error) as err:
            raise StorageError(f"Cannot open storage at {self._path}: {err}", operation="open") from err
        _logger.debug("Opened storage at %s", self._path)

    async def close(self) -> None:
        db = self._db
        self._db = None
        if db is not None:
            await db.close()

    async def __aenter__(self) -> SqliteStorage:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    def _require_db(self) -> aiosqlite.Connection:
        if self._db is None:
            raise StorageError("Storage not opened. Use 'async with SqliteStorage(...)'", operation="connect")
        return self._db

    # ------------------------------------------------------------------
    # Backend contract
    # ------------------------------------------------------------------

    async def _read(self, keys: list[str] | None = None) -> dict[str, Any]:
        db = self._require_db()
        if keys is None:
            query, params = "SELECT key, value FROM storage", ()
        elif not keys:
            return {}
        else:
            placeholders = ", ".join("?" for _ in keys)
            query, params = f"SELECT key, value FROM storage WHERE key IN ({placeholders})", tuple(keys)

        try:
            async with db.execute(query, params) as cursor:
                rows = await cursor.fetchall()
        except sqlite3.Error as err:
            raise StorageError(f"Storage read failed: {err}", operation="get") from err

        values: dict[str, Any] = {}
        for key, raw in rows:
            try:
                values[key] = json.loads(raw)
            except json.JSONDecodeError:
                _logger.warning("Stored value for %r is not valid JSON; ignoring it", key)
        return values

    async def get(self, defaults: Mapping[str, Any]) -> dict[str, Any]:
        stored = await self._read(list(defaults))
        return {key: stored.get(key, default) for key, default in defaults.items()}

    async def set(self, items: Mapping[str, Any]) -> None:
        if not items:
            return
        db = self._require_db()
        old_values = await self._read(list(items))
        now = datetime.now(UTC).isoformat()
        try:
            await db.executemany(
                "INSERT OR REPLACE INTO storage (key, value, updated_at) VALUES (?, ?, ?)",
                [(key, json.dumps(value), now) for key, value in items.items()],
            )
            await db.commit()
        except (TypeError, ValueError) as err:
            raise StorageError(f"Value is not JSON serializable: {err}", operation="set") from err
        except sqlite3.Error as err:
            raise StorageError(f"Storage write failed: {err}", operation="set") from err

        self._notify(
            {key: StorageChange(old_value=old_values.get(key), new_value=value) for key, value in items.items()}
        )

    async def clear(self) -> None:
        db = self._require_db()
        old_values = await self._read()
        try:
            await db.execute("DELETE FROM storage")
            await db.commit()
        except sqlite3.Error as err:
            raise StorageError(f"Storage clear failed: {err}", operation="clear") from err

        self._notify({key: StorageChange(old_value=value) for key, value in old_values.items()})

    async def dump(self) -> dict[str, Any]:
        """Everything currently stored."""
        return await self._read()
