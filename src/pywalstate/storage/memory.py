"""In-process storage backend."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from pywalstate._constants import DEFAULT_AREA_NAME
from pywalstate.storage.base import ChangeNotifier, StorageChange


class MemoryStorage(ChangeNotifier):
    """Dict-backed storage. Values are deep-copied in both directions."""

    def __init__(self, initial: Mapping[str, Any] | None = None, *, area_name: str = DEFAULT_AREA_NAME) -> None:
        super().__init__(area_name)
        self._data: dict[str, Any] = copy.deepcopy(dict(initial)) if initial else {}

    async def get(self, defaults: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, default in defaults.items():
            result[key] = copy.deepcopy(self._data[key]) if key in self._data else copy.deepcopy(default)
        return result

    async def set(self, items: Mapping[str, Any]) -> None:
        changes: dict[str, StorageChange] = {}
        for key, value in items.items():
            stored = copy.deepcopy(value)
            changes[key] = StorageChange(old_value=self._data.get(key), new_value=copy.deepcopy(stored))
            self._data[key] = stored
        self._notify(changes)

    async def clear(self) -> None:
        changes = {key: StorageChange(old_value=value) for key, value in self._data.items()}
        self._data.clear()
        self._notify(changes)

    def dump(self) -> dict[str, Any]:
        """Copy of everything currently stored."""
        return copy.deepcopy(self._data)
