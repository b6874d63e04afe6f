"""Persistent key-value backend contract.

The store only depends on this protocol: a flat mapping of top-level keys
to JSON-compatible values, plus a change-notification stream.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

_logger = logging.getLogger(__name__)


class StorageChange(BaseModel):
    """Old and new value of one key, as delivered to change listeners."""

    model_config = ConfigDict(frozen=True)

    old_value: Any = None
    new_value: Any = None


ChangeListener = Callable[[dict[str, StorageChange], str], None]


class StorageBackend(Protocol):
    area_name: str

    async def get(self, defaults: Mapping[str, Any]) -> dict[str, Any]:
        """Stored values for the keys of *defaults*, falling back per key."""
        ...

    async def set(self, items: Mapping[str, Any]) -> None:
        """Write the given top-level keys."""
        ...

    async def clear(self) -> None:
        """Remove every key."""
        ...

    def add_listener(self, listener: ChangeListener) -> None: ...

    def remove_listener(self, listener: ChangeListener) -> None: ...


class ChangeNotifier:
    """Listener registry shared by the bundled backends."""

    area_name: str

    def __init__(self, area_name: str) -> None:
        self.area_name = area_name
        self._listeners: list[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, changes: dict[str, StorageChange]) -> None:
        if not changes:
            return
        for listener in list(self._listeners):
            try:
                listener(changes, self.area_name)
            except Exception:
                _logger.debug("Storage change listener failed", exc_info=True)
