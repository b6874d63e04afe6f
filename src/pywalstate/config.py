"""Store configuration for pywalstate."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from pywalstate.exceptions import StateConfigError

_TRUE_VALUES = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "n", "off"})


def _env_bool(name: str, value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise StateConfigError(f"{name} must be a boolean flag, got {value!r}")


@dataclasses.dataclass(frozen=True)
class StoreConfig:
    """State store configuration.

    Parameters
    ----------
    storage_path : Path or None
        SQLite file backing the store. ``None`` keeps everything in
        process memory (nothing survives a restart).
    serialize_writes : bool
        Issue backend writes one at a time in call order. When disabled,
        concurrent writes to the same key land in whatever order the
        backend completes them.
    strict_state_version : bool
        Raise :class:`~pywalstate.exceptions.UnsupportedStateVersionError`
        when the stored ``stateVersion`` is neither current nor the legacy
        version. Otherwise the mismatch is only logged.
    log_storage_changes : bool
        Log backend change notifications at DEBUG level.
    """

    storage_path: Path | None = None
    serialize_writes: bool = True
    strict_state_version: bool = False
    log_storage_changes: bool = True

    @classmethod
    def from_env(cls, **overrides: Any) -> StoreConfig:
        """Create configuration from environment variables.

        Reads ``PYWALSTATE_STORAGE_PATH``, ``PYWALSTATE_SERIALIZE_WRITES``,
        ``PYWALSTATE_STRICT_STATE_VERSION`` and ``PYWALSTATE_LOG_CHANGES``.
        Explicit keyword arguments override environment values.

        Raises
        ------
        StateConfigError
            If a boolean variable holds an unrecognised value.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        path_env = env.get("PYWALSTATE_STORAGE_PATH")
        if path_env and "storage_path" not in overrides:
            config_kwargs["storage_path"] = Path(path_env).expanduser()

        _ENV_BOOL_MAP = {
            "PYWALSTATE_SERIALIZE_WRITES": ("serialize_writes", True),
            "PYWALSTATE_STRICT_STATE_VERSION": ("strict_state_version", False),
            "PYWALSTATE_LOG_CHANGES": ("log_storage_changes", True),
        }
        for env_key, (field_name, default) in _ENV_BOOL_MAP.items():
            if field_name in overrides:
                continue
            config_kwargs[field_name] = _env_bool(env_key, env.get(env_key), default)

        storage_path = overrides.get("storage_path")
        if isinstance(storage_path, str):
            overrides["storage_path"] = Path(storage_path).expanduser()

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
