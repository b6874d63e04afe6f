"""pywalstate - Persisted state store for the Pywalfox theming extension."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pywalstate")
except PackageNotFoundError:
    __version__ = "0+local"
from pywalstate._constants import LEGACY_STATE_VERSION, STATE_VERSION
from pywalstate.config import StoreConfig
from pywalstate.exceptions import (
    PywalStateError,
    StateConfigError,
    StorageError,
    UnsupportedStateVersionError,
)
from pywalstate.models import (
    CssTargets,
    ExtensionOption,
    ExtensionOptions,
    ExtensionState,
    InitialData,
    OptionSetData,
    ThemeModes,
    TimeIntervalEndpoint,
    default_state,
)
from pywalstate.state.store import ThemeStateStore
from pywalstate.storage import MemoryStorage, SqliteStorage, StorageBackend, StorageChange, open_storage

__all__ = [
    "__version__",
    "CssTargets",
    "ExtensionOption",
    "ExtensionOptions",
    "ExtensionState",
    "InitialData",
    "LEGACY_STATE_VERSION",
    "MemoryStorage",
    "OptionSetData",
    "PywalStateError",
    "STATE_VERSION",
    "SqliteStorage",
    "StateConfigError",
    "StorageBackend",
    "StorageChange",
    "StorageError",
    "StoreConfig",
    "ThemeModes",
    "ThemeStateStore",
    "TimeIntervalEndpoint",
    "UnsupportedStateVersionError",
    "default_state",
    "open_storage",
]
