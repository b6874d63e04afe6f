"""Write-through store for the extension state.

This is the only component allowed to change the snapshot. Mutators update
it synchronously, then forward the changed top-level keys to the storage
backend and return the pending write.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Coroutine, Mapping
from typing import Any

from pywalstate._constants import STATE_VERSION
from pywalstate.config import StoreConfig
from pywalstate.exceptions import UnsupportedStateVersionError
from pywalstate.models._default_themes import builtin_template
from pywalstate.models.options import (
    CSS_TARGET_OPTIONS,
    OPTION_KINDS,
    ExtensionOption,
    OptionKind,
    OptionSetData,
    TimeIntervalEndpoint,
)
from pywalstate.models.state import DebuggingInfo, ExtensionState, InitialData, default_state
from pywalstate.models.theme import (
    CssTargets,
    CustomColors,
    GeneratedTheme,
    PywalColors,
    ThemeModes,
    ThemeTemplate,
    UserTheme,
)
from pywalstate.state.merge import (
    CUSTOM_COLORS_KEY,
    USER_TEMPLATE_KEY,
    merge_generated_theme,
    merge_options,
    merge_template,
    merge_user_theme,
)
from pywalstate.state.migration import is_legacy_version, migrate_legacy_state
from pywalstate.storage.base import StorageBackend, StorageChange

_logger = logging.getLogger(__name__)


class ThemeStateStore:
    """Single owner of the extension state snapshot.

    Usage::

        store = ThemeStateStore(storage)
        await store.load()
        await store.set_theme_mode(ThemeModes.AUTO)
        template = store.get_generated_template()

    Mutators must be called from inside the running event loop. Each one
    returns an awaitable that resolves once the backend write completes
    (or fails); reads see the new value immediately either way. Mutators
    whose precondition is not met return an already completed awaitable
    and change nothing.
    """

    def __init__(self, storage: StorageBackend, config: StoreConfig | None = None) -> None:
        self._storage = storage
        self._config = config or StoreConfig()
        self._state = default_state()
        self._pending: set[asyncio.Future[None]] = set()
        self._write_lock = asyncio.Lock()
        storage.add_listener(self._on_storage_changed)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Replace the snapshot with stored data, migrating legacy data.

        Raises
        ------
        UnsupportedStateVersionError
            Only with ``strict_state_version``, for a stored version that is
            neither current nor legacy.
        """
        raw = await self._storage.get(default_state().to_storage())
        self._state = ExtensionState.from_storage(raw)

        stored_version = self._state.state_version
        if stored_version == STATE_VERSION:
            _logger.debug("Loaded state (stateVersion=%s)", stored_version)
            return

        if is_legacy_version(stored_version):
            _logger.info("Migrating stored state from stateVersion %s to %s", stored_version, STATE_VERSION)
            await self._storage.clear()
            migrated = migrate_legacy_state(raw)
            await self._storage.set(migrated.to_storage())
            self._state = migrated
            return

        if self._config.strict_state_version:
            raise UnsupportedStateVersionError(stored_version, STATE_VERSION)
        _logger.warning(
            "Stored stateVersion %s has no migration to %s; using stored data as-is",
            stored_version,
            STATE_VERSION,
        )

    async def flush(self) -> None:
        """Wait until every write issued so far has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def close(self) -> None:
        """Stop observing the backend."""
        self._storage.remove_listener(self._on_storage_changed)

    def _on_storage_changed(self, changes: dict[str, StorageChange], area_name: str) -> None:
        if self._config.log_storage_changes:
            _logger.debug("[%s] State change: %s", area_name, changes)

    # ------------------------------------------------------------------
    # Write-through helpers
    # ------------------------------------------------------------------

    def _set(self, **fields: Any) -> asyncio.Future[None]:
        for name, value in fields.items():
            setattr(self._state, name, value)
        items = self._state.model_dump(by_alias=True, mode="json", include=set(fields))
        return self._schedule(self._write(items))

    def _schedule(self, write: Coroutine[Any, Any, None]) -> asyncio.Future[None]:
        task = asyncio.get_running_loop().create_task(write)
        self._pending.add(task)
        task.add_done_callback(self._write_done)
        return task

    async def _write(self, items: dict[str, Any]) -> None:
        if not self._config.serialize_writes:
            await self._storage.set(items)
            return
        async with self._write_lock:
            await self._storage.set(items)

    def _write_done(self, task: asyncio.Future[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        err = task.exception()
        if err is not None:
            _logger.warning("State write failed", exc_info=err)

    @staticmethod
    def _completed() -> asyncio.Future[None]:
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        future.set_result(None)
        return future

    # ------------------------------------------------------------------
    # Structural mutators
    # ------------------------------------------------------------------

    def _update_global_template(self, data: Mapping[str, Any]) -> asyncio.Future[None]:
        mode = self.resolve_theme_mode().value
        templates = dict(self._state.global_templates)
        templates[mode] = merge_template(templates.get(mode), data)
        return self._set(global_templates=templates)

    def _update_generated_theme(self, data: Mapping[str, Any]) -> asyncio.Future[None]:
        return self._set(generated_theme=merge_generated_theme(self._state.generated_theme, data))

    def _update_generated_template(self, data: Mapping[str, Any]) -> asyncio.Future[None]:
        if self._state.generated_theme is None:
            return self._completed()
        return self._update_generated_theme({"template": data})

    def _update_current_theme(self, data: Mapping[str, Any]) -> asyncio.Future[None]:
        pywal_hash = self._state.pywal_hash
        if pywal_hash is None:
            return self._completed()

        mode = self.resolve_theme_mode().value
        user_themes = copy.deepcopy(self._state.user_themes)
        palette_themes = user_themes.setdefault(pywal_hash, {})
        palette_themes[mode] = merge_user_theme(palette_themes.get(mode), data)
        return self._set(user_themes=user_themes)

    def update_options(self, data: Mapping[str, Any]) -> asyncio.Future[None]:
        """Replace the given options, keyed by stored name or field name.

        Raises
        ------
        ValueError
            For an unknown option key or a value of the wrong shape.
        """
        return self._set(options=merge_options(self._state.options, data))

    def set_global_template(self, template: Mapping[str, Any]) -> asyncio.Future[None]:
        return self._update_global_template(template)

    def set_generated_template(self, template: Mapping[str, Any]) -> asyncio.Future[None]:
        return self._update_generated_template(template)

    def set_browser_theme(self, browser: Mapping[str, Any]) -> asyncio.Future[None]:
        return self._update_generated_theme({"browser": browser})

    def set_user_template(self, user_template: Mapping[str, Any]) -> asyncio.Future[None]:
        return self._update_current_theme({USER_TEMPLATE_KEY: user_template})

    def set_custom_colors(self, custom_colors: CustomColors | None) -> asyncio.Future[None]:
        return self._update_current_theme({CUSTOM_COLORS_KEY: custom_colors})

    # ------------------------------------------------------------------
    # Scalar setters
    # ------------------------------------------------------------------

    def set_version(self, version: float) -> asyncio.Future[None]:
        return self._set(version=float(version))

    def set_connected(self, connected: bool) -> asyncio.Future[None]:
        return self._set(connected=connected)

    def set_update_muted(self, muted: bool) -> asyncio.Future[None]:
        return self._set(update_muted=muted)

    def set_applied(self, is_applied: bool) -> asyncio.Future[None]:
        return self._set(is_applied=is_applied)

    def set_pywal_colors(self, pywal_colors: PywalColors) -> asyncio.Future[None]:
        return self._set(pywal_colors=copy.deepcopy(pywal_colors))

    def set_pywal_hash(self, pywal_hash: str | None) -> asyncio.Future[None]:
        return self._set(pywal_hash=pywal_hash)

    def set_theme_mode(self, mode: ThemeModes | str) -> asyncio.Future[None]:
        return self._set(mode=ThemeModes(mode))

    def set_is_day(self, is_day: bool) -> asyncio.Future[None]:
        return self._set(is_day=is_day)

    def set_generated_theme(self, generated_theme: GeneratedTheme | None) -> asyncio.Future[None]:
        return self._set(generated_theme=copy.deepcopy(generated_theme))

    def set_duckduckgo_enabled(self, enabled: bool) -> asyncio.Future[None]:
        return self.update_options({ExtensionOption.DUCKDUCKGO: enabled})

    def set_darkreader_enabled(self, enabled: bool) -> asyncio.Future[None]:
        return self.update_options({ExtensionOption.DARKREADER: enabled})

    def set_fetch_on_startup_enabled(self, enabled: bool) -> asyncio.Future[None]:
        return self.update_options({ExtensionOption.FETCH_ON_STARTUP: enabled})

    def set_interval_start(self, endpoint: TimeIntervalEndpoint | Mapping[str, Any]) -> asyncio.Future[None]:
        return self.update_options({ExtensionOption.INTERVAL_START: endpoint})

    def set_interval_end(self, endpoint: TimeIntervalEndpoint | Mapping[str, Any]) -> asyncio.Future[None]:
        return self.update_options({ExtensionOption.INTERVAL_END: endpoint})

    def set_css_enabled(self, target: CssTargets | str, enabled: bool) -> asyncio.Future[None]:
        return self.update_options({CSS_TARGET_OPTIONS[CssTargets(target)]: enabled})

    def set_css_font_size(self, font_size: int) -> asyncio.Future[None]:
        return self.update_options({ExtensionOption.FONT_SIZE: font_size})

    def reset_custom_colors(self) -> asyncio.Future[None]:
        return self.set_custom_colors(None)

    def reset_generated_theme(self) -> asyncio.Future[None]:
        return self.set_generated_theme(None)

    # ------------------------------------------------------------------
    # Derived accessors
    # ------------------------------------------------------------------

    def resolve_theme_mode(self) -> ThemeModes:
        """Mode used for template lookups: ``AUTO`` collapses to light or dark."""
        mode = self._state.mode
        if mode == ThemeModes.AUTO:
            return ThemeModes.LIGHT if self._state.is_day else ThemeModes.DARK
        return mode

    def get_generated_template(self) -> ThemeTemplate:
        """Template of the generated theme, or the global template without one."""
        generated_theme = self._state.generated_theme
        if generated_theme is not None:
            template = generated_theme.get("template")
            if isinstance(template, dict):
                return copy.deepcopy(template)
        return self.get_global_template()

    def get_global_template(self) -> ThemeTemplate:
        mode = self.resolve_theme_mode()
        template = self._state.global_templates.get(mode.value)
        if template is None:
            return builtin_template(mode)
        return copy.deepcopy(template)

    def get_user_theme(self) -> UserTheme:
        """Override for the current palette and resolved mode; ``{}`` if there is none."""
        pywal_hash = self._state.pywal_hash
        if pywal_hash is None:
            return {}
        saved_theme = self._state.user_themes.get(pywal_hash)
        if not saved_theme:
            return {}
        return copy.deepcopy(saved_theme.get(self.resolve_theme_mode().value) or {})

    def get_options_data(self) -> list[OptionSetData]:
        stored = self._state.options.to_storage()
        data: list[OptionSetData] = []
        for option, kind in OPTION_KINDS.items():
            value = stored[option.value]
            if kind == OptionKind.TOGGLE:
                data.append(OptionSetData(option=option, enabled=value))
            else:
                data.append(OptionSetData(option=option, enabled=True, value=value))
        return data

    def get_interval(self) -> tuple[TimeIntervalEndpoint, TimeIntervalEndpoint]:
        options = self._state.options
        return options.interval_start, options.interval_end

    def get_initial_data(self) -> InitialData:
        return InitialData(
            debugging_info=self.get_debugging_info(),
            is_applied=self.get_applied(),
            pywal_colors=self.get_pywal_colors(),
            template=self.get_generated_template(),
            user_theme=self.get_user_theme(),
            theme_mode=self.get_theme_mode(),
            template_theme_mode=self.resolve_theme_mode(),
            options=self.get_options_data(),
        )

    def get_debugging_info(self) -> DebuggingInfo:
        return DebuggingInfo(version=self.get_version(), connected=self.get_connected())

    # ------------------------------------------------------------------
    # Direct projections
    # ------------------------------------------------------------------

    def get_version(self) -> float:
        return self._state.version

    def get_connected(self) -> bool:
        return self._state.connected

    def get_update_muted(self) -> bool:
        return self._state.update_muted

    def get_theme_mode(self) -> ThemeModes:
        return self._state.mode

    def get_is_day(self) -> bool:
        return self._state.is_day

    def get_applied(self) -> bool:
        return self._state.is_applied

    def get_pywal_colors(self) -> PywalColors:
        return copy.deepcopy(self._state.pywal_colors)

    def get_pywal_hash(self) -> str | None:
        return self._state.pywal_hash

    def get_generated_theme(self) -> GeneratedTheme | None:
        return copy.deepcopy(self._state.generated_theme)

    def get_duckduckgo_enabled(self) -> bool:
        return self._state.options.duckduckgo

    def get_darkreader_enabled(self) -> bool:
        return self._state.options.darkreader

    def get_fetch_on_startup_enabled(self) -> bool:
        return self._state.options.fetch_on_startup

    def get_css_font_size(self) -> int:
        return self._state.options.font_size

    def get_css_enabled(self, target: CssTargets | str) -> bool:
        option = CSS_TARGET_OPTIONS[CssTargets(target)]
        return bool(self._state.options.to_storage()[option.value])

    def snapshot(self) -> dict[str, Any]:
        """Copy of the whole state, keyed as stored."""
        return self._state.to_storage()

    def dump(self) -> None:
        _logger.debug("Current state: %s", self._state.to_storage())
