from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import pytest

from pywalstate.config import StoreConfig
from pywalstate.exceptions import StorageError
from pywalstate.models import (
    DEFAULT_THEME_DARK,
    DEFAULT_THEME_LIGHT,
    CssTargets,
    ExtensionOption,
    OptionSetData,
    ThemeModes,
    TimeIntervalEndpoint,
)
from pywalstate.state.store import ThemeStateStore
from pywalstate.storage.memory import MemoryStorage


class _DelayedStorage(MemoryStorage):
    """Delays each write by the next value in *delays*."""

    def __init__(self, delays: list[float]) -> None:
        super().__init__()
        self._delays = list(delays)

    async def set(self, items: Mapping[str, Any]) -> None:
        delay = self._delays.pop(0) if self._delays else 0.0
        await asyncio.sleep(delay)
        await super().set(items)


class _FailingStorage(MemoryStorage):
    async def set(self, items: Mapping[str, Any]) -> None:
        raise StorageError("disk full", operation="set")


def _store(storage: MemoryStorage | None = None, **config: Any) -> ThemeStateStore:
    return ThemeStateStore(storage or MemoryStorage(), StoreConfig(**config))


_GENERATED_THEME = {
    "template": {"palette": {"background": 4, "foreground": 11}},
    "browser": {"colors": {"frame": "#1d1f21", "toolbar": "#282a2e"}},
}

_REPEATABLE_UPDATES: dict[str, Callable[[ThemeStateStore], Awaitable[None]]] = {
    "set_user_template": lambda store: store.set_user_template({"palette": {"background": 1}}),
    "update_options": lambda store: store.update_options({"fontSize": 20, "duckduckgo": True}),
    "set_global_template": lambda store: store.set_global_template({"palette": {"background": 3}}),
    "set_browser_theme": lambda store: store.set_browser_theme({"colors": {"frame": "#1d1f21"}}),
}

# ------------------------------------------------------------------
# Theme mode resolution
# ------------------------------------------------------------------


class TestResolveThemeMode:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("mode", [ThemeModes.LIGHT, ThemeModes.DARK])
    @pytest.mark.parametrize("is_day", [True, False])
    async def test_static_mode_ignores_is_day(self, mode: ThemeModes, is_day: bool) -> None:
        store = _store()
        await store.set_theme_mode(mode)
        await store.set_is_day(is_day)
        assert store.resolve_theme_mode() == mode

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("is_day", "expected"), [(True, ThemeModes.LIGHT), (False, ThemeModes.DARK)])
    async def test_auto_follows_is_day(self, is_day: bool, expected: ThemeModes) -> None:
        store = _store()
        await store.set_theme_mode(ThemeModes.AUTO)
        await store.set_is_day(is_day)
        assert store.resolve_theme_mode() == expected
        assert store.get_theme_mode() == ThemeModes.AUTO

    @pytest.mark.asyncio
    async def test_fresh_store_auto_then_day_is_light(self) -> None:
        store = _store()
        await store.set_theme_mode("auto")
        await store.set_is_day(True)
        assert store.resolve_theme_mode() == ThemeModes.LIGHT


# ------------------------------------------------------------------
# Templates
# ------------------------------------------------------------------


class TestTemplates:
    @pytest.mark.asyncio
    async def test_generated_template_falls_back_to_global(self) -> None:
        store = _store()
        assert store.get_generated_template() == DEFAULT_THEME_DARK
        await store.set_theme_mode(ThemeModes.LIGHT)
        assert store.get_generated_template() == DEFAULT_THEME_LIGHT
        assert store.get_generated_template() == store.get_global_template()

    @pytest.mark.asyncio
    async def test_generated_template_used_when_present(self) -> None:
        store = _store()
        await store.set_generated_theme(_GENERATED_THEME)
        assert store.get_generated_template() == _GENERATED_THEME["template"]

    @pytest.mark.asyncio
    async def test_set_generated_template_is_noop_without_theme(self) -> None:
        storage = MemoryStorage()
        store = _store(storage)
        result = await store.set_generated_template({"palette": {"background": 1}})
        assert result is None
        assert store.get_generated_theme() is None
        assert storage.dump() == {}

    @pytest.mark.asyncio
    async def test_set_generated_template_merges(self) -> None:
        store = _store()
        await store.set_generated_theme(_GENERATED_THEME)
        await store.set_generated_template({"palette": {"background": 1}})
        assert store.get_generated_template() == {"palette": {"background": 1, "foreground": 11}}
        assert store.get_generated_theme()["browser"] == _GENERATED_THEME["browser"]

    @pytest.mark.asyncio
    async def test_set_browser_theme_without_generated_theme(self) -> None:
        storage = MemoryStorage()
        store = _store(storage)
        await store.set_browser_theme({"colors": {"frame": "#000000"}})
        assert store.get_generated_theme() == {"browser": {"colors": {"frame": "#000000"}}}
        assert storage.dump()["generatedTheme"] == {"browser": {"colors": {"frame": "#000000"}}}

    @pytest.mark.asyncio
    async def test_reset_generated_theme(self) -> None:
        store = _store()
        await store.set_generated_theme(_GENERATED_THEME)
        await store.reset_generated_theme()
        assert store.get_generated_theme() is None
        assert store.get_generated_template() == DEFAULT_THEME_DARK

    @pytest.mark.asyncio
    async def test_global_template_update_targets_resolved_mode(self) -> None:
        storage = MemoryStorage()
        store = _store(storage)
        await store.set_theme_mode(ThemeModes.AUTO)
        await store.set_is_day(True)
        await store.set_global_template({"palette": {"background": 7}})

        assert store.get_global_template()["palette"]["background"] == 7
        assert store.get_global_template()["palette"]["foreground"] == DEFAULT_THEME_LIGHT["palette"]["foreground"]
        stored = storage.dump()["globalTemplates"]
        assert set(stored) == {"light", "dark"}
        assert stored["dark"] == DEFAULT_THEME_DARK

        await store.set_is_day(False)
        assert store.get_global_template() == DEFAULT_THEME_DARK

    @pytest.mark.asyncio
    async def test_returned_templates_are_copies(self) -> None:
        store = _store()
        template = store.get_global_template()
        template["palette"]["background"] = 99
        assert store.get_global_template() == DEFAULT_THEME_DARK


# ------------------------------------------------------------------
# Per-palette user themes
# ------------------------------------------------------------------


class TestUserTheme:
    @pytest.mark.asyncio
    async def test_empty_without_hash(self) -> None:
        storage = MemoryStorage()
        store = _store(storage)
        await store.set_custom_colors({"background": "#000"})
        assert store.get_user_theme() == {}
        assert store.snapshot()["userThemes"] == {}
        assert "userThemes" not in storage.dump()

    @pytest.mark.asyncio
    async def test_empty_for_unknown_hash(self) -> None:
        store = _store()
        await store.set_pywal_hash("abc123")
        await store.set_custom_colors({"background": "#000"})
        await store.set_pywal_hash("def456")
        assert store.get_user_theme() == {}

    @pytest.mark.asyncio
    async def test_custom_colors_are_per_mode(self) -> None:
        store = _store()
        await store.set_pywal_hash("abc123")
        await store.set_custom_colors({"background": "#000"})
        assert store.get_user_theme() == {"customColors": {"background": "#000"}}

        await store.set_theme_mode(ThemeModes.LIGHT)
        assert store.get_user_theme() == {}

        await store.set_theme_mode(ThemeModes.DARK)
        assert store.get_user_theme() == {"customColors": {"background": "#000"}}

    @pytest.mark.asyncio
    async def test_overrides_survive_repeated_calls(self) -> None:
        store = _store()
        await store.set_pywal_hash("abc123")
        await store.set_user_template({"palette": {"background": 1}})
        await store.set_custom_colors({"background": "#000"})
        await store.set_user_template({"palette": {"foreground": 2}})
        assert store.get_user_theme() == {
            "userTemplate": {"palette": {"background": 1, "foreground": 2}},
            "customColors": {"background": "#000"},
        }

    @pytest.mark.asyncio
    async def test_reset_custom_colors_keeps_user_template(self) -> None:
        store = _store()
        await store.set_pywal_hash("abc123")
        await store.set_user_template({"palette": {"background": 1}})
        await store.set_custom_colors({"background": "#000"})
        await store.reset_custom_colors()
        assert store.get_user_theme() == {"userTemplate": {"palette": {"background": 1}}}

    @pytest.mark.asyncio
    async def test_other_palettes_untouched(self) -> None:
        storage = MemoryStorage()
        store = _store(storage)
        await store.set_pywal_hash("abc123")
        await store.set_custom_colors({"background": "#000"})
        await store.set_pywal_hash("def456")
        await store.set_custom_colors({"background": "#fff"})
        assert storage.dump()["userThemes"] == {
            "abc123": {"dark": {"customColors": {"background": "#000"}}},
            "def456": {"dark": {"customColors": {"background": "#fff"}}},
        }


class TestRepeatedUpdates:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("update", list(_REPEATABLE_UPDATES.values()), ids=list(_REPEATABLE_UPDATES))
    async def test_same_call_twice_is_idempotent(self, update: Callable[[ThemeStateStore], Awaitable[None]]) -> None:
        storage = MemoryStorage()
        store = _store(storage)
        await store.set_pywal_hash("abc123")
        await update(store)
        once, stored_once = store.snapshot(), storage.dump()
        await update(store)
        assert store.snapshot() == once
        assert storage.dump() == stored_once


# ------------------------------------------------------------------
# Options
# ------------------------------------------------------------------


class TestOptions:
    @pytest.mark.asyncio
    async def test_update_changes_only_given_option(self) -> None:
        storage = MemoryStorage()
        store = _store(storage)
        before = store.snapshot()["options"]
        await store.update_options({"fontSize": 20})
        after = store.snapshot()["options"]

        assert after["fontSize"] == 20
        assert {k: v for k, v in after.items() if k != "fontSize"} == {
            k: v for k, v in before.items() if k != "fontSize"
        }
        assert storage.dump() == {"options": after}

    @pytest.mark.asyncio
    async def test_unknown_option_raises_before_any_change(self) -> None:
        storage = MemoryStorage()
        store = _store(storage)
        with pytest.raises(ValueError):
            store.update_options({"autoUpdate": True})
        assert storage.dump() == {}

    @pytest.mark.asyncio
    async def test_feature_toggles(self) -> None:
        store = _store()
        await store.set_duckduckgo_enabled(True)
        await store.set_darkreader_enabled(True)
        await store.set_fetch_on_startup_enabled(True)
        assert store.get_duckduckgo_enabled() is True
        assert store.get_darkreader_enabled() is True
        assert store.get_fetch_on_startup_enabled() is True

    @pytest.mark.asyncio
    async def test_css_targets(self) -> None:
        store = _store()
        await store.set_css_enabled(CssTargets.USER_CHROME, True)
        assert store.get_css_enabled("userChrome") is True
        assert store.get_css_enabled(CssTargets.USER_CONTENT) is False
        await store.set_css_font_size(16)
        assert store.get_css_font_size() == 16
        with pytest.raises(ValueError):
            store.get_css_enabled("userStyles")

    @pytest.mark.asyncio
    async def test_interval(self) -> None:
        store = _store()
        await store.set_interval_start(TimeIntervalEndpoint.at(8, 30))
        await store.set_interval_end({"hour": 20, "minute": 0, "stringFormat": "20:00"})
        start, end = store.get_interval()
        assert start == TimeIntervalEndpoint(hour=8, minute=30, string_format="08:30")
        assert end.string_format == "20:00"

    def test_options_data_on_defaults(self) -> None:
        data = _store().get_options_data()
        assert [item.option for item in data] == list(ExtensionOption)

        by_option = {item.option: item for item in data}
        for option in (
            ExtensionOption.USER_CHROME,
            ExtensionOption.USER_CONTENT,
            ExtensionOption.DUCKDUCKGO,
            ExtensionOption.DARKREADER,
            ExtensionOption.FETCH_ON_STARTUP,
        ):
            assert by_option[option] == OptionSetData(option=option, enabled=False)
        assert by_option[ExtensionOption.FONT_SIZE] == OptionSetData(
            option=ExtensionOption.FONT_SIZE, enabled=True, value=13
        )
        assert by_option[ExtensionOption.INTERVAL_START].enabled is True
        assert by_option[ExtensionOption.INTERVAL_START].value == {"hour": 10, "minute": 0, "stringFormat": "10:00"}
        assert by_option[ExtensionOption.INTERVAL_END].value == {"hour": 19, "minute": 0, "stringFormat": "19:00"}

    @pytest.mark.asyncio
    async def test_options_data_reflects_toggle(self) -> None:
        store = _store()
        await store.set_darkreader_enabled(True)
        by_option = {item.option: item for item in store.get_options_data()}
        assert by_option[ExtensionOption.DARKREADER].enabled is True
        assert by_option[ExtensionOption.DARKREADER].value is None


# ------------------------------------------------------------------
# Scalars and aggregate views
# ------------------------------------------------------------------


class TestScalars:
    @pytest.mark.asyncio
    async def test_setters_write_through(self) -> None:
        storage = MemoryStorage()
        store = _store(storage)
        await store.set_version(2.1)
        await store.set_connected(True)
        await store.set_update_muted(True)
        await store.set_applied(True)
        await store.set_pywal_colors({"colors": ["#000000"] * 16, "wallpaper": "/tmp/wall.png"})
        await store.set_pywal_hash("abc123")

        assert store.get_version() == 2.1
        assert store.get_connected() is True
        assert store.get_update_muted() is True
        assert store.get_applied() is True
        assert store.get_pywal_hash() == "abc123"
        assert store.get_pywal_colors()["wallpaper"] == "/tmp/wall.png"
        assert storage.dump() == {
            "version": 2.1,
            "connected": True,
            "updateMuted": True,
            "isApplied": True,
            "pywalColors": {"colors": ["#000000"] * 16, "wallpaper": "/tmp/wall.png"},
            "pywalHash": "abc123",
        }

    @pytest.mark.asyncio
    async def test_snapshot_updated_before_write_completes(self) -> None:
        store = _store(_DelayedStorage([0.05]))
        pending = store.set_connected(True)
        assert store.get_connected() is True
        assert not pending.done()
        await pending

    @pytest.mark.asyncio
    async def test_initial_data(self) -> None:
        store = _store()
        await store.set_version(2.1)
        await store.set_theme_mode(ThemeModes.AUTO)
        await store.set_is_day(True)
        data = store.get_initial_data()
        assert data.debugging_info.version == 2.1
        assert data.debugging_info.connected is False
        assert data.theme_mode == ThemeModes.AUTO
        assert data.template_theme_mode == ThemeModes.LIGHT
        assert data.template == DEFAULT_THEME_LIGHT
        assert data.user_theme == {}
        assert len(data.options) == len(ExtensionOption)
        dumped = data.model_dump(by_alias=True, mode="json")
        assert dumped["debuggingInfo"] == {"version": 2.1, "connected": False}
        assert dumped["templateThemeMode"] == "light"

    @pytest.mark.asyncio
    async def test_palette_list_survives_reload(self) -> None:
        palette = ["#1d1f21"] * 16
        storage = MemoryStorage()
        store = _store(storage)
        await store.load()
        await store.set_pywal_colors(palette)

        assert store.get_initial_data().pywal_colors == palette
        assert storage.dump()["pywalColors"] == palette

        reloaded = _store(storage)
        await reloaded.load()
        assert reloaded.get_pywal_colors() == palette
        assert reloaded.get_initial_data().model_dump(by_alias=True, mode="json")["pywalColors"] == palette


# ------------------------------------------------------------------
# Write ordering and failures
# ------------------------------------------------------------------


class TestWrites:
    @pytest.mark.asyncio
    async def test_serialized_writes_land_in_call_order(self) -> None:
        storage = _DelayedStorage([0.05, 0.0])
        store = _store(storage, serialize_writes=True)
        store.set_css_font_size(20)
        store.set_css_font_size(30)
        await store.flush()
        assert storage.dump()["options"]["fontSize"] == 30
        assert store.get_css_font_size() == 30

    @pytest.mark.asyncio
    async def test_unserialized_writes_last_landing_wins(self) -> None:
        storage = _DelayedStorage([0.05, 0.0])
        store = _store(storage, serialize_writes=False)
        store.set_css_font_size(20)
        store.set_css_font_size(30)
        await store.flush()
        assert storage.dump()["options"]["fontSize"] == 20
        assert store.get_css_font_size() == 30

    @pytest.mark.asyncio
    async def test_write_failure_surfaces_to_caller(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.WARNING, logger="pywalstate.state.store")
        store = _store(_FailingStorage())
        with pytest.raises(StorageError, match="disk full"):
            await store.set_connected(True)
        assert store.get_connected() is True
        assert "State write failed" in caplog.text

    @pytest.mark.asyncio
    async def test_flush_settles_failed_writes(self) -> None:
        store = _store(_FailingStorage())
        store.set_connected(True)
        await store.flush()


# ------------------------------------------------------------------
# Change observer
# ------------------------------------------------------------------


class TestChangeObserver:
    @pytest.mark.asyncio
    async def test_changes_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="pywalstate.state.store")
        store = _store()
        await store.set_pywal_hash("abc123")
        assert "[local] State change" in caplog.text
        assert "pywalHash" in caplog.text

    @pytest.mark.asyncio
    async def test_external_write_does_not_touch_snapshot(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="pywalstate.state.store")
        storage = MemoryStorage()
        store = _store(storage)
        await storage.set({"pywalHash": "written-elsewhere"})
        assert "written-elsewhere" in caplog.text
        assert store.get_pywal_hash() is None

    @pytest.mark.asyncio
    async def test_logging_disabled_or_closed(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="pywalstate.state.store")
        quiet = _store(log_storage_changes=False)
        await quiet.set_connected(True)

        closed = _store()
        closed.close()
        await closed.set_connected(True)

        assert "State change" not in caplog.text
