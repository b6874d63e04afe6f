"""The extension state snapshot and its default value."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import Field, ValidationError, field_validator

from pywalstate.models._base import StateBaseModel
from pywalstate.models._default_themes import builtin_template
from pywalstate.models.options import ExtensionOptions, OptionSetData
from pywalstate.models.theme import (
    TEMPLATE_THEME_MODES,
    GeneratedTheme,
    PywalColors,
    ThemeModes,
    ThemeTemplate,
    UserTheme,
)

__all__ = ["DebuggingInfo", "ExtensionState", "InitialData", "default_global_templates", "default_state"]

_logger = logging.getLogger(__name__)

_TEMPLATE_MODE_KEYS = frozenset(mode.value for mode in TEMPLATE_THEME_MODES)


def default_global_templates() -> dict[str, ThemeTemplate]:
    return {mode.value: builtin_template(mode) for mode in TEMPLATE_THEME_MODES}


class ExtensionState(StateBaseModel):
    """Complete in-memory snapshot of the extension state.

    Field names map to the top-level storage keys (``stateVersion``,
    ``pywalHash``, ...). ``global_templates`` always holds exactly one
    template per resolved mode.
    """

    version: float = 0.0
    state_version: float = 0.0
    connected: bool = False
    update_muted: bool = False
    mode: ThemeModes = ThemeModes.DARK
    is_day: bool = False
    is_applied: bool = False
    pywal_colors: PywalColors = None
    pywal_hash: str | None = None
    generated_theme: GeneratedTheme | None = None
    global_templates: dict[str, ThemeTemplate] = Field(default_factory=default_global_templates)
    user_themes: dict[str, dict[str, UserTheme]] = Field(default_factory=dict)
    options: ExtensionOptions = Field(default_factory=ExtensionOptions)

    @field_validator("global_templates", mode="before")
    @classmethod
    def _one_template_per_mode(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return default_global_templates()
        templates: dict[str, Any] = {}
        for mode in TEMPLATE_THEME_MODES:
            template = value.get(mode.value)
            templates[mode.value] = template if isinstance(template, Mapping) else builtin_template(mode)
        return templates

    @field_validator("user_themes", mode="before")
    @classmethod
    def _drop_malformed_user_themes(cls, value: Any) -> Any:
        """Drop bad palette or mode entries instead of the whole map."""
        if not isinstance(value, Mapping):
            return value
        user_themes: dict[str, dict[str, Any]] = {}
        dropped: list[str] = []
        for pywal_hash, themes in value.items():
            if not isinstance(themes, Mapping):
                dropped.append(str(pywal_hash))
                continue
            kept: dict[str, Any] = {}
            for mode, theme in themes.items():
                if mode in _TEMPLATE_MODE_KEYS and isinstance(theme, Mapping):
                    kept[mode] = theme
                else:
                    dropped.append(f"{pywal_hash}.{mode}")
            user_themes[str(pywal_hash)] = kept
        if dropped:
            _logger.warning("Ignoring malformed stored user themes: %s", ", ".join(dropped))
        return user_themes

    @classmethod
    def from_storage(cls, raw: Mapping[str, Any]) -> ExtensionState:
        """Build a snapshot from stored data.

        Keys that fail validation are dropped so their defaults apply;
        every other stored key is kept.
        """
        data = dict(raw)
        while True:
            try:
                return cls.model_validate(data)
            except ValidationError as err:
                malformed = {str(error["loc"][0]) for error in err.errors() if error["loc"]} & set(data)
                if not malformed:
                    raise
                _logger.warning("Ignoring malformed stored keys: %s", ", ".join(sorted(malformed)))
                for key in malformed:
                    del data[key]


def default_state() -> ExtensionState:
    """Canonical initial snapshot. Every call returns an independent copy."""
    return ExtensionState()


class DebuggingInfo(StateBaseModel):
    version: float
    connected: bool


class InitialData(StateBaseModel):
    """Everything the extension UI needs when it opens."""

    debugging_info: DebuggingInfo
    is_applied: bool
    pywal_colors: PywalColors
    template: ThemeTemplate
    user_theme: UserTheme
    theme_mode: ThemeModes
    template_theme_mode: ThemeModes
    options: list[OptionSetData]
