"""Data models for the persisted extension state."""

from pywalstate.models._default_themes import DEFAULT_THEME_DARK, DEFAULT_THEME_LIGHT, builtin_template
from pywalstate.models.theme import (
    TEMPLATE_THEME_MODES,
    CssTargets,
    CustomColors,
    GeneratedTheme,
    PywalColors,
    ThemeModes,
    ThemeTemplate,
    UserTheme,
)
from pywalstate.models.options import (
    CSS_TARGET_OPTIONS,
    OPTION_KINDS,
    ExtensionOption,
    ExtensionOptions,
    OptionKind,
    OptionSetData,
    TimeIntervalEndpoint,
)
from pywalstate.models.state import DebuggingInfo, ExtensionState, InitialData, default_state

__all__ = [
    "CSS_TARGET_OPTIONS",
    "CssTargets",
    "CustomColors",
    "DEFAULT_THEME_DARK",
    "DEFAULT_THEME_LIGHT",
    "DebuggingInfo",
    "ExtensionOption",
    "ExtensionOptions",
    "ExtensionState",
    "GeneratedTheme",
    "InitialData",
    "OPTION_KINDS",
    "OptionKind",
    "OptionSetData",
    "PywalColors",
    "TEMPLATE_THEME_MODES",
    "ThemeModes",
    "ThemeTemplate",
    "TimeIntervalEndpoint",
    "UserTheme",
    "builtin_template",
    "default_state",
]
