"""Theme modes, CSS targets and the loosely typed theme payloads.

Templates, generated themes and palettes are produced and consumed by
collaborators outside this package (palette generation, CSS rendering), so
they are kept as plain mappings here. Only their nesting matters to the
store, see :mod:`pywalstate.state.merge`. The palette is not even that: it
is stored and handed back exactly as received (usually a list of colors).
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, TypeAlias

__all__ = [
    "CssTargets",
    "CustomColors",
    "GeneratedTheme",
    "PywalColors",
    "TEMPLATE_THEME_MODES",
    "ThemeModes",
    "ThemeTemplate",
    "UserTheme",
]

ThemeTemplate: TypeAlias = dict[str, Any]
GeneratedTheme: TypeAlias = dict[str, Any]
PywalColors: TypeAlias = Any
CustomColors: TypeAlias = dict[str, Any]
UserTheme: TypeAlias = dict[str, Any]


class ThemeModes(StrEnum):
    """User-selected theme mode."""

    DARK = "dark"
    LIGHT = "light"
    AUTO = "auto"


#: Modes a template can be keyed by. ``AUTO`` always resolves to one of these.
TEMPLATE_THEME_MODES: tuple[ThemeModes, ...] = (ThemeModes.LIGHT, ThemeModes.DARK)


class CssTargets(StrEnum):
    """Browser CSS files the extension can write to."""

    USER_CHROME = "userChrome"
    USER_CONTENT = "userContent"
