"""Builtin global templates for the light and dark theme modes.

Palette entries are indices into the 16 pywal colors (optionally with a
brightness modifier). The other sections map target properties to palette
entry names.
"""

from __future__ import annotations

import copy

from pywalstate.models.theme import ThemeModes, ThemeTemplate

_BROWSER_TEMPLATE: ThemeTemplate = {
    "icons": "accentPrimary",
    "icons_attention": "accentSecondary",
    "frame": "background",
    "tab_text": "foreground",
    "tab_loading": "accentPrimary",
    "tab_background_text": "text",
    "tab_selected": "backgroundLight",
    "tab_line": "accentPrimary",
    "tab_background_separator": "background",
    "toolbar": "background",
    "toolbar_field": "backgroundLight",
    "toolbar_field_focus": "backgroundLight",
    "toolbar_field_text": "foreground",
    "toolbar_field_text_focus": "foreground",
    "toolbar_field_border": "backgroundLight",
    "toolbar_field_border_focus": "accentPrimary",
    "toolbar_field_separator": "background",
    "toolbar_field_highlight": "accentPrimary",
    "toolbar_field_highlight_text": "background",
    "toolbar_text": "foreground",
    "toolbar_bottom_separator": "background",
    "toolbar_top_separator": "background",
    "popup": "background",
    "popup_text": "foreground",
    "popup_border": "backgroundLight",
    "popup_highlight": "accentPrimary",
    "popup_highlight_text": "background",
    "ntp_background": "background",
    "ntp_text": "foreground",
    "sidebar": "background",
    "sidebar_border": "backgroundLight",
    "sidebar_text": "foreground",
    "sidebar_highlight": "accentPrimary",
    "sidebar_highlight_text": "background",
    "button_background_hover": "backgroundLight",
    "button_background_active": "backgroundLight",
}

_DUCKDUCKGO_TEMPLATE: ThemeTemplate = {
    "background": "background",
    "foreground": "foreground",
    "header": "background",
    "link": "accentPrimary",
    "visited": "accentSecondary",
}

_DARKREADER_TEMPLATE: ThemeTemplate = {
    "background": "background",
    "foreground": "foreground",
    "selection": "accentPrimary",
}

DEFAULT_THEME_DARK: ThemeTemplate = {
    "palette": {
        "background": 0,
        "foreground": 15,
        "backgroundLight": {"colorIndex": 0, "modifier": 0.2},
        "accentPrimary": 1,
        "accentSecondary": 2,
        "text": 7,
    },
    "browser": _BROWSER_TEMPLATE,
    "duckduckgo": _DUCKDUCKGO_TEMPLATE,
    "darkreader": _DARKREADER_TEMPLATE,
}

DEFAULT_THEME_LIGHT: ThemeTemplate = {
    "palette": {
        "background": 15,
        "foreground": 0,
        "backgroundLight": {"colorIndex": 15, "modifier": -0.1},
        "accentPrimary": 1,
        "accentSecondary": 2,
        "text": 8,
    },
    "browser": _BROWSER_TEMPLATE,
    "duckduckgo": _DUCKDUCKGO_TEMPLATE,
    "darkreader": _DARKREADER_TEMPLATE,
}


def builtin_template(mode: ThemeModes) -> ThemeTemplate:
    """Return a private copy of the builtin template for a resolved *mode*."""
    if mode == ThemeModes.LIGHT:
        return copy.deepcopy(DEFAULT_THEME_LIGHT)
    return copy.deepcopy(DEFAULT_THEME_DARK)
