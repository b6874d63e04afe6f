"""Per-entity merge functions for the mutable parts of the snapshot.

Each function returns a new value and never mutates its inputs. Nested
mappings are merged key by key only where the entity says so; everything
else (scalars, lists, opaque mappings) is replaced wholesale.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from pywalstate.models.options import ExtensionOption, ExtensionOptions
from pywalstate.models.theme import GeneratedTheme, ThemeTemplate, UserTheme

__all__ = [
    "merge_generated_theme",
    "merge_options",
    "merge_template",
    "merge_user_theme",
    "option_key",
]

# Generated theme sections merged recursively; other keys are replaced.
_GENERATED_THEME_NESTED_KEYS = frozenset({"template", "browser"})

USER_TEMPLATE_KEY = "userTemplate"
CUSTOM_COLORS_KEY = "customColors"


def merge_template(base: Mapping[str, Any] | None, patch: Mapping[str, Any]) -> ThemeTemplate:
    """Deep merge: mappings recurse, anything else replaces."""
    merged: dict[str, Any] = copy.deepcopy(dict(base)) if base else {}
    for key, value in patch.items():
        existing = merged.get(key)
        if isinstance(value, Mapping) and isinstance(existing, dict):
            merged[key] = merge_template(existing, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def merge_generated_theme(base: Mapping[str, Any] | None, patch: Mapping[str, Any]) -> GeneratedTheme:
    """Merge into a generated theme, treating ``None`` as an empty theme."""
    merged: dict[str, Any] = copy.deepcopy(dict(base)) if base else {}
    for key, value in patch.items():
        if key in _GENERATED_THEME_NESTED_KEYS and isinstance(value, Mapping):
            merged[key] = merge_template(merged.get(key) if isinstance(merged.get(key), dict) else None, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def merge_user_theme(base: Mapping[str, Any] | None, patch: Mapping[str, Any]) -> UserTheme:
    """Merge into one palette/mode override.

    ``userTemplate`` merges recursively so repeated partial edits
    accumulate. ``customColors`` is a complete color set and replaces the
    previous one. A ``None`` value removes the key.
    """
    merged: dict[str, Any] = copy.deepcopy(dict(base)) if base else {}
    for key, value in patch.items():
        if value is None:
            merged.pop(key, None)
        elif key == USER_TEMPLATE_KEY and isinstance(value, Mapping):
            merged[key] = merge_template(merged.get(key) if isinstance(merged.get(key), dict) else None, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def option_key(key: str) -> ExtensionOption:
    """Resolve a stored key (``fontSize``) or field name (``font_size``)."""
    try:
        return ExtensionOption(key)
    except ValueError:
        pass
    field = ExtensionOptions.model_fields.get(key)
    if field is None or field.alias is None:
        raise ValueError(f"Unknown option: {key!r}")
    return ExtensionOption(field.alias)


def merge_options(options: ExtensionOptions, patch: Mapping[str, Any]) -> ExtensionOptions:
    """One-level merge: every given option replaces its previous value."""
    stored = options.to_storage()
    for key, value in patch.items():
        if isinstance(value, BaseModel):
            value = value.model_dump(by_alias=True, mode="json")
        stored[option_key(key).value] = value
    return ExtensionOptions.model_validate(stored)
