"""Schema migration for stored state."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pywalstate._constants import LEGACY_STATE_VERSION, STATE_VERSION
from pywalstate.models.state import ExtensionState, default_state


def is_legacy_version(state_version: float) -> bool:
    return state_version == LEGACY_STATE_VERSION


def migrate_legacy_state(legacy: Mapping[str, Any]) -> ExtensionState:
    """Build a current-schema state from data written before ``stateVersion`` existed.

    *legacy* is accepted so callers hand over what they read, but it is
    ignored: the legacy layout has no mapping onto the current schema, so
    the result is always the default state stamped with
    :data:`STATE_VERSION`. The next load then sees a current schema and
    leaves storage alone.
    """
    migrated = default_state()
    migrated.state_version = STATE_VERSION
    return migrated
