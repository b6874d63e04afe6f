"""User-facing extension options.

Each option is declared up front in :data:`OPTION_KINDS` together with its
kind: a *toggle* is reported as enabled/disabled, a *setting* is always
reported enabled and carries its value.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import ConfigDict, Field

from pywalstate._constants import DEFAULT_CSS_FONT_SIZE
from pywalstate.models._base import StateBaseModel
from pywalstate.models.theme import CssTargets

__all__ = [
    "CSS_TARGET_OPTIONS",
    "ExtensionOption",
    "ExtensionOptions",
    "OPTION_KINDS",
    "OptionKind",
    "OptionSetData",
    "TimeIntervalEndpoint",
]


class ExtensionOption(StrEnum):
    """Option keys, spelled as they are stored."""

    USER_CHROME = "userChrome"
    USER_CONTENT = "userContent"
    FONT_SIZE = "fontSize"
    DUCKDUCKGO = "duckduckgo"
    DARKREADER = "darkreader"
    FETCH_ON_STARTUP = "fetchOnStartup"
    INTERVAL_START = "intervalStart"
    INTERVAL_END = "intervalEnd"


class OptionKind(StrEnum):
    TOGGLE = "toggle"
    SETTING = "setting"


OPTION_KINDS: dict[ExtensionOption, OptionKind] = {
    ExtensionOption.USER_CHROME: OptionKind.TOGGLE,
    ExtensionOption.USER_CONTENT: OptionKind.TOGGLE,
    ExtensionOption.FONT_SIZE: OptionKind.SETTING,
    ExtensionOption.DUCKDUCKGO: OptionKind.TOGGLE,
    ExtensionOption.DARKREADER: OptionKind.TOGGLE,
    ExtensionOption.FETCH_ON_STARTUP: OptionKind.TOGGLE,
    ExtensionOption.INTERVAL_START: OptionKind.SETTING,
    ExtensionOption.INTERVAL_END: OptionKind.SETTING,
}

CSS_TARGET_OPTIONS: dict[CssTargets, ExtensionOption] = {
    CssTargets.USER_CHROME: ExtensionOption.USER_CHROME,
    CssTargets.USER_CONTENT: ExtensionOption.USER_CONTENT,
}


class TimeIntervalEndpoint(StateBaseModel):
    """One end of the day/night interval."""

    model_config = ConfigDict(frozen=True)

    hour: int
    minute: int
    string_format: str

    @classmethod
    def at(cls, hour: int, minute: int = 0) -> TimeIntervalEndpoint:
        return cls(hour=hour, minute=minute, string_format=f"{hour:02d}:{minute:02d}")


class ExtensionOptions(StateBaseModel):
    """User preferences. Replaced as a whole on every update."""

    model_config = ConfigDict(frozen=True)

    user_chrome: bool = False
    user_content: bool = False
    font_size: int = DEFAULT_CSS_FONT_SIZE
    duckduckgo: bool = False
    darkreader: bool = False
    fetch_on_startup: bool = False
    interval_start: TimeIntervalEndpoint = Field(default_factory=lambda: TimeIntervalEndpoint.at(10))
    interval_end: TimeIntervalEndpoint = Field(default_factory=lambda: TimeIntervalEndpoint.at(19))

    def value_of(self, option: ExtensionOption) -> Any:
        """Stored value of *option* (endpoints as plain mappings)."""
        return self.to_storage()[option.value]


class OptionSetData(StateBaseModel):
    """Descriptor for one option, as shown by the options UI."""

    model_config = ConfigDict(frozen=True)

    option: ExtensionOption
    enabled: bool
    value: Any = None
