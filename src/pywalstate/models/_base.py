"""Base model for persisted state records.

Every stored record inherits from :class:`StateBaseModel`, which maps the
camelCase keys used in storage (``stateVersion``, ``pywalHash``, ...) to
snake_case fields via ``alias_generator=to_camel``. Records are read with
``populate_by_name=True`` so callers may use either spelling, and written
back with ``by_alias=True`` so the stored schema never changes shape.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StateBaseModel(BaseModel):
    """Base for records that round-trip through the storage backend."""

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_storage(self) -> dict[str, Any]:
        """Dump to plain JSON-compatible data keyed by storage names."""
        return self.model_dump(by_alias=True, mode="json")
