"""Internal constants shared across the library."""

#: Schema version written by this release. ``stateVersion`` in storage is
#: compared against it on every load.
STATE_VERSION: float = 2.1

#: ``stateVersion`` found in data written by releases up to 2.0.4, which
#: did not stamp a schema version at all.
LEGACY_STATE_VERSION: float = 0.0

DEFAULT_CSS_FONT_SIZE: int = 13

#: Storage area reported with change notifications.
DEFAULT_AREA_NAME = "local"
