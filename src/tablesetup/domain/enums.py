"""Enumerations shared by the setup domain and its services."""

from __future__ import annotations

from enum import StrEnum


class LoadStatus(StrEnum):
    """Lifecycle of a catalog load as seen by presentation callers."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class DragPhase(StrEnum):
    """Phases of the interactive step reordering lifecycle."""

    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"


class ConditionField(StrEnum):
    """Condition keys, in the order the resolver evaluates them.

    The values double as the keys of the JSON ``conditions`` column.
    """

    PLAYER_COUNTS = "playerCounts"
    REQUIRE_NO_EXPANSIONS = "requireNoExpansions"
    INCLUDE_EXPANSIONS = "includeExpansions"
    EXCLUDE_EXPANSIONS = "excludeExpansions"
    INCLUDE_MODULES = "includeModules"
    EXCLUDE_MODULES = "excludeModules"
