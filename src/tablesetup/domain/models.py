"""Dataclasses describing games, expansions, modules and setup steps.

The resolver, the order maintainer and the selection state only ever see
these in-memory types.  Persistence adapters (SQLAlchemy or JSON snapshots)
translate their rows into the dataclasses below once, at load time, so the
rules layer never has to deal with loosely typed storage records.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NewType

# --- Strongly typed identifiers -------------------------------------------------

GameID = NewType("GameID", str)
ExpansionID = NewType("ExpansionID", str)
ModuleID = NewType("ModuleID", str)
StepID = NewType("StepID", str)


# --- Value types ----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Visual:
    """Presentation hint attached to a step (opaque to the resolver)."""

    asset: str = ""
    animation: str = ""


@dataclass(frozen=True, slots=True)
class StepCondition:
    """Flat conjunction of applicability constraints.

    ``None`` on a set-valued field means the constraint is absent.  Build
    instances through :func:`tablesetup.domain.conditions.build_condition`
    so empty collections are normalised away.
    """

    player_counts: frozenset[int] | None = None
    include_expansions: frozenset[ExpansionID] | None = None
    exclude_expansions: frozenset[ExpansionID] | None = None
    include_modules: frozenset[ModuleID] | None = None
    exclude_modules: frozenset[ModuleID] | None = None
    require_no_expansions: bool = False

    def is_empty(self) -> bool:
        return (
            not self.player_counts
            and not self.include_expansions
            and not self.exclude_expansions
            and not self.include_modules
            and not self.exclude_modules
            and not self.require_no_expansions
        )


@dataclass(frozen=True, slots=True)
class PlayerCountDomain:
    """Player counts a game supports, as an inclusive range or explicit set."""

    values: tuple[int, ...]

    @classmethod
    def from_range(cls, minimum: int, maximum: int) -> PlayerCountDomain:
        if minimum > maximum:
            raise ValueError(f"players_min ({minimum}) exceeds players_max ({maximum})")
        return cls(values=tuple(range(minimum, maximum + 1)))

    @classmethod
    def from_values(cls, values: Iterable[int]) -> PlayerCountDomain:
        return cls(values=tuple(sorted(set(values))))

    def __contains__(self, count: object) -> bool:
        return count in self.values

    def __len__(self) -> int:
        return len(self.values)

    @property
    def default(self) -> int | None:
        """Smallest supported count, or ``None`` for an empty domain."""

        return self.values[0] if self.values else None

    @property
    def minimum(self) -> int | None:
        return self.default

    @property
    def maximum(self) -> int | None:
        return self.values[-1] if self.values else None


# --- Catalog records ------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Step:
    """A single setup instruction."""

    id: StepID
    order: int
    text: str
    visual: Visual | None = None
    condition: StepCondition | None = None


@dataclass(slots=True)
class StepDraft:
    """Payload used to create or update a step through storage."""

    order: int
    text: str
    visual: Visual | None = None
    condition: StepCondition | None = None


@dataclass(slots=True)
class Game:
    """Game metadata owning a step catalog."""

    id: GameID
    title: str
    player_counts: PlayerCountDomain
    rules_url: str | None = None
    tagline: str | None = None
    cover_image: str | None = None
    popularity: int = 0


@dataclass(slots=True)
class Expansion:
    """Expansion owned by exactly one game."""

    id: ExpansionID
    game_id: GameID
    name: str


@dataclass(slots=True)
class Module:
    """Optional module owned by an expansion or, when ``expansion_id`` is None, the base game."""

    id: ModuleID
    name: str
    expansion_id: ExpansionID | None = None
    description: str | None = None


@dataclass(slots=True)
class GameCatalog:
    """Everything needed to resolve setup steps for one game."""

    game: Game
    expansions: list[Expansion] = field(default_factory=list)
    modules: list[Module] = field(default_factory=list)
    steps: list[Step] = field(default_factory=list)

    @property
    def id(self) -> GameID:
        return self.game.id

    def expansion_ids(self) -> set[ExpansionID]:
        return {expansion.id for expansion in self.expansions}

    def modules_by_owner(self) -> dict[ExpansionID | None, list[Module]]:
        grouped: dict[ExpansionID | None, list[Module]] = {}
        for module in self.modules:
            grouped.setdefault(module.expansion_id, []).append(module)
        return grouped
