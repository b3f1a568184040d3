"""Per-session selection of player count, expansions and modules.

:class:`Selection` is an immutable snapshot handed to the resolver.
:class:`SelectionState` owns the current snapshot for one active game and
replaces it wholesale on every mutation, so a reader never observes a
half-applied change (for instance a module still selected after its
expansion was switched off).
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .models import Expansion, ExpansionID, GameCatalog, Module, ModuleID

BASE_GAME_LABEL = "Base game only"
MULTIPLE_EXPANSIONS_LABEL = "Multiple"


@dataclass(frozen=True, slots=True)
class Selection:
    """Snapshot of the user's current choices."""

    player_count: int | None = None
    selected_expansions: frozenset[ExpansionID] = field(default_factory=frozenset)
    selected_modules: frozenset[ModuleID] = field(default_factory=frozenset)


def available_modules(catalog: GameCatalog, selected_expansions: Iterable[str]) -> list[Module]:
    """Modules selectable under the given expansions.

    Base game modules come first, then each selected expansion's modules in
    catalog order.  Duplicate module ids are listed once.
    """

    selected = set(selected_expansions)
    grouped = catalog.modules_by_owner()
    owners: list[ExpansionID | None] = [None]
    owners.extend(expansion.id for expansion in catalog.expansions if expansion.id in selected)
    result: list[Module] = []
    seen: set[str] = set()
    for owner in owners:
        for module in grouped.get(owner, []):
            if module.id in seen:
                continue
            seen.add(module.id)
            result.append(module)
    return result


def expansion_summary_label(
    expansions: Sequence[Expansion], selected_expansions: Iterable[str]
) -> str:
    """Short label describing the selected expansions."""

    selected = set(selected_expansions)
    names = [expansion.name for expansion in expansions if expansion.id in selected]
    if not names:
        return BASE_GAME_LABEL
    if len(names) == 1:
        return names[0]
    return MULTIPLE_EXPANSIONS_LABEL


class SelectionState:
    """Mutable holder of the selection for one active game.

    Every mutator returns ``True`` when it changed the selection and
    ``False`` when the request was rejected, so callers can surface the
    rejection instead of silently showing a different value.
    """

    def __init__(self, catalog: GameCatalog | None = None) -> None:
        self._catalog: GameCatalog | None = None
        self._selection = Selection()
        if catalog is not None:
            self.reset(catalog)

    # -- accessors -------------------------------------------------------------

    @property
    def catalog(self) -> GameCatalog | None:
        return self._catalog

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def player_count(self) -> int | None:
        return self._selection.player_count

    @property
    def selected_expansions(self) -> frozenset[ExpansionID]:
        return self._selection.selected_expansions

    @property
    def selected_modules(self) -> frozenset[ModuleID]:
        return self._selection.selected_modules

    def available_modules(self) -> list[Module]:
        if self._catalog is None:
            return []
        return available_modules(self._catalog, self._selection.selected_expansions)

    def summary_label(self) -> str:
        if self._catalog is None:
            return BASE_GAME_LABEL
        return expansion_summary_label(
            self._catalog.expansions, self._selection.selected_expansions
        )

    # -- lifecycle -------------------------------------------------------------

    def reset(self, catalog: GameCatalog | None) -> None:
        """Start over for ``catalog``: minimum player count, nothing selected."""

        self._catalog = catalog
        default = catalog.game.player_counts.default if catalog is not None else None
        self._selection = Selection(player_count=default)

    def switch_game(self, catalog: GameCatalog) -> None:
        """Bind to another game.

        Reloading the same game keeps the current choices but re-applies the
        module cleanup in case the catalog changed underneath.
        """

        if self._catalog is not None and self._catalog.id == catalog.id:
            self._catalog = catalog
            domain = catalog.game.player_counts
            count = self.player_count if self.player_count in domain else domain.default
            expansions = self.selected_expansions & catalog.expansion_ids()
            self._selection = Selection(
                player_count=count,
                selected_expansions=expansions,
                selected_modules=self._prune_modules(expansions, self.selected_modules),
            )
            return
        self.reset(catalog)

    # -- mutators --------------------------------------------------------------

    def set_player_count(self, count: int) -> bool:
        """Select ``count`` if the game supports it; otherwise keep the current value."""

        if self._catalog is None or count not in self._catalog.game.player_counts:
            return False
        if count == self.player_count:
            return True
        self._selection = Selection(
            player_count=count,
            selected_expansions=self.selected_expansions,
            selected_modules=self.selected_modules,
        )
        return True

    def increment_player_count(self) -> bool:
        return self._step_player_count(1)

    def decrement_player_count(self) -> bool:
        return self._step_player_count(-1)

    def _step_player_count(self, delta: int) -> bool:
        if self._catalog is None:
            return False
        values = self._catalog.game.player_counts.values
        if not values:
            return False
        try:
            index = values.index(self.player_count)  # type: ignore[arg-type]
        except ValueError:
            index = 0
        target = min(max(index + delta, 0), len(values) - 1)
        if values[target] == self.player_count:
            return False
        return self.set_player_count(values[target])

    def toggle_expansion(self, expansion_id: ExpansionID) -> bool:
        """Flip an expansion and drop modules whose owner is no longer selected."""

        if self._catalog is None or expansion_id not in self._catalog.expansion_ids():
            return False
        expansions = self.selected_expansions ^ {expansion_id}
        self._selection = Selection(
            player_count=self.player_count,
            selected_expansions=expansions,
            selected_modules=self._prune_modules(expansions, self.selected_modules),
        )
        return True

    def toggle_module(self, module_id: ModuleID) -> bool:
        """Flip a module; modules that are not currently available are refused."""

        if module_id not in self.selected_modules:
            allowed = {module.id for module in self.available_modules()}
            if module_id not in allowed:
                return False
        self._selection = Selection(
            player_count=self.player_count,
            selected_expansions=self.selected_expansions,
            selected_modules=self.selected_modules ^ {module_id},
        )
        return True

    def _prune_modules(
        self, expansions: frozenset[ExpansionID], modules: frozenset[ModuleID]
    ) -> frozenset[ModuleID]:
        if self._catalog is None:
            return frozenset()
        allowed = {module.id for module in available_modules(self._catalog, expansions)}
        return frozenset(module_id for module_id in modules if module_id in allowed)
