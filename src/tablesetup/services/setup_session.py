"""Setup page session: a loaded catalog bound to a selection."""

from __future__ import annotations

from tablesetup.domain import models as dm
from tablesetup.domain.enums import LoadStatus
from tablesetup.domain.resolver import resolve_steps
from tablesetup.domain.selection import Selection, SelectionState
from tablesetup.services.catalog_loader import CatalogLoader, LoadState


class SetupSession:
    """State behind one setup view.

    The selection is reset whenever a different game becomes active.
    ``visible_steps`` re-runs the resolver on every call; there is no cache
    to invalidate when the selection changes.
    """

    def __init__(self, loader: CatalogLoader) -> None:
        self._loader = loader
        self.selection_state = SelectionState()

    @property
    def state(self) -> LoadState:
        return self._loader.state

    @property
    def catalog(self) -> dm.GameCatalog | None:
        return self.selection_state.catalog

    @property
    def selection(self) -> Selection:
        return self.selection_state.selection

    async def open(self, game_id: str | None) -> dm.GameCatalog | None:
        """Load ``game_id`` and make it the active game.

        A failed load clears the active game so no stale steps are shown.

        Raises:
            LoadError: If the catalog could not be loaded.
        """

        try:
            catalog = await self._loader.load(game_id)
        except Exception:
            self.selection_state.reset(None)
            raise
        if catalog is not None:
            self.selection_state.switch_game(catalog)
        return catalog

    def visible_steps(self) -> list[dm.Step]:
        """Steps that apply to the current selection; empty until a catalog is ready."""

        catalog = self.catalog
        if catalog is None or self.state.status is not LoadStatus.READY:
            return []
        return resolve_steps(catalog.steps, self.selection)

    def available_modules(self) -> list[dm.Module]:
        return self.selection_state.available_modules()

    def expansion_summary_label(self) -> str:
        return self.selection_state.summary_label()

    # Selection mutators, forwarded so callers only deal with the session.

    def set_player_count(self, count: int) -> bool:
        return self.selection_state.set_player_count(count)

    def increment_player_count(self) -> bool:
        return self.selection_state.increment_player_count()

    def decrement_player_count(self) -> bool:
        return self.selection_state.decrement_player_count()

    def toggle_expansion(self, expansion_id: str) -> bool:
        return self.selection_state.toggle_expansion(dm.ExpansionID(expansion_id))

    def toggle_module(self, module_id: str) -> bool:
        return self.selection_state.toggle_module(dm.ModuleID(module_id))
