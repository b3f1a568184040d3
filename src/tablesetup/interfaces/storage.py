"""Setup Storage Protocol Interface.

This module defines the protocol (interface) for the catalog store that
backs the setup tools.  The core never talks to a database directly; it
only depends on this contract.
"""

from typing import Protocol

from tablesetup.domain.models import (
    Expansion,
    ExpansionID,
    Game,
    GameID,
    Module,
    Step,
    StepDraft,
    StepID,
)


class ISetupStorage(Protocol):
    """Protocol defining read and admin write access to game catalogs.

    Implementations raise :class:`tablesetup.errors.RecordNotFoundError`
    for unknown ids and :class:`tablesetup.errors.StorageError` for any
    other failure.  Each call must be safe to run from a worker thread
    concurrently with other calls.
    """

    def fetch_game(self, game_id: GameID) -> Game:
        """Load game metadata.

        Args:
            game_id: Game to load

        Returns:
            Game with its player-count domain
        """
        ...

    def list_game_ids(self) -> list[GameID]:
        """Return the ids of every stored game, in catalog order."""
        ...

    def fetch_expansions(self, game_id: GameID) -> list[Expansion]:
        """Return the expansions owned by a game."""
        ...

    def fetch_modules(
        self, expansion_id: ExpansionID | None, *, game_id: GameID
    ) -> list[Module]:
        """Return modules owned by an expansion, or the game's base modules when None."""
        ...

    def fetch_steps(self, game_id: GameID) -> list[Step]:
        """Return every step of a game ordered by ``order``."""
        ...

    def update_step_order(self, step_id: StepID, new_order: int) -> None:
        """Persist a new order for one step."""
        ...

    def create_step(self, game_id: GameID, draft: StepDraft) -> StepID:
        """Insert a step and return its storage-assigned id."""
        ...

    def update_step(self, step_id: StepID, draft: StepDraft) -> None:
        """Replace a step's content."""
        ...

    def delete_step(self, step_id: StepID) -> None:
        """Remove a step."""
        ...
