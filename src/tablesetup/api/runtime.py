"""Runtime primitives backing the setup HTTP API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

from tablesetup.config import Settings, get_settings
from tablesetup.database import (
    check_database_health,
    create_db_engine,
    create_session_factory,
    init_db,
)
from tablesetup.domain import models as dm
from tablesetup.domain.ordering import index_of
from tablesetup.errors import LoadError, RecordNotFoundError, ValidationError
from tablesetup.forms import StepForm
from tablesetup.interfaces import ISetupStorage
from tablesetup.repository import SqlSetupRepository
from tablesetup.services import CatalogLoader, SetupSession, StepAdminService

logger = logging.getLogger(__name__)


class SetupService:
    """Build setup views from query parameters.

    Each request gets a fresh :class:`SetupSession`; the requested
    expansions and modules are applied through the same toggles the
    interactive page uses, so unknown expansions and unavailable modules
    are dropped rather than passed to the resolver.
    """

    def __init__(
        self, storage: ISetupStorage, *, default_game_id: str | None, debug: bool = False
    ) -> None:
        self._storage = storage
        self._default_game_id = default_game_id
        self._debug = debug

    async def view(
        self,
        game_id: str | None,
        *,
        players: int | None = None,
        expansions: Iterable[str] = (),
        modules: Iterable[str] = (),
    ) -> tuple[SetupSession, dm.GameCatalog]:
        """Return the session with the selection applied, and the catalog it resolved."""

        loader = CatalogLoader(
            self._storage, default_game_id=self._default_game_id, debug=self._debug
        )
        session = SetupSession(loader)
        catalog = await session.open(game_id)
        if catalog is None:
            raise LoadError(f'Could not load game data for "{game_id}".', game_id=game_id)

        if players is not None and not session.set_player_count(players):
            domain = catalog.game.player_counts
            raise ValidationError(
                f"{catalog.game.title} supports {domain.minimum} to {domain.maximum} players.",
                field="players",
            )
        for expansion_id in expansions:
            if expansion_id not in session.selection.selected_expansions:
                session.toggle_expansion(expansion_id)
        for module_id in modules:
            if module_id not in session.selection.selected_modules:
                session.toggle_module(module_id)
        return session, catalog


class AdminService:
    """Step editing for the admin routes.

    Writes to one game are serialised with a per-game lock so two reorders
    never interleave their order updates.
    """

    def __init__(self, storage: ISetupStorage, *, debug: bool = False) -> None:
        self._storage = storage
        self._debug = debug
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _game_lock(self, game_id: str) -> AsyncIterator[None]:
        # Entries live only while a request holds or waits on the lock.
        lock = self._locks.setdefault(game_id, asyncio.Lock())
        self._lock_users[game_id] = self._lock_users.get(game_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[game_id] -= 1
            if not self._lock_users[game_id]:
                del self._lock_users[game_id]
                del self._locks[game_id]

    @asynccontextmanager
    async def editing(self, game_id: str) -> AsyncIterator[StepAdminService]:
        """Yield a :class:`StepAdminService` loaded with the game's steps.

        Raises:
            RecordNotFoundError: If the game does not exist.
        """

        await asyncio.to_thread(self._storage.fetch_game, dm.GameID(game_id))
        async with self._game_lock(game_id):
            admin = StepAdminService(self._storage, debug=self._debug)
            await admin.load_steps(game_id)
            yield admin

    @staticmethod
    def _require_step(admin: StepAdminService, step_id: str) -> None:
        if index_of(admin.steps, dm.StepID(step_id)) == -1:
            raise RecordNotFoundError(f"Step '{step_id}' not found")

    async def list_steps(self, game_id: str) -> StepAdminService:
        async with self.editing(game_id) as admin:
            return admin

    async def create_step(self, game_id: str, form: StepForm) -> tuple[StepAdminService, dm.StepID]:
        async with self.editing(game_id) as admin:
            step_id = await admin.create_step(form)
            logger.info("created step %s in %s", step_id, game_id)
            return admin, step_id

    async def update_step(self, game_id: str, step_id: str, form: StepForm) -> StepAdminService:
        async with self.editing(game_id) as admin:
            self._require_step(admin, step_id)
            await admin.update_step(step_id, form)
            return admin

    async def delete_step(self, game_id: str, step_id: str) -> StepAdminService:
        async with self.editing(game_id) as admin:
            self._require_step(admin, step_id)
            await admin.delete_step(step_id)
            logger.info("deleted step %s from %s", step_id, game_id)
            return admin

    async def reorder(self, game_id: str, source_id: str, target_id: str) -> StepAdminService:
        async with self.editing(game_id) as admin:
            self._require_step(admin, source_id)
            self._require_step(admin, target_id)
            await admin.reorder_by_ids(source_id, target_id)
            return admin


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(self, *, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.engine = create_db_engine(settings=self.settings)
        if self.settings.auto_create_tables:
            init_db(self.engine)
        self.repository = SqlSetupRepository(create_session_factory(self.engine))
        self.setup = SetupService(
            self.repository,
            default_game_id=self.settings.default_game_id,
            debug=self.settings.debug,
        )
        self.admin = AdminService(self.repository, debug=self.settings.debug)

    async def list_games(self) -> list[dm.Game]:
        return await asyncio.to_thread(self.repository.list_games)

    def database_ok(self) -> bool:
        return check_database_health(self.engine)

    async def shutdown(self) -> None:
        self.engine.dispose()


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
