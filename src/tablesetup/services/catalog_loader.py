"""Asynchronous catalog loading.

A catalog is the game row plus its expansions, modules and steps.  The
fetches run concurrently in worker threads and must all succeed before a
:class:`~tablesetup.domain.models.GameCatalog` is produced; a partial load
never reaches the resolver.  Each ``load`` call supersedes the previous
one: a response that arrives for an older request is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from tablesetup.domain import models as dm
from tablesetup.domain.enums import LoadStatus
from tablesetup.errors import LoadError, RecordNotFoundError, StorageError, safe_error_message
from tablesetup.interfaces import ISetupStorage

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadState:
    """User-visible status of the most recent load."""

    status: LoadStatus = LoadStatus.IDLE
    game_id: dm.GameID | None = None
    error: str = ""
    notices: list[str] = field(default_factory=list)

    @property
    def is_ready(self) -> bool:
        return self.status is LoadStatus.READY


class CatalogLoader:
    """Load game catalogs from storage for the setup page."""

    def __init__(
        self,
        storage: ISetupStorage,
        *,
        default_game_id: str | None = None,
        debug: bool = False,
    ) -> None:
        self._storage = storage
        self._default_game_id = dm.GameID(default_game_id) if default_game_id else None
        self._debug = debug
        self._generation = 0
        self.state = LoadState()
        self.catalog: dm.GameCatalog | None = None
        self.warnings: list[LoadError] = []

    @property
    def generation(self) -> int:
        return self._generation

    async def load(self, game_id: str | None) -> dm.GameCatalog | None:
        """Load the catalog for ``game_id`` (or the default game).

        Returns the catalog, or ``None`` when a newer ``load`` call started
        before this one finished.

        Raises:
            LoadError: If any fetch failed or no game could be found.
        """

        self._generation += 1
        token = self._generation
        requested = dm.GameID(game_id) if game_id else self._default_game_id
        self.catalog = None
        self.warnings = []
        self.state = LoadState(status=LoadStatus.LOADING, game_id=requested)

        try:
            if requested is None:
                raise LoadError("No game requested and no default game configured.")
            catalog, warnings = await self._load_with_fallback(requested)
        except LoadError as exc:
            if token != self._generation:
                logger.debug("discarding failed load of %s; superseded", requested)
                return None
            logger.warning("catalog load for %s failed: %s", requested, exc)
            self.state = LoadState(
                status=LoadStatus.ERROR,
                game_id=requested,
                error=safe_error_message(exc.__cause__ or exc, debug=self._debug),
            )
            raise

        if token != self._generation:
            logger.debug("discarding stale catalog for %s", requested)
            return None

        self.catalog = catalog
        self.warnings = warnings
        self.state = LoadState(
            status=LoadStatus.READY,
            game_id=catalog.id,
            notices=[str(warning) for warning in warnings],
        )
        return catalog

    async def _load_with_fallback(
        self, game_id: dm.GameID
    ) -> tuple[dm.GameCatalog, list[LoadError]]:
        try:
            return await self._load_catalog(game_id), []
        except RecordNotFoundError as exc:
            missing = exc

        default = self._default_game_id
        if default is not None and default != game_id:
            try:
                return await self._load_instead(game_id, default)
            except RecordNotFoundError as exc:
                logger.warning("default game %s is missing as well", default)
                missing = exc

        fallback = await self._first_other_game_id({game_id, default}, game_id)
        if fallback is not None:
            try:
                return await self._load_instead(game_id, fallback)
            except RecordNotFoundError as exc:
                missing = exc
        raise LoadError(f'Could not load game data for "{game_id}".', game_id=game_id) from missing

    async def _load_instead(
        self, game_id: dm.GameID, fallback: dm.GameID
    ) -> tuple[dm.GameCatalog, list[LoadError]]:
        catalog = await self._load_catalog(fallback)
        warning = LoadError(
            f'Game "{game_id}" was not found; showing "{fallback}" instead.',
            game_id=game_id,
            fatal=False,
        )
        logger.warning("%s", warning)
        return catalog, [warning]

    async def _first_other_game_id(
        self, excluded: set[dm.GameID | None], missing: dm.GameID
    ) -> dm.GameID | None:
        try:
            known = await asyncio.to_thread(self._storage.list_game_ids)
        except StorageError as exc:
            raise LoadError(str(exc), game_id=missing) from exc
        return next((game_id for game_id in known if game_id not in excluded), None)

    async def _load_catalog(self, game_id: dm.GameID) -> dm.GameCatalog:
        """Fetch every part of a catalog; raises RecordNotFoundError for an unknown game."""

        results = await asyncio.gather(
            asyncio.to_thread(self._storage.fetch_game, game_id),
            asyncio.to_thread(self._storage.fetch_expansions, game_id),
            asyncio.to_thread(self._storage.fetch_modules, None, game_id=game_id),
            asyncio.to_thread(self._storage.fetch_steps, game_id),
            return_exceptions=True,
        )
        game_result = results[0]
        if isinstance(game_result, RecordNotFoundError):
            raise game_result
        self._raise_first_failure(game_id, results)
        game, expansions, base_modules, steps = results

        expansion_modules = await asyncio.gather(
            *(
                asyncio.to_thread(self._storage.fetch_modules, expansion.id, game_id=game_id)
                for expansion in expansions
            ),
            return_exceptions=True,
        )
        self._raise_first_failure(game_id, expansion_modules)

        modules: list[dm.Module] = list(base_modules)
        for batch in expansion_modules:
            modules.extend(batch)

        return dm.GameCatalog(
            game=game,
            expansions=list(expansions),
            modules=modules,
            steps=list(steps),
        )

    @staticmethod
    def _raise_first_failure(game_id: dm.GameID, results: list[object]) -> None:
        for result in results:
            if isinstance(result, Exception):
                raise LoadError(str(result), game_id=game_id) from result
            if isinstance(result, BaseException):
                raise result
