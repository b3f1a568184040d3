"""SQLAlchemy-backed catalog store.

Each public method opens its own session, so calls are safe to run from
concurrent worker threads (the async services fan fetches and order
updates out with ``asyncio.to_thread``).  Database errors surface as
:class:`~tablesetup.errors.StorageError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tablesetup import models as orm
from tablesetup.domain import models as dm
from tablesetup.domain.conditions import condition_from_json, condition_to_json, strip_reference
from tablesetup.errors import RecordNotFoundError, StorageError

logger = logging.getLogger(__name__)


def to_domain_game(row: orm.Game) -> dm.Game:
    return dm.Game(
        id=dm.GameID(row.id),
        title=row.title,
        player_counts=dm.PlayerCountDomain.from_range(row.players_min, row.players_max),
        rules_url=row.rules_url,
        tagline=row.tagline,
        cover_image=row.cover_image,
        popularity=row.popularity or 0,
    )


def to_domain_step(row: orm.SetupStep) -> dm.Step:
    visual = None
    if row.visual_asset or row.visual_animation:
        visual = dm.Visual(asset=row.visual_asset or "", animation=row.visual_animation or "")
    return dm.Step(
        id=dm.StepID(row.id),
        order=row.step_order,
        text=row.text,
        visual=visual,
        condition=condition_from_json(row.conditions),
    )


def _apply_draft(row: orm.SetupStep, draft: dm.StepDraft) -> None:
    row.step_order = draft.order
    row.text = draft.text
    visual = draft.visual or dm.Visual()
    row.visual_asset = visual.asset or None
    row.visual_animation = visual.animation or None
    row.conditions = condition_to_json(draft.condition)


class SqlSetupRepository:
    """Catalog store on top of a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except StorageError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            raise StorageError(str(exc)) from exc
        finally:
            session.close()

    @staticmethod
    def _get(session: Session, model: type, record_id: str, label: str):
        row = session.get(model, record_id)
        if row is None:
            raise RecordNotFoundError(f"{label} '{record_id}' not found")
        return row

    # -- reads -----------------------------------------------------------------

    def fetch_game(self, game_id: dm.GameID) -> dm.Game:
        with self._session() as session:
            return to_domain_game(self._get(session, orm.Game, game_id, "Game"))

    def list_games(self) -> list[dm.Game]:
        """Every game, most popular first."""

        with self._session() as session:
            rows = session.scalars(
                select(orm.Game).order_by(orm.Game.popularity.desc(), orm.Game.title)
            ).all()
            return [to_domain_game(row) for row in rows]

    def list_game_ids(self) -> list[dm.GameID]:
        return [game.id for game in self.list_games()]

    def fetch_expansions(self, game_id: dm.GameID) -> list[dm.Expansion]:
        with self._session() as session:
            rows = session.scalars(
                select(orm.Expansion)
                .where(orm.Expansion.game_id == game_id)
                .order_by(orm.Expansion.name)
            ).all()
            return [
                dm.Expansion(id=dm.ExpansionID(row.id), game_id=game_id, name=row.name)
                for row in rows
            ]

    def fetch_modules(
        self, expansion_id: dm.ExpansionID | None, *, game_id: dm.GameID
    ) -> list[dm.Module]:
        query = select(orm.ExpansionModule).where(orm.ExpansionModule.game_id == game_id)
        if expansion_id is None:
            query = query.where(orm.ExpansionModule.expansion_id.is_(None))
        else:
            query = query.where(orm.ExpansionModule.expansion_id == expansion_id)
        with self._session() as session:
            rows = session.scalars(query.order_by(orm.ExpansionModule.name)).all()
            return [
                dm.Module(
                    id=dm.ModuleID(row.id),
                    name=row.name,
                    expansion_id=dm.ExpansionID(row.expansion_id) if row.expansion_id else None,
                    description=row.description,
                )
                for row in rows
            ]

    def fetch_steps(self, game_id: dm.GameID) -> list[dm.Step]:
        with self._session() as session:
            rows = session.scalars(
                select(orm.SetupStep)
                .where(orm.SetupStep.game_id == game_id)
                .order_by(orm.SetupStep.step_order, orm.SetupStep.created_at)
            ).all()
            return [to_domain_step(row) for row in rows]

    # -- step writes -----------------------------------------------------------

    def update_step_order(self, step_id: dm.StepID, new_order: int) -> None:
        with self._session() as session:
            row = self._get(session, orm.SetupStep, step_id, "Step")
            row.step_order = new_order

    def create_step(self, game_id: dm.GameID, draft: dm.StepDraft) -> dm.StepID:
        with self._session() as session:
            self._get(session, orm.Game, game_id, "Game")
            row = orm.SetupStep(id=orm.new_id(), game_id=game_id)
            _apply_draft(row, draft)
            session.add(row)
            session.flush()
            return dm.StepID(row.id)

    def update_step(self, step_id: dm.StepID, draft: dm.StepDraft) -> None:
        with self._session() as session:
            _apply_draft(self._get(session, orm.SetupStep, step_id, "Step"), draft)

    def delete_step(self, step_id: dm.StepID) -> None:
        with self._session() as session:
            session.delete(self._get(session, orm.SetupStep, step_id, "Step"))

    # -- catalog admin ---------------------------------------------------------

    def save_game(self, game: dm.Game) -> None:
        """Insert or update game metadata."""

        domain = game.player_counts
        if domain.minimum is None or domain.maximum is None:
            raise StorageError("A game needs at least one supported player count")
        with self._session() as session:
            row = session.get(orm.Game, game.id) or orm.Game(id=game.id)
            row.title = game.title
            row.players_min = domain.minimum
            row.players_max = domain.maximum
            row.popularity = game.popularity
            row.tagline = game.tagline
            row.cover_image = game.cover_image
            row.rules_url = game.rules_url
            session.add(row)

    def delete_game(self, game_id: dm.GameID) -> None:
        with self._session() as session:
            session.delete(self._get(session, orm.Game, game_id, "Game"))

    def create_expansion(
        self, game_id: dm.GameID, name: str, *, expansion_id: str | None = None
    ) -> dm.ExpansionID:
        with self._session() as session:
            self._get(session, orm.Game, game_id, "Game")
            row = orm.Expansion(id=expansion_id or orm.new_id(), game_id=game_id, name=name)
            session.add(row)
            session.flush()
            return dm.ExpansionID(row.id)

    def delete_expansion(self, expansion_id: dm.ExpansionID) -> None:
        """Delete an expansion with its modules and scrub both from step conditions."""

        with self._session() as session:
            row = self._get(session, orm.Expansion, expansion_id, "Expansion")
            removed = [row.id, *(module.id for module in row.modules)]
            self._scrub_conditions(session, row.game_id, removed)
            session.delete(row)

    def create_module(
        self,
        game_id: dm.GameID,
        name: str,
        *,
        expansion_id: dm.ExpansionID | None = None,
        description: str | None = None,
        module_id: str | None = None,
    ) -> dm.ModuleID:
        with self._session() as session:
            self._get(session, orm.Game, game_id, "Game")
            if expansion_id is not None:
                expansion = self._get(session, orm.Expansion, expansion_id, "Expansion")
                if expansion.game_id != game_id:
                    raise StorageError(
                        f"Expansion '{expansion_id}' does not belong to game '{game_id}'"
                    )
            row = orm.ExpansionModule(
                id=module_id or orm.new_id(),
                game_id=game_id,
                expansion_id=expansion_id,
                name=name,
                description=description,
            )
            session.add(row)
            session.flush()
            return dm.ModuleID(row.id)

    def delete_module(self, module_id: dm.ModuleID) -> None:
        with self._session() as session:
            row = self._get(session, orm.ExpansionModule, module_id, "Module")
            self._scrub_conditions(session, row.game_id, [row.id])
            session.delete(row)

    @staticmethod
    def _scrub_conditions(session: Session, game_id: str, removed_ids: list[str]) -> None:
        steps = session.scalars(select(orm.SetupStep).where(orm.SetupStep.game_id == game_id))
        for step in steps:
            condition = condition_from_json(step.conditions)
            cleaned = condition
            for removed_id in removed_ids:
                cleaned = strip_reference(cleaned, removed_id)
            if cleaned != condition:
                logger.info("removing deleted ids %s from step %s", removed_ids, step.id)
                step.conditions = condition_to_json(cleaned)
