"""Admin step management: CRUD, drag-and-drop reordering and persistence.

Reordering is optimistic.  The new order is applied to the local list
first and then written back, one ``update_step_order`` call per changed
step, concurrently.  If any write fails the whole batch counts as failed
and the local list is replaced by a fresh read from storage.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from tablesetup.domain import models as dm
from tablesetup.domain.enums import DragPhase
from tablesetup.domain.ordering import changed_steps, index_of, next_step_order, reorder, sort_steps
from tablesetup.errors import (
    LoadError,
    PersistError,
    StorageError,
    ValidationError,
    safe_error_message,
)
from tablesetup.forms import StepForm, new_step_form
from tablesetup.interfaces import ISetupStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def persist_order(
    steps: Sequence[dm.Step],
    storage: ISetupStorage,
    *,
    previous: Sequence[dm.Step] | None = None,
) -> None:
    """Write the orders of ``steps`` to storage.

    With ``previous`` only steps whose order changed are written; without it
    every step is. All writes are awaited even when one fails early.

    Raises:
        PersistError: If any single write failed.
    """

    targets = changed_steps(previous, steps) if previous is not None else list(steps)
    if not targets:
        return

    results = await asyncio.gather(
        *(asyncio.to_thread(storage.update_step_order, step.id, step.order) for step in targets),
        return_exceptions=True,
    )

    failures: list[tuple[dm.Step, Exception]] = []
    for step, result in zip(targets, results, strict=True):
        if isinstance(result, Exception):
            failures.append((step, result))
        elif isinstance(result, BaseException):
            raise result
    if failures:
        first_error = failures[0][1]
        raise PersistError(
            f"Failed to save order for {len(failures)} of {len(targets)} steps: {first_error}",
            failed_step_ids=[step.id for step, _ in failures],
        ) from first_error


@dataclass(frozen=True, slots=True)
class DragState:
    """Interactive reorder lifecycle: idle -> dragging -> hovering -> idle."""

    phase: DragPhase = DragPhase.IDLE
    source_id: dm.StepID | None = None
    target_id: dm.StepID | None = None


IDLE = DragState()


class StepAdminService:
    """Step list of one game as edited in the admin console."""

    def __init__(self, storage: ISetupStorage, *, debug: bool = False) -> None:
        self._storage = storage
        self._debug = debug
        self.game_id: dm.GameID | None = None
        self.steps: list[dm.Step] = []
        self.status_message = ""
        self.reordering = False
        self.drag = IDLE

    # -- loading ---------------------------------------------------------------

    async def load_steps(self, game_id: str) -> list[dm.Step]:
        """Replace the local list with the authoritative one from storage.

        Raises:
            LoadError: If the steps could not be fetched.
        """

        self.game_id = dm.GameID(game_id)
        try:
            fetched = await asyncio.to_thread(self._storage.fetch_steps, self.game_id)
        except StorageError as exc:
            self.status_message = safe_error_message(exc, debug=self._debug)
            raise LoadError(str(exc), game_id=game_id) from exc
        self.steps = sort_steps(fetched)
        return self.steps

    async def _resync(self) -> None:
        if self.game_id is None:
            return
        logger.warning("resynchronising steps of %s from storage", self.game_id)
        try:
            await self.load_steps(self.game_id)
        except LoadError:
            logger.warning("resync of %s failed; local steps may be stale", self.game_id)

    def _require_game(self) -> dm.GameID:
        if self.game_id is None:
            self.status_message = "Select a game first."
            raise ValidationError(self.status_message, field="game_id")
        return self.game_id

    # -- CRUD ------------------------------------------------------------------

    def new_step_form(self) -> StepForm:
        """Blank form whose order follows the current maximum."""

        return new_step_form(self.steps)

    def _draft_from(self, form: StepForm, *, editing: dm.StepID | None = None) -> dm.StepDraft:
        if editing is None and not form.step_order.strip():
            form = form.model_copy(update={"step_order": str(next_step_order(self.steps))})
        try:
            draft = form.to_draft()
        except ValidationError as exc:
            self.status_message = str(exc)
            raise
        clash = next(
            (step for step in self.steps if step.order == draft.order and step.id != editing),
            None,
        )
        if clash is not None:
            self.status_message = f"Step order {draft.order} is already used."
            raise ValidationError(self.status_message, field="order")
        return draft

    async def create_step(self, form: StepForm) -> dm.StepID:
        """Validate ``form`` and insert a new step.

        A blank order means "after the current last step".

        Raises:
            ValidationError: If the form is malformed (nothing is written).
            PersistError: If the insert failed.
        """

        game_id = self._require_game()
        draft = self._draft_from(form)
        step_id = await self._write(
            "create", lambda: self._storage.create_step(game_id, draft)
        )
        self.status_message = "Step created."
        await self._resync_quietly()
        return step_id

    async def update_step(self, step_id: str, form: StepForm) -> None:
        self._require_game()
        draft = self._draft_from(form, editing=dm.StepID(step_id))
        await self._write("update", lambda: self._storage.update_step(dm.StepID(step_id), draft))
        self.status_message = "Step updated."
        await self._resync_quietly()

    async def delete_step(self, step_id: str) -> None:
        self._require_game()
        await self._write("delete", lambda: self._storage.delete_step(dm.StepID(step_id)))
        self.status_message = "Step deleted."
        await self._resync_quietly()

    async def _write(self, action: str, operation: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(operation)
        except StorageError as exc:
            self.status_message = safe_error_message(exc, debug=self._debug)
            logger.warning("step %s failed: %s", action, exc)
            await self._resync()
            raise PersistError(f"Step {action} failed: {exc}") from exc

    async def _resync_quietly(self) -> None:
        if self.game_id is None:
            return
        try:
            await self.load_steps(self.game_id)
        except LoadError:
            logger.warning("could not refresh steps of %s after write", self.game_id)

    # -- reordering ------------------------------------------------------------

    async def reorder_by_ids(self, source_id: str, target_id: str) -> list[dm.Step]:
        """Move ``source_id`` to the position of ``target_id`` and persist.

        Dropping a step onto itself, or naming an unknown step, changes
        nothing and writes nothing.

        Raises:
            PersistError: If any order update failed; ``steps`` has then been
                reloaded from storage.
        """

        if source_id == target_id:
            return self.steps
        from_index = index_of(self.steps, dm.StepID(source_id))
        to_index = index_of(self.steps, dm.StepID(target_id))
        if from_index == -1 or to_index == -1:
            return self.steps

        previous = self.steps
        self.steps = reorder(previous, from_index, to_index)
        self.reordering = True
        self.status_message = ""
        try:
            await persist_order(self.steps, self._storage, previous=previous)
        except PersistError as exc:
            self.status_message = safe_error_message(exc.__cause__ or exc, debug=self._debug)
            logger.warning("reorder of %s failed: %s", self.game_id, exc)
            await self._resync()
            raise
        finally:
            self.reordering = False
            self.drag = IDLE
        self.status_message = "Step order updated."
        return self.steps

    def drag_start(self, step_id: str) -> bool:
        """Begin dragging ``step_id``; refused while a reorder is being saved."""

        if self.reordering or index_of(self.steps, dm.StepID(step_id)) == -1:
            return False
        self.drag = DragState(phase=DragPhase.DRAGGING, source_id=dm.StepID(step_id))
        return True

    def drag_over(self, step_id: str) -> bool:
        if self.drag.phase is DragPhase.IDLE:
            return False
        if self.drag.target_id != step_id:
            self.drag = DragState(
                phase=DragPhase.HOVERING,
                source_id=self.drag.source_id,
                target_id=dm.StepID(step_id),
            )
        return True

    async def drop(self, step_id: str | None = None) -> bool:
        """Commit the drag onto ``step_id`` (or the hovered step).

        Returns ``True`` when a reorder was persisted.

        Raises:
            PersistError: Propagated from :meth:`reorder_by_ids`.
        """

        source_id = self.drag.source_id
        target_id = dm.StepID(step_id) if step_id is not None else self.drag.target_id
        if source_id is None or target_id is None or source_id == target_id:
            self.drag = IDLE
            return False
        await self.reorder_by_ids(source_id, target_id)
        return True

    def drag_end(self) -> None:
        """Cancel the drag without reordering."""

        if not self.reordering:
            self.drag = IDLE
