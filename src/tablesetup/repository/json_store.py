"""JSON-based repository for game catalogs."""

from __future__ import annotations

import re
import threading
from dataclasses import replace
from pathlib import Path
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError

from tablesetup.domain import models as dm
from tablesetup.errors import RecordNotFoundError, StorageError

_SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonCatalogRepository:
    """Persist game catalogs as JSON snapshots on disk."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._adapter: TypeAdapter[dm.GameCatalog] = TypeAdapter(dm.GameCatalog)
        self._lock = threading.RLock()

    def _path_for(self, game_id: dm.GameID) -> Path:
        if not _SAFE_ID.match(game_id) or game_id in {".", ".."}:
            raise StorageError(f"Invalid game id {game_id!r}")
        return self.base_path / f"game_{game_id}.json"

    # -- snapshot level --------------------------------------------------------

    def save(self, catalog: dm.GameCatalog) -> Path:
        """Serialize a catalog to disk and return the snapshot path."""

        path = self._path_for(catalog.id)
        payload = self._adapter.dump_json(catalog, indent=2)
        with self._lock:
            path.write_bytes(payload)
        return path

    def load(self, game_id: dm.GameID) -> dm.GameCatalog:
        """Load a previously saved catalog snapshot."""

        path = self._path_for(game_id)
        try:
            with self._lock:
                data = path.read_bytes()
        except FileNotFoundError as exc:
            raise RecordNotFoundError(f"Game '{game_id}' not found") from exc
        try:
            return self._adapter.validate_json(data)
        except ValidationError as exc:
            raise StorageError(f"Catalog snapshot for game '{game_id}' is unreadable") from exc

    def list_game_ids(self) -> list[dm.GameID]:
        """Return every game id persisted in the repository, sorted."""

        prefix = "game_"
        suffix = ".json"
        ids = [
            dm.GameID(path.name[len(prefix) : -len(suffix)])
            for path in self.base_path.glob("game_*.json")
        ]
        return sorted(ids)

    def delete(self, game_id: dm.GameID) -> None:
        """Remove a catalog snapshot if it exists."""

        path = self._path_for(game_id)
        with self._lock:
            if path.exists():
                path.unlink()

    # -- storage protocol ------------------------------------------------------

    def fetch_game(self, game_id: dm.GameID) -> dm.Game:
        return self.load(game_id).game

    def fetch_expansions(self, game_id: dm.GameID) -> list[dm.Expansion]:
        return list(self.load(game_id).expansions)

    def fetch_modules(
        self, expansion_id: dm.ExpansionID | None, *, game_id: dm.GameID
    ) -> list[dm.Module]:
        return [
            module
            for module in self.load(game_id).modules
            if module.expansion_id == expansion_id
        ]

    def fetch_steps(self, game_id: dm.GameID) -> list[dm.Step]:
        return sorted(self.load(game_id).steps, key=lambda step: step.order)

    def _locate_step(self, step_id: dm.StepID) -> tuple[dm.GameCatalog, int]:
        for game_id in self.list_game_ids():
            catalog = self.load(game_id)
            for index, step in enumerate(catalog.steps):
                if step.id == step_id:
                    return catalog, index
        raise RecordNotFoundError(f"Step '{step_id}' not found")

    def update_step_order(self, step_id: dm.StepID, new_order: int) -> None:
        with self._lock:
            catalog, index = self._locate_step(step_id)
            catalog.steps[index] = replace(catalog.steps[index], order=new_order)
            self.save(catalog)

    def create_step(self, game_id: dm.GameID, draft: dm.StepDraft) -> dm.StepID:
        with self._lock:
            catalog = self.load(game_id)
            step_id = dm.StepID(str(uuid4()))
            catalog.steps.append(
                dm.Step(
                    id=step_id,
                    order=draft.order,
                    text=draft.text,
                    visual=draft.visual,
                    condition=draft.condition,
                )
            )
            self.save(catalog)
            return step_id

    def update_step(self, step_id: dm.StepID, draft: dm.StepDraft) -> None:
        with self._lock:
            catalog, index = self._locate_step(step_id)
            catalog.steps[index] = dm.Step(
                id=step_id,
                order=draft.order,
                text=draft.text,
                visual=draft.visual,
                condition=draft.condition,
            )
            self.save(catalog)

    def delete_step(self, step_id: dm.StepID) -> None:
        with self._lock:
            catalog, index = self._locate_step(step_id)
            del catalog.steps[index]
            self.save(catalog)
