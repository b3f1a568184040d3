"""Pytest configuration to ensure the `src` package layout is importable.

This adds the `src/` directory to `sys.path` so tests can import the
`tablesetup` package (e.g., `from tablesetup.api.app import create_app`)
without requiring an editable install in CI.  It also provides a small
catalog and an in-memory storage fake shared by the service tests.
"""

import sys
import threading
from dataclasses import replace
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from tablesetup.domain import models as dm  # noqa: E402
from tablesetup.domain.conditions import build_condition  # noqa: E402
from tablesetup.errors import RecordNotFoundError, StorageError  # noqa: E402


def make_step(step_id: str, order: int, text: str | None = None, **condition) -> dm.Step:
    return dm.Step(
        id=dm.StepID(step_id),
        order=order,
        text=text or step_id,
        condition=build_condition(**condition),
    )


def make_catalog(game_id: str = "cascadia", title: str = "Cascadia") -> dm.GameCatalog:
    game = dm.Game(
        id=dm.GameID(game_id),
        title=title,
        player_counts=dm.PlayerCountDomain.from_range(1, 4),
        rules_url="https://example.org/rules.pdf",
    )
    expansions = [
        dm.Expansion(id=dm.ExpansionID("landmarks"), game_id=game.id, name="Landmarks"),
        dm.Expansion(id=dm.ExpansionID("rivers"), game_id=game.id, name="Rivers"),
    ]
    modules = [
        dm.Module(id=dm.ModuleID("family-variant"), name="Family variant"),
        dm.Module(
            id=dm.ModuleID("landmark-tokens"),
            name="Landmark tokens",
            expansion_id=dm.ExpansionID("landmarks"),
        ),
        dm.Module(
            id=dm.ModuleID("river-bonus"),
            name="River bonus",
            expansion_id=dm.ExpansionID("rivers"),
        ),
    ]
    steps = [
        make_step("shuffle", 1, "Shuffle the habitat tiles"),
        make_step("solo", 2, "Set aside the solo deck", player_counts=[1]),
        make_step("base-only", 3, "Use the base scoring cards", require_no_expansions=True),
        make_step("landmarks", 4, "Place landmark tiles", include_expansions=["landmarks"]),
        make_step(
            "tokens",
            5,
            "Stack landmark tokens",
            include_expansions=["landmarks"],
            include_modules=["landmark-tokens"],
        ),
        make_step("no-family", 6, "Deal scoring goals", exclude_modules=["family-variant"]),
    ]
    return dm.GameCatalog(game=game, expansions=expansions, modules=modules, steps=steps)


class InMemoryStorage:
    """Protocol-based storage fake with switchable failures.

    ``failures`` maps a method name to the exception it should raise,
    ``failing_step_ids`` makes ``update_step_order`` fail for those steps and
    ``gates`` holds ``fetch_game`` for a game until the event is set.
    """

    def __init__(self, *catalogs: dm.GameCatalog) -> None:
        self.catalogs: dict[str, dm.GameCatalog] = {c.id: c for c in catalogs}
        self.failures: dict[str, Exception] = {}
        self.failing_step_ids: set[str] = set()
        self.gates: dict[str, threading.Event] = {}
        self.order_updates: list[tuple[str, int]] = []
        self._lock = threading.Lock()
        self._counter = 0

    def _maybe_fail(self, method: str) -> None:
        if method in self.failures:
            raise self.failures[method]

    def _catalog(self, game_id: str) -> dm.GameCatalog:
        try:
            return self.catalogs[game_id]
        except KeyError as exc:
            raise RecordNotFoundError(f"Game '{game_id}' not found") from exc

    def _locate(self, step_id: str) -> tuple[dm.GameCatalog, int]:
        for catalog in self.catalogs.values():
            for index, step in enumerate(catalog.steps):
                if step.id == step_id:
                    return catalog, index
        raise RecordNotFoundError(f"Step '{step_id}' not found")

    def fetch_game(self, game_id):
        gate = self.gates.get(game_id)
        if gate is not None:
            gate.wait(5)
        self._maybe_fail("fetch_game")
        return self._catalog(game_id).game

    def list_game_ids(self):
        self._maybe_fail("list_game_ids")
        return list(self.catalogs)

    def fetch_expansions(self, game_id):
        self._maybe_fail("fetch_expansions")
        return list(self._catalog(game_id).expansions)

    def fetch_modules(self, expansion_id, *, game_id):
        self._maybe_fail("fetch_modules")
        return [m for m in self._catalog(game_id).modules if m.expansion_id == expansion_id]

    def fetch_steps(self, game_id):
        self._maybe_fail("fetch_steps")
        return sorted(self._catalog(game_id).steps, key=lambda step: step.order)

    def update_step_order(self, step_id, new_order):
        self._maybe_fail("update_step_order")
        if step_id in self.failing_step_ids:
            raise StorageError(f"network error updating {step_id}")
        with self._lock:
            catalog, index = self._locate(step_id)
            catalog.steps[index] = replace(catalog.steps[index], order=new_order)
            self.order_updates.append((step_id, new_order))

    def create_step(self, game_id, draft):
        self._maybe_fail("create_step")
        with self._lock:
            catalog = self._catalog(game_id)
            self._counter += 1
            step_id = dm.StepID(f"new-{self._counter}")
            catalog.steps.append(
                dm.Step(
                    id=step_id,
                    order=draft.order,
                    text=draft.text,
                    visual=draft.visual,
                    condition=draft.condition,
                )
            )
            return step_id

    def update_step(self, step_id, draft):
        self._maybe_fail("update_step")
        with self._lock:
            catalog, index = self._locate(step_id)
            catalog.steps[index] = dm.Step(
                id=dm.StepID(step_id),
                order=draft.order,
                text=draft.text,
                visual=draft.visual,
                condition=draft.condition,
            )

    def delete_step(self, step_id):
        self._maybe_fail("delete_step")
        with self._lock:
            catalog, index = self._locate(step_id)
            del catalog.steps[index]


@pytest.fixture
def catalog() -> dm.GameCatalog:
    return make_catalog()


@pytest.fixture
def storage(catalog) -> InMemoryStorage:
    wingspan = make_catalog("wingspan", "Wingspan")
    wingspan.expansions = []
    wingspan.modules = []
    wingspan.steps = [make_step("feeder", 1, "Fill the bird feeder")]
    return InMemoryStorage(catalog, wingspan)
