"""Tests for the JSON catalog repository."""

from __future__ import annotations

import pytest

from tablesetup.domain import models as dm
from tablesetup.errors import RecordNotFoundError, StorageError
from tablesetup.repository import JsonCatalogRepository


def test_save_and_load_catalog(tmp_path, catalog):
    repo = JsonCatalogRepository(tmp_path)

    path = repo.save(catalog)
    assert path.exists()

    loaded = repo.load(dm.GameID("cascadia"))
    assert loaded == catalog


def test_list_and_delete(tmp_path, catalog, storage):
    repo = JsonCatalogRepository(tmp_path)
    repo.save(catalog)
    repo.save(storage.catalogs["wingspan"])

    assert repo.list_game_ids() == ["cascadia", "wingspan"]

    repo.delete(dm.GameID("cascadia"))
    assert repo.list_game_ids() == ["wingspan"]


def test_missing_game_raises_not_found(tmp_path):
    repo = JsonCatalogRepository(tmp_path)
    with pytest.raises(RecordNotFoundError):
        repo.fetch_game(dm.GameID("missing"))


def test_unsafe_game_id_rejected(tmp_path):
    repo = JsonCatalogRepository(tmp_path)
    with pytest.raises(StorageError, match="Invalid game id"):
        repo.load(dm.GameID("../etc"))


def test_corrupt_snapshot_raises_storage_error(tmp_path):
    repo = JsonCatalogRepository(tmp_path)
    (tmp_path / "game_broken.json").write_text("{not json")
    with pytest.raises(StorageError, match="unreadable"):
        repo.load(dm.GameID("broken"))


def test_storage_protocol_reads(tmp_path, catalog):
    repo = JsonCatalogRepository(tmp_path)
    repo.save(catalog)
    game_id = dm.GameID("cascadia")

    assert repo.fetch_game(game_id).title == "Cascadia"
    assert [e.id for e in repo.fetch_expansions(game_id)] == ["landmarks", "rivers"]
    assert [m.id for m in repo.fetch_modules(None, game_id=game_id)] == ["family-variant"]
    assert [m.id for m in repo.fetch_modules(dm.ExpansionID("rivers"), game_id=game_id)] == [
        "river-bonus"
    ]
    assert [s.order for s in repo.fetch_steps(game_id)] == [1, 2, 3, 4, 5, 6]


def test_step_writes(tmp_path, catalog):
    repo = JsonCatalogRepository(tmp_path)
    repo.save(catalog)
    game_id = dm.GameID("cascadia")

    step_id = repo.create_step(game_id, dm.StepDraft(order=7, text="Pick a first player"))
    repo.update_step_order(dm.StepID("shuffle"), 8)
    repo.update_step(step_id, dm.StepDraft(order=7, text="Pick the start player"))
    repo.delete_step(dm.StepID("solo"))

    steps = {step.id: step for step in repo.fetch_steps(game_id)}
    assert steps["shuffle"].order == 8
    assert steps[step_id].text == "Pick the start player"
    assert "solo" not in steps

    with pytest.raises(RecordNotFoundError):
        repo.delete_step(dm.StepID("solo"))
