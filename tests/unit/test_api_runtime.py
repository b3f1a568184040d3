"""Tests for API runtime helpers (setup views and admin locking)."""

from __future__ import annotations

import asyncio

import pytest

from tablesetup.api.runtime import AdminService, SetupService
from tablesetup.errors import RecordNotFoundError, ValidationError


@pytest.mark.asyncio
async def test_view_returns_resolved_catalog(storage):
    service = SetupService(storage, default_game_id="cascadia")

    session, catalog = await service.view(
        "cascadia", players=3, expansions=["landmarks"], modules=["landmark-tokens"]
    )

    assert catalog.id == "cascadia"
    assert session.catalog is catalog
    assert session.selection.selected_modules == {"landmark-tokens"}


@pytest.mark.asyncio
async def test_view_rejects_unsupported_player_count(storage):
    service = SetupService(storage, default_game_id="cascadia")
    with pytest.raises(ValidationError, match="supports 1 to 4 players"):
        await service.view("cascadia", players=9)


@pytest.mark.asyncio
async def test_unknown_games_leave_no_locks(storage):
    service = AdminService(storage)

    for index in range(50):
        with pytest.raises(RecordNotFoundError):
            async with service.editing(f"missing-{index}"):
                pass

    assert service._locks == {}


@pytest.mark.asyncio
async def test_lock_is_released_after_editing(storage):
    service = AdminService(storage)

    async with service.editing("cascadia") as admin:
        assert admin.game_id == "cascadia"
        assert service._locks["cascadia"].locked()

    assert service._locks == {}


@pytest.mark.asyncio
async def test_edits_to_one_game_are_serialised(storage):
    service = AdminService(storage)
    events: list[str] = []
    first_inside = asyncio.Event()

    async def first() -> None:
        async with service.editing("cascadia"):
            events.append("first in")
            first_inside.set()
            await asyncio.sleep(0.01)
            events.append("first out")

    async def second() -> None:
        await first_inside.wait()
        async with service.editing("cascadia"):
            events.append("second in")

    await asyncio.gather(first(), second())

    assert events == ["first in", "first out", "second in"]
    assert service._locks == {}
