"""Integration tests for the FastAPI layer."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from tablesetup.api.app import create_app
from tablesetup.api.runtime import ApiState
from tablesetup.config import Settings
from tablesetup.domain import models as dm
from tablesetup.domain.conditions import build_condition
from tablesetup.repository import SqlSetupRepository

GAME = dm.GameID("cascadia")


def _seed(repo: SqlSetupRepository) -> None:
    repo.save_game(
        dm.Game(
            id=GAME,
            title="Cascadia",
            player_counts=dm.PlayerCountDomain.from_range(1, 4),
            popularity=5,
        )
    )
    repo.save_game(
        dm.Game(
            id=dm.GameID("wingspan"),
            title="Wingspan",
            player_counts=dm.PlayerCountDomain.from_range(1, 5),
        )
    )
    repo.create_expansion(GAME, "Landmarks", expansion_id="landmarks")
    repo.create_module(GAME, "Family variant", module_id="family-variant")
    repo.create_module(
        GAME, "Landmark tokens", expansion_id=dm.ExpansionID("landmarks"), module_id="tokens"
    )
    drafts = [
        dm.StepDraft(order=1, text="Shuffle the habitat tiles"),
        dm.StepDraft(
            order=2,
            text="Use the base scoring cards",
            condition=build_condition(require_no_expansions=True),
        ),
        dm.StepDraft(
            order=3,
            text="Place landmark tiles",
            condition=build_condition(include_expansions=["landmarks"]),
        ),
        dm.StepDraft(
            order=4,
            text="Stack landmark tokens",
            condition=build_condition(include_modules=["tokens"]),
        ),
    ]
    for draft in drafts:
        repo.create_step(GAME, draft)


def _make_app(tmp_path):
    def factory() -> ApiState:
        settings = Settings(
            database_url=f"sqlite:///{tmp_path / 'api.db'}",
            default_game_id="cascadia",
        )
        state = ApiState(settings=settings)
        _seed(state.repository)
        return state

    app = create_app(state_factory=factory)
    transport = ASGITransport(app=app)
    return app, transport


def _texts(payload):
    return [step["text"] for step in payload["steps"]]


@pytest.mark.asyncio
async def test_health_and_games(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        health = await client.get("/health")
        assert health.status_code == 200
        assert health.json() == {
            "status": "ok",
            "database": True,
            "default_game_id": "cascadia",
        }

        games = await client.get("/games")
        assert games.status_code == 200
        assert [game["id"] for game in games.json()] == ["cascadia", "wingspan"]
        assert games.json()[0]["players_max"] == 4


@pytest.mark.asyncio
async def test_setup_view(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        base = await client.get("/games/cascadia/setup")
        assert base.status_code == 200
        payload = base.json()
        assert payload["player_count"] == 1
        assert payload["expansion_summary"] == "Base game only"
        assert _texts(payload) == ["Shuffle the habitat tiles", "Use the base scoring cards"]
        assert [m["id"] for m in payload["available_modules"]] == ["family-variant"]

        chosen = await client.get(
            "/games/cascadia/setup",
            params={"players": 3, "expansions": ["landmarks"], "modules": ["tokens", "ghost"]},
        )
        assert chosen.status_code == 200
        payload = chosen.json()
        assert payload["player_count"] == 3
        assert payload["selected_expansions"] == ["landmarks"]
        assert payload["selected_modules"] == ["tokens"]
        assert payload["expansion_summary"] == "Landmarks"
        assert _texts(payload) == [
            "Shuffle the habitat tiles",
            "Place landmark tiles",
            "Stack landmark tokens",
        ]


@pytest.mark.asyncio
async def test_setup_rejects_unsupported_player_count(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.get("/games/cascadia/setup", params={"players": 5})
        assert response.status_code == 400
        assert response.json()["detail"] == "Cascadia supports 1 to 4 players."


@pytest.mark.asyncio
async def test_unknown_game_falls_back_with_notice(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        response = await client.get("/games/missing/setup")
        assert response.status_code == 200
        payload = response.json()
        assert payload["game"]["id"] == "cascadia"
        assert len(payload["notices"]) == 1
        assert "missing" in payload["notices"][0]


@pytest.mark.asyncio
async def test_step_admin_lifecycle(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        listed = await client.get("/games/cascadia/steps")
        assert listed.status_code == 200
        steps = listed.json()["steps"]
        assert [step["order"] for step in steps] == [1, 2, 3, 4]
        ids = [step["id"] for step in steps]

        created = await client.post(
            "/games/cascadia/steps",
            json={"text": "Pick a first player", "player_counts": "2, 3"},
        )
        assert created.status_code == 201
        payload = created.json()
        assert payload["status_message"] == "Step created."
        new_step = next(step for step in payload["steps"] if step["id"] == payload["step_id"])
        assert new_step["order"] == 5
        assert new_step["conditions"] == {"playerCounts": [2, 3]}

        updated = await client.put(
            f"/games/cascadia/steps/{payload['step_id']}",
            json={"step_order": "5", "text": "Pick the start player"},
        )
        assert updated.status_code == 200
        assert updated.json()["status_message"] == "Step updated."
        assert _texts(updated.json())[-1] == "Pick the start player"

        reordered = await client.post(
            "/games/cascadia/steps/reorder",
            json={"source_id": payload["step_id"], "target_id": ids[0]},
        )
        assert reordered.status_code == 200
        body = reordered.json()
        assert body["status_message"] == "Step order updated."
        assert [step["id"] for step in body["steps"]][:2] == [payload["step_id"], ids[0]]
        assert [step["order"] for step in body["steps"]] == [1, 2, 3, 4, 5]

        deleted = await client.delete(f"/games/cascadia/steps/{ids[1]}")
        assert deleted.status_code == 200
        assert deleted.json()["status_message"] == "Step deleted."
        assert ids[1] not in [step["id"] for step in deleted.json()["steps"]]


@pytest.mark.asyncio
async def test_step_admin_errors(tmp_path):
    app, transport = _make_app(tmp_path)

    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=transport, base_url="http://test") as client,
    ):
        missing_game = await client.get("/games/missing/steps")
        assert missing_game.status_code == 404

        bad_order = await client.post(
            "/games/cascadia/steps", json={"step_order": "soon", "text": "Later"}
        )
        assert bad_order.status_code == 400
        assert bad_order.json()["detail"] == "Step order must be a number."

        clash = await client.post("/games/cascadia/steps", json={"step_order": "1", "text": "x"})
        assert clash.status_code == 400

        no_text = await client.post("/games/cascadia/steps", json={"text": "  "})
        assert no_text.status_code == 400
        assert no_text.json()["detail"] == "Step text is required."

        missing_step = await client.put(
            "/games/cascadia/steps/ghost", json={"step_order": "9", "text": "Boo"}
        )
        assert missing_step.status_code == 404

        bad_reorder = await client.post(
            "/games/cascadia/steps/reorder", json={"source_id": "ghost", "target_id": "ghost"}
        )
        assert bad_reorder.status_code == 404

        listed = await client.get("/games/cascadia/steps")
        assert len(listed.json()["steps"]) == 4
