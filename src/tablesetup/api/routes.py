"""HTTP routes for the setup API."""

from __future__ import annotations

from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from tablesetup.api.runtime import ApiState
from tablesetup.errors import (
    LoadError,
    PersistError,
    RecordNotFoundError,
    SetupError,
    StorageError,
    ValidationError,
    safe_error_message,
)
from tablesetup.forms import StepForm
from tablesetup.schemas import (
    ExpansionRead,
    GameRead,
    ModuleRead,
    ReorderRequest,
    SetupView,
    StepListResponse,
    StepRead,
)
from tablesetup.services import StepAdminService

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


ApiStateDep = Annotated[ApiState, Depends(get_state)]


def _is_not_found(exc: BaseException) -> bool:
    return isinstance(exc, RecordNotFoundError) or isinstance(
        exc.__cause__, RecordNotFoundError
    )


def raise_http_error(exc: SetupError, state: ApiState) -> NoReturn:
    """Translate a package error into an HTTPException."""

    if isinstance(exc, ValidationError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if _is_not_found(exc):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=safe_error_message(exc.__cause__ or exc, debug=state.settings.debug),
        ) from exc
    if isinstance(exc, (LoadError, PersistError, StorageError)):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=safe_error_message(exc.__cause__ or exc, debug=state.settings.debug),
        ) from exc
    raise exc


def _step_list(admin: StepAdminService, *, step_id: str | None = None) -> StepListResponse:
    return StepListResponse(
        steps=[StepRead.from_domain(step) for step in admin.steps],
        status_message=admin.status_message,
        step_id=step_id,
    )


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    return {
        "status": "ok",
        "database": state.database_ok(),
        "default_game_id": state.settings.default_game_id,
    }


@router.get("/games", response_model=list[GameRead])
async def list_games(state: ApiStateDep) -> list[GameRead]:
    try:
        games = await state.list_games()
    except SetupError as exc:
        raise_http_error(exc, state)
    return [GameRead.from_domain(game) for game in games]


@router.get("/games/{game_id}/setup", response_model=SetupView)
async def get_setup(
    game_id: str,
    state: ApiStateDep,
    players: Annotated[int | None, Query(ge=1)] = None,
    expansions: Annotated[list[str] | None, Query()] = None,
    modules: Annotated[list[str] | None, Query()] = None,
) -> SetupView:
    try:
        session, catalog = await state.setup.view(
            game_id,
            players=players,
            expansions=expansions or [],
            modules=modules or [],
        )
    except SetupError as exc:
        raise_http_error(exc, state)

    selection = session.selection
    return SetupView(
        game=GameRead.from_domain(catalog.game),
        player_count=selection.player_count,
        selected_expansions=sorted(selection.selected_expansions),
        selected_modules=sorted(selection.selected_modules),
        expansions=[ExpansionRead(id=e.id, name=e.name) for e in catalog.expansions],
        available_modules=[ModuleRead.from_domain(m) for m in session.available_modules()],
        expansion_summary=session.expansion_summary_label(),
        steps=[StepRead.from_domain(step) for step in session.visible_steps()],
        notices=list(session.state.notices),
    )


@router.get("/games/{game_id}/steps", response_model=StepListResponse)
async def list_steps(game_id: str, state: ApiStateDep) -> StepListResponse:
    try:
        admin = await state.admin.list_steps(game_id)
    except SetupError as exc:
        raise_http_error(exc, state)
    return _step_list(admin)


@router.post(
    "/games/{game_id}/steps",
    response_model=StepListResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_step(game_id: str, form: StepForm, state: ApiStateDep) -> StepListResponse:
    try:
        admin, step_id = await state.admin.create_step(game_id, form)
    except SetupError as exc:
        raise_http_error(exc, state)
    return _step_list(admin, step_id=step_id)


@router.put("/games/{game_id}/steps/{step_id}", response_model=StepListResponse)
async def update_step(
    game_id: str, step_id: str, form: StepForm, state: ApiStateDep
) -> StepListResponse:
    try:
        admin = await state.admin.update_step(game_id, step_id, form)
    except SetupError as exc:
        raise_http_error(exc, state)
    return _step_list(admin)


@router.delete("/games/{game_id}/steps/{step_id}", response_model=StepListResponse)
async def delete_step(game_id: str, step_id: str, state: ApiStateDep) -> StepListResponse:
    try:
        admin = await state.admin.delete_step(game_id, step_id)
    except SetupError as exc:
        raise_http_error(exc, state)
    return _step_list(admin)


@router.post("/games/{game_id}/steps/reorder", response_model=StepListResponse)
async def reorder_steps(
    game_id: str, request: ReorderRequest, state: ApiStateDep
) -> StepListResponse:
    try:
        admin = await state.admin.reorder(game_id, request.source_id, request.target_id)
    except SetupError as exc:
        raise_http_error(exc, state)
    return _step_list(admin)
