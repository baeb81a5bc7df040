from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from manor import manor_service
from manor.api.deps import get_progress_store, guessed_key
from manor.api.models import DEFAULT_PLAYER_ID, KeyRequest, ManorResponse
from manor.progress_store import ProgressStore

router = APIRouter()
api = APIRouter(prefix="/api", tags=["Haunted Manor Escape API"])

PlayerId = Annotated[str, Query(alias="playerId", description="Unique player identifier", examples=["player1"])]

_REJECTED: dict[int | str, dict[str, Any]] = {400: {"model": ManorResponse, "description": "Wrong key or wrong stage"}}

# `guessed_key` reads the body itself so a bad body is a wrong key, not a 422.
_KEY_BODY: dict[str, Any] = {
    "requestBody": {
        "required": False,
        "content": {"application/json": {"schema": KeyRequest.model_json_schema()}},
    }
}


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@api.get(
    "/room",
    response_model=ManorResponse,
    summary="Enter the haunted parlor",
    description="Begins (or restarts) the game and returns the first clue.",
)
def enter_room_route(
    player_id: PlayerId = DEFAULT_PLAYER_ID,
    store: ProgressStore = Depends(get_progress_store),
) -> ManorResponse:
    return manor_service.enter_room(store=store, player_id=player_id)


@api.post(
    "/door",
    response_model=ManorResponse,
    responses=_REJECTED,
    openapi_extra=_KEY_BODY,
    summary="Attempt to unlock the parlor door",
    description='Sends a secret key to unlock the next room. Expects `{"key": "..."}`.',
)
def unlock_door_route(
    player_id: PlayerId = DEFAULT_PLAYER_ID,
    key: str | None = Depends(guessed_key),
    store: ProgressStore = Depends(get_progress_store),
) -> ManorResponse:
    return manor_service.unlock_door(store=store, player_id=player_id, key=key)


@api.get(
    "/hallway",
    response_model=ManorResponse,
    responses=_REJECTED,
    summary="Enter the haunted hallway",
    description="Only reachable once the parlor door has been unlocked.",
)
def enter_hallway_route(
    player_id: PlayerId = DEFAULT_PLAYER_ID,
    store: ProgressStore = Depends(get_progress_store),
) -> ManorResponse:
    return manor_service.enter_hallway(store=store, player_id=player_id)


@api.post(
    "/escape",
    response_model=ManorResponse,
    responses=_REJECTED,
    openapi_extra=_KEY_BODY,
    summary="Attempt to escape the manor",
    description='Tries to break the curse. Expects `{"key": "..."}`.',
)
def attempt_escape_route(
    player_id: PlayerId = DEFAULT_PLAYER_ID,
    key: str | None = Depends(guessed_key),
    store: ProgressStore = Depends(get_progress_store),
) -> ManorResponse:
    return manor_service.attempt_escape(store=store, player_id=player_id, key=key)


@api.get(
    "/status",
    response_model=ManorResponse,
    summary="Check current game status",
    description="Returns the player's current location and what to do next. Never changes progress.",
)
def get_status_route(
    player_id: PlayerId = DEFAULT_PLAYER_ID,
    store: ProgressStore = Depends(get_progress_store),
) -> ManorResponse:
    return manor_service.get_status(store=store, player_id=player_id)


router.include_router(api)
