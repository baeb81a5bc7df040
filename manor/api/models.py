from __future__ import annotations

from enum import IntEnum, StrEnum

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_PLAYER_ID = "player1"


class Stage(IntEnum):
    parlor = 0
    door_unlocked = 1
    hallway = 2
    escaped = 3


class ManorStatus(StrEnum):
    # /room
    parlor_entered = "parlor_entered"

    # /door
    door_unlocked = "door_unlocked"
    door_locked = "door_locked"
    door_already_unlocked = "door_already_unlocked"

    # /hallway
    hallway_entered = "hallway_entered"
    access_denied = "access_denied"
    hallway_already_explored = "hallway_already_explored"

    # /escape
    escaped_successfully = "escaped_successfully"
    escape_premature = "escape_premature"
    escape_failed = "escape_failed"

    # /status
    in_parlor = "in_parlor"
    in_hallway = "in_hallway"
    escaped = "escaped"
    lost = "lost"


class PlayerProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: int = Stage.parlor
    door_unlocked: bool = False


class ManorResponse(BaseModel):
    """Envelope returned by every /api endpoint, on success and on rejection."""

    model_config = ConfigDict(populate_by_name=True)

    narrative: str
    status: ManorStatus
    # Hint shown to the player; null when the house has nothing to say.
    inscription: str | None = None
    current_stage: int = Field(..., alias="currentStage")


class KeyRequest(BaseModel):
    """Body of /door and /escape: `{"key": "..."}`."""

    key: str | None = Field(default=None, examples=["knock"])
