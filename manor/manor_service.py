from __future__ import annotations

import logging

from manor import narrative
from manor.api.models import ManorResponse, ManorStatus, Stage
from manor.fsm import ManorFSM
from manor.progress_store import ProgressStore


logger = logging.getLogger(__name__)

DOOR_KEY = "knock"
ESCAPE_KEY = "truth"


class ManorRejection(Exception):
    """A request the house refuses: wrong key or wrong stage.

    Carries the envelope to send back with HTTP 400. Progress is never changed when this
    is raised.
    """

    def __init__(self, response: ManorResponse) -> None:
        super().__init__(response.status)
        self.response = response


def key_matches(guess: str | None, expected: str) -> bool:
    # Case-insensitive, exact otherwise: surrounding whitespace is part of the guess.
    return guess is not None and guess.casefold() == expected.casefold()


def _reject(*, player_id: str, narrative_text: str, status: ManorStatus, stage: int, inscription: str | None) -> ManorRejection:
    logger.debug("player %s rejected: %s (stage %s)", player_id, status.value, stage)
    return ManorRejection(
        ManorResponse(narrative=narrative_text, status=status, inscription=inscription, current_stage=stage)
    )


def enter_room(*, store: ProgressStore, player_id: str) -> ManorResponse:
    # start() is one atomic overwrite; no player lock.
    store.start(player_id)

    logger.info("player %s entered the parlor", player_id)
    return ManorResponse(
        narrative=narrative.PARLOR_ENTERED,
        status=ManorStatus.parlor_entered,
        inscription=narrative.PARLOR_INSCRIPTION,
        current_stage=Stage.parlor,
    )


def unlock_door(*, store: ProgressStore, player_id: str, key: str | None) -> ManorResponse:
    with store.player_lock(player_id):
        stage = store.get_stage(player_id)
        if stage != Stage.parlor:
            raise _reject(
                player_id=player_id,
                narrative_text=narrative.DOOR_ALREADY_UNLOCKED,
                status=ManorStatus.door_already_unlocked,
                stage=stage,
                inscription=None,
            )

        if not key_matches(key, DOOR_KEY):
            raise _reject(
                player_id=player_id,
                narrative_text=narrative.DOOR_LOCKED,
                status=ManorStatus.door_locked,
                stage=stage,
                inscription=narrative.DOOR_LOCKED_INSCRIPTION,
            )

        new_stage = ManorFSM(stage).advance("knock")
        store.unlock_door(player_id)
        store.set_stage(player_id, new_stage)

    logger.info("player %s unlocked the parlor door", player_id)
    return ManorResponse(
        narrative=narrative.DOOR_UNLOCKED,
        status=ManorStatus.door_unlocked,
        inscription=narrative.DOOR_UNLOCKED_INSCRIPTION,
        current_stage=new_stage,
    )


def enter_hallway(*, store: ProgressStore, player_id: str) -> ManorResponse:
    with store.player_lock(player_id):
        progress = store.get_progress(player_id)

        # The door check comes first: a locked door wins over any stage mismatch.
        if not progress.door_unlocked:
            raise _reject(
                player_id=player_id,
                narrative_text=narrative.ACCESS_DENIED,
                status=ManorStatus.access_denied,
                stage=progress.stage,
                inscription=narrative.ACCESS_DENIED_INSCRIPTION,
            )

        if progress.stage != Stage.door_unlocked:
            raise _reject(
                player_id=player_id,
                narrative_text=narrative.HALLWAY_ALREADY_EXPLORED,
                status=ManorStatus.hallway_already_explored,
                stage=progress.stage,
                inscription=None,
            )

        new_stage = ManorFSM(progress.stage).advance("enter_hallway")
        store.set_stage(player_id, new_stage)

    logger.info("player %s entered the hallway", player_id)
    return ManorResponse(
        narrative=narrative.HALLWAY_ENTERED,
        status=ManorStatus.hallway_entered,
        inscription=narrative.HALLWAY_INSCRIPTION,
        current_stage=new_stage,
    )


def attempt_escape(*, store: ProgressStore, player_id: str, key: str | None) -> ManorResponse:
    with store.player_lock(player_id):
        stage = store.get_stage(player_id)
        if stage < Stage.hallway:
            raise _reject(
                player_id=player_id,
                narrative_text=narrative.ESCAPE_PREMATURE,
                status=ManorStatus.escape_premature,
                stage=stage,
                inscription=narrative.ESCAPE_PREMATURE_INSCRIPTION,
            )

        if not key_matches(key, ESCAPE_KEY):
            raise _reject(
                player_id=player_id,
                narrative_text=narrative.ESCAPE_FAILED,
                status=ManorStatus.escape_failed,
                stage=Stage.hallway,
                inscription=narrative.ESCAPE_FAILED_INSCRIPTION,
            )

        # Escaped is terminal: speaking the truth again just replays the ending.
        if stage == Stage.escaped:
            new_stage = Stage.escaped
        else:
            new_stage = ManorFSM(stage).advance("speak_truth")
            store.set_stage(player_id, new_stage)

    logger.info("player %s escaped the manor", player_id)
    return ManorResponse(
        narrative=narrative.ESCAPED,
        status=ManorStatus.escaped_successfully,
        inscription=narrative.ESCAPED_INSCRIPTION,
        current_stage=new_stage,
    )


def get_status(*, store: ProgressStore, player_id: str) -> ManorResponse:
    stage = store.get_stage(player_id)
    status, text = narrative.describe_stage(stage)
    return ManorResponse(narrative=text, status=status, inscription=None, current_stage=stage)
