from __future__ import annotations

import threading
import time

import fakeredis
import pytest
from statemachine.exceptions import TransitionNotAllowed

from manor.api.models import Stage
from manor.fsm import ManorFSM
from manor.lock import KeyedLock, PlayerBusyError, player_lock


def test_fsm_walks_the_manor_in_order() -> None:
    assert ManorFSM(0).advance("knock") == Stage.door_unlocked
    assert ManorFSM(1).advance("enter_hallway") == Stage.hallway
    assert ManorFSM(2).advance("speak_truth") == Stage.escaped


@pytest.mark.parametrize(
    ("stage", "event"),
    [
        (0, "enter_hallway"),
        (0, "speak_truth"),
        (1, "knock"),
        (2, "knock"),
        (3, "speak_truth"),
    ],
)
def test_fsm_rejects_out_of_order_events(stage: int, event: str) -> None:
    fsm = ManorFSM(stage)
    with pytest.raises(TransitionNotAllowed):
        fsm.advance(event)
    assert fsm.stage == stage


def test_fsm_rejects_unknown_stage() -> None:
    with pytest.raises(ValueError):
        ManorFSM(5)


def test_keyed_lock_serializes_same_key() -> None:
    locks = KeyedLock()
    inside = 0
    max_inside = 0
    counter_lock = threading.Lock()

    def _work() -> None:
        nonlocal inside, max_inside
        with locks.hold("p"):
            with counter_lock:
                inside += 1
                max_inside = max(max_inside, inside)
            time.sleep(0.005)
            with counter_lock:
                inside -= 1

    threads = [threading.Thread(target=_work) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert max_inside == 1


def test_redis_player_lock_releases_on_exit() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    with player_lock(r=r, player_id="p"):
        assert r.get("lock:player:p") is not None

    assert r.get("lock:player:p") is None


def test_redis_player_lock_times_out_when_held() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    r.set("lock:player:p", "someone-else", px=5_000)

    with pytest.raises(PlayerBusyError) as e:
        with player_lock(r=r, player_id="p", timeout_ms=30, poll_ms=5):
            pass

    assert e.value.player_id == "p"
    # The other holder's lock is untouched.
    assert r.get("lock:player:p") == "someone-else"


def test_redis_player_lock_does_not_release_a_lock_it_lost() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    with player_lock(r=r, player_id="p"):
        # Simulate expiry followed by another holder taking over.
        r.set("lock:player:p", "new-owner")

    assert r.get("lock:player:p") == "new-owner"
