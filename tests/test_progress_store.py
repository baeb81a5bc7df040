from __future__ import annotations

import threading

import fakeredis
import pytest

from manor import manor_service
from manor.api.models import PlayerProgress
from manor.progress_store import InMemoryProgressStore, ProgressStore, RedisProgressStore


@pytest.fixture(params=["memory", "redis"])
def any_store(request: pytest.FixtureRequest) -> ProgressStore:
    if request.param == "memory":
        return InMemoryProgressStore()
    return RedisProgressStore(r=fakeredis.FakeRedis(decode_responses=True))


def test_unknown_player_defaults_to_parlor(any_store: ProgressStore) -> None:
    assert any_store.get_stage("nobody") == 0
    assert any_store.is_door_unlocked("nobody") is False
    assert any_store.get_progress("nobody") == PlayerProgress(stage=0, door_unlocked=False)


def test_start_overwrites_previous_progress(any_store: ProgressStore) -> None:
    any_store.start("p")
    any_store.unlock_door("p")
    any_store.set_stage("p", 3)
    assert any_store.get_progress("p") == PlayerProgress(stage=3, door_unlocked=True)

    any_store.start("p")
    assert any_store.get_progress("p") == PlayerProgress(stage=0, door_unlocked=False)


def test_fields_are_stored_independently(any_store: ProgressStore) -> None:
    any_store.start("p")
    any_store.set_stage("p", 2)
    assert any_store.is_door_unlocked("p") is False

    any_store.unlock_door("p")
    assert any_store.get_stage("p") == 2
    assert any_store.is_door_unlocked("p") is True


def test_players_do_not_share_progress(any_store: ProgressStore) -> None:
    any_store.start("a")
    any_store.unlock_door("a")
    any_store.set_stage("a", 1)

    assert any_store.get_progress("b") == PlayerProgress()


@pytest.mark.parametrize("stage", [-1, 4, 99])
def test_set_stage_rejects_out_of_range(any_store: ProgressStore, stage: int) -> None:
    with pytest.raises(ValueError):
        any_store.set_stage("p", stage)
    assert any_store.get_stage("p") == 0


def test_player_locks_are_per_player(any_store: ProgressStore) -> None:
    # Different players never wait on each other.
    with any_store.player_lock("a"):
        with any_store.player_lock("b"):
            any_store.start("b")
    assert any_store.get_stage("b") == 0


def test_concurrent_door_attempts_unlock_exactly_once() -> None:
    store = InMemoryProgressStore()
    manor_service.enter_room(store=store, player_id="p")

    outcomes: list[str] = []
    outcomes_lock = threading.Lock()
    barrier = threading.Barrier(8)

    def _knock() -> None:
        barrier.wait()
        try:
            resp = manor_service.unlock_door(store=store, player_id="p", key="knock")
            status = resp.status.value
        except manor_service.ManorRejection as e:
            status = e.response.status.value
        with outcomes_lock:
            outcomes.append(status)

    threads = [threading.Thread(target=_knock) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("door_unlocked") == 1
    assert outcomes.count("door_already_unlocked") == 7
    assert store.get_progress("p") == PlayerProgress(stage=1, door_unlocked=True)


def test_concurrent_players_progress_independently() -> None:
    store = InMemoryProgressStore()
    players = [f"p{i}" for i in range(10)]

    def _play(player_id: str) -> None:
        manor_service.enter_room(store=store, player_id=player_id)
        manor_service.unlock_door(store=store, player_id=player_id, key="knock")
        manor_service.enter_hallway(store=store, player_id=player_id)
        manor_service.attempt_escape(store=store, player_id=player_id, key="truth")

    threads = [threading.Thread(target=_play, args=(p,)) for p in players]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    for p in players:
        assert store.get_progress(p) == PlayerProgress(stage=3, door_unlocked=True)
