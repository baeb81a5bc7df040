from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager

import redis

from manor.api.models import PlayerProgress, Stage
from manor.lock import KeyedLock, player_lock


PLAYER_KEY_PREFIX = "manor:player:"  # + {player_id}


def _player_key(player_id: str) -> str:
    return f"{PLAYER_KEY_PREFIX}{player_id}"


def _validate_stage(stage: int) -> int:
    # Stage(...) raises ValueError for anything outside 0..3.
    return int(Stage(stage))


class ProgressStore(ABC):
    """Per-player progress.

    Each operation is atomic on its own. Callers that read and then write (the game rules)
    wrap the sequence in `player_lock(player_id)`.
    """

    @abstractmethod
    def start(self, player_id: str) -> None:
        """Reset the player to the parlor with the door locked."""

    @abstractmethod
    def get_progress(self, player_id: str) -> PlayerProgress:
        """Snapshot of both fields; unknown players are in the parlor."""

    @abstractmethod
    def set_stage(self, player_id: str, stage: int) -> None: ...

    @abstractmethod
    def unlock_door(self, player_id: str) -> None: ...

    @abstractmethod
    def player_lock(self, player_id: str) -> AbstractContextManager[None]: ...

    def get_stage(self, player_id: str) -> int:
        return self.get_progress(player_id).stage

    def is_door_unlocked(self, player_id: str) -> bool:
        return self.get_progress(player_id).door_unlocked


class InMemoryProgressStore(ProgressStore):
    """Process-wide store: one dict of frozen records, swapped whole under a lock."""

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._players: dict[str, PlayerProgress] = {}
        self._player_locks = KeyedLock()

    def start(self, player_id: str) -> None:
        with self._mutex:
            self._players[player_id] = PlayerProgress()

    def get_progress(self, player_id: str) -> PlayerProgress:
        with self._mutex:
            return self._players.get(player_id, PlayerProgress())

    def set_stage(self, player_id: str, stage: int) -> None:
        stage = _validate_stage(stage)
        with self._mutex:
            current = self._players.get(player_id, PlayerProgress())
            self._players[player_id] = current.model_copy(update={"stage": stage})

    def unlock_door(self, player_id: str) -> None:
        with self._mutex:
            current = self._players.get(player_id, PlayerProgress())
            self._players[player_id] = current.model_copy(update={"door_unlocked": True})

    @contextmanager
    def player_lock(self, player_id: str) -> Iterator[None]:
        with self._player_locks.hold(player_id):
            yield


class RedisProgressStore(ProgressStore):
    """Progress kept in one Redis hash per player (`stage`, `door_unlocked`)."""

    def __init__(self, *, r: redis.Redis, lock_ttl_ms: int = 5_000, lock_timeout_ms: int = 2_000) -> None:
        self.r = r
        self.lock_ttl_ms = lock_ttl_ms
        self.lock_timeout_ms = lock_timeout_ms

    def start(self, player_id: str) -> None:
        self.r.hset(_player_key(player_id), mapping={"stage": "0", "door_unlocked": "0"})

    def get_progress(self, player_id: str) -> PlayerProgress:
        raw = self.r.hgetall(_player_key(player_id))
        if not raw:
            return PlayerProgress()
        return PlayerProgress(
            stage=int(raw.get("stage", "0")),
            door_unlocked=raw.get("door_unlocked") == "1",
        )

    def set_stage(self, player_id: str, stage: int) -> None:
        stage = _validate_stage(stage)
        self.r.hset(_player_key(player_id), "stage", str(stage))

    def unlock_door(self, player_id: str) -> None:
        self.r.hset(_player_key(player_id), "door_unlocked", "1")

    def player_lock(self, player_id: str) -> AbstractContextManager[None]:
        return player_lock(
            r=self.r,
            player_id=player_id,
            ttl_ms=self.lock_ttl_ms,
            timeout_ms=self.lock_timeout_ms,
        )
