from __future__ import annotations

import threading
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager

import redis


class PlayerBusyError(RuntimeError):
    """Raised when a player's lock could not be acquired in time."""

    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player {player_id!r} is busy")
        self.player_id = player_id


class KeyedLock:
    """In-process locks, one per key.

    Locks are created lazily and kept for the process lifetime, like the players they guard.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._lock_for(key):
            yield


def _release(*, r: redis.Redis, key: str, token: str) -> None:
    # Delete the lock only if we still own it; it may have expired and been taken over.
    with r.pipeline() as pipe:
        try:
            pipe.watch(key)
            if pipe.get(key) == token:
                pipe.multi()
                pipe.delete(key)
                pipe.execute()
        except redis.WatchError:
            # Someone else touched the key between GET and DEL, so it is no longer ours.
            return


@contextmanager
def player_lock(
    *,
    r: redis.Redis,
    player_id: str,
    ttl_ms: int = 5_000,
    timeout_ms: int = 2_000,
    poll_ms: int = 10,
) -> Iterator[None]:
    """Per-player lock shared by every process talking to the same Redis.

    Waits up to `timeout_ms` for the lock, then raises `PlayerBusyError`. The key expires
    after `ttl_ms` so a crashed holder cannot wedge the player forever.
    """

    key = f"lock:player:{player_id}"
    token = uuid.uuid4().hex
    deadline = time.monotonic() + timeout_ms / 1000

    while not r.set(key, token, nx=True, px=ttl_ms):
        if time.monotonic() >= deadline:
            raise PlayerBusyError(player_id)
        time.sleep(poll_ms / 1000)

    try:
        yield
    finally:
        _release(r=r, key=key, token=token)
