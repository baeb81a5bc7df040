from __future__ import annotations

import logging

from fastapi import Request
from pydantic import ValidationError

from manor.api.models import KeyRequest
from manor.infra.redis_client import create_redis
from manor.progress_store import InMemoryProgressStore, ProgressStore, RedisProgressStore
from manor.settings import load_settings


logger = logging.getLogger(__name__)

_STORE: ProgressStore | None = None


def init_progress_store() -> ProgressStore:
    """Create the process-wide store from settings.

    Safe to call multiple times; subsequent calls return the already created instance.
    """

    global _STORE
    if _STORE is None:
        settings = load_settings()
        if settings.store == "redis":
            _STORE = RedisProgressStore(
                r=create_redis(),
                lock_ttl_ms=settings.lock_ttl_ms,
                lock_timeout_ms=settings.lock_timeout_ms,
            )
        else:
            _STORE = InMemoryProgressStore()
        logger.info("progress store: %s", type(_STORE).__name__)
    return _STORE


def reset_progress_store_for_tests() -> None:
    global _STORE
    _STORE = None


def get_progress_store() -> ProgressStore:
    return init_progress_store()


async def guessed_key(request: Request) -> str | None:
    """The `key` field of a JSON body, or None.

    Empty bodies and anything `KeyRequest` rejects (malformed or over-nested JSON,
    non-object bodies, non-string keys) count as "no key", which the game treats as
    a wrong guess rather than a validation error.
    """

    raw = await request.body()
    if not raw:
        return None
    try:
        return KeyRequest.model_validate_json(raw).key
    except ValidationError:
        return None
