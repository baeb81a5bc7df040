from __future__ import annotations

from collections.abc import Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient

from manor.api.deps import get_progress_store, reset_progress_store_for_tests
from manor.main import app
from manor.progress_store import InMemoryProgressStore, RedisProgressStore


@pytest.fixture(autouse=True)
def _memory_store_by_default(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep tests hermetic: never pick up a developer's MANOR_STORE=redis."""

    monkeypatch.setenv("MANOR_STORE", "memory")
    reset_progress_store_for_tests()
    yield
    reset_progress_store_for_tests()


@pytest.fixture()
def store() -> InMemoryProgressStore:
    return InMemoryProgressStore()


@pytest.fixture()
def client(store: InMemoryProgressStore) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_progress_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """TestClient backed by a RedisProgressStore over fakeredis."""

    r = fakeredis.FakeRedis(decode_responses=True)
    redis_store = RedisProgressStore(r=r)

    app.dependency_overrides[get_progress_store] = lambda: redis_store
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
