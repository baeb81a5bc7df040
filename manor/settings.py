from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


_PROJECT_ROOT = Path(__file__).resolve().parents[1]


@dataclass(frozen=True, slots=True)
class Settings:
    store: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    lock_ttl_ms: int = 5_000
    lock_timeout_ms: int = 2_000
    log_level: str = "INFO"


def load_settings(*, env_file: Path | None = None) -> Settings:
    """Build settings from the environment.

    A `.env` file at the project root is loaded first when present; real environment
    variables always win over it.
    """

    env_path = env_file or (_PROJECT_ROOT / ".env")
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)

    store = os.environ.get("MANOR_STORE", "memory").strip().lower()
    if store not in {"memory", "redis"}:
        raise ValueError(f"MANOR_STORE must be 'memory' or 'redis', got {store!r}")

    return Settings(
        store=store,
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        lock_ttl_ms=int(os.environ.get("MANOR_LOCK_TTL_MS", "5000")),
        lock_timeout_ms=int(os.environ.get("MANOR_LOCK_TIMEOUT_MS", "2000")),
        log_level=os.environ.get("MANOR_LOG_LEVEL", "INFO").upper(),
    )
