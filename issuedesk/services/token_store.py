"""Revoked-token and login-failure store backed by Redis, in memory without it."""
from __future__ import annotations

import logging
import time
from typing import Protocol

import redis

from issuedesk.core.config import settings

logger = logging.getLogger(__name__)


class Store(Protocol):
    def revoke(self, token: str, ttl_seconds: int) -> None: ...
    def is_revoked(self, token: str) -> bool: ...
    def inc_failure(self, key: str, window: int) -> int: ...
    def clear_failure(self, key: str) -> None: ...


class InMemoryStore:
    def __init__(self):
        self._revoked: dict[str, float] = {}
        self._fails: dict[str, tuple[int, float]] = {}

    def revoke(self, token: str, ttl_seconds: int) -> None:
        self._revoked[token] = time.time() + ttl_seconds

    def is_revoked(self, token: str) -> bool:
        now = time.time()
        expired = [k for k, exp in self._revoked.items() if exp <= now]
        for k in expired:
            self._revoked.pop(k, None)
        return token in self._revoked

    def inc_failure(self, key: str, window: int) -> int:
        now = time.time()
        count, expiry = self._fails.get(key, (0, now + window))
        if expiry < now:
            count = 0
            expiry = now + window
        count += 1
        self._fails[key] = (count, expiry)
        return count

    def clear_failure(self, key: str) -> None:
        self._fails.pop(key, None)


class RedisStore:
    def __init__(self, url: str):
        self.client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=1,
            socket_timeout=1,
        )

    def revoke(self, token: str, ttl_seconds: int) -> None:
        self.client.setex(f"revoked:{token}", ttl_seconds, "1")

    def is_revoked(self, token: str) -> bool:
        return bool(self.client.get(f"revoked:{token}"))

    def inc_failure(self, key: str, window: int) -> int:
        redis_key = f"loginfail:{key}"
        pipe = self.client.pipeline()
        pipe.incr(redis_key)
        pipe.expire(redis_key, window)
        count, _ = pipe.execute()
        return int(count)

    def clear_failure(self, key: str) -> None:
        self.client.delete(f"loginfail:{key}")


def build_store(redis_url: str | None) -> Store:
    if settings.env.lower() == "test" or not redis_url:
        return InMemoryStore()
    try:
        store = RedisStore(redis_url)
        store.client.ping()
        return store
    except redis.RedisError as exc:
        logger.warning(
            "Redis unavailable, using in-memory token store",
            extra={"event": {"error": str(exc)}},
        )
        return InMemoryStore()
