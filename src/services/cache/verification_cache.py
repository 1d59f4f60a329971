"""TTL cache for INN verification verdicts."""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from threading import RLock

import redis.asyncio as redis
from redis.exceptions import RedisError

from src.config import settings

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "inn_validation_"


class VerificationCache(ABC):
    """Maps an INN to a previously computed validity flag."""

    @abstractmethod
    async def get(self, inn: str) -> bool | None:
        """Return the cached verdict, or None when absent or expired."""

    @abstractmethod
    async def set(self, inn: str, valid: bool, ttl_seconds: int) -> None:
        """Store a verdict that silently expires after ``ttl_seconds``."""

    @staticmethod
    def key(inn: str) -> str:
        return f"{CACHE_KEY_PREFIX}{inn}"


class RedisVerificationCache(VerificationCache):
    """Verdicts stored as "1"/"0" strings with a Redis expiry.

    Backend errors degrade to a cache miss on read and are ignored on write.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    async def get(self, inn: str) -> bool | None:
        try:
            raw = await self._client.get(self.key(inn))
        except RedisError as exc:
            logger.warning("INN cache read failed for %s: %s", inn, exc)
            return None
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return raw == "1"

    async def set(self, inn: str, valid: bool, ttl_seconds: int) -> None:
        try:
            await self._client.set(self.key(inn), "1" if valid else "0", ex=ttl_seconds)
        except RedisError as exc:
            logger.warning("INN cache write failed for %s: %s", inn, exc)


class InMemoryVerificationCache(VerificationCache):
    """Process-local cache guarded by a lock; last write wins."""

    def __init__(self, clock=time.monotonic) -> None:
        self._lock = RLock()
        self._entries: dict[str, tuple[bool, float]] = {}
        self._clock = clock

    async def get(self, inn: str) -> bool | None:
        key = self.key(inn)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    async def set(self, inn: str, valid: bool, ttl_seconds: int) -> None:
        with self._lock:
            self._entries[self.key(inn)] = (valid, self._clock() + ttl_seconds)


_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client for the current process."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


def _initialize_cache() -> VerificationCache:
    if settings.INN_CACHE_BACKEND.lower() == "memory":
        return InMemoryVerificationCache()
    return RedisVerificationCache(get_redis_client())


_verification_cache = _initialize_cache()


def get_verification_cache() -> VerificationCache:
    """FastAPI dependency returning the process-wide verification cache."""

    return _verification_cache
