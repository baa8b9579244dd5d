"""
Key/value cache shared by the page render cache and the TMDB client.

Uses Redis when REDIS_URL is configured, an in-process store otherwise.
The backend is chosen once at startup; a Redis error is never turned into
a silent fallback, it propagates to the caller.

Capability: get(key) -> value | None, set(key, value), expire(key, ttl).
"""
import logging
import time
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class RedisCache:
    """Cache backed by a Redis server."""

    def __init__(self, client):
        """
        Args:
            client: redis.Redis instance (decode_responses=True)
        """
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        import redis

        client = redis.from_url(url, decode_responses=True)
        logger.info("Page/metadata cache using Redis")
        return cls(client)

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def set(self, key: str, value: str) -> None:
        self._client.set(key, value)

    def expire(self, key: str, ttl_seconds: int) -> None:
        self._client.expire(key, ttl_seconds)

    def close(self) -> None:
        self._client.close()


class MemoryCache:
    """In-process cache with per-key expiry (development and tests)."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._store: Dict[str, Tuple[str, Optional[float]]] = {}

    def get(self, key: str) -> Optional[str]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: str) -> None:
        # A plain set clears any previous expiry, as Redis SET does
        self._store[key] = (value, None)

    def expire(self, key: str, ttl_seconds: int) -> None:
        entry = self._store.get(key)
        if entry is not None:
            self._store[key] = (entry[0], self._clock() + ttl_seconds)

    def close(self) -> None:
        self._store.clear()


def build_cache(redis_url: Optional[str]):
    """Create the cache backend for this process."""
    if redis_url:
        return RedisCache.from_url(redis_url)
    logger.info("REDIS_URL not set, page/metadata cache is in-memory")
    return MemoryCache()
