"""Redis cache for mapping lookups, implementing ICacheBackend."""

from __future__ import annotations

import redis

from payroll_bridge.core.exceptions import CacheError


class RedisCacheBackend:
    """ICacheBackend backed by Redis.

    Keys are namespaced with ``key_prefix`` so several environments can share
    one Redis database; callers always pass the bare key.
    """

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 key_prefix: str = "payroll-bridge:") -> None:
        self._key_prefix = key_prefix
        self._client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(self._key(key))
        except redis.RedisError as exc:
            raise CacheError(f"Cache read failed for {key!r}: {exc}") from exc

    def setex(self, key: str, ttl: int, value: str) -> None:
        if ttl <= 0:
            raise CacheError(f"Cache TTL must be positive for {key!r}, got {ttl}")
        try:
            self._client.setex(self._key(key), ttl, value)
        except redis.RedisError as exc:
            raise CacheError(f"Cache write failed for {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except redis.RedisError as exc:
            raise CacheError(f"Cache delete failed for {key!r}: {exc}") from exc
