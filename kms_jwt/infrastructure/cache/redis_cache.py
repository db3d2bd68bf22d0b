"""
Infrastructure adapter: Redis → IKeyCache.

Plaintext keys are stored as raw bytes with SET ... EXAT <exp>, so Redis evicts
each entry at the token's own expiry. Redis errors (including timeouts) are
wrapped in KeyCacheError and propagated, never treated as a cache miss.
"""

import logging
from typing import Optional

import redis
from redis.exceptions import RedisError

from kms_jwt.domain.exceptions import KeyCacheError
from kms_jwt.domain.ports.key_cache_port import IKeyCache

logger = logging.getLogger(__name__)


class RedisKeyCache(IKeyCache):
    """Plaintext key cache shared across processes through Redis."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisKeyCache":
        return cls(
            redis.Redis.from_url(
                redis_url,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        )

    def get(self, key: str) -> tuple[Optional[bytes], bool]:
        try:
            value = self._client.get(key)
        except RedisError as exc:
            logger.error("Redis GET failed for %s: %s", key, exc)
            raise KeyCacheError(f"Key cache lookup failed: {exc}") from exc
        if value is None:
            return None, False
        return value, True

    def set(self, key: str, value: bytes, expires_at: int) -> None:
        try:
            self._client.set(key, value, exat=expires_at)
        except RedisError as exc:
            logger.error("Redis SET failed for %s: %s", key, exc)
            raise KeyCacheError(f"Key cache store failed: {exc}") from exc
