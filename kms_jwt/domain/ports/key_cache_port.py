"""
Port (interface) for plaintext data key caches.
Infrastructure adapters (e.g. InMemoryKeyCache, RedisKeyCache) must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Optional


class IKeyCache(ABC):
    @abstractmethod
    def get(self, key: str) -> tuple[Optional[bytes], bool]:
        """Return ``(value, hit)``. *value* is None on a miss."""
        ...

    @abstractmethod
    def set(self, key: str, value: bytes, expires_at: int) -> None:
        """Store *value* until the absolute Unix timestamp *expires_at*.

        Raises:
            KeyCacheError: if the backend fails to store the entry.
        """
        ...
