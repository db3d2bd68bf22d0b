"""
Infrastructure adapter: process-local dict → IKeyCache.

Entries carry an absolute expiry and stay valid up to and including that
second. A min-heap of (expires_at, key) lets every set() evict all entries
already past their expiry, so plaintext keys of expired tokens do not linger
in memory even when their key is never read again.
"""

import heapq
import threading
import time
from typing import Callable, Optional

from kms_jwt.domain.ports.key_cache_port import IKeyCache


class InMemoryKeyCache(IKeyCache):
    """Thread-safe in-process plaintext key cache."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[bytes, int]] = {}
        self._expiry_heap: list[tuple[int, str]] = []
        self._lock = threading.Lock()

    def get(self, key: str) -> tuple[Optional[bytes], bool]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None, False
            value, expires_at = entry
            if self._clock() > expires_at:
                del self._entries[key]
                return None, False
            return value, True

    def set(self, key: str, value: bytes, expires_at: int) -> None:
        with self._lock:
            self._evict_expired(self._clock())
            self._entries[key] = (value, expires_at)
            heapq.heappush(self._expiry_heap, (expires_at, key))

    def get_expiry(self, key: str) -> Optional[int]:
        """Return the stored absolute expiry for *key*, expired or not."""
        with self._lock:
            entry = self._entries.get(key)
            return entry[1] if entry else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _evict_expired(self, now: float) -> None:
        # Heap items can be stale (entry overwritten or already dropped by get);
        # only delete when the live entry still carries the popped expiry.
        while self._expiry_heap and self._expiry_heap[0][0] < now:
            expires_at, key = heapq.heappop(self._expiry_heap)
            entry = self._entries.get(key)
            if entry is not None and entry[1] == expires_at:
                del self._entries[key]
