"""
Simple in-memory TTL cache for upstream API results.

No locking: every read and write happens on the event loop thread.
"""
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


class TTLCache:
    """
    Map of key -> (value, fetched_at).

    Entries older than `ttl_seconds` read as absent and are evicted on
    read; `set` replaces an entry wholesale and evicts every expired entry.
    `clear` drops everything regardless of age.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: Dict[Hashable, Tuple[Any, float]] = {}

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, fetched_at = entry
        if self._clock() - fetched_at >= self.ttl_seconds:
            del self._store[key]
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        now = self._clock()
        # Evict everything past its TTL, not just `key`
        expired = [k for k, (_, fetched_at) in self._store.items() if now - fetched_at >= self.ttl_seconds]
        for k in expired:
            del self._store[k]
        self._store[key] = (value, now)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
