"""
Result Cache

In-process memoization with a fixed time-to-live:
- Entries hold a value and its creation time
- A fresh entry is served without recomputing
- A stale or absent entry is recomputed synchronously and replaced
- No eviction; entries live until the process exits

Concurrent misses on the same key each recompute. There is no single-flight
guarantee.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Hashable, Optional

import structlog

logger = structlog.get_logger(__name__)

Clock = Callable[[], float]


class CacheState(str, Enum):
    """Lifecycle of a cache key"""
    ABSENT = "absent"
    FRESH = "fresh"
    STALE = "stale"


@dataclass
class CacheEntry:
    value: Any
    created_at: float


class ResultCache:
    """
    Time-boxed cache keyed by query parameters.

    The clock is injectable so TTL transitions can be driven by tests.

    Example:
        cache = ResultCache("sales-summary", ttl_seconds=60)
        summary = await cache.get_or_set(key, compute_summary)
    """

    def __init__(
        self,
        namespace: str,
        ttl_seconds: float = 60.0,
        clock: Optional[Clock] = None,
    ):
        self.namespace = namespace
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: Dict[Hashable, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def state(self, key: Hashable) -> CacheState:
        """Current state of a key"""
        entry = self._entries.get(key)
        if entry is None:
            return CacheState.ABSENT
        if self._clock() - entry.created_at > self.ttl_seconds:
            return CacheState.STALE
        return CacheState.FRESH

    def get(self, key: Hashable) -> Optional[Any]:
        """Fresh value for key, or None"""
        if self.state(key) is CacheState.FRESH:
            return self._entries[key].value
        return None

    def set(self, key: Hashable, value: Any) -> None:
        """Store value, resetting the key's creation time"""
        self._entries[key] = CacheEntry(value=value, created_at=self._clock())

    async def get_or_set(
        self,
        key: Hashable,
        factory: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Get from cache or compute and cache.

        Args:
            key: Cache key
            factory: Async function to compute value if not fresh

        Returns:
            Cached or computed value
        """
        state = self.state(key)
        if state is CacheState.FRESH:
            logger.debug("Cache hit", namespace=self.namespace, key=str(key))
            return self._entries[key].value

        logger.debug("Cache miss", namespace=self.namespace, key=str(key), state=state.value)
        value = await factory()
        self.set(key, value)
        return value

    def clear(self) -> None:
        """Drop all entries"""
        self._entries.clear()
