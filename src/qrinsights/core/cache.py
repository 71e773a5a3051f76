"""In-memory TTL cache for report query results."""

import os
import time
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Optional, TypeVar

from fastapi import Request

from qrinsights.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "60"))
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "100"))


class ResultCache:
    """
    Bounded TTL cache keyed by endpoint name + filter values.

    Entries are kept in insertion order. When a write pushes the size past
    ``max_entries`` the earliest-inserted entry is dropped; reads never move
    an entry, so this is FIFO rather than LRU. Expired entries are removed
    lazily when they are read.

    Concurrent misses on the same key are not coalesced: each caller runs
    ``compute`` and the last one to finish wins.
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        max_entries: int = CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        """Stored keys, oldest insertion first."""
        return list(self._entries.keys())

    def _live_entry(self, key: str) -> Optional[tuple[Any, float]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        _, stored_at = entry
        if self._clock() - stored_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value if present and not expired."""
        entry = self._live_entry(key)
        return entry[0] if entry is not None else None

    def set(self, key: str, value: Any) -> None:
        """Store value under key, evicting the oldest insertion on overflow."""
        self._entries[key] = (value, self._clock())
        if len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("cache.evict", key=evicted, size=len(self._entries))

    async def get_or_compute(self, key: str, compute: Callable[[], Awaitable[T]]) -> T:
        """Return the live cached value for key or run compute and cache its result."""
        entry = self._live_entry(key)
        if entry is not None:
            value, stored_at = entry
            self.hits += 1
            logger.info("cache.hit", key=key, age_seconds=round(self._clock() - stored_at, 1))
            return value

        self.misses += 1
        logger.info("cache.miss", key=key)
        start = time.perf_counter()
        # Failures propagate and leave the cache untouched
        value = await compute()
        logger.info(
            "cache.computed",
            key=key,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        self.set(key, value)
        return value

    def clear(self, pattern: Optional[str] = None) -> None:
        """Clear cache by pattern or all if pattern is None."""
        if pattern is None:
            self._entries.clear()
            return

        for key in [key for key in self._entries if pattern in key]:
            del self._entries[key]

    def stats(self) -> dict[str, Any]:
        """Snapshot of cache size and hit counters."""
        return {
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
        }


def make_cache_key(endpoint: str, state: Optional[str], *values: Any) -> str:
    """Build "<endpoint>:<state or 'all'>:<values...>" for a report request."""
    parts = [endpoint, state or "all"]
    parts.extend(str(value) for value in values)
    return ":".join(parts)


def get_result_cache(request: Request) -> ResultCache:
    """FastAPI dependency returning the cache owned by the running app."""
    return request.app.state.result_cache
