"""
In-process TTL cache for aggregation results.

Shared by all request handlers without locking: concurrent misses for the
same key may both fetch, and the last writer wins.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    value: Any
    stored_at: float


class ResponseCache:
    """
    Memoizes values by key for `ttl_seconds`.

    Stale entries are dropped lazily on lookup. A disabled cache never
    stores and never hits.
    """

    def __init__(self, ttl_seconds: float = 900, enabled: bool = True, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.enabled = enabled
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None

        entry = self._entries.get(key)
        if entry is None:
            return None

        if self.clock() - entry.stored_at > self.ttl_seconds:
            del self._entries[key]
            logger.debug("cache_entry_expired", key=key)
            return None

        return entry.value

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        self._entries[key] = CacheEntry(value=value, stored_at=self.clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
