"""
In-memory cache for web-search results.

Entries expire after a fixed TTL and the store never grows past its capacity:
when full, the oldest-inserted entry is dropped (FIFO, not LRU). One instance
is created per process and shared by every request, so all access goes
through a lock.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, NamedTuple

from services.web_search import SearchResult

logger = logging.getLogger(__name__)


class CacheEntry(NamedTuple):
    timestamp: float
    results: list[SearchResult]


class SearchCache:
    def __init__(
        self,
        ttl_seconds: float = 300.0,
        capacity: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._ttl = ttl_seconds
        self._capacity = capacity
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, query: str) -> list[SearchResult] | None:
        with self._lock:
            entry = self._entries.get(query)
            if entry is None:
                return None
            if self._clock() - entry.timestamp > self._ttl:
                del self._entries[query]
                return None
            logger.debug("Search cache hit for %r", query)
            return list(entry.results)

    def put(self, query: str, results: list[SearchResult]) -> None:
        if not results:
            return
        with self._lock:
            # Re-insertion counts as a fresh entry at the newest position.
            self._entries.pop(query, None)
            while len(self._entries) >= self._capacity:
                self._entries.popitem(last=False)
            self._entries[query] = CacheEntry(self._clock(), list(results))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, query: object) -> bool:
        with self._lock:
            return query in self._entries
