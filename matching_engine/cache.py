"""
matching_engine/cache.py
Bounded memoisation for compatibility retrieval.

Entries are evicted in insertion order (oldest first) once the cache grows
past its capacity; reads do not refresh an entry.  Values are stored as
tuples and callers get a fresh list, so mutating a result cannot reach the
cache.  A lock guards the map because API requests run in a thread pool.
"""
import threading
from collections import OrderedDict
from typing import Any, Hashable, Optional

from monitoring import CACHE_EVENTS, get_logger

log = get_logger(__name__)


class MatchCache:

    def __init__(self, capacity: int = 50) -> None:
        self.capacity = capacity
        self._entries: "OrderedDict[Hashable, tuple]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[list[Any]]:
        with self._lock:
            value = self._entries.get(key)
        if value is None:
            CACHE_EVENTS.labels(event="miss").inc()
            return None
        CACHE_EVENTS.labels(event="hit").inc()
        return list(value)

    def put(self, key: Hashable, results: list[Any]) -> None:
        with self._lock:
            self._entries[key] = tuple(results)
            evicted = None
            if len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
        if evicted is not None:
            CACHE_EVENTS.labels(event="evict").inc()
            log.debug("Match cache entry evicted", key=str(evicted))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
