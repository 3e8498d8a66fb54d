from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Generic, Hashable, List, TypeVar

from . import metrics


logger = logging.getLogger("bundler.cache")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class ResolutionCache(Generic[K, V]):
    """Process-local memo of resolved asset urls or rendered bundle markup.

    Reads, inserts and clears are serialized on one lock per instance. The
    compute function runs outside the lock: two callers missing on the same key
    may both compute it, the last store wins. A compute that raises stores
    nothing.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._store: Dict[K, V] = {}
        self._lock = threading.Lock()

    def get_or_compute(self, key: K, compute: Callable[[K], V]) -> V:
        with self._lock:
            if key in self._store:
                metrics.record_cache_event(self.name, "hit")
                return self._store[key]
        metrics.record_cache_event(self.name, "miss")
        value = compute(key)
        with self._lock:
            self._store[key] = value
        return value

    def clear(self) -> None:
        with self._lock:
            dropped = len(self._store)
            self._store.clear()
        metrics.record_cache_event(self.name, "clear")
        if dropped:
            logger.debug("Cleared %d entries from %s cache", dropped, self.name)

    def keys(self) -> List[K]:
        with self._lock:
            return list(self._store.keys())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
