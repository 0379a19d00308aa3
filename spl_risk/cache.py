"""Bounded in-memory TTL cache shared by concurrent analyses.

Entries expire strictly after `ttl` seconds (an entry read exactly at `ttl`
is still valid). When full, the entry with the oldest insertion instant is
evicted; reads do not refresh anything, so this is not an LRU.

Caching is best-effort: a write that cannot take the lock in time is
skipped, and nothing here raises into the caller.

Readers and writers share one exclusive lock. A reader holds it only for a
single dict lookup, so concurrent readers on different threads serialize
for that lookup but never wait on each other for longer. Analyses running
on one event loop never contend for it.
"""

import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Generic, TypeVar

from loguru import logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

WRITE_LOCK_TIMEOUT_SEC = 0.05


@dataclass(frozen=True)
class CacheStats:
    size: int
    capacity: int
    expired_entries: int  # diagnostic only, purged on next insert


@dataclass
class _Entry(Generic[V]):
    value: V
    inserted_at: float


class TTLCache(Generic[K, V]):
    """Key -> value store with per-entry expiry and a capacity ceiling."""

    def __init__(
        self,
        ttl: float,
        max_size: int,
        *,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._max_size = max(max_size, 0)
        self._name = name
        self._clock = clock
        self._data: dict[K, _Entry[V]] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def capacity(self) -> int:
        return self._max_size

    def _is_expired(self, entry: _Entry[V], now: float) -> bool:
        if self._ttl <= 0:
            return True
        return now - entry.inserted_at > self._ttl

    def get(self, key: K) -> V | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._data.get(key)
            if entry is None or self._is_expired(entry, self._clock()):
                return None
            return entry.value

    def insert(self, key: K, value: V) -> None:
        """Store value under key; silently skipped under lock contention."""
        if not self._lock.acquire(timeout=WRITE_LOCK_TIMEOUT_SEC):
            logger.debug(f"[CACHE] {self._name}: write lock busy, skipping insert")
            return
        try:
            now = self._clock()
            self._data.pop(key, None)

            expired = [k for k, e in self._data.items() if self._is_expired(e, now)]
            for k in expired:
                del self._data[k]

            # Insertion-age eviction; loop only matters for capacity 0
            while self._data and len(self._data) >= self._max_size:
                oldest = min(self._data, key=lambda k: self._data[k].inserted_at)
                del self._data[oldest]

            if self._max_size == 0:
                return
            self._data[key] = _Entry(value=value, inserted_at=now)
        finally:
            self._lock.release()

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            now = self._clock()
            expired = sum(1 for e in self._data.values() if self._is_expired(e, now))
            return CacheStats(
                size=len(self._data),
                capacity=self._max_size,
                expired_entries=expired,
            )

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
