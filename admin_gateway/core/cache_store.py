"""Cache Store — keyed store of time-stamped entries with read-time TTL.

Invariants:
    - An entry older than the TTL passed to get() is absent, whether or not it
      has been purged yet; a stale hit is deleted by the read itself
    - set() overwrites unconditionally (no merge); last writer wins
    - delete() and clear() are idempotent
    - The store is tag-agnostic; tag conventions live in cache_tags.py
    - Never more than max_entries entries: set() at capacity evicts the oldest
      stored entry, so pages nobody reads again cannot pile up

Design Decisions:
    - TTL at read time, not write time: one entry serves callers with different
      freshness needs without a re-fetch
    - Explicit instances over a module-level singleton: the app builds one in its
      lifespan, tests build their own
    - Injected monotonic clock: wall-clock jumps never resurrect or expire entries
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_MAX_ENTRIES = 1024


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Cached value plus the clock reading at insertion."""
    value: T
    stored_at: float


class CacheStore(Generic[T]):
    """In-process read-through cache, one instance per application."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._clock = clock
        self.max_entries = max_entries
        # Insertion order == stored_at order: set() re-inserts overwritten keys
        self._entries: dict[str, CacheEntry[T]] = {}

    def get(self, key: str, ttl: float) -> T | None:
        """Return the value under key if it is at most ttl seconds old."""
        if ttl < 0:
            raise ValueError("ttl must be non-negative")
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.stored_at > ttl:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: T) -> None:
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        """Snapshot of stored keys, stale ones included until read."""
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
