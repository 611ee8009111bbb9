"""Bounded in-memory TTL cache with insertion-order eviction.

Entries remember when they were inserted (monotonic clock) and are
dropped lazily: on a read that finds them expired, or by the prune pass
that runs before every insert. When full, the earliest-inserted entry is
evicted. Reads never refresh an entry, so this is not an LRU.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, Hashable, Optional, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    value: T
    inserted_at: float  # time.monotonic()


class TTLCache(Generic[T]):
    def __init__(self, *, ttl_seconds: float, maxsize: int) -> None:
        self._ttl = float(ttl_seconds)
        self._maxsize = max(1, int(maxsize))
        # Ordered oldest -> newest insertion; replacing a key re-appends it.
        self._store: "OrderedDict[Hashable, CacheEntry[T]]" = OrderedDict()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def get(self, key: Hashable) -> Optional[T]:
        entry = self._store.get(key)
        if entry is None:
            return None

        if self._is_expired(entry, time.monotonic()):
            self._store.pop(key, None)
            return None

        return entry.value

    def set(self, key: Hashable, value: T) -> None:
        now = time.monotonic()
        self._prune_expired(now)

        # A replaced key gets a fresh timestamp, so it moves to the newest end.
        replaced = self._store.pop(key, None) is not None

        # Only new keys evict; a replace never grows the store (see DESIGN.md "Replacing a key").
        if not replaced and len(self._store) >= self._maxsize:
            self._store.popitem(last=False)

        self._store[key] = CacheEntry(value=value, inserted_at=now)

    def delete(self, key: Hashable) -> bool:
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        entry = self._store.get(key)  # type: ignore[arg-type]
        return entry is not None and not self._is_expired(entry, time.monotonic())

    def __len__(self) -> int:
        # Physical size; may still include expired entries awaiting a prune.
        return len(self._store)

    def _is_expired(self, entry: CacheEntry[T], now: float) -> bool:
        return now - entry.inserted_at > self._ttl

    def _prune_expired(self, now: float) -> None:
        # Insertion order matches inserted_at order, so expired entries
        # are always a prefix of the store.
        while self._store:
            oldest = next(iter(self._store.values()))
            if not self._is_expired(oldest, now):
                break
            self._store.popitem(last=False)
