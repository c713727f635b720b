"""
Fresh/stale cache entries with subscribers.

A CacheEntry is fresh for `ttl_fresh` seconds, then stale (still servable
while a refresh is attempted) until `ttl_stale`, then expired. The checks
are pure functions of the entry and the current time.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    timestamp: float
    ttl_fresh: float
    ttl_stale: float


def age(entry: CacheEntry, now: float) -> float:
    return now - entry.timestamp


def is_fresh(entry: Optional[CacheEntry], now: float) -> bool:
    return entry is not None and age(entry, now) < entry.ttl_fresh


def is_stale(entry: Optional[CacheEntry], now: float) -> bool:
    """Past its fresh window but still servable."""
    return entry is not None and entry.ttl_fresh <= age(entry, now) < entry.ttl_stale


def is_expired(entry: Optional[CacheEntry], now: float) -> bool:
    return entry is None or age(entry, now) >= entry.ttl_stale


Subscriber = Callable[[str, T], None]


class StaleCache(Generic[T]):
    """
    Keyed cache with fresh/stale windows and change subscribers.

    Subscribers are called with (key, new_value) whenever a stored value
    differs from the previous one.
    """

    def __init__(
        self,
        ttl_fresh: float,
        ttl_stale: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_stale < ttl_fresh:
            raise ValueError("ttl_stale must be >= ttl_fresh")
        self.ttl_fresh = ttl_fresh
        self.ttl_stale = ttl_stale
        self.clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber. Returns a function that unsubscribes it."""
        self._subscribers.append(subscriber)

        def unsubscribe():
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def get_entry(self, key: str) -> Optional[CacheEntry[T]]:
        return self._entries.get(key)

    def put(self, key: str, value: T) -> CacheEntry[T]:
        previous = self._entries.get(key)
        entry = CacheEntry(value, self.clock(), self.ttl_fresh, self.ttl_stale)
        self._entries[key] = entry
        if previous is None or previous.value != value:
            for subscriber in list(self._subscribers):
                subscriber(key, value)
        return entry

    def invalidate(self, key: Optional[str] = None):
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        """
        Return a cached value, loading or refreshing it as needed.

        Fresh entries are returned as is. Stale entries are refreshed; if the
        refresh fails the stale value is served. Missing or expired entries
        are loaded and load errors propagate.
        """
        now = self.clock()
        entry = self._entries.get(key)
        if is_fresh(entry, now):
            return entry.value
        if is_stale(entry, now):
            try:
                return self.put(key, loader()).value
            except Exception as e:
                logger.warning(f"Refresh of {key!r} failed, serving stale value: {e}")
                return entry.value
        return self.put(key, loader()).value
