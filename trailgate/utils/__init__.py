"""TrailGate utilities."""

from .cache import (
    CacheEntry,
    StaleCache,
    age,
    is_fresh,
    is_stale,
    is_expired,
)

__all__ = [
    "CacheEntry",
    "StaleCache",
    "age",
    "is_fresh",
    "is_stale",
    "is_expired",
]
