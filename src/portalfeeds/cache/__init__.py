"""Cache backends."""

from portalfeeds.cache.memory import CacheEntry, CacheResult, MemoryCache

__all__ = [
    "CacheEntry",
    "CacheResult",
    "MemoryCache",
]
