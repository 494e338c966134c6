"""Session-scoped cache for issue data."""

from ghedit.core.cache.store import CacheEntry, CacheStats, TTLCacheStore

__all__ = ["CacheEntry", "CacheStats", "TTLCacheStore"]
