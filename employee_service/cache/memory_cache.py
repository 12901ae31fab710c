"""
In-memory TTL cache for hot employee data.

This module provides fast in-process access to recently read employee
pages and records using a bounded cache whose entries expire after a
fixed time-to-live.
"""

import logging
from typing import Any, Dict, Hashable, Optional

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)


class MemoryCache:
    """
    In-memory TTL cache for one named cache region.

    Designed as Layer 0 (L0) cache before Redis and MongoDB.

    Attributes:
        name: Cache region name, used in logs and statistics
        cache: TTL cache storing values (LRU eviction when full)
        max_size: Maximum number of items to cache
        ttl_seconds: Time-to-live of each entry
        hits: Number of cache hits
        misses: Number of cache misses
        evictions: Number of items evicted due to size limit
    """

    def __init__(self, name: str, max_size: int = 1000, ttl_seconds: int = 300):
        """
        Initialize memory cache.

        Args:
            name: Cache region name
            max_size: Maximum number of entries (default: 1000)
            ttl_seconds: Entry time-to-live in seconds (default: 300)
        """
        self.name = name
        self.cache: TTLCache = TTLCache(maxsize=max_size, ttl=ttl_seconds)
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds

        # Statistics
        self.hits = 0
        self.misses = 0
        self.evictions = 0

        logger.info(
            f"Initialized MemoryCache '{name}' with max_size={max_size}, ttl={ttl_seconds}s"
        )

    def get(self, key: Hashable) -> Optional[Any]:
        """
        Get a value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value if present and not expired, None otherwise
        """
        value = self.cache.get(key)

        if value is None:
            self.misses += 1
            logger.debug(f"Cache MISS [{self.name}]: {key}")
            return None

        self.hits += 1
        logger.debug(f"Cache HIT [{self.name}]: {key}")
        return value

    def set(self, key: Hashable, value: Any) -> None:
        """
        Store a value in cache.

        Args:
            key: Cache key
            value: Value to cache
        """
        # Check if we'll evict an item
        if len(self.cache) >= self.max_size and key not in self.cache:
            self.evictions += 1

        self.cache[key] = value
        logger.debug(f"Cached [{self.name}]: {key} (TTL: {self.ttl_seconds}s)")

    def delete(self, key: Hashable) -> None:
        """
        Delete item from cache.

        Args:
            key: Cache key to delete
        """
        if self.cache.pop(key, None) is not None:
            logger.debug(f"Deleted from cache [{self.name}]: {key}")

    def clear(self) -> None:
        """Clear all items from cache."""
        count = len(self.cache)
        self.cache.clear()
        logger.info(f"Cleared {count} items from cache '{self.name}'")

    def get_stats(self) -> Dict[str, int]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        total_requests = self.hits + self.misses
        hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0

        return {
            "size": len(self.cache),
            "max_size": self.max_size,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "total_requests": total_requests,
            "hit_rate_percent": int(round(hit_rate)),
        }
