"""
Cache Manager for orchestrating multi-layer caching.

Coordinates named cache regions across the in-memory cache (L0) and an
optional Redis cache (L1). MongoDB stays the source of truth.
"""

import functools
import logging
from typing import Any, Callable, Dict, Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from .. import metrics
from .memory_cache import MemoryCache
from .redis_cache import RedisCache

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Manages multi-layer cache operations for named regions.

    Each region has its own L0 memory cache and, when Redis is configured,
    a key namespace ``{region}:{key}`` in L1. Values reach Redis as JSON
    produced by the region's pydantic TypeAdapter.
    """

    def __init__(
        self,
        regions: Dict[str, TypeAdapter],
        max_size: int = 1000,
        ttl_seconds: int = 300,
        redis_cache: Optional[RedisCache] = None,
    ):
        """
        Initialize cache manager.

        Args:
            regions: Region name to TypeAdapter for the cached value type
            max_size: Maximum entries per L0 region
            ttl_seconds: Entry time-to-live for both layers
            redis_cache: Connected Redis cache, or None for L0 only
        """
        self.adapters = regions
        self.ttl_seconds = ttl_seconds
        self.memory_caches = {
            name: MemoryCache(name, max_size=max_size, ttl_seconds=ttl_seconds)
            for name in regions
        }
        self.redis_cache = redis_cache
        logger.debug(f"Initialized CacheManager with regions {sorted(regions)}")

    def _memory(self, region: str) -> MemoryCache:
        try:
            return self.memory_caches[region]
        except KeyError:
            raise KeyError(f"Unknown cache region: {region}") from None

    async def get(self, region: str, key: str) -> Optional[Any]:
        """
        Get a value from the cache hierarchy.

        Checks L0 (memory) first, then L1 (Redis) and back-fills L0 on an
        L1 hit.

        Args:
            region: Cache region name
            key: Cache key within the region

        Returns:
            Cached value if found, None otherwise
        """
        memory = self._memory(region)
        value = memory.get(key)
        if value is not None:
            metrics.track_cache_hit(region)
            return value

        if self.redis_cache is not None:
            data = await self.redis_cache.get(f"{region}:{key}")
            if data is not None:
                try:
                    value = self.adapters[region].validate_json(data)
                except ValidationError as e:
                    logger.warning(f"Discarding undecodable cache entry {region}:{key}: {e}")
                    await self.redis_cache.delete(f"{region}:{key}")
                else:
                    memory.set(key, value)
                    metrics.track_cache_hit(region)
                    return value

        metrics.track_cache_miss(region)
        return None

    async def set(self, region: str, key: str, value: Any) -> None:
        """
        Store a value in every cache layer.

        Args:
            region: Cache region name
            key: Cache key within the region
            value: Value of the region's type
        """
        self._memory(region).set(key, value)

        if self.redis_cache is not None:
            data = self.adapters[region].dump_json(value, by_alias=True)
            await self.redis_cache.set(f"{region}:{key}", data, ttl=self.ttl_seconds)

    async def evict_all(self, region: str) -> None:
        """
        Invalidate every entry of a region across all layers.

        Args:
            region: Cache region name
        """
        self._memory(region).clear()
        if self.redis_cache is not None:
            await self.redis_cache.clear_pattern(f"{region}:*")
        metrics.track_cache_eviction(region)
        logger.debug(f"Invalidated cache region: {region}")

    async def clear_all(self) -> None:
        """Clear all cache regions."""
        for region in self.memory_caches:
            await self.evict_all(region)
        logger.info("Cleared all caches")

    def get_stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with stats from all layers
        """
        return {
            "memory": {name: cache.get_stats() for name, cache in self.memory_caches.items()},
            "redis": self.redis_cache.get_stats() if self.redis_cache else None,
        }


def cacheable(
    region: str,
    key: Callable[..., str],
    unless: Optional[Callable[[Any], bool]] = None,
):
    """
    Read-through caching for a service method using the instance's ``cache``.

    Args:
        region: Cache region name
        key: Builds the cache key from the method's arguments (without self)
        unless: Result predicate; matching results are returned but not cached

    Example:
        @cacheable("employee", key=lambda employee_id: employee_id)
        async def get_employee_by_id(self, employee_id: str): ...
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            cache_key = key(*args, **kwargs)
            cached = await self.cache.get(region, cache_key)
            if cached is not None:
                return cached

            result = await func(self, *args, **kwargs)
            if result is not None and not (unless and unless(result)):
                await self.cache.set(region, cache_key, result)
            return result

        return wrapper

    return decorator


def cache_evict(*regions: str):
    """
    Invalidate whole cache regions after a service method succeeds.

    Args:
        *regions: Region names to clear

    Example:
        @cache_evict("employee", "employees")
        async def delete_employee(self, employee_id: str): ...
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            result = await func(self, *args, **kwargs)
            await _evict(self.cache, regions)
            return result

        return wrapper

    return decorator


async def _evict(cache: CacheManager, regions: Iterable[str]) -> None:
    for region in regions:
        await cache.evict_all(region)
