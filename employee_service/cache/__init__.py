"""Cache module initialization."""

from .cache_manager import CacheManager, cache_evict, cacheable
from .memory_cache import MemoryCache
from .redis_cache import RedisCache

__all__ = ["CacheManager", "MemoryCache", "RedisCache", "cache_evict", "cacheable"]
