"""
Distributed cache implementation using Redis.

Provides a shared cache layer that works across multiple service
instances. Values are stored as raw bytes; serialization belongs to the
caller.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisCache:
    """
    Distributed cache using Redis.

    Supports:
    - TTL-based expiration
    - Connection pooling
    - Namespaced keys and pattern invalidation
    - Error handling with fallback (errors behave as cache misses)
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        prefix: str = "employee-service:cache:",
        default_ttl: int = 300,
        max_connections: int = 50,
        socket_timeout: int = 5,
        socket_connect_timeout: int = 5,
    ):
        """
        Initialize Redis cache.

        Args:
            redis_url: Redis connection URL
            prefix: Key prefix for namespacing
            default_ttl: Default TTL in seconds
            max_connections: Maximum connections in pool
            socket_timeout: Socket read/write timeout
            socket_connect_timeout: Socket connection timeout
        """
        self.prefix = prefix
        self.default_ttl = default_ttl
        self.redis_url = redis_url
        self.client: Optional[Redis] = None
        self.max_connections = max_connections
        self.socket_timeout = socket_timeout
        self.socket_connect_timeout = socket_connect_timeout

        self.hits = 0
        self.misses = 0
        self.errors = 0

    async def connect(self) -> None:
        """Establish Redis connection with connection pooling."""
        if self.client is not None:
            return

        try:
            self.client = redis.from_url(
                self.redis_url,
                max_connections=self.max_connections,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_connect_timeout,
                decode_responses=False,
            )

            await self.client.ping()

            logger.info(f"Redis cache connected: {self.redis_url.split('@')[-1]}")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.client = None
            raise

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Redis cache disconnected")

    def _make_key(self, key: str) -> str:
        """Generate namespaced cache key."""
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Optional[bytes]:
        """
        Get raw value from cache.

        Args:
            key: Cache key

        Returns:
            Cached bytes or None if not found/error
        """
        if not self.client:
            self.misses += 1
            return None

        try:
            data = await self.client.get(self._make_key(key))
        except RedisError as e:
            logger.error(f"Redis error on get: {e}")
            self.errors += 1
            self.misses += 1
            return None

        if data is None:
            self.misses += 1
            logger.debug(f"Cache MISS: {key}")
            return None

        self.hits += 1
        logger.debug(f"Cache HIT: {key}")
        return data

    async def set(self, key: str, data: bytes, ttl: Optional[int] = None) -> bool:
        """
        Set raw value in cache.

        Args:
            key: Cache key
            data: Serialized value
            ttl: Time-to-live in seconds (uses default if None)

        Returns:
            True if successful, False otherwise
        """
        if not self.client:
            return False

        ttl_seconds = ttl if ttl is not None else self.default_ttl
        try:
            await self.client.setex(self._make_key(key), ttl_seconds, data)
        except RedisError as e:
            logger.error(f"Redis error on set: {e}")
            self.errors += 1
            return False

        logger.debug(f"Cache SET: {key} (TTL: {ttl_seconds}s)")
        return True

    async def delete(self, key: str) -> bool:
        """
        Delete key from cache.

        Args:
            key: Cache key to delete

        Returns:
            True if deleted, False otherwise
        """
        if not self.client:
            return False

        try:
            result = await self.client.delete(self._make_key(key))
        except RedisError as e:
            logger.error(f"Redis error on delete: {e}")
            self.errors += 1
            return False

        logger.debug(f"Cache DELETE: {key}")
        return result > 0

    async def clear_pattern(self, pattern: str) -> int:
        """
        Clear all keys matching pattern.

        Args:
            pattern: Pattern to match (e.g., "employees:*")

        Returns:
            Number of keys deleted
        """
        if not self.client:
            return 0

        try:
            keys = [key async for key in self.client.scan_iter(match=self._make_key(pattern))]
            if not keys:
                return 0
            deleted = await self.client.delete(*keys)
        except RedisError as e:
            logger.error(f"Redis error on clear_pattern: {e}")
            self.errors += 1
            return 0

        logger.info(f"Cleared {deleted} cache keys matching pattern: {pattern}")
        return deleted

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        if not self.client:
            return False
        try:
            return bool(await self.client.ping())
        except RedisError:
            return False

    def get_stats(self) -> dict:
        """Get cache statistics."""
        total = self.hits + self.misses
        hit_rate = (self.hits / total * 100) if total > 0 else 0

        return {
            "connected": self.client is not None,
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "total_requests": total,
            "hit_rate_percent": round(hit_rate, 2),
        }
