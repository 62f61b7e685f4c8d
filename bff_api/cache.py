"""Cache implementations."""

import json
from typing import Any, Protocol

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import RedisError

from .config import Settings
from .exceptions import CacheConnectionError

DEFAULT_TTL = 3600

BACKEND_ERRORS = (RedisError, ConnectionError, TimeoutError, OSError)


def cache_key(namespace: str, id: str) -> str:
    """Build a namespaced cache key, e.g. ``user:1``."""
    return f"{namespace}:{id}"


class Cache(Protocol):
    """Cache protocol shared by every backend."""

    name: str

    async def get(self, key: str) -> Any | None:
        """Get cached value, None on miss."""
        ...

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Set cached value with TTL."""
        ...

    async def delete(self, key: str) -> None:
        """Delete cached value."""
        ...

    async def startup(self) -> None:
        """Initialize cache on startup."""
        ...

    async def shutdown(self) -> None:
        """Cleanup cache on shutdown."""
        ...


class RedisCache:
    """Redis cache implementation.

    The client is created lazily; ``startup`` makes the first round trip so a
    bad URL or unreachable server fails the boot instead of the first request.
    After that, backend errors are logged and degrade to a miss or a no-op.
    """

    name = "redis"

    def __init__(self, redis_url: str, default_ttl: int = DEFAULT_TTL):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL.
            default_ttl: TTL applied when callers do not pass one.
        """
        self.redis_url = redis_url
        self.default_ttl = default_ttl
        self.redis: redis.Redis | None = None

    def _client(self) -> redis.Redis:
        if self.redis is None:
            self.redis = redis.from_url(self.redis_url, decode_responses=True)
        return self.redis

    async def startup(self) -> None:
        """Open the connection and verify the server answers."""
        try:
            await self._client().ping()
        except ValueError as e:
            raise CacheConnectionError(f"Invalid Redis URL {self.redis_url}: {e}") from e
        except BACKEND_ERRORS as e:
            raise CacheConnectionError(f"Cannot connect to Redis at {self.redis_url}: {e}") from e
        logger.info("Redis enabled and connected")

    async def shutdown(self) -> None:
        """Close Redis connection."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None

    async def get(self, key: str) -> Any | None:
        """Get cached value.

        Args:
            key: Cache key.

        Returns:
            Cached data if found, None otherwise.
        """
        try:
            data = await self._client().get(key)
            return json.loads(data) if data is not None else None
        except (json.JSONDecodeError, *BACKEND_ERRORS) as e:
            logger.warning(f"Cache get failed for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Set cached value with TTL.

        Args:
            key: Cache key.
            value: JSON-serializable data to cache.
            ttl: Time to live in seconds, defaults to ``default_ttl``.
        """
        ttl = self.default_ttl if ttl is None else ttl
        if ttl <= 0:
            raise ValueError(f"Cache TTL must be positive, got {ttl}")

        try:
            await self._client().set(key, json.dumps(value), ex=ttl)
        except (TypeError, ValueError, *BACKEND_ERRORS) as e:
            logger.warning(f"Cache set failed for key {key}: {e}")

    async def delete(self, key: str) -> None:
        """Delete cached value. Missing keys are not an error."""
        try:
            await self._client().delete(key)
        except BACKEND_ERRORS as e:
            logger.warning(f"Cache delete failed for key {key}: {e}")


class NullCache:
    """No-op cache implementation when Redis is disabled."""

    name = "disabled"

    async def startup(self) -> None:
        """No initialization needed."""
        logger.info("Redis is disabled")

    async def shutdown(self) -> None:
        """No cleanup needed."""
        pass

    async def get(self, key: str) -> Any | None:
        """Always returns None (no caching)."""
        return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Does nothing (no caching)."""
        pass

    async def delete(self, key: str) -> None:
        """Does nothing (no caching)."""
        pass


ActiveCache = RedisCache


def create_cache(settings: Settings) -> Cache:
    """Create cache instance based on configuration.

    Args:
        settings: Application settings.

    Returns:
        RedisCache when ENABLE_REDIS is set, NullCache otherwise.
    """
    if settings.enable_redis:
        logger.info("Creating Redis cache")
        return RedisCache(settings.redis_url, default_ttl=settings.cache_ttl_seconds)
    logger.info("Redis disabled, cache operations are no-ops")
    return NullCache()
