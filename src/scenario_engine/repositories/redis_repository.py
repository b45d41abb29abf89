"""Redis implementation of CacheStore.

This repository keeps one string value per key and relies on Redis key
expiry (SETEX) for the TTL. It's the default implementation and satisfies
the CacheStore protocol.
"""

import redis.asyncio as redis
from redis.exceptions import RedisError

from scenario_engine.config import get_redis_client
from scenario_engine.errors import CacheStoreError
from scenario_engine.log import get_logger

logger = get_logger(__name__)


class RedisScenarioRepository:
    """Redis implementation using plain string keys with expiry.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    GET and SETEX are single atomic commands; no cross-key transactions
    are needed. Any ``RedisError`` is re-raised as ``CacheStoreError``.
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Initialize the Redis repository.

        Args:
            redis_client: asyncio Redis client instance. If None, creates default.
        """
        self._client = redis_client or get_redis_client()

    @classmethod
    def create(cls, redis_client: redis.Redis | None = None) -> "RedisScenarioRepository":
        """Factory method to create RedisScenarioRepository with defaults.

        Args:
            redis_client: Client to use. If None, one is built from settings.

        Returns:
            Configured RedisScenarioRepository
        """
        return cls(redis_client=redis_client)

    async def get(self, key: str) -> str | None:
        """Fetch a live value.

        Args:
            key: The storage key

        Returns:
            The stored value, or None if absent or expired

        Raises:
            CacheStoreError: If Redis is unreachable
        """
        try:
            value = await self._client.get(key)
        except RedisError as e:
            raise CacheStoreError(f"Redis GET failed for {key}: {e}") from e

        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set_with_ttl(self, key: str, value: str, ttl: int) -> None:
        """Store a value that expires after ``ttl`` seconds.

        Raises:
            CacheStoreError: If Redis is unreachable
        """
        try:
            await self._client.setex(key, ttl, value)
        except RedisError as e:
            raise CacheStoreError(f"Redis SETEX failed for {key}: {e}") from e

    async def delete(self, key: str) -> bool:
        """Delete a specific entry by key.

        Raises:
            CacheStoreError: If Redis is unreachable
        """
        try:
            result: int = await self._client.delete(key)
        except RedisError as e:
            raise CacheStoreError(f"Redis DEL failed for {key}: {e}") from e
        return result > 0

    async def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.warning("Redis health check failed: %s", e)
            return False

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
