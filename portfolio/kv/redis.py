"""
Redis-based key-value store for the portfolio admin application.

This module provides a Redis store with connection pooling, JSON
serialization and error handling. Storage failures are logged and re-raised
as StorageError so callers can decide whether they are fatal.
"""
from functools import wraps
from typing import Any, Dict, List, Optional, Set

import structlog
from redis.asyncio import Redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from portfolio.config import KVConfig
from portfolio.errors import StorageError
from portfolio.kv import BaseKVStore, ZRangeResult

# Set up structured logger
logger = structlog.get_logger()


def _redis_operation(func):
    """Convert RedisError raised by an operation into StorageError."""

    @wraps(func)
    async def wrapper(self, key, *args, **kwargs):
        try:
            return await func(self, key, *args, **kwargs)
        except RedisError as e:
            logger.error("Redis error", operation=func.__name__, key=key, error=str(e))
            raise StorageError(f"Redis {func.__name__} failed: {e}") from e

    return wrapper


class RedisKVStore(BaseKVStore):
    """
    Redis key-value store.

    Keys are namespaced with the configured prefix; values are stored as JSON
    text. Collection members are plain strings.
    """

    def __init__(
        self,
        config: KVConfig,
        redis_client: Redis,
        connection_pool: ConnectionPool,
    ):
        """
        Initialize the Redis store.

        Args:
            config: Key-value store configuration
            redis_client: Redis client instance
            connection_pool: Redis connection pool
        """
        super().__init__(config)
        self.redis = redis_client
        self.connection_pool = connection_pool
        self._closed = False

    @classmethod
    async def create(cls, config: KVConfig) -> "RedisKVStore":
        """
        Create a new Redis store.

        Args:
            config: Key-value store configuration

        Returns:
            RedisKVStore: Connected store

        Raises:
            StorageError: If the Redis URL is missing or the server is unreachable
        """
        if not config.redis_url:
            raise StorageError("Redis URL is required")

        connection_kwargs = {"decode_responses": True}
        if config.redis_password:
            connection_kwargs["password"] = config.redis_password.get_secret_value()

        try:
            connection_pool = ConnectionPool.from_url(config.redis_url, **connection_kwargs)
            redis_client = Redis(connection_pool=connection_pool)
            await redis_client.ping()
            return cls(config, redis_client, connection_pool)

        except RedisError as e:
            logger.error("Failed to connect to Redis", error=str(e))
            raise StorageError(f"Failed to connect to Redis: {e}") from e

    def _prefix_key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def _strip_prefix(self, key: str) -> str:
        if self.prefix and key.startswith(self.prefix):
            return key[len(self.prefix):]
        return key

    @_redis_operation
    async def get(self, key: str) -> Optional[Any]:
        """Get a value from Redis."""
        return self._deserialize(await self.redis.get(self._prefix_key(key)))

    @_redis_operation
    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set a value in Redis with an optional TTL."""
        serialized = self._serialize(value)
        if ttl:
            await self.redis.setex(self._prefix_key(key), ttl, serialized)
        else:
            await self.redis.set(self._prefix_key(key), serialized)
        return True

    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""
        if not keys:
            return 0
        try:
            return await self.redis.delete(*(self._prefix_key(k) for k in keys))
        except RedisError as e:
            logger.error("Redis error", operation="delete", keys=list(keys), error=str(e))
            raise StorageError(f"Redis delete failed: {e}") from e

    @_redis_operation
    async def exists(self, key: str) -> bool:
        return await self.redis.exists(self._prefix_key(key)) > 0

    @_redis_operation
    async def keys(self, pattern: str = "*") -> List[str]:
        """List keys matching a pattern, scanning instead of blocking with KEYS."""
        found = []
        async for key in self.redis.scan_iter(match=self._prefix_key(pattern), count=1000):
            found.append(self._strip_prefix(key))
        return found

    @_redis_operation
    async def incr(self, key: str, amount: int = 1) -> int:
        return await self.redis.incrby(self._prefix_key(key), amount)

    @_redis_operation
    async def lpush(self, key: str, *values: str) -> int:
        return await self.redis.lpush(self._prefix_key(key), *values)

    @_redis_operation
    async def lrange(self, key: str, start: int, stop: int) -> List[str]:
        return await self.redis.lrange(self._prefix_key(key), start, stop)

    @_redis_operation
    async def llen(self, key: str) -> int:
        return await self.redis.llen(self._prefix_key(key))

    @_redis_operation
    async def lrem(self, key: str, count: int, value: str) -> int:
        return await self.redis.lrem(self._prefix_key(key), count, value)

    @_redis_operation
    async def sadd(self, key: str, *members: str) -> int:
        return await self.redis.sadd(self._prefix_key(key), *members)

    @_redis_operation
    async def srem(self, key: str, *members: str) -> int:
        return await self.redis.srem(self._prefix_key(key), *members)

    @_redis_operation
    async def smembers(self, key: str) -> Set[str]:
        return set(await self.redis.smembers(self._prefix_key(key)))

    @_redis_operation
    async def scard(self, key: str) -> int:
        return await self.redis.scard(self._prefix_key(key))

    @_redis_operation
    async def zadd(self, key: str, mapping: Dict[str, float]) -> int:
        return await self.redis.zadd(self._prefix_key(key), mapping)

    @_redis_operation
    async def zincrby(self, key: str, amount: float, member: str) -> float:
        return await self.redis.zincrby(self._prefix_key(key), amount, member)

    @_redis_operation
    async def zrange(
        self,
        key: str,
        start: int,
        stop: int,
        desc: bool = False,
        withscores: bool = False,
    ) -> ZRangeResult:
        result = await self.redis.zrange(
            self._prefix_key(key), start, stop, desc=desc, withscores=withscores
        )
        if withscores:
            return [(member, float(score)) for member, score in result]
        return list(result)

    @_redis_operation
    async def zrem(self, key: str, *members: str) -> int:
        return await self.redis.zrem(self._prefix_key(key), *members)

    @_redis_operation
    async def zcard(self, key: str) -> int:
        return await self.redis.zcard(self._prefix_key(key))

    async def clear(self) -> bool:
        """
        Clear all values carrying the current prefix.

        Without a prefix the whole logical database is flushed.
        """
        try:
            if not self.prefix:
                await self.redis.flushdb()
                return True

            keys_to_delete = [
                key async for key in self.redis.scan_iter(match=f"{self.prefix}*", count=1000)
            ]
            if keys_to_delete:
                await self.redis.delete(*keys_to_delete)
            return True

        except RedisError as e:
            logger.error("Redis error in clear operation", error=str(e))
            raise StorageError(f"Redis clear failed: {e}") from e

    async def close(self) -> None:
        """Close the Redis client and connection pool."""
        if self._closed:
            return
        self._closed = True
        try:
            await self.redis.aclose()
            await self.connection_pool.disconnect()
        except RedisError as e:
            logger.warning("Error closing Redis connection", error=str(e))
