"""
Key-value storage package for the portfolio admin application.

Content, videos and chat logs live in a Redis-style key-value store. This
package defines the store interface (strings, counters, lists, sets and sorted
sets), JSON serialization shared by all backends, and a factory returning the
configured backend (Redis or in-process memory).
"""
import json
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple, Union

import structlog

from portfolio.config import KVBackend, KVConfig
from portfolio.errors import StorageError

# Set up structured logger
logger = structlog.get_logger()

ZRangeResult = Union[List[str], List[Tuple[str, float]]]


class KVStore(Protocol):
    """Protocol defining the interface for key-value stores."""

    async def get(self, key: str) -> Optional[Any]:
        """
        Get a value from the store.

        Args:
            key: Store key

        Returns:
            Any: Deserialized value if found, None otherwise
        """
        ...

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set a value with an optional TTL.

        Args:
            key: Store key
            value: JSON-serializable value
            ttl: Optional time to live in seconds

        Returns:
            bool: True if successful
        """
        ...

    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""
        ...

    async def exists(self, key: str) -> bool:
        """Check if a key exists."""
        ...

    async def keys(self, pattern: str = "*") -> List[str]:
        """List keys matching a glob-style pattern."""
        ...

    async def incr(self, key: str, amount: int = 1) -> int:
        """Atomically increment an integer counter."""
        ...

    async def lpush(self, key: str, *values: str) -> int:
        """Prepend values to a list, returning the new length."""
        ...

    async def lrange(self, key: str, start: int, stop: int) -> List[str]:
        """Return list items between start and stop (inclusive, negatives allowed)."""
        ...

    async def llen(self, key: str) -> int:
        """Length of a list."""
        ...

    async def lrem(self, key: str, count: int, value: str) -> int:
        """
        Remove occurrences of value from a list, returning how many were removed.

        count > 0 removes from the head, count < 0 from the tail, 0 removes all.
        """
        ...

    async def sadd(self, key: str, *members: str) -> int:
        """Add members to a set, returning how many were new."""
        ...

    async def srem(self, key: str, *members: str) -> int:
        """Remove members from a set, returning how many were removed."""
        ...

    async def smembers(self, key: str) -> Set[str]:
        """All members of a set."""
        ...

    async def scard(self, key: str) -> int:
        """Cardinality of a set."""
        ...

    async def zadd(self, key: str, mapping: Dict[str, float]) -> int:
        """Add scored members to a sorted set, returning how many were new."""
        ...

    async def zincrby(self, key: str, amount: float, member: str) -> float:
        """Increment the score of a sorted-set member."""
        ...

    async def zrange(
        self,
        key: str,
        start: int,
        stop: int,
        desc: bool = False,
        withscores: bool = False,
    ) -> ZRangeResult:
        """Return sorted-set members by rank."""
        ...

    async def zrem(self, key: str, *members: str) -> int:
        """Remove members from a sorted set."""
        ...

    async def zcard(self, key: str) -> int:
        """Cardinality of a sorted set."""
        ...

    async def get_int(self, key: str) -> int:
        """Get an integer value, defaulting to 0."""
        ...

    async def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """Get a JSON object value."""
        ...

    async def clear(self) -> bool:
        """Remove every key owned by this store."""
        ...

    async def close(self) -> None:
        """Close the store and release resources."""
        ...

    async def __aenter__(self) -> "KVStore":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager."""
        await self.close()


class BaseKVStore:
    """
    Base class for key-value stores.

    Provides the JSON serialization shared by all backends and typed
    convenience getters built on ``get``.
    """

    def __init__(self, config: KVConfig):
        """
        Initialize the base store.

        Args:
            config: Key-value store configuration
        """
        self.config = config
        self.prefix = config.key_prefix

    async def __aenter__(self) -> "BaseKVStore":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the store and release resources."""
        pass

    async def get(self, key: str) -> Optional[Any]:
        """Get value - to be implemented by subclasses."""
        raise NotImplementedError

    @staticmethod
    def _serialize(value: Any) -> str:
        """
        Serialize a value for storage.

        Raises:
            StorageError: If the value is not JSON serializable
        """
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value is not serializable: {e}") from e

    @staticmethod
    def _deserialize(data: Optional[Union[str, bytes]]) -> Any:
        """Deserialize a stored value, returning raw text if it is not JSON."""
        if data is None:
            return None
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        try:
            return json.loads(data)
        except json.JSONDecodeError:
            return data

    async def get_int(self, key: str) -> int:
        """
        Get an integer value, defaulting to 0.

        Args:
            key: Store key

        Returns:
            int: Stored integer, or 0 when missing or not numeric
        """
        value = await self.get(key)
        if value is None:
            return 0
        try:
            return int(value)
        except (ValueError, TypeError):
            return 0

    async def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get a JSON object value.

        Args:
            key: Store key

        Returns:
            Optional[Dict[str, Any]]: Stored object if found, None otherwise
        """
        value = await self.get(key)
        if isinstance(value, dict):
            return value
        return None


def redis_slice(items: List[Any], start: int, stop: int) -> List[Any]:
    """Apply Redis LRANGE/ZRANGE index semantics (inclusive stop, negative offsets)."""
    length = len(items)
    if start < 0:
        start = max(length + start, 0)
    if stop < 0:
        stop = length + stop
    if start >= length or start > stop:
        return []
    return items[start:stop + 1]


async def get_kv_store(config: KVConfig) -> KVStore:
    """
    Get a key-value store based on configuration.

    Args:
        config: Key-value store configuration

    Returns:
        KVStore: Configured store

    Raises:
        StorageError: If the Redis backend cannot be reached
    """
    if config.backend == KVBackend.REDIS:
        from portfolio.kv.redis import RedisKVStore
        logger.info("Using Redis key-value store")
        return await RedisKVStore.create(config)

    from portfolio.kv.memory import MemoryKVStore
    logger.info("Using in-memory key-value store")
    return MemoryKVStore(config)


# Import specific implementations to make them available
from portfolio.kv.memory import MemoryKVStore
from portfolio.kv.redis import RedisKVStore

__all__ = [
    "KVStore",
    "BaseKVStore",
    "MemoryKVStore",
    "RedisKVStore",
    "get_kv_store",
    "redis_slice",
]
