"""
Memory-based key-value store for the portfolio admin application.

This module provides an in-process store with Redis semantics for testing and
single-instance deployments. It supports TTL-based expiration and periodic
cleanup of expired entries.
"""
import asyncio
import fnmatch
import time
from typing import Any, Dict, List, Optional, Set, Tuple

import structlog

from portfolio.config import KVConfig
from portfolio.errors import StorageError
from portfolio.kv import BaseKVStore, ZRangeResult, redis_slice

# Set up structured logger
logger = structlog.get_logger()


class MemoryKVStore(BaseKVStore):
    """
    In-memory key-value store.

    Strings are kept JSON-serialized so callers never share mutable state with
    the store. Lists, sets and sorted sets hold plain string members.
    """

    def __init__(self, config: Optional[KVConfig] = None):
        """
        Initialize the memory store.

        Args:
            config: Key-value store configuration
        """
        super().__init__(config or KVConfig())
        # Storage format: {key: (value, expiration_timestamp or None)}
        self._storage: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._lock = asyncio.Lock()
        self._cleanup_task: Optional[asyncio.Task] = None
        self._closed = False

    def _ensure_cleanup_task(self) -> None:
        """Start the periodic cleanup task once a loop is running."""
        if self._cleanup_task is not None or self._closed:
            return
        try:
            self._cleanup_task = asyncio.get_running_loop().create_task(self._cleanup_loop())
        except RuntimeError:
            return
        self._cleanup_task.add_done_callback(self._cleanup_task_done)

    def _cleanup_task_done(self, task: asyncio.Task) -> None:
        """Handle cleanup task completion."""
        if task.cancelled():
            logger.debug("Memory store cleanup task cancelled")
        elif task.exception():
            logger.error(
                "Memory store cleanup task failed with exception",
                error=str(task.exception()),
            )

    async def _cleanup_loop(self) -> None:
        """Periodically clean up expired entries."""
        try:
            while not self._closed:
                await self._cleanup_expired()
                await asyncio.sleep(self.config.cleanup_interval_seconds)
        except asyncio.CancelledError:
            pass

    async def _cleanup_expired(self) -> None:
        """Clean up expired entries from the store."""
        now = time.time()
        async with self._lock:
            expired = [
                key for key, (_, expiration) in self._storage.items()
                if expiration is not None and expiration <= now
            ]
            for key in expired:
                del self._storage[key]

        if expired:
            logger.debug("Cleaned up expired entries", count=len(expired))

    def _live(self, key: str) -> Optional[Any]:
        """Return the raw stored value if present and not expired. Caller holds the lock."""
        entry = self._storage.get(key)
        if entry is None:
            return None
        value, expiration = entry
        if expiration is not None and expiration <= time.time():
            del self._storage[key]
            return None
        return value

    def _typed(self, key: str, kind: type) -> Optional[Any]:
        """Return a live collection value, failing on a type mismatch like Redis does."""
        value = self._live(key)
        if value is not None and not isinstance(value, kind):
            raise StorageError(
                f"WRONGTYPE Operation against key '{key}' holding the wrong kind of value"
            )
        return value

    def _store(self, key: str, value: Any) -> None:
        """Store a collection value, keeping any existing expiration."""
        expiration = self._storage.get(key, (None, None))[1]
        self._storage[key] = (value, expiration)

    # Strings ----------------------------------------------------------- #

    async def get(self, key: str) -> Optional[Any]:
        """
        Get a value from the store.

        Args:
            key: Store key

        Returns:
            Any: Value if found and not expired, None otherwise
        """
        async with self._lock:
            value = self._typed(key, str)
        return self._deserialize(value)

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
        serialized = self._serialize(value)
        expiration = time.time() + ttl if ttl else None
        async with self._lock:
            self._storage[key] = (serialized, expiration)
        if ttl:
            self._ensure_cleanup_task()
        return True

    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""
        removed = 0
        async with self._lock:
            for key in keys:
                if self._live(key) is not None:
                    del self._storage[key]
                    removed += 1
        return removed

    async def exists(self, key: str) -> bool:
        """Check if a key exists and is not expired."""
        async with self._lock:
            return self._live(key) is not None

    async def keys(self, pattern: str = "*") -> List[str]:
        """List live keys matching a glob-style pattern."""
        async with self._lock:
            candidates = list(self._storage)
            return [
                key for key in candidates
                if self._live(key) is not None and fnmatch.fnmatchcase(key, pattern)
            ]

    async def incr(self, key: str, amount: int = 1) -> int:
        """Atomically increment an integer counter."""
        async with self._lock:
            current = self._typed(key, str)
            try:
                value = int(self._deserialize(current) or 0)
            except (TypeError, ValueError) as e:
                raise StorageError(f"Value at '{key}' is not an integer") from e
            value += amount
            self._store(key, self._serialize(value))
            return value

    # Lists ------------------------------------------------------------- #

    async def lpush(self, key: str, *values: str) -> int:
        """Prepend values to a list, returning the new length."""
        async with self._lock:
            items = self._typed(key, list) or []
            for value in values:
                items.insert(0, str(value))
            self._store(key, items)
            return len(items)

    async def lrange(self, key: str, start: int, stop: int) -> List[str]:
        """Return list items between start and stop inclusive."""
        async with self._lock:
            items = self._typed(key, list) or []
            return list(redis_slice(items, start, stop))

    async def llen(self, key: str) -> int:
        """Length of a list."""
        async with self._lock:
            return len(self._typed(key, list) or [])

    async def lrem(self, key: str, count: int, value: str) -> int:
        """Remove occurrences of value from a list."""
        async with self._lock:
            items = self._typed(key, list)
            if not items:
                return 0
            value = str(value)
            limit = abs(count) or len(items)
            order = range(len(items) - 1, -1, -1) if count < 0 else range(len(items))
            matches = [i for i in order if items[i] == value][:limit]
            for i in sorted(matches, reverse=True):
                del items[i]
            if items:
                self._store(key, items)
            else:
                del self._storage[key]
            return len(matches)

    # Sets -------------------------------------------------------------- #

    async def sadd(self, key: str, *members: str) -> int:
        """Add members to a set, returning how many were new."""
        async with self._lock:
            members_set: Set[str] = self._typed(key, set) or set()
            before = len(members_set)
            members_set.update(str(m) for m in members)
            self._store(key, members_set)
            return len(members_set) - before

    async def srem(self, key: str, *members: str) -> int:
        """Remove members from a set, returning how many were removed."""
        async with self._lock:
            members_set = self._typed(key, set)
            if not members_set:
                return 0
            before = len(members_set)
            members_set.difference_update(str(m) for m in members)
            if members_set:
                self._store(key, members_set)
            else:
                del self._storage[key]
            return before - len(members_set)

    async def smembers(self, key: str) -> Set[str]:
        """All members of a set."""
        async with self._lock:
            return set(self._typed(key, set) or set())

    async def scard(self, key: str) -> int:
        """Cardinality of a set."""
        async with self._lock:
            return len(self._typed(key, set) or set())

    # Sorted sets ------------------------------------------------------- #

    async def zadd(self, key: str, mapping: Dict[str, float]) -> int:
        """Add scored members to a sorted set, returning how many were new."""
        async with self._lock:
            scores: Dict[str, float] = self._typed(key, dict) or {}
            added = sum(1 for member in mapping if str(member) not in scores)
            for member, score in mapping.items():
                scores[str(member)] = float(score)
            self._store(key, scores)
            return added

    async def zincrby(self, key: str, amount: float, member: str) -> float:
        """Increment the score of a sorted-set member."""
        async with self._lock:
            scores: Dict[str, float] = self._typed(key, dict) or {}
            scores[str(member)] = scores.get(str(member), 0.0) + float(amount)
            self._store(key, scores)
            return scores[str(member)]

    async def zrange(
        self,
        key: str,
        start: int,
        stop: int,
        desc: bool = False,
        withscores: bool = False,
    ) -> ZRangeResult:
        """Return sorted-set members by rank, ties broken by member like Redis."""
        async with self._lock:
            scores: Dict[str, float] = dict(self._typed(key, dict) or {})
        ordered = sorted(scores.items(), key=lambda item: (item[1], item[0]), reverse=desc)
        window = redis_slice(ordered, start, stop)
        if withscores:
            return [(member, score) for member, score in window]
        return [member for member, _ in window]

    async def zrem(self, key: str, *members: str) -> int:
        """Remove members from a sorted set."""
        async with self._lock:
            scores = self._typed(key, dict)
            if not scores:
                return 0
            removed = 0
            for member in members:
                if scores.pop(str(member), None) is not None:
                    removed += 1
            if not scores:
                del self._storage[key]
            return removed

    async def zcard(self, key: str) -> int:
        """Cardinality of a sorted set."""
        async with self._lock:
            return len(self._typed(key, dict) or {})

    # Lifecycle --------------------------------------------------------- #

    async def clear(self) -> bool:
        """Clear all values from the store."""
        async with self._lock:
            self._storage.clear()
        return True

    async def close(self) -> None:
        """Close the store and release resources."""
        self._closed = True

        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None

    def __len__(self) -> int:
        """Number of keys held, including not-yet-collected expired ones."""
        return len(self._storage)
