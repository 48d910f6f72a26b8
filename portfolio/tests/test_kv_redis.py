import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from portfolio.config import KVBackend, KVConfig
from portfolio.errors import StorageError
from portfolio.kv import RedisKVStore


def make_store(prefix: str = "site:") -> RedisKVStore:
    config = KVConfig(backend=KVBackend.REDIS, redis_url="redis://localhost:6379/0", key_prefix=prefix)
    return RedisKVStore(config, redis_client=AsyncMock(), connection_pool=AsyncMock())


@pytest.mark.asyncio
async def test_set_with_ttl_uses_setex_and_prefix():
    store = make_store()
    await store.set("chat:1", {"id": "1"}, ttl=60)
    store.redis.setex.assert_awaited_once_with("site:chat:1", 60, json.dumps({"id": "1"}))

    await store.set("blog:1", {"id": "1"})
    store.redis.set.assert_awaited_once_with("site:blog:1", json.dumps({"id": "1"}))


@pytest.mark.asyncio
async def test_get_deserializes_json():
    store = make_store()
    store.redis.get.return_value = '{"id": "1"}'
    assert await store.get("blog:1") == {"id": "1"}
    store.redis.get.assert_awaited_once_with("site:blog:1")


@pytest.mark.asyncio
async def test_zrange_with_scores_returns_float_pairs():
    store = make_store()
    store.redis.zrange.return_value = [("hello", 3.0), ("hi", 1)]
    result = await store.zrange("stats:top-questions", 0, 9, desc=True, withscores=True)
    assert result == [("hello", 3.0), ("hi", 1.0)]
    store.redis.zrange.assert_awaited_once_with(
        "site:stats:top-questions", 0, 9, desc=True, withscores=True
    )


@pytest.mark.asyncio
async def test_keys_strips_prefix():
    store = make_store()

    async def scan_iter(match, count):
        for key in ("site:blog:1", "site:blog:slug:a"):
            yield key

    store.redis.scan_iter = MagicMock(side_effect=scan_iter)
    assert await store.keys("blog:*") == ["blog:1", "blog:slug:a"]
    store.redis.scan_iter.assert_called_once_with(match="site:blog:*", count=1000)


@pytest.mark.asyncio
async def test_redis_errors_become_storage_errors():
    store = make_store()
    store.redis.llen.side_effect = RedisConnectionError("connection refused")
    with pytest.raises(StorageError):
        await store.llen("inbox:needs-reply")

    store.redis.delete.side_effect = RedisConnectionError("connection refused")
    with pytest.raises(StorageError):
        await store.delete("a", "b")


@pytest.mark.asyncio
async def test_create_fails_when_server_unreachable():
    config = KVConfig(backend=KVBackend.REDIS, redis_url="redis://127.0.0.1:1/0")
    with pytest.raises(StorageError):
        await RedisKVStore.create(config)


@pytest.mark.asyncio
async def test_lrem_passes_count_and_prefix():
    store = make_store()
    store.redis.lrem.return_value = 1
    assert await store.lrem("inbox:needs-reply", 0, "chat-1") == 1
    store.redis.lrem.assert_awaited_once_with("site:inbox:needs-reply", 0, "chat-1")
