import asyncio

import pytest

from portfolio.errors import StorageError
from portfolio.kv import MemoryKVStore, redis_slice


@pytest.mark.asyncio
async def test_set_get_roundtrips_json_values():
    kv = MemoryKVStore()
    await kv.set("blog:1", {"id": "1", "tags": ["a", "b"]})
    assert await kv.get("blog:1") == {"id": "1", "tags": ["a", "b"]}
    assert await kv.get("missing") is None
    await kv.close()


@pytest.mark.asyncio
async def test_ttl_expires_value():
    kv = MemoryKVStore()
    await kv.set("short", "value", ttl=1)
    assert await kv.exists("short")
    await asyncio.sleep(1.1)
    assert await kv.get("short") is None
    assert not await kv.exists("short")
    await kv.close()


@pytest.mark.asyncio
async def test_incr_and_get_int():
    kv = MemoryKVStore()
    assert await kv.get_int("counter") == 0
    assert await kv.incr("counter") == 1
    assert await kv.incr("counter", 4) == 5
    assert await kv.get_int("counter") == 5


@pytest.mark.asyncio
async def test_incr_non_integer_raises():
    kv = MemoryKVStore()
    await kv.set("name", "abc")
    with pytest.raises(StorageError):
        await kv.incr("name")


@pytest.mark.asyncio
async def test_lists_prepend_and_slice():
    kv = MemoryKVStore()
    await kv.lpush("inbox", "a")
    await kv.lpush("inbox", "b", "c")
    assert await kv.lrange("inbox", 0, -1) == ["c", "b", "a"]
    assert await kv.lrange("inbox", 0, 0) == ["c"]
    assert await kv.llen("inbox") == 3


@pytest.mark.asyncio
async def test_sets():
    kv = MemoryKVStore()
    assert await kv.sadd("tags", "x", "y") == 2
    assert await kv.sadd("tags", "y") == 0
    assert await kv.smembers("tags") == {"x", "y"}
    assert await kv.srem("tags", "x", "z") == 1
    assert await kv.scard("tags") == 1
    await kv.srem("tags", "y")
    assert not await kv.exists("tags")


@pytest.mark.asyncio
async def test_sorted_sets_order_and_scores():
    kv = MemoryKVStore()
    await kv.zadd("scores", {"a": 1, "b": 3, "c": 2})
    await kv.zincrby("scores", 5, "a")
    assert await kv.zrange("scores", 0, -1) == ["c", "b", "a"]
    assert await kv.zrange("scores", 0, 1, desc=True, withscores=True) == [("a", 6.0), ("b", 3.0)]
    assert await kv.zrem("scores", "b") == 1
    assert await kv.zcard("scores") == 2


@pytest.mark.asyncio
async def test_wrong_type_raises():
    kv = MemoryKVStore()
    await kv.sadd("members", "x")
    with pytest.raises(StorageError):
        await kv.lpush("members", "y")


@pytest.mark.asyncio
async def test_keys_pattern_and_get_json():
    kv = MemoryKVStore()
    await kv.set("blog:1", {"id": "1"})
    await kv.set("blog:slug:hello", "1")
    await kv.set("project:1", {"id": "p"})
    assert sorted(await kv.keys("blog:*")) == ["blog:1", "blog:slug:hello"]
    assert await kv.get_json("blog:1") == {"id": "1"}
    assert await kv.get_json("blog:slug:hello") is None


def test_redis_slice_semantics():
    items = [0, 1, 2, 3, 4]
    assert redis_slice(items, 0, -1) == items
    assert redis_slice(items, 1, 2) == [1, 2]
    assert redis_slice(items, -2, -1) == [3, 4]
    assert redis_slice(items, 10, 20) == []
    assert redis_slice(items, 3, 1) == []


@pytest.mark.asyncio
async def test_lrem_removes_from_head_tail_or_all():
    kv = MemoryKVStore()
    await kv.lpush("inbox", "a", "x", "b", "x", "c", "x")
    # List is now x, c, x, b, x, a
    assert await kv.lrem("inbox", 1, "x") == 1
    assert await kv.lrange("inbox", 0, -1) == ["c", "x", "b", "x", "a"]
    assert await kv.lrem("inbox", -1, "x") == 1
    assert await kv.lrange("inbox", 0, -1) == ["c", "x", "b", "a"]
    assert await kv.lrem("inbox", 0, "x") == 1
    assert await kv.lrange("inbox", 0, -1) == ["c", "b", "a"]
    assert await kv.lrem("inbox", 0, "missing") == 0


@pytest.mark.asyncio
async def test_lrem_last_item_deletes_list():
    kv = MemoryKVStore()
    await kv.lpush("inbox", "only")
    assert await kv.lrem("inbox", 0, "only") == 1
    assert not await kv.exists("inbox")
    assert await kv.lrem("inbox", 0, "only") == 0
