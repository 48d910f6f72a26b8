import math

import pytest
import pytest_asyncio
from pydantic import ValidationError as PydanticValidationError

from portfolio.config import VectorDBConfig, VectorDBType
from portfolio.errors import ValidationError
from portfolio.kv import MemoryKVStore
from portfolio.models.vector import VectorRecord
from portfolio.vectordb import (
    InMemoryVectorStore,
    KVVectorStore,
    get_vector_store,
    matches_filter,
)


def record(id: str, values, vector_type: str = "website", **metadata) -> VectorRecord:
    return VectorRecord(id=id, values=values, metadata={"vectorType": vector_type, **metadata})


@pytest_asyncio.fixture(params=["memory", "kv"])
async def store(request):
    config = VectorDBConfig(dimension=3, batch_size=2)
    if request.param == "kv":
        s = KVVectorStore(config, MemoryKVStore())
    else:
        s = InMemoryVectorStore(config)
    await s.initialize()
    yield s
    await s.close()


def test_record_rejects_empty_and_non_finite_values():
    with pytest.raises(PydanticValidationError):
        VectorRecord(id="a", values=[])
    with pytest.raises(PydanticValidationError):
        VectorRecord(id="a", values=[1.0, math.nan])


def test_record_type_falls_back_to_legacy_key():
    assert VectorRecord(id="a", values=[1.0], metadata={"type": "document"}).vector_type == "document"
    assert VectorRecord(id="a", values=[1.0]).vector_type is None


def test_matches_filter():
    metadata = {"vectorType": "video", "category": "AI"}
    assert matches_filter(metadata, None)
    assert matches_filter(metadata, {"vectorType": "video"})
    assert matches_filter(metadata, {"category": ["AI", "Tech"]})
    assert not matches_filter(metadata, {"category": "Tech"})


@pytest.mark.asyncio
async def test_upsert_get_and_count(store):
    await store.upsert_batch([
        record("a", [1.0, 0.0, 0.0]),
        record("b", [0.0, 1.0, 0.0]),
        record("c", [0.0, 0.0, 1.0], "video"),
    ])
    assert await store.count() == 3
    fetched = await store.get("b")
    assert fetched.values == [0.0, 1.0, 0.0]
    assert fetched.metadata["vectorType"] == "website"
    assert await store.get("missing") is None


@pytest.mark.asyncio
async def test_upsert_rejects_wrong_dimension(store):
    with pytest.raises(ValidationError):
        await store.upsert(record("a", [1.0, 0.0]))
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_query_sorted_and_filtered(store):
    await store.upsert_batch([
        record("near", [1.0, 0.1, 0.0]),
        record("far", [0.0, 1.0, 0.0]),
        record("video", [1.0, 0.0, 0.0], "video"),
    ])

    matches = await store.query([1.0, 0.0, 0.0], top_k=2)
    assert [m.id for m in matches] == ["video", "near"]
    assert matches[0].score == pytest.approx(1.0)

    filtered = await store.query([1.0, 0.0, 0.0], filter={"vectorType": "website"}, min_score=0.5)
    assert [m.id for m in filtered] == ["near"]


@pytest.mark.asyncio
async def test_list_by_type_and_stats(store):
    await store.upsert_batch([
        record("w2", [1.0, 0.0, 0.0]),
        record("w1", [1.0, 0.0, 0.0]),
        record("d1", [1.0, 0.0, 0.0], "document"),
        VectorRecord(id="legacy", values=[1.0, 0.0, 0.0], metadata={"type": "video"}),
        VectorRecord(id="untyped", values=[1.0, 0.0, 0.0]),
    ])

    assert [r.id for r in await store.list_by_type("website")] == ["w1", "w2"]
    assert [r.id for r in await store.list_by_type("website", limit=1)] == ["w1"]
    assert [r.id for r in await store.list_by_type("video")] == ["legacy"]

    stats = await store.type_stats()
    assert (stats.website, stats.document, stats.video, stats.unknown, stats.total) == (2, 1, 1, 1, 5)

    description = await store.describe()
    assert description["dimension"] == 3
    assert description["totalRecordCount"] == 5


@pytest.mark.asyncio
async def test_delete_many_and_delete_all(store):
    await store.upsert_batch([record(str(i), [1.0, 0.0, 0.0]) for i in range(5)])

    assert await store.delete("0")
    assert not await store.delete("0")
    assert await store.delete_many(["1", "2", "missing"]) == 2
    assert await store.count() == 2
    assert await store.delete_all() == 2
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_kv_store_persists_camel_case_and_drops_stale_index():
    kv = MemoryKVStore()
    store = KVVectorStore(VectorDBConfig(dimension=2, collection_name="site"), kv)
    await store.upsert(record("a", [1.0, 0.0]))
    await store.upsert(record("b", [0.0, 1.0]))

    assert (await kv.get("vector:site:a"))["metadata"]["vectorType"] == "website"

    await kv.delete("vector:site:b")
    assert [r.id for r in await store.list_by_type("website")] == ["a"]
    assert await kv.smembers("vectors:site") == {"a"}


@pytest.mark.asyncio
async def test_factory_selects_backend():
    assert isinstance(await get_vector_store(VectorDBConfig()), InMemoryVectorStore)
    kv_config = VectorDBConfig(db_type=VectorDBType.KV)
    assert isinstance(await get_vector_store(kv_config, MemoryKVStore()), KVVectorStore)
    with pytest.raises(ValueError):
        await get_vector_store(kv_config)


def test_similarity_metrics():
    assert InMemoryVectorStore.cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
    assert InMemoryVectorStore.cosine_similarity([0, 0], [1, 1]) == 0.0
    assert InMemoryVectorStore.euclidean_distance([0, 0], [3, 4]) == pytest.approx(5.0)
    assert InMemoryVectorStore.dot_product([1, 2], [3, 4]) == pytest.approx(11.0)
    with pytest.raises(ValueError):
        InMemoryVectorStore.cosine_similarity([1], [1, 2])

    euclidean = InMemoryVectorStore(VectorDBConfig(distance_metric="euclidean"))
    assert euclidean.score([0, 0], [3, 4]) == pytest.approx(1.0 / 6.0)
