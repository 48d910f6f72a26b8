from types import SimpleNamespace
from unittest.mock import AsyncMock

import numpy as np
import pytest

from portfolio.config import EmbeddingConfig, EmbeddingProvider
from portfolio.embeddings import (
    DummyEmbeddingClient,
    OpenAIEmbeddingClient,
    get_embedding_client,
)


@pytest.mark.asyncio
async def test_dummy_embeddings_are_deterministic_unit_vectors():
    client = DummyEmbeddingClient(EmbeddingConfig(dimensions=64))
    first = await client.embed_text("hello")
    again = await client.embed_text("hello")
    other = await client.embed_text("world")

    assert len(first) == 64
    assert first == again
    assert first != other
    assert np.linalg.norm(first) == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_embed_texts_batches_in_order():
    client = DummyEmbeddingClient(EmbeddingConfig(dimensions=8, batch_size=2))
    texts = ["a", "b", "c", "d", "e"]
    vectors = await client.embed_texts(texts)
    assert len(vectors) == 5
    assert vectors[4] == await client.embed_text("e")
    assert await client.embed_texts([]) == []


@pytest.mark.asyncio
async def test_openai_client_sorts_by_index_and_passes_dimensions():
    config = EmbeddingConfig(
        provider=EmbeddingProvider.OPENAI, openai_api_key="sk-test", dimensions=2, batch_size=10
    )
    client = OpenAIEmbeddingClient(config)
    client.client.embeddings.create = AsyncMock(return_value=SimpleNamespace(data=[
        SimpleNamespace(index=1, embedding=[0.0, 1.0]),
        SimpleNamespace(index=0, embedding=[1.0, 0.0]),
    ]))

    vectors = await client.embed_texts(["first", "second"])

    assert vectors == [[1.0, 0.0], [0.0, 1.0]]
    client.client.embeddings.create.assert_awaited_once_with(
        model="text-embedding-3-small", input=["first", "second"], dimensions=2
    )
    await client.close()


@pytest.mark.asyncio
async def test_factory_selects_provider():
    assert isinstance(await get_embedding_client(EmbeddingConfig()), DummyEmbeddingClient)
    openai_config = EmbeddingConfig(provider=EmbeddingProvider.OPENAI, openai_api_key="sk-test")
    client = await get_embedding_client(openai_config)
    assert isinstance(client, OpenAIEmbeddingClient)
    await client.close()
