"""
Embedding generation package for the portfolio admin application.

This package turns text chunks into vectors for the vector store. It provides
a client interface, a deterministic dummy client for tests and local
development, and an OpenAI client for production.
"""
import hashlib
from abc import ABC, abstractmethod
from typing import List, Protocol

import numpy as np
import structlog

from portfolio.config import EmbeddingConfig, EmbeddingProvider
from portfolio.errors import ConfigurationError

# Set up structured logger
logger = structlog.get_logger()


class EmbeddingClient(Protocol):
    """Protocol defining the interface for embedding clients."""

    dimensions: int

    async def embed_text(self, text: str) -> List[float]:
        """
        Generate an embedding for text.

        Args:
            text: Text to embed

        Returns:
            List[float]: Embedding vector
        """
        ...

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple texts.

        Args:
            texts: List of texts to embed

        Returns:
            List[List[float]]: Embedding vectors in input order
        """
        ...

    async def close(self) -> None:
        """Close the embedding client and release resources."""
        ...


class BaseEmbeddingClient(ABC):
    """
    Base class for embedding clients.

    This class provides batching and a consistent interface; subclasses embed
    one batch at a time.
    """

    def __init__(self, config: EmbeddingConfig):
        """
        Initialize the base embedding client.

        Args:
            config: Embedding configuration
        """
        self.config = config
        self.batch_size = config.batch_size
        self.dimensions = config.dimensions
        self._closed = False

    async def __aenter__(self) -> "BaseEmbeddingClient":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager."""
        await self.close()

    async def close(self) -> None:
        """Close the embedding client and release resources."""
        self._closed = True

    async def embed_text(self, text: str) -> List[float]:
        # Single text embedding is just a special case of batch embedding
        result = await self.embed_texts([text])
        return result[0]

    async def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple texts.

        This method batches the texts according to the configured batch size
        and calls the _embed_text_batch method for each batch.

        Args:
            texts: List of texts to embed

        Returns:
            List[List[float]]: List of embedding vectors
        """
        if not texts:
            return []

        results = []
        for i in range(0, len(texts), self.batch_size):
            batch = texts[i:i + self.batch_size]
            results.extend(await self._embed_text_batch(batch))

        return results

    @abstractmethod
    async def _embed_text_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a batch of texts.

        Args:
            texts: Batch of texts to embed

        Returns:
            List[List[float]]: List of embedding vectors
        """


class DummyEmbeddingClient(BaseEmbeddingClient):
    """
    Dummy embedding client for testing.

    Vectors are unit-length and seeded from the text hash, so the same text
    always embeds to the same vector.
    """

    async def _embed_text_batch(self, texts: List[str]) -> List[List[float]]:
        results = []

        for text in texts:
            # Generate a deterministic seed from the text
            text_hash = int(hashlib.md5(text.encode()).hexdigest(), 16) % (2**32)
            text_rng = np.random.RandomState(text_hash)

            vector = text_rng.randn(self.dimensions)
            norm = np.linalg.norm(vector)
            if norm > 0:
                vector = vector / norm

            results.append(vector.tolist())

        return results


class OpenAIEmbeddingClient(BaseEmbeddingClient):
    """
    OpenAI embedding client.

    This client uses the OpenAI embeddings API through the async SDK client.
    """

    def __init__(self, config: EmbeddingConfig):
        """
        Initialize the OpenAI embedding client.

        Args:
            config: Embedding configuration

        Raises:
            ConfigurationError: If no API key is configured
        """
        super().__init__(config)

        if not config.openai_api_key:
            raise ConfigurationError("OpenAI API key is required")

        import openai

        self.client = openai.AsyncOpenAI(api_key=config.openai_api_key.get_secret_value())
        self.model = config.model_name

        logger.info("OpenAI embedding client initialized", model=self.model)

    async def _embed_text_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a batch of texts using the OpenAI API.

        Args:
            texts: Batch of texts to embed

        Returns:
            List[List[float]]: Embedding vectors in input order
        """
        logger.debug("Generating OpenAI text embeddings", model=self.model, count=len(texts))

        response = await self.client.embeddings.create(
            model=self.model,
            input=texts,
            dimensions=self.dimensions,
        )
        ordered = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in ordered]

    async def close(self) -> None:
        await self.client.close()
        await super().close()


async def get_embedding_client(config: EmbeddingConfig) -> EmbeddingClient:
    """
    Get an embedding client based on configuration.

    Args:
        config: Embedding configuration

    Returns:
        EmbeddingClient: Configured embedding client

    Raises:
        ConfigurationError: If the OpenAI provider is selected without a key
    """
    if config.provider == EmbeddingProvider.OPENAI:
        return OpenAIEmbeddingClient(config)

    logger.info("Using dummy embedding client", dimensions=config.dimensions)
    return DummyEmbeddingClient(config)


__all__ = [
    "EmbeddingClient",
    "BaseEmbeddingClient",
    "DummyEmbeddingClient",
    "OpenAIEmbeddingClient",
    "get_embedding_client",
]
