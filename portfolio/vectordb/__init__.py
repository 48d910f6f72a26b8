"""
Vector store package for the portfolio admin application.

This package stores the embedding vectors that back the site assistant. Every
record carries a ``vectorType`` in its metadata naming the corpus it came
from (website pages, documents or videos), which the admin area uses to list,
count and bulk-delete vectors.

The main components are:
- Vector store interface
- Factory function to get the configured store
- Implementations backed by process memory and by the key-value store
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Protocol

import numpy as np
import structlog

from portfolio.config import VectorDBConfig, VectorDBType
from portfolio.errors import ValidationError
from portfolio.kv import KVStore
from portfolio.models.vector import VectorMatch, VectorRecord, VectorType, VectorTypeStats

# Set up structured logger
logger = structlog.get_logger()

MetadataFilter = Dict[str, Any]


class VectorStore(Protocol):
    """Protocol defining the interface for vector stores."""

    async def initialize(self) -> None:
        """Create collections or indexes needed by the store."""
        ...

    async def upsert(self, record: VectorRecord) -> bool:
        """
        Insert or update a record.

        Args:
            record: Vector record to insert or update

        Returns:
            bool: True if successful
        """
        ...

    async def upsert_batch(self, records: List[VectorRecord]) -> bool:
        """Insert or update many records in batches."""
        ...

    async def get(self, id: str) -> Optional[VectorRecord]:
        """
        Get a record by ID.

        Args:
            id: Record ID

        Returns:
            Optional[VectorRecord]: Record if found, None otherwise
        """
        ...

    async def delete(self, id: str) -> bool:
        """Delete a record, returning whether it existed."""
        ...

    async def delete_many(self, ids: List[str]) -> int:
        """Delete records in batches, returning how many existed."""
        ...

    async def delete_all(self) -> int:
        """Delete every record in the collection."""
        ...

    async def query(
        self,
        vector: List[float],
        top_k: int = 10,
        filter: Optional[MetadataFilter] = None,
        min_score: float = 0.0,
    ) -> List[VectorMatch]:
        """
        Find the records most similar to a vector.

        Args:
            vector: Query vector
            top_k: Maximum number of matches
            filter: Metadata values every match must have
            min_score: Minimum similarity score

        Returns:
            List[VectorMatch]: Matches, best first
        """
        ...

    async def list_by_type(self, vector_type: str, limit: Optional[int] = None) -> List[VectorRecord]:
        """Records whose metadata type equals vector_type."""
        ...

    async def count(self) -> int:
        """Number of records in the collection."""
        ...

    async def describe(self) -> Dict[str, Any]:
        """Collection details for the admin area."""
        ...

    async def type_stats(self) -> VectorTypeStats:
        """Record counts per corpus."""
        ...

    async def close(self) -> None:
        """Close the store and release resources."""
        ...


def matches_filter(metadata: Dict[str, Any], filter: Optional[MetadataFilter]) -> bool:
    """
    Check metadata against an equality filter.

    A list value in the filter matches any of its elements.
    """
    if not filter:
        return True
    for key, expected in filter.items():
        actual = metadata.get(key)
        if isinstance(expected, (list, tuple, set)):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


def record_type(record: VectorRecord) -> Optional[str]:
    """Corpus of a record, honouring the legacy ``type`` metadata key."""
    return record.vector_type


class BaseVectorStore(ABC):
    """
    Base class for vector stores.

    This class provides batching, similarity scoring and the per-type
    queries shared by every backend. Backends supply storage primitives.
    """

    def __init__(self, config: VectorDBConfig):
        """
        Initialize the base vector store.

        Args:
            config: Vector store configuration
        """
        self.config = config
        self.collection_name = config.collection_name
        self.batch_size = config.batch_size
        self.distance_metric = config.distance_metric
        self._closed = False

    async def __aenter__(self) -> "BaseVectorStore":
        """Enter the async context manager."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager."""
        await self.close()

    async def initialize(self) -> None:
        pass

    async def close(self) -> None:
        """Close the vector store and release resources."""
        self._closed = True

    def _check_dimension(self, record: VectorRecord) -> None:
        if len(record.values) != self.config.dimension:
            raise ValidationError(
                f"Vector {record.id} has dimension {len(record.values)}, "
                f"expected {self.config.dimension}"
            )

    async def upsert(self, record: VectorRecord) -> bool:
        return await self.upsert_batch([record])

    async def upsert_batch(self, records: List[VectorRecord]) -> bool:
        """
        Insert or update multiple records.

        This method batches the records according to the configured batch size
        and calls the _upsert_batch method for each batch.

        Args:
            records: List of vector records to insert or update

        Returns:
            bool: True if successful

        Raises:
            ValidationError: If a record has the wrong dimension
        """
        if not records:
            return True

        for record in records:
            self._check_dimension(record)

        success = True
        for i in range(0, len(records), self.batch_size):
            batch = records[i:i + self.batch_size]
            batch_success = await self._upsert_batch(batch)
            success = success and batch_success

        logger.debug(
            "Upserted vectors",
            collection=self.collection_name,
            count=len(records),
        )
        return success

    async def delete(self, id: str) -> bool:
        return await self.delete_many([id]) == 1

    async def delete_many(self, ids: List[str]) -> int:
        """
        Delete records in batches of the configured size.

        Args:
            ids: Record IDs

        Returns:
            int: Number of records that existed
        """
        deleted = 0
        for i in range(0, len(ids), self.batch_size):
            deleted += await self._delete_batch(ids[i:i + self.batch_size])
        return deleted

    async def query(
        self,
        vector: List[float],
        top_k: int = 10,
        filter: Optional[MetadataFilter] = None,
        min_score: float = 0.0,
    ) -> List[VectorMatch]:
        """
        Find the records most similar to a vector.

        Args:
            vector: Query vector
            top_k: Maximum number of matches
            filter: Metadata values every match must have
            min_score: Minimum similarity score

        Returns:
            List[VectorMatch]: Matches sorted by score, descending
        """
        results = []

        for record in await self._all_records():
            if not matches_filter(record.metadata, filter):
                continue

            score = self.score(vector, record.values)
            if score >= min_score:
                results.append(
                    VectorMatch(id=record.id, score=score, metadata=record.metadata)
                )

        results.sort(key=lambda m: m.score, reverse=True)
        return results[:top_k]

    async def list_by_type(self, vector_type: str, limit: Optional[int] = None) -> List[VectorRecord]:
        """
        List records of one corpus.

        Args:
            vector_type: website, document or video
            limit: Maximum number of records, defaults to max_results

        Returns:
            List[VectorRecord]: Matching records ordered by ID
        """
        limit = limit or self.config.max_results
        records = [r for r in await self._all_records() if record_type(r) == vector_type]
        records.sort(key=lambda r: r.id)
        return records[:limit]

    async def type_stats(self) -> VectorTypeStats:
        """
        Count records per corpus.

        Records without a recognised type are counted as unknown.
        """
        stats = VectorTypeStats()
        known = set(VectorType.values())
        for record in await self._all_records():
            kind = record_type(record)
            if kind in known:
                setattr(stats, kind, getattr(stats, kind) + 1)
            else:
                stats.unknown += 1
            stats.total += 1
        return stats

    async def describe(self) -> Dict[str, Any]:
        return {
            "collection": self.collection_name,
            "dimension": self.config.dimension,
            "metric": self.distance_metric,
            "totalRecordCount": await self.count(),
        }

    def score(self, vec1: List[float], vec2: List[float]) -> float:
        """Similarity of two vectors under the configured metric, higher is closer."""
        if self.distance_metric == "euclidean":
            # Convert distance to similarity score (1.0 / (1.0 + distance))
            return 1.0 / (1.0 + self.euclidean_distance(vec1, vec2))
        if self.distance_metric == "dot":
            return self.dot_product(vec1, vec2)
        return self.cosine_similarity(vec1, vec2)

    @staticmethod
    def cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
        """
        Calculate cosine similarity between two vectors.

        Args:
            vec1: First vector
            vec2: Second vector

        Returns:
            float: Cosine similarity (-1.0 to 1.0)
        """
        if len(vec1) != len(vec2):
            raise ValueError("Vector dimensions do not match")

        a = np.array(vec1)
        b = np.array(vec2)

        norm_a = np.linalg.norm(a)
        norm_b = np.linalg.norm(b)
        if norm_a == 0 or norm_b == 0:
            return 0.0

        return float(np.dot(a, b) / (norm_a * norm_b))

    @staticmethod
    def euclidean_distance(vec1: List[float], vec2: List[float]) -> float:
        if len(vec1) != len(vec2):
            raise ValueError("Vector dimensions do not match")
        return float(np.linalg.norm(np.array(vec1) - np.array(vec2)))

    @staticmethod
    def dot_product(vec1: List[float], vec2: List[float]) -> float:
        if len(vec1) != len(vec2):
            raise ValueError("Vector dimensions do not match")
        return float(np.dot(np.array(vec1), np.array(vec2)))

    @abstractmethod
    async def _upsert_batch(self, records: List[VectorRecord]) -> bool:
        """Store one batch of already validated records."""

    @abstractmethod
    async def _delete_batch(self, ids: List[str]) -> int:
        """Delete one batch of IDs, returning how many existed."""

    @abstractmethod
    async def _all_records(self) -> Iterable[VectorRecord]:
        """Every record in the collection."""

    @abstractmethod
    async def get(self, id: str) -> Optional[VectorRecord]:
        ...

    @abstractmethod
    async def delete_all(self) -> int:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...


class InMemoryVectorStore(BaseVectorStore):
    """
    In-memory vector store for testing and single-process use.

    This store keeps all records in a dictionary. It does not persist
    across restarts.
    """

    def __init__(self, config: VectorDBConfig):
        super().__init__(config)
        self.records: Dict[str, VectorRecord] = {}

    async def initialize(self) -> None:
        logger.info(
            "Initialized in-memory vector store",
            collection=self.collection_name,
        )

    async def _upsert_batch(self, records: List[VectorRecord]) -> bool:
        for record in records:
            self.records[record.id] = record.model_copy(deep=True)
        return True

    async def get(self, id: str) -> Optional[VectorRecord]:
        record = self.records.get(id)
        return record.model_copy(deep=True) if record else None

    async def _delete_batch(self, ids: List[str]) -> int:
        deleted = 0
        for id in ids:
            if self.records.pop(id, None) is not None:
                deleted += 1
        return deleted

    async def delete_all(self) -> int:
        deleted = len(self.records)
        self.records.clear()
        return deleted

    async def _all_records(self) -> Iterable[VectorRecord]:
        return list(self.records.values())

    async def count(self) -> int:
        return len(self.records)


async def get_vector_store(config: VectorDBConfig, kv: Optional[KVStore] = None) -> VectorStore:
    """
    Get a vector store based on configuration.

    Args:
        config: Vector store configuration
        kv: Key-value store, required by the kv backend

    Returns:
        VectorStore: Initialized vector store

    Raises:
        ValueError: If the kv backend is selected without a key-value store
    """
    if config.db_type == VectorDBType.KV:
        if kv is None:
            raise ValueError("The kv vector store requires a key-value store")
        store: BaseVectorStore = KVVectorStore(config, kv)
    else:
        logger.info("Using in-memory vector store", db_type=config.db_type)
        store = InMemoryVectorStore(config)

    await store.initialize()
    return store


# Import specific implementations to make them available
from portfolio.vectordb.kv import KVVectorStore

__all__ = [
    "VectorStore",
    "BaseVectorStore",
    "InMemoryVectorStore",
    "KVVectorStore",
    "get_vector_store",
    "matches_filter",
]
