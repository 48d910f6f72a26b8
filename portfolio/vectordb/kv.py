"""
Vector store persisted in the key-value store.

Each record is stored as JSON under ``vector:<collection>:<id>`` and its ID is
kept in the set ``vectors:<collection>``. Similarity search loads the whole
collection.
"""
from typing import Iterable, List, Optional

import structlog

from portfolio.config import VectorDBConfig
from portfolio.kv import KVStore
from portfolio.models.vector import VectorRecord
from portfolio.vectordb import BaseVectorStore

# Set up structured logger
logger = structlog.get_logger()


class KVVectorStore(BaseVectorStore):
    """Vector store backed by a KVStore."""

    def __init__(self, config: VectorDBConfig, kv: KVStore):
        """
        Initialize the store.

        Args:
            config: Vector store configuration
            kv: Key-value store holding the records
        """
        super().__init__(config)
        self.kv = kv
        self.index_key = f"vectors:{self.collection_name}"

    def _record_key(self, id: str) -> str:
        return f"vector:{self.collection_name}:{id}"

    async def initialize(self) -> None:
        logger.info(
            "Initialized key-value vector store",
            collection=self.collection_name,
            count=await self.count(),
        )

    async def _upsert_batch(self, records: List[VectorRecord]) -> bool:
        for record in records:
            await self.kv.set(self._record_key(record.id), record.to_dict())
        await self.kv.sadd(self.index_key, *(r.id for r in records))
        return True

    async def get(self, id: str) -> Optional[VectorRecord]:
        data = await self.kv.get(self._record_key(id))
        if not isinstance(data, dict):
            return None
        return VectorRecord.model_validate(data)

    async def _delete_batch(self, ids: List[str]) -> int:
        if not ids:
            return 0
        deleted = await self.kv.delete(*(self._record_key(id) for id in ids))
        await self.kv.srem(self.index_key, *ids)
        return deleted

    async def delete_all(self) -> int:
        ids = sorted(await self.kv.smembers(self.index_key))
        deleted = await self.delete_many(ids)
        await self.kv.delete(self.index_key)
        logger.info("Deleted all vectors", collection=self.collection_name, count=deleted)
        return deleted

    async def _all_records(self) -> Iterable[VectorRecord]:
        records = []
        for id in sorted(await self.kv.smembers(self.index_key)):
            record = await self.get(id)
            if record is None:
                # Index entry outlived its record (TTL or partial delete)
                await self.kv.srem(self.index_key, id)
                continue
            records.append(record)
        return records

    async def count(self) -> int:
        return await self.kv.scard(self.index_key)
