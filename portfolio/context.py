"""
Application context management.
"""
from contextlib import AsyncExitStack
from typing import Optional

import structlog

from portfolio.config import Settings
from portfolio.embeddings import EmbeddingClient, get_embedding_client
from portfolio.kv import KVStore, get_kv_store
from portfolio.services.chat_logger import ChatLogger
from portfolio.services.content import ContentManager
from portfolio.services.videos import VideoManager
from portfolio.services.youtube import YouTubeClient
from portfolio.vectordb import VectorStore, get_vector_store

# Set up structured logger
logger = structlog.get_logger()


class AppContext:
    """
    Application context that holds all initialized components and resources.

    This class manages the lifecycle of the storage clients and the services
    built on them. Route handlers reach it through ``request.app.state``.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.exit_stack = AsyncExitStack()
        self.kv: Optional[KVStore] = None
        self.vector_store: Optional[VectorStore] = None
        self.embedding_client: Optional[EmbeddingClient] = None
        self.youtube: Optional[YouTubeClient] = None
        self.content: Optional[ContentManager] = None
        self.chat_logger: Optional[ChatLogger] = None
        self.videos: Optional[VideoManager] = None
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize all components and resources."""
        if self._initialized:
            return

        logger.info("Initializing application context", environment=self.settings.environment.value)

        await self._init_kv()
        await self._init_vector_store()
        await self._init_embedding_client()
        await self._init_youtube()
        self._init_services()

        self._initialized = True
        logger.info("Application context initialized")

    async def _init_kv(self) -> None:
        self.kv = await get_kv_store(self.settings.kv)
        self.exit_stack.push_async_callback(self.kv.close)
        logger.info("Key-value store initialized", backend=self.settings.kv.backend.value)

    async def _init_vector_store(self) -> None:
        self.vector_store = await get_vector_store(self.settings.vector_db, self.kv)
        self.exit_stack.push_async_callback(self.vector_store.close)
        logger.info(
            "Vector store initialized",
            type=self.settings.vector_db.db_type.value,
            collection=self.settings.vector_db.collection_name,
        )

    async def _init_embedding_client(self) -> None:
        self.embedding_client = await get_embedding_client(self.settings.embedding)
        self.exit_stack.push_async_callback(self.embedding_client.close)
        logger.info(
            "Embedding client initialized",
            provider=self.settings.embedding.provider.value,
            model=self.settings.embedding.model_name,
        )

    async def _init_youtube(self) -> None:
        self.youtube = YouTubeClient(self.settings.youtube)
        await self.exit_stack.enter_async_context(self.youtube)

    def _init_services(self) -> None:
        """Wire the domain services to the storage clients."""
        self.content = ContentManager(self.kv, self.settings.content.words_per_minute)
        self.chat_logger = ChatLogger(
            self.kv,
            ttl_days=self.settings.content.chat_log_ttl_days,
            top_questions_limit=self.settings.content.top_questions_limit,
        )
        self.videos = VideoManager(
            self.kv,
            youtube=self.youtube,
            vector_store=self.vector_store,
            embeddings=self.embedding_client,
            chunk_words=self.settings.embedding.chunk_words,
            chunk_overlap=self.settings.embedding.chunk_overlap,
        )

    async def shutdown(self) -> None:
        """Close all components in reverse order of creation."""
        logger.info("Shutting down application context")
        await self.exit_stack.aclose()
        self._initialized = False
        logger.info("Application context shut down")

    async def __aenter__(self) -> "AppContext":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.shutdown()
