"""
Video library service.

Videos are stored in the key-value store:

- ``video:<id>``: the video record
- ``videos:<category>``: set of video IDs in a category
- ``videos:all``: sorted set of every video ID scored by when it was added

The video ID is the YouTube video ID.
"""
from typing import List, Optional

import structlog
from prometheus_client import Counter

from portfolio.embeddings import EmbeddingClient
from portfolio.errors import NotFoundError, PortfolioError, ValidationError
from portfolio.kv import KVStore
from portfolio.models.vector import VectorRecord, VectorType
from portfolio.models.video import BatchImportResult, Video, VideoCategory, VideoStats
from portfolio.services.youtube import YouTubeClient, extract_video_id
from portfolio.textutils import chunk_text
from portfolio.vectordb import VectorStore

# Set up structured logger
logger = structlog.get_logger()

# Define metrics
VIDEOS_IMPORTED_TOTAL = Counter(
    'portfolio_videos_imported_total', 'Videos imported from YouTube URLs', ['outcome']
)

ALL_VIDEOS_KEY = "videos:all"

# Characters of chunk text kept in vector metadata
CHUNK_PREVIEW_CHARS = 500


def video_key(video_id: str) -> str:
    return f"video:{video_id}"


def category_key(category: VideoCategory) -> str:
    return f"videos:{category.value}"


class VideoManager:
    """
    Manage the video library and its vector index.
    """

    def __init__(
        self,
        kv: KVStore,
        youtube: Optional[YouTubeClient] = None,
        vector_store: Optional[VectorStore] = None,
        embeddings: Optional[EmbeddingClient] = None,
        chunk_words: int = 512,
        chunk_overlap: int = 50,
    ):
        """
        Initialize the manager.

        Args:
            kv: Key-value store holding the library
            youtube: Client used to fetch metadata on import
            vector_store: Store receiving video chunk vectors
            embeddings: Client embedding the chunks
            chunk_words: Words per indexed chunk
            chunk_overlap: Words shared by consecutive chunks
        """
        self.kv = kv
        self.youtube = youtube
        self.vector_store = vector_store
        self.embeddings = embeddings
        self.chunk_words = chunk_words
        self.chunk_overlap = chunk_overlap

    async def save_video(self, video: Video) -> None:
        await self.kv.set(video_key(video.id), video.to_dict())
        await self.kv.sadd(category_key(video.category), video.id)
        await self.kv.zadd(ALL_VIDEOS_KEY, {video.id: video.added_at.timestamp()})

    async def get_video(self, video_id: str) -> Optional[Video]:
        data = await self.kv.get(video_key(video_id))
        if not isinstance(data, dict):
            return None
        return Video.model_validate(data)

    async def _load(self, video_ids: List[str]) -> List[Video]:
        videos = []
        for video_id in video_ids:
            video = await self.get_video(video_id)
            if video:
                videos.append(video)
        return videos

    async def get_videos_by_category(self, category: VideoCategory) -> List[Video]:
        """Videos of a category, newest first."""
        videos = await self._load(sorted(await self.kv.smembers(category_key(category))))
        return sorted(videos, key=lambda v: v.added_at, reverse=True)

    async def get_all_videos(self, limit: int = 50, offset: int = 0) -> List[Video]:
        """
        Page through every video, newest first.

        Args:
            limit: Page size
            offset: Number of videos to skip

        Returns:
            List[Video]: Videos on the page
        """
        if limit <= 0:
            return []
        ids = await self.kv.zrange(ALL_VIDEOS_KEY, offset, offset + limit - 1, desc=True)
        return await self._load(ids)

    async def count_videos(self) -> int:
        return await self.kv.zcard(ALL_VIDEOS_KEY)

    async def update_video_category(self, video_id: str, category: VideoCategory) -> Video:
        """
        Move a video to another category.

        Raises:
            NotFoundError: If the video does not exist
        """
        video = await self.get_video(video_id)
        if video is None:
            raise NotFoundError("Video not found")

        old_category = video.category
        video.category = category
        await self.kv.set(video_key(video_id), video.to_dict())
        await self.kv.srem(category_key(old_category), video_id)
        await self.kv.sadd(category_key(category), video_id)

        logger.info(
            "Updated video category",
            video_id=video_id,
            old_category=old_category.value,
            new_category=category.value,
        )
        return video

    async def delete_video(self, video_id: str) -> None:
        """
        Delete a video, its index entries and its vectors.

        Raises:
            NotFoundError: If the video does not exist
        """
        video = await self.get_video(video_id)
        if video is None:
            raise NotFoundError("Video not found")

        if video.vector_ids and self.vector_store is not None:
            await self.vector_store.delete_many(video.vector_ids)

        await self.kv.delete(video_key(video_id))
        await self.kv.srem(category_key(video.category), video_id)
        await self.kv.zrem(ALL_VIDEOS_KEY, video_id)

        logger.info("Deleted video", video_id=video_id, vectors=len(video.vector_ids))

    async def get_video_stats(self) -> VideoStats:
        return VideoStats(
            leadership=await self.kv.scard(category_key(VideoCategory.LEADERSHIP)),
            ai_works=await self.kv.scard(category_key(VideoCategory.AI_WORKS)),
            health=await self.kv.scard(category_key(VideoCategory.HEALTH)),
            entertaining=await self.kv.scard(category_key(VideoCategory.ENTERTAINING)),
            philosophy=await self.kv.scard(category_key(VideoCategory.HUMAN_PHILOSOPHY)),
            total=await self.kv.zcard(ALL_VIDEOS_KEY),
        )

    async def batch_import_videos(
        self,
        urls: List[str],
        category: VideoCategory,
        user_email: str,
    ) -> BatchImportResult:
        """
        Import videos from YouTube URLs.

        Each URL is handled independently; failures are recorded in the
        result instead of aborting the batch.

        Args:
            urls: YouTube URLs
            category: Category of every imported video
            user_email: Admin performing the import

        Returns:
            BatchImportResult: Success and failure counts with per-URL errors

        Raises:
            ValidationError: If no YouTube client is configured
        """
        if self.youtube is None:
            raise ValidationError("YouTube client not configured")

        result = BatchImportResult()

        for url in urls:
            video_id = extract_video_id(url)
            if not video_id:
                result.record_failure(url, "Invalid YouTube URL")
                VIDEOS_IMPORTED_TOTAL.labels(outcome="invalid_url").inc()
                continue

            if await self.get_video(video_id):
                result.record_failure(url, "Video already exists")
                VIDEOS_IMPORTED_TOTAL.labels(outcome="duplicate").inc()
                continue

            try:
                metadata = await self.youtube.get_video_metadata(video_id)
                video = Video(
                    id=video_id,
                    category=category,
                    added_by=user_email,
                    **metadata.model_dump(),
                )
                await self.save_video(video)
            except PortfolioError as e:
                logger.warning("Video import failed", url=url, video_id=video_id, error=e.message)
                result.record_failure(url, e.message)
                VIDEOS_IMPORTED_TOTAL.labels(outcome="failed").inc()
                continue

            result.success += 1
            result.imported_ids.append(video_id)
            VIDEOS_IMPORTED_TOTAL.labels(outcome="imported").inc()

        logger.info(
            "Batch video import finished",
            category=category.value,
            success=result.success,
            failed=result.failed,
        )
        return result

    async def index_video_embeddings(self, video: Video) -> List[str]:
        """
        Embed a video's text and upsert it into the vector store.

        Title, description and transcript are chunked; each chunk becomes a
        vector ``video_<videoId>_chunk_<i>``. Vectors left over from a
        previous, longer indexing run are removed. The new IDs are saved on
        the video.

        Args:
            video: Video to index

        Returns:
            List[str]: IDs of the upserted vectors

        Raises:
            ValidationError: If no vector store or embedding client is configured
        """
        if self.vector_store is None or self.embeddings is None:
            raise ValidationError("Vector indexing is not configured")

        chunks = chunk_text(video.embedding_text(), self.chunk_words, self.chunk_overlap)
        vectors = await self.embeddings.embed_texts(chunks)

        records = [
            VectorRecord(
                id=f"video_{video.video_id}_chunk_{i}",
                values=values,
                metadata={
                    "vectorType": VectorType.VIDEO.value,
                    "title": video.title,
                    "description": chunk[:CHUNK_PREVIEW_CHARS],
                    "category": video.category.value,
                    "videoId": video.video_id,
                    "channelTitle": video.channel_title,
                    "chunkIndex": i,
                    "totalChunks": len(chunks),
                },
            )
            for i, (chunk, values) in enumerate(zip(chunks, vectors))
        ]
        await self.vector_store.upsert_batch(records)

        vector_ids = [record.id for record in records]
        stale = [vid for vid in video.vector_ids if vid not in set(vector_ids)]
        if stale:
            await self.vector_store.delete_many(stale)

        video.vector_ids = vector_ids
        await self.kv.set(video_key(video.id), video.to_dict())

        logger.info("Indexed video embeddings", video_id=video.video_id, chunks=len(records))
        return vector_ids
