"""
YouTube Data API client.

Fetches video metadata through httpx with tenacity retries. Transport errors
and 5xx responses are retried; other HTTP errors fail immediately.
"""
import re
from typing import Any, Dict, Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from portfolio.config import YouTubeConfig
from portfolio.errors import ConfigurationError, ExternalServiceError, NotFoundError
from portfolio.models.video import VideoMetadata

# Set up structured logger
logger = structlog.get_logger()

VIDEO_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/embed/([^&\n?#]+)"),
)


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract the video ID from a YouTube URL.

    Supports watch, youtu.be and embed URLs.

    Args:
        url: YouTube URL

    Returns:
        Optional[str]: Video ID, or None if the URL is not recognised
    """
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.TransportError)


class YouTubeClient:
    """
    Thin async client for the YouTube Data API v3.
    """

    def __init__(
        self,
        config: YouTubeConfig,
        client: Optional[httpx.AsyncClient] = None,
        retry_min_wait: float = 0.5,
        retry_max_wait: float = 5.0,
    ):
        """
        Initialize the client.

        Args:
            config: YouTube configuration
            client: Optional preconfigured httpx client
            retry_min_wait: Minimum wait between retries in seconds
            retry_max_wait: Maximum wait between retries in seconds
        """
        self.config = config
        self.retry_min_wait = retry_min_wait
        self.retry_max_wait = retry_max_wait
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=config.api_base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
        )

    async def __aenter__(self) -> "YouTubeClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """GET a JSON document with retries."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.config.retry_attempts),
                wait=wait_exponential(min=self.retry_min_wait, max=self.retry_max_wait),
                retry=retry_if_exception(_is_retryable),
                reraise=True,
            ):
                with attempt:
                    try:
                        response = await self.client.get(path, params=params)
                        response.raise_for_status()
                        return response.json()
                    except httpx.HTTPError as e:
                        logger.warning(
                            "YouTube API request failed",
                            path=path,
                            error=str(e),
                            attempt=attempt.retry_state.attempt_number,
                            max_attempts=self.config.retry_attempts,
                        )
                        raise
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"YouTube API request failed: {e}") from e

    async def get_video_metadata(self, video_id: str) -> VideoMetadata:
        """
        Fetch metadata for a video.

        Args:
            video_id: YouTube video ID

        Returns:
            VideoMetadata: Title, channel, description, publish date, thumbnail and duration

        Raises:
            ConfigurationError: If no API key is configured
            NotFoundError: If YouTube returns no video for the ID
            ExternalServiceError: If the API keeps failing
        """
        if not self.config.api_key:
            raise ConfigurationError("YouTube API key not configured")

        data = await self._get(
            "/videos",
            {
                "part": "snippet,contentDetails",
                "id": video_id,
                "key": self.config.api_key.get_secret_value(),
            },
        )

        items = data.get("items") or []
        if not items:
            raise NotFoundError("Video not found")

        item = items[0]
        snippet = item.get("snippet", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail = thumbnails.get("medium") or thumbnails.get("default") or {}

        return VideoMetadata(
            video_id=video_id,
            title=snippet.get("title", ""),
            channel_title=snippet.get("channelTitle", ""),
            description=snippet.get("description", ""),
            published_at=snippet.get("publishedAt", ""),
            thumbnail_url=thumbnail.get("url", ""),
            duration=item.get("contentDetails", {}).get("duration", ""),
        )
