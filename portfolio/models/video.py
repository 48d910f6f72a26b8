"""
Video library models.

Videos are YouTube uploads curated into a fixed set of categories. A video may
be indexed into the vector store, in which case the ids of its chunk vectors
are kept on the record so they can be removed with it.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from portfolio.models.base import CamelModel


class VideoCategory(str, Enum):
    """Categories of the video library."""
    LEADERSHIP = "Leadership"
    AI_WORKS = "AI Works"
    HEALTH = "Health"
    ENTERTAINING = "Entertaining"
    HUMAN_PHILOSOPHY = "Human Philosophy"

    @classmethod
    def from_string(cls, value: str) -> "VideoCategory":
        """
        Convert a string to a category, case-insensitively.

        Raises:
            ValueError: If the value names no category
        """
        for category in cls:
            if category.value.lower() == value.strip().lower():
                return category
        raise ValueError(f"Unknown video category: {value}")


class VideoMetadata(CamelModel):
    """Metadata returned by the YouTube Data API."""
    video_id: str
    title: str
    channel_title: str = ""
    description: str = ""
    published_at: str = ""
    thumbnail_url: str = ""
    duration: str = ""  # ISO 8601 duration, e.g. PT4M13S


class Video(VideoMetadata):
    """A video in the library."""
    id: str
    category: VideoCategory
    transcript: Optional[str] = None
    summary: Optional[str] = None
    added_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    added_by: str = "admin"
    vector_ids: List[str] = Field(default_factory=list)

    @field_validator("added_at", mode="after")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    def embedding_text(self) -> str:
        """Text indexed into the vector store."""
        return f"{self.title}\n{self.description}\n{self.transcript or ''}"

    def to_public_dict(self) -> Dict[str, Any]:
        """Serialize without fields reserved for the admin area."""
        return self.model_dump(
            by_alias=True,
            mode="json",
            exclude={"transcript", "added_by", "vector_ids"},
        )


class VideoStats(CamelModel):
    """Per-category video counts."""
    leadership: int = 0
    ai_works: int = 0
    health: int = 0
    entertaining: int = 0
    philosophy: int = 0
    total: int = 0


class ImportFailure(CamelModel):
    url: str
    error: str


class BatchImportResult(CamelModel):
    """Outcome of importing a list of video URLs."""
    success: int = 0
    failed: int = 0
    errors: List[ImportFailure] = Field(default_factory=list)
    imported_ids: List[str] = Field(default_factory=list)

    def record_failure(self, url: str, error: str) -> None:
        self.failed += 1
        self.errors.append(ImportFailure(url=url, error=error))
