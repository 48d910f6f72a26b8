"""
Central re-exports for the portfolio admin data models.

This module exposes the canonical models from their dedicated modules to
provide stable import paths as "portfolio.models" without redefining types.
"""
from .chat import ChatLog, ChatStats, PageContext, TopQuestion
from .content import (
    AboutContent,
    AboutContentInput,
    AboutProfile,
    BlogPost,
    BlogPostInput,
    ContentStatus,
    LocalizedContent,
    Project,
    ProjectInput,
)
from .session import ADMIN_ROLE, SessionUser
from .vector import VectorMatch, VectorRecord, VectorType, VectorTypeStats
from .video import (
    BatchImportResult,
    ImportFailure,
    Video,
    VideoCategory,
    VideoMetadata,
    VideoStats,
)

__all__ = [
    "ADMIN_ROLE",
    "AboutContent",
    "AboutContentInput",
    "AboutProfile",
    "BatchImportResult",
    "BlogPost",
    "BlogPostInput",
    "ChatLog",
    "ChatStats",
    "ContentStatus",
    "ImportFailure",
    "LocalizedContent",
    "PageContext",
    "Project",
    "ProjectInput",
    "SessionUser",
    "TopQuestion",
    "VectorMatch",
    "VectorRecord",
    "VectorType",
    "VectorTypeStats",
    "Video",
    "VideoCategory",
    "VideoMetadata",
    "VideoStats",
]
