"""
Content models: blog posts, projects and the about page.

Posts and projects carry bilingual (English / Vietnamese) copy and a
publication status; only published records are visible through the public
API. The about page is a single document.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from portfolio.models.base import CamelModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _with_utc(v):
    if isinstance(v, datetime) and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


class ContentStatus(str, Enum):
    """Publication status of a content record."""
    DRAFT = "draft"
    PUBLISHED = "published"


class LocalizedContent(CamelModel):
    """Copy for one language."""
    title: str = ""
    description: str = ""
    content: str = ""  # Markdown


class BlogPost(CamelModel):
    """
    A blog post stored in the content store.

    ``reading_time`` is derived from the English content whenever the post is
    saved.
    """
    id: str
    slug: str
    status: ContentStatus = ContentStatus.DRAFT
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    published_at: Optional[datetime] = None
    created_by: str = "admin"

    en: LocalizedContent
    vi: LocalizedContent = Field(default_factory=LocalizedContent)

    tags: List[str] = Field(default_factory=list)
    image: Optional[str] = None
    featured: bool = False
    reading_time: Optional[int] = None

    @field_validator("created_at", "updated_at", "published_at", mode="after")
    @classmethod
    def ensure_timezone(cls, v):
        """Ensure all datetime fields have timezone information."""
        return _with_utc(v)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        """Drop empty and duplicate tags, keeping the author's order."""
        seen = []
        for tag in (t.strip() for t in v):
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED

    def sort_timestamp(self) -> datetime:
        """Publication time, falling back to creation time."""
        return self.published_at or self.created_at


class Project(CamelModel):
    """A portfolio project stored in the content store."""
    id: str
    slug: str
    status: ContentStatus = ContentStatus.DRAFT
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    created_by: str = "admin"

    en: LocalizedContent
    vi: LocalizedContent = Field(default_factory=LocalizedContent)

    tech: List[str] = Field(default_factory=list)
    image: Optional[str] = None
    github: Optional[str] = None
    demo: Optional[str] = None
    featured: bool = False

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def ensure_timezone(cls, v):
        return _with_utc(v)

    @property
    def is_published(self) -> bool:
        return self.status == ContentStatus.PUBLISHED


class ContentInput(CamelModel):
    """Fields an admin submits for a blog post or project."""
    slug: Optional[str] = None
    status: Optional[ContentStatus] = None
    en: Optional[LocalizedContent] = None
    vi: Optional[LocalizedContent] = None
    image: Optional[str] = None
    featured: Optional[bool] = None

    def has_required_fields(self) -> bool:
        """English title and description are mandatory."""
        return bool(self.en and self.en.title and self.en.description)


class BlogPostInput(ContentInput):
    tags: Optional[List[str]] = None


class ProjectInput(ContentInput):
    tech: Optional[List[str]] = None
    github: Optional[str] = None
    demo: Optional[str] = None


class AboutProfile(CamelModel):
    """Profile copy for one language."""
    name: str = ""
    role: str = ""
    intro: str = ""
    photo: Optional[str] = None


class BeyondWorkCopy(CamelModel):
    bio: str = ""
    interests: str = ""


class BeyondWork(CamelModel):
    """The "beyond work" section, per language."""
    en: BeyondWorkCopy = Field(default_factory=BeyondWorkCopy)
    vi: BeyondWorkCopy = Field(default_factory=BeyondWorkCopy)


class AboutContent(CamelModel):
    """
    The about page, stored as a single document.
    """
    id: Literal["about"] = "about"
    updated_at: datetime = Field(default_factory=utcnow)
    updated_by: str = "admin"

    en: AboutProfile
    vi: AboutProfile = Field(default_factory=AboutProfile)
    beyond_work: BeyondWork = Field(default_factory=BeyondWork)

    @field_validator("updated_at", mode="after")
    @classmethod
    def ensure_timezone(cls, v):
        return _with_utc(v)


class AboutContentInput(CamelModel):
    """Fields an admin submits for the about page."""
    en: Optional[AboutProfile] = None
    vi: Optional[AboutProfile] = None
    beyond_work: Optional[BeyondWork] = None

    def has_required_fields(self) -> bool:
        """English name, role and intro are mandatory."""
        return bool(self.en and self.en.name and self.en.role and self.en.intro)
