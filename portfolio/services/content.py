"""
Content store for blog posts, projects and the about page.

Records are kept in the key-value store:

- ``blog:<id>`` and ``project:<id>``: the records
- ``blog:slug:<slug>`` and ``project:slug:<slug>``: slug to ID indexes
- ``content:about``: the about page document
"""
from typing import List, Optional, Type, TypeVar

import structlog

from portfolio.errors import NotFoundError, ValidationError
from portfolio.kv import KVStore
from portfolio.models.content import (
    AboutContent,
    AboutContentInput,
    BlogPost,
    BlogPostInput,
    ContentStatus,
    LocalizedContent,
    Project,
    ProjectInput,
    utcnow,
)
from portfolio.textutils import calculate_reading_time, generate_id, generate_slug

# Set up structured logger
logger = structlog.get_logger()

Record = TypeVar("Record", BlogPost, Project)

ABOUT_KEY = "content:about"


class ContentManager:
    """
    CRUD operations for blog posts, projects and the about page.
    """

    def __init__(self, kv: KVStore, words_per_minute: int = 200):
        """
        Initialize the content manager.

        Args:
            kv: Key-value store holding the content
            words_per_minute: Reading speed used for reading time estimates
        """
        self.kv = kv
        self.words_per_minute = words_per_minute

    # Shared helpers ---------------------------------------------------- #

    async def _get(self, model: Type[Record], prefix: str, id: str) -> Optional[Record]:
        data = await self.kv.get(f"{prefix}:{id}")
        if not isinstance(data, dict):
            return None
        return model.model_validate(data)

    async def _get_by_slug(self, model: Type[Record], prefix: str, slug: str) -> Optional[Record]:
        id = await self.kv.get(f"{prefix}:slug:{slug}")
        if not id:
            return None
        return await self._get(model, prefix, str(id))

    async def _get_all(self, model: Type[Record], prefix: str) -> List[Record]:
        records = []
        for key in await self.kv.keys(f"{prefix}:*"):
            # Skip slug index keys
            if ":slug:" in key:
                continue
            data = await self.kv.get(key)
            if isinstance(data, dict):
                records.append(model.model_validate(data))
        return records

    async def _slug_owner(self, prefix: str, slug: str) -> Optional[str]:
        """ID of the live record indexed under ``slug``, if any."""
        owner = await self.kv.get(f"{prefix}:slug:{slug}")
        if not owner or not await self.kv.exists(f"{prefix}:{owner}"):
            return None
        return str(owner)

    async def _release_slug(self, prefix: str, slug: str, id: str) -> None:
        # Only the owning record may drop an index entry
        if await self.kv.get(f"{prefix}:slug:{slug}") == id:
            await self.kv.delete(f"{prefix}:slug:{slug}")

    async def _save(self, record: Record, prefix: str) -> None:
        owner = await self._slug_owner(prefix, record.slug)
        if owner is not None and owner != record.id:
            raise ValidationError(f"Slug '{record.slug}' is already in use")

        previous = await self._get(type(record), prefix, record.id)
        await self.kv.set(f"{prefix}:{record.id}", record.to_dict())
        await self.kv.set(f"{prefix}:slug:{record.slug}", record.id)
        if previous is not None and previous.slug != record.slug:
            await self._release_slug(prefix, previous.slug, record.id)

    async def _delete(self, model: Type[Record], prefix: str, id: str) -> bool:
        record = await self._get(model, prefix, id)
        if record is None:
            return False
        await self.kv.delete(f"{prefix}:{id}")
        await self._release_slug(prefix, record.slug, id)
        return True

    # Blog posts -------------------------------------------------------- #

    async def get_blog_post(self, id: str) -> Optional[BlogPost]:
        return await self._get(BlogPost, "blog", id)

    async def get_blog_post_by_slug(self, slug: str) -> Optional[BlogPost]:
        """
        Look up a blog post through the slug index.

        Args:
            slug: URL slug

        Returns:
            Optional[BlogPost]: Post if the slug is indexed and the record exists
        """
        return await self._get_by_slug(BlogPost, "blog", slug)

    async def get_all_blog_posts(self) -> List[BlogPost]:
        return await self._get_all(BlogPost, "blog")

    async def get_published_blog_posts(self) -> List[BlogPost]:
        """Published posts, most recently published first."""
        posts = [p for p in await self.get_all_blog_posts() if p.is_published]
        return sorted(posts, key=lambda p: p.sort_timestamp(), reverse=True)

    async def save_blog_post(self, post: BlogPost) -> BlogPost:
        """
        Store a blog post and its slug index.

        The reading time is recalculated from the English content, so a post
        without content reads in one minute. A changed slug replaces the old
        index entry.

        Args:
            post: Post to store

        Returns:
            BlogPost: The stored post

        Raises:
            ValidationError: If another post owns the slug
        """
        post.reading_time = calculate_reading_time(post.en.content, self.words_per_minute)
        await self._save(post, "blog")
        logger.info("Saved blog post", post_id=post.id, slug=post.slug, status=post.status.value)
        return post

    async def create_blog_post(self, data: BlogPostInput, created_by: str) -> BlogPost:
        """
        Create a blog post from admin input.

        The slug defaults to one generated from the English title. A post
        created as published gets its publication time set.

        Args:
            data: Submitted fields
            created_by: Email of the admin creating the post

        Returns:
            BlogPost: The stored post

        Raises:
            ValidationError: If the English title or description is missing, or
                the slug belongs to another post
        """
        if not data.has_required_fields():
            raise ValidationError("Missing required English fields (title, description)")

        now = utcnow()
        status = data.status or ContentStatus.DRAFT
        post = BlogPost(
            id=generate_id(),
            slug=data.slug or generate_slug(data.en.title),
            status=status,
            created_at=now,
            updated_at=now,
            published_at=now if status == ContentStatus.PUBLISHED else None,
            created_by=created_by,
            en=data.en,
            vi=data.vi or LocalizedContent(),
            tags=data.tags or [],
            image=data.image,
            featured=bool(data.featured),
        )
        return await self.save_blog_post(post)

    async def update_blog_post(self, id: str, data: BlogPostInput) -> BlogPost:
        """
        Apply admin input to an existing blog post.

        Submitted fields replace stored ones. Without an explicit slug, a
        changed English title regenerates it. Moving a draft to published
        sets the publication time.

        Args:
            id: Post ID
            data: Submitted fields

        Returns:
            BlogPost: The stored post

        Raises:
            NotFoundError: If the post does not exist
            ValidationError: If the English title or description is missing, or
                the slug belongs to another post
        """
        existing = await self.get_blog_post(id)
        if existing is None:
            raise NotFoundError("Blog post not found")
        if not data.has_required_fields():
            raise ValidationError("Missing required English fields (title, description)")

        slug = data.slug or (
            generate_slug(data.en.title) if data.en.title != existing.en.title else existing.slug
        )
        published_at = existing.published_at
        if data.status == ContentStatus.PUBLISHED and existing.status == ContentStatus.DRAFT:
            published_at = utcnow()

        changes = {k: v for k, v in data if k in data.model_fields_set and v is not None}
        changes.update(id=id, slug=slug, updated_at=utcnow(), published_at=published_at)
        return await self.save_blog_post(BlogPost.model_validate({**existing.model_dump(), **changes}))

    async def delete_blog_post(self, id: str) -> bool:
        deleted = await self._delete(BlogPost, "blog", id)
        if deleted:
            logger.info("Deleted blog post", post_id=id)
        return deleted

    # Projects ---------------------------------------------------------- #

    async def get_project(self, id: str) -> Optional[Project]:
        return await self._get(Project, "project", id)

    async def get_project_by_slug(self, slug: str) -> Optional[Project]:
        return await self._get_by_slug(Project, "project", slug)

    async def get_all_projects(self) -> List[Project]:
        return await self._get_all(Project, "project")

    async def get_published_projects(self) -> List[Project]:
        """Published projects, newest first."""
        projects = [p for p in await self.get_all_projects() if p.is_published]
        return sorted(projects, key=lambda p: p.created_at, reverse=True)

    async def save_project(self, project: Project) -> Project:
        await self._save(project, "project")
        logger.info("Saved project", project_id=project.id, slug=project.slug)
        return project

    async def delete_project(self, id: str) -> bool:
        deleted = await self._delete(Project, "project", id)
        if deleted:
            logger.info("Deleted project", project_id=id)
        return deleted

    async def create_project(self, data: ProjectInput, created_by: str) -> Project:
        """
        Create a project from admin input.

        Raises:
            ValidationError: If the English title or description is missing, or
                the slug belongs to another project
        """
        if not data.has_required_fields():
            raise ValidationError("Missing required English fields (title, description)")

        now = utcnow()
        project = Project(
            id=generate_id(),
            slug=data.slug or generate_slug(data.en.title),
            status=data.status or ContentStatus.DRAFT,
            created_at=now,
            updated_at=now,
            created_by=created_by,
            en=data.en,
            vi=data.vi or LocalizedContent(),
            tech=data.tech or [],
            image=data.image,
            github=data.github,
            demo=data.demo,
            featured=bool(data.featured),
        )
        return await self.save_project(project)

    async def update_project(self, id: str, data: ProjectInput) -> Project:
        """
        Apply admin input to an existing project.

        Slug handling matches blog posts: a changed English title regenerates
        the slug unless one is submitted.

        Raises:
            NotFoundError: If the project does not exist
            ValidationError: If the English title or description is missing, or
                the slug belongs to another project
        """
        existing = await self.get_project(id)
        if existing is None:
            raise NotFoundError("Project not found")
        if not data.has_required_fields():
            raise ValidationError("Missing required English fields (title, description)")

        slug = data.slug or (
            generate_slug(data.en.title) if data.en.title != existing.en.title else existing.slug
        )
        changes = {k: v for k, v in data if k in data.model_fields_set and v is not None}
        changes.update(id=id, slug=slug, updated_at=utcnow())
        return await self.save_project(Project.model_validate({**existing.model_dump(), **changes}))

    # About page -------------------------------------------------------- #

    async def get_about_content(self) -> Optional[AboutContent]:
        data = await self.kv.get(ABOUT_KEY)
        if not isinstance(data, dict):
            return None
        return AboutContent.model_validate(data)

    async def save_about_content(self, data: AboutContentInput, updated_by: str) -> AboutContent:
        """
        Replace the about page.

        Args:
            data: Submitted fields
            updated_by: Email of the admin saving the page

        Returns:
            AboutContent: The stored document

        Raises:
            ValidationError: If the English name, role or intro is missing
        """
        if not data.has_required_fields():
            raise ValidationError("Missing required English fields (name, role, intro)")

        fields = {k: v for k, v in data if v is not None}
        content = AboutContent(updated_at=utcnow(), updated_by=updated_by, **fields)
        await self.kv.set(ABOUT_KEY, content.to_dict())
        logger.info("Saved about content", updated_by=updated_by)
        return content
