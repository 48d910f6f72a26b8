"""
Video library API.
"""
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, Query

from portfolio.auth import require_admin_api
from portfolio.context import AppContext
from portfolio.errors import NotFoundError, ValidationError
from portfolio.models.base import CamelModel
from portfolio.models.session import SessionUser
from portfolio.models.video import Video, VideoCategory
from portfolio.web.dependencies import get_context

# Set up structured logger
logger = structlog.get_logger()

router = APIRouter(prefix="/api/videos", tags=["videos"])
admin_router = APIRouter(
    prefix="/api/admin/videos",
    tags=["admin-videos"],
    dependencies=[Depends(require_admin_api)],
)


class VideoImportRequest(CamelModel):
    urls: Optional[List[str]] = None
    category: Optional[str] = None
    generate_embeddings: bool = False


class VideoUpdateRequest(CamelModel):
    category: Optional[str] = None
    generate_embeddings: bool = False


def parse_category(value: str) -> VideoCategory:
    try:
        return VideoCategory.from_string(value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


async def _list_videos(
    ctx: AppContext,
    category: Optional[str],
    limit: int,
    offset: int,
) -> List[Video]:
    # A category listing is unpaginated: limit and offset only apply to the
    # full library, and pagination.total stays the library-wide count
    if category:
        return await ctx.videos.get_videos_by_category(parse_category(category))
    return await ctx.videos.get_all_videos(limit, offset)


@router.get("")
async def list_public_videos(
    category: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    stats: bool = False,
    ctx: AppContext = Depends(get_context),
):
    """Published video library without admin-only fields."""
    video_stats = await ctx.videos.get_video_stats()
    if stats:
        return {"success": True, **video_stats.to_dict()}

    videos = await _list_videos(ctx, category, limit, offset)
    return {
        "success": True,
        "videos": [video.to_public_dict() for video in videos],
        "stats": video_stats.to_dict(),
        "pagination": {"limit": limit, "offset": offset, "total": video_stats.total},
    }


@admin_router.get("")
async def list_videos(
    category: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    ctx: AppContext = Depends(get_context),
):
    videos = await _list_videos(ctx, category, limit, offset)
    video_stats = await ctx.videos.get_video_stats()
    return {
        "success": True,
        "videos": [video.to_dict() for video in videos],
        "stats": video_stats.to_dict(),
        "pagination": {"limit": limit, "offset": offset, "total": video_stats.total},
    }


@admin_router.post("/import")
async def import_videos(
    body: VideoImportRequest,
    user: SessionUser = Depends(require_admin_api),
    ctx: AppContext = Depends(get_context),
):
    """
    Import YouTube videos into a category.

    With ``generateEmbeddings`` each imported video is also indexed into the
    vector store.
    """
    if not body.urls:
        raise ValidationError("URLs array is required")
    if not body.category:
        raise ValidationError("Category is required")

    category = parse_category(body.category)
    result = await ctx.videos.batch_import_videos(body.urls, category, user.email or "admin")

    if body.generate_embeddings:
        for video_id in result.imported_ids:
            video = await ctx.videos.get_video(video_id)
            if video:
                await ctx.videos.index_video_embeddings(video)

    return {"success": True, "result": result.to_dict()}


@admin_router.get("/{video_id}")
async def get_video(video_id: str, ctx: AppContext = Depends(get_context)):
    video = await ctx.videos.get_video(video_id)
    if video is None:
        raise NotFoundError("Video not found")
    return {"success": True, "video": video.to_dict()}


@admin_router.patch("/{video_id}")
async def update_video(
    video_id: str,
    body: VideoUpdateRequest,
    ctx: AppContext = Depends(get_context),
):
    video = await ctx.videos.get_video(video_id)
    if video is None:
        raise NotFoundError("Video not found")

    if body.category:
        video = await ctx.videos.update_video_category(video_id, parse_category(body.category))

    if body.generate_embeddings:
        await ctx.videos.index_video_embeddings(video)

    return {"success": True, "video": video.to_dict()}


@admin_router.delete("/{video_id}")
async def delete_video(video_id: str, ctx: AppContext = Depends(get_context)):
    await ctx.videos.delete_video(video_id)
    return {"success": True}
