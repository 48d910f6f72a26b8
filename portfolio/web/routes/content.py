"""
Blog, project and about page content API.

Public lookups only ever return published records. The admin router manages
posts and projects regardless of status, and the about page.
"""
from typing import Literal

import structlog
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from portfolio.auth import require_admin_api
from portfolio.context import AppContext
from portfolio.errors import NotFoundError
from portfolio.models.content import AboutContentInput, BlogPostInput, ContentStatus, ProjectInput
from portfolio.models.session import SessionUser
from portfolio.web.dependencies import get_context

# Set up structured logger
logger = structlog.get_logger()

router = APIRouter(prefix="/api/content", tags=["content"])
admin_router = APIRouter(
    prefix="/api/admin/content",
    tags=["admin-content"],
    dependencies=[Depends(require_admin_api)],
)


def revalidate_headers(seconds: int) -> dict:
    """Let shared caches serve a response for ``seconds`` and refresh it in the background."""
    return {"Cache-Control": f"public, s-maxage={seconds}, stale-while-revalidate"}


@router.get("/blog/{slug}")
async def get_published_blog_post(slug: str, ctx: AppContext = Depends(get_context)):
    """
    A published blog post by slug.

    Missing and unpublished posts are indistinguishable: both are 404.
    """
    post = await ctx.content.get_blog_post_by_slug(slug)
    if post is None or not post.is_published:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Blog post not found"},
        )

    return JSONResponse(
        content=post.to_dict(),
        headers=revalidate_headers(ctx.settings.content.blog_revalidate_seconds),
    )


@router.get("/projects/{slug}")
async def get_published_project(slug: str, ctx: AppContext = Depends(get_context)):
    project = await ctx.content.get_project_by_slug(slug)
    if project is None or not project.is_published:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Project not found"},
        )

    return JSONResponse(
        content=project.to_dict(),
        headers=revalidate_headers(ctx.settings.content.blog_revalidate_seconds),
    )


@router.get("/about")
async def get_about(ctx: AppContext = Depends(get_context)):
    about = await ctx.content.get_about_content()
    if about is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Content not found"},
        )
    return about.to_dict()


@admin_router.get("/blog")
async def list_blog_posts(
    status_filter: Literal["all", "published", "draft"] = Query("all", alias="status"),
    ctx: AppContext = Depends(get_context),
):
    if status_filter == "published":
        posts = await ctx.content.get_published_blog_posts()
    else:
        posts = await ctx.content.get_all_blog_posts()
        if status_filter == "draft":
            posts = [p for p in posts if p.status == ContentStatus.DRAFT]
    return [post.to_dict() for post in posts]


@admin_router.post("/blog", status_code=201)
async def create_blog_post(
    body: BlogPostInput,
    user: SessionUser = Depends(require_admin_api),
    ctx: AppContext = Depends(get_context),
):
    post = await ctx.content.create_blog_post(body, created_by=user.email or "admin")
    return {"success": True, "post": post.to_dict()}


@admin_router.get("/blog/{post_id}")
async def get_blog_post(post_id: str, ctx: AppContext = Depends(get_context)):
    post = await ctx.content.get_blog_post(post_id)
    if post is None:
        raise NotFoundError("Blog post not found")
    return post.to_dict()


@admin_router.put("/blog/{post_id}")
async def update_blog_post(
    post_id: str,
    body: BlogPostInput,
    ctx: AppContext = Depends(get_context),
):
    post = await ctx.content.update_blog_post(post_id, body)
    return {"success": True, "post": post.to_dict()}


@admin_router.delete("/blog/{post_id}")
async def delete_blog_post(post_id: str, ctx: AppContext = Depends(get_context)):
    await ctx.content.delete_blog_post(post_id)
    return {"success": True}


@admin_router.get("/projects")
async def list_projects(
    status_filter: Literal["all", "published", "draft"] = Query("all", alias="status"),
    ctx: AppContext = Depends(get_context),
):
    if status_filter == "published":
        projects = await ctx.content.get_published_projects()
    else:
        projects = await ctx.content.get_all_projects()
        if status_filter == "draft":
            projects = [p for p in projects if p.status == ContentStatus.DRAFT]
    return [project.to_dict() for project in projects]


@admin_router.post("/projects", status_code=201)
async def create_project(
    body: ProjectInput,
    user: SessionUser = Depends(require_admin_api),
    ctx: AppContext = Depends(get_context),
):
    project = await ctx.content.create_project(body, created_by=user.email or "admin")
    return {"success": True, "project": project.to_dict()}


@admin_router.get("/projects/{project_id}")
async def get_project(project_id: str, ctx: AppContext = Depends(get_context)):
    project = await ctx.content.get_project(project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return project.to_dict()


@admin_router.put("/projects/{project_id}")
async def update_project(
    project_id: str,
    body: ProjectInput,
    ctx: AppContext = Depends(get_context),
):
    project = await ctx.content.update_project(project_id, body)
    return {"success": True, "project": project.to_dict()}


@admin_router.delete("/projects/{project_id}")
async def delete_project(project_id: str, ctx: AppContext = Depends(get_context)):
    await ctx.content.delete_project(project_id)
    return {"success": True}


@admin_router.get("/about")
async def get_about_for_admin(ctx: AppContext = Depends(get_context)):
    about = await ctx.content.get_about_content()
    if about is None:
        raise NotFoundError("Content not found")
    return about.to_dict()


@admin_router.put("/about")
async def update_about(
    body: AboutContentInput,
    user: SessionUser = Depends(require_admin_api),
    ctx: AppContext = Depends(get_context),
):
    about = await ctx.content.save_about_content(body, updated_by=user.email or "admin")
    return {"success": True, "content": about.to_dict()}
