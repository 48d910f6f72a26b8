"""
Admin vector store API: list, count and bulk-delete vectors by corpus.
"""
from typing import Optional

import structlog
from fastapi import APIRouter, Depends

from portfolio.auth import require_admin_api
from portfolio.context import AppContext
from portfolio.errors import ValidationError
from portfolio.models.vector import VectorType
from portfolio.web.dependencies import get_context

# Set up structured logger
logger = structlog.get_logger()

router = APIRouter(
    prefix="/api/admin/vectors",
    tags=["admin-vectors"],
    dependencies=[Depends(require_admin_api)],
)

ALL_TYPES = "all"


@router.get("")
async def list_vectors(type: Optional[str] = None, ctx: AppContext = Depends(get_context)):
    if type not in VectorType.values():
        raise ValidationError("Invalid type. Must be: website, document, or video")

    records = await ctx.vector_store.list_by_type(type)
    vectors = [{"id": r.id, "metadata": r.metadata} for r in records]
    return {"success": True, "type": type, "count": len(vectors), "vectors": vectors}


@router.delete("")
async def delete_vectors(
    type: Optional[str] = None,
    id: Optional[str] = None,
    ctx: AppContext = Depends(get_context),
):
    """
    Delete one vector by ID, every vector of a corpus, or everything.

    ``id`` takes precedence over ``type``.
    """
    if id:
        await ctx.vector_store.delete(id)
        logger.info("Deleted vector", vector_id=id)
        return {"success": True, "message": f"Deleted vector: {id}"}

    if type == ALL_TYPES:
        count = await ctx.vector_store.delete_all()
        logger.info("Deleted all vectors", count=count)
        return {"success": True, "message": "Deleted all vectors", "count": count}

    if type not in VectorType.values():
        raise ValidationError("Invalid type. Must be: website, document, video, or all")

    ids = [r.id for r in await ctx.vector_store.list_by_type(type)]
    if not ids:
        return {"success": True, "message": f"No vectors found for type: {type}", "count": 0}

    count = await ctx.vector_store.delete_many(ids)
    logger.info("Deleted vectors by type", vector_type=type, count=count)
    return {
        "success": True,
        "message": f"Deleted {count} vectors of type: {type}",
        "count": count,
    }


@router.get("/stats")
async def vector_stats(ctx: AppContext = Depends(get_context)):
    stats = await ctx.vector_store.type_stats()
    return {
        "success": True,
        "stats": stats.to_dict(),
        "details": await ctx.vector_store.describe(),
    }
