"""
Liveness endpoint.
"""
from fastapi import APIRouter, Request

from portfolio import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Returns 200 while the process is up."""
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": __version__,
        "environment": settings.environment.value,
    }
