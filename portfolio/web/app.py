"""
FastAPI application for the portfolio admin.

This module assembles the admin pages, the admin and public JSON APIs, the
session middleware and the error handlers around an application context.
"""
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from portfolio import __version__
from portfolio.config import Settings, load_settings
from portfolio.context import AppContext
from portfolio.web.errors import register_error_handlers
from portfolio.web.middleware import register_middleware
from portfolio.web.routes import admin_api, admin_pages, content, health, vectors, videos

# Set up structured logger
logger = structlog.get_logger()


def create_app(settings: Optional[Settings] = None, context: Optional[AppContext] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Application settings, loaded from the environment when omitted
        context: Prebuilt application context; one is created from the
            settings when omitted

    Returns:
        FastAPI: Configured application
    """
    settings = settings or (context.settings if context else load_settings())
    context = context or AppContext(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting portfolio admin", environment=settings.environment.value)
        await context.initialize()
        try:
            yield
        finally:
            await context.shutdown()

    app = FastAPI(
        title="Portfolio Admin",
        description="Content, video library and chat analytics administration",
        version=__version__,
        lifespan=lifespan,
    )

    # Store settings and context in app state
    app.state.settings = settings
    app.state.context = context

    register_middleware(app, enforce_origin=settings.is_production)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.auth.secret_key.get_secret_value(),
        session_cookie=settings.auth.session_cookie,
        max_age=settings.auth.session_max_age_seconds,
        same_site="lax",
        https_only=settings.auth.https_only,
    )
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(admin_pages.router)
    app.include_router(admin_api.router)
    app.include_router(content.router)
    app.include_router(content.admin_router)
    app.include_router(videos.router)
    app.include_router(videos.admin_router)
    app.include_router(vectors.router)

    return app
