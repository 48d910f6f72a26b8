"""
HTTP middleware: security headers and same-origin checks for admin APIs.
"""
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Set up structured logger
logger = structlog.get_logger()

ADMIN_API_PREFIX = "/api/admin"

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}


def is_same_origin(origin: Optional[str], referer: Optional[str], host: Optional[str]) -> bool:
    """
    Check that a request was issued by a page of this site.

    Either the Origin or the Referer header must contain the Host header.
    """
    host = host or ""
    return bool((origin and host in origin) or (referer and host in referer))


def register_middleware(app: FastAPI, enforce_origin: bool) -> None:
    """
    Register the security middleware on the app.

    Args:
        app: FastAPI application
        enforce_origin: Reject cross-origin admin API calls (production only)
    """

    @app.middleware("http")
    async def security_middleware(request: Request, call_next):
        if enforce_origin and request.url.path.startswith(ADMIN_API_PREFIX):
            origin = request.headers.get("origin")
            referer = request.headers.get("referer")
            host = request.headers.get("host")

            if not is_same_origin(origin, referer, host):
                logger.warning(
                    "Invalid origin for admin API",
                    path=request.url.path,
                    origin=origin,
                    referer=referer,
                    host=host,
                )
                response = JSONResponse(
                    status_code=403,
                    content={"error": "Forbidden", "message": "Invalid request origin"},
                )
                response.headers.update(SECURITY_HEADERS)
                return response

        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response
