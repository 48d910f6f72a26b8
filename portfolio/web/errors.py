"""
Exception handlers mapping application errors to HTTP responses.
"""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse

from portfolio.errors import LoginRequired, PortfolioError

# Set up structured logger
logger = structlog.get_logger()


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(LoginRequired)
    async def login_required_handler(request: Request, exc: LoginRequired):
        return RedirectResponse(exc.login_path, status_code=status.HTTP_303_SEE_OTHER)

    @app.exception_handler(PortfolioError)
    async def portfolio_error_handler(request: Request, exc: PortfolioError):
        """Render domain errors as ``{"error": message}``."""
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            "Request failed",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=exc.message,
            status_code=exc.http_status,
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.info("Invalid request data", path=request.url.path, errors=len(errors))
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request data")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": f"{field}: {message}" if field else message},
        )
