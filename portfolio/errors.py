"""
Exception hierarchy for the portfolio admin application.

Every error carries the HTTP status it maps to. The web layer renders them as
``{"error": message}`` bodies so API clients see one error shape.
"""
from typing import Any, Dict


class PortfolioError(Exception):
    """Base exception for all application errors."""

    http_status: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> Dict[str, Any]:
        """Convert to the JSON error envelope."""
        return {"error": self.message}


class ValidationError(PortfolioError):
    """Request data failed a business rule."""
    http_status = 400


class NotFoundError(PortfolioError):
    """The requested record does not exist."""
    http_status = 404


class ConfigurationError(PortfolioError):
    """A required setting (API key, index name...) is missing."""
    http_status = 500


class StorageError(PortfolioError):
    """The key-value backend failed."""
    http_status = 500


class ExternalServiceError(PortfolioError):
    """An upstream API (YouTube, OpenAI) failed."""
    http_status = 502


class UnauthorizedError(PortfolioError):
    """An admin API was called without an admin session."""
    http_status = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class LoginRequired(Exception):
    """An admin page was requested without an admin session."""

    def __init__(self, login_path: str = "/admin/login"):
        super().__init__(login_path)
        self.login_path = login_path
