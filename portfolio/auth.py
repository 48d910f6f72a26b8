"""
Admin authentication and session helpers.

There is a single admin account configured through ``AuthConfig``. A
successful login stores a ``SessionUser`` in the signed session cookie; admin
pages and APIs check its role on every request.
"""
from typing import Optional

import bcrypt
import structlog
from fastapi import Request
from prometheus_client import Counter
from pydantic import ValidationError as PydanticValidationError

from portfolio.config import AuthConfig
from portfolio.errors import LoginRequired, UnauthorizedError
from portfolio.models.session import ADMIN_ROLE, SessionUser

# Set up structured logger
logger = structlog.get_logger()

# Define metrics
LOGIN_ATTEMPTS_TOTAL = Counter('portfolio_login_attempts_total', 'Admin login attempts', ['outcome'])

SESSION_USER_KEY = "user"


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Args:
        password: Plain-text password

    Returns:
        str: bcrypt hash suitable for ``AUTH__ADMIN_PASSWORD_HASH``
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a bcrypt hash. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def authenticate(email: str, password: str, config: AuthConfig) -> Optional[SessionUser]:
    """
    Verify admin credentials.

    Args:
        email: Submitted email address
        password: Submitted password
        config: Authentication configuration

    Returns:
        Optional[SessionUser]: The admin user, or None if the credentials are wrong
    """
    if not config.admin_password_hash:
        logger.warning("Login attempted but no admin password hash is configured")
        LOGIN_ATTEMPTS_TOTAL.labels(outcome="disabled").inc()
        return None

    email_matches = email.strip().lower() == config.admin_email.strip().lower()
    # Run bcrypt even when the email is wrong
    password_matches = verify_password(password, config.admin_password_hash.get_secret_value())

    if not (email_matches and password_matches):
        logger.info("Admin login failed", email=email)
        LOGIN_ATTEMPTS_TOTAL.labels(outcome="failure").inc()
        return None

    LOGIN_ATTEMPTS_TOTAL.labels(outcome="success").inc()
    logger.info("Admin logged in", email=config.admin_email)
    return SessionUser(
        id=config.admin_email,
        name=config.admin_name,
        email=config.admin_email,
        role=ADMIN_ROLE,
    )


def get_session_user(request: Request) -> Optional[SessionUser]:
    """The user stored in the request's session, if any."""
    data = request.session.get(SESSION_USER_KEY)
    if not isinstance(data, dict):
        return None
    try:
        return SessionUser.model_validate(data)
    except PydanticValidationError:
        logger.warning("Discarding malformed session user")
        return None


def is_admin(user: Optional[SessionUser]) -> bool:
    return user is not None and user.is_admin


def login(request: Request, user: SessionUser) -> None:
    request.session[SESSION_USER_KEY] = user.model_dump()


def logout(request: Request) -> None:
    request.session.clear()


def require_admin_page(request: Request) -> SessionUser:
    """
    Dependency for admin pages.

    Raises:
        LoginRequired: If the session does not belong to an admin
    """
    user = get_session_user(request)
    if not is_admin(user):
        raise LoginRequired()
    return user


def require_admin_api(request: Request) -> SessionUser:
    """
    Dependency for admin JSON APIs.

    Raises:
        UnauthorizedError: If the session does not belong to an admin
    """
    user = get_session_user(request)
    if not is_admin(user):
        raise UnauthorizedError()
    return user
