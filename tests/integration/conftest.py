"""
Shared fixtures for the HTTP integration tests.

Each test gets a fresh application with in-memory storage and dummy
embeddings; the lifespan runs inside ``TestClient``'s context manager.
"""
import json
from base64 import b64encode

import pytest
from fastapi.testclient import TestClient
from itsdangerous import TimestampSigner

from portfolio.auth import hash_password
from portfolio.config import Settings
from portfolio.web import create_app

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct horse battery staple"


@pytest.fixture(scope="session")
def password_hash():
    return hash_password(ADMIN_PASSWORD)


@pytest.fixture
def settings(password_hash):
    return Settings(
        _env_file=None,
        auth={
            "admin_email": ADMIN_EMAIL,
            "admin_name": "Admin",
            "admin_password_hash": password_hash,
            "secret_key": "test-secret",
        },
        vector_db={"dimension": 8},
        embedding={"dimensions": 8, "chunk_words": 100, "chunk_overlap": 10},
        youtube={"api_key": "test-key", "retry_attempts": 1},
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    response = client.post(
        "/admin/login",
        data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client


@pytest.fixture
def context(app):
    return app.state.context


def session_cookie(settings: Settings, session: dict) -> str:
    """Sign a session payload the way the session middleware does."""
    signer = TimestampSigner(settings.auth.secret_key.get_secret_value())
    data = b64encode(json.dumps(session).encode("utf-8"))
    return signer.sign(data).decode("utf-8")


@pytest.fixture
def viewer_headers(settings):
    """Cookie header for a signed-in user without the admin role."""
    viewer = {"user": {"id": "v1", "name": "Viewer", "email": "viewer@example.com", "role": "viewer"}}
    return {"Cookie": f"{settings.auth.session_cookie}={session_cookie(settings, viewer)}"}


@pytest.fixture
def run(client):
    """Run a coroutine function on the application's event loop."""
    return client.portal.call
