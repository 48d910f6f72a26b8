import pytest

from portfolio.auth import authenticate, hash_password, verify_password
from portfolio.config import AuthConfig
from portfolio.models.session import ADMIN_ROLE, SessionUser


@pytest.fixture(scope="module")
def auth_config():
    return AuthConfig(
        admin_email="Admin@Example.com",
        admin_name="Site Owner",
        admin_password_hash=hash_password("correct horse"),
    )


def test_hash_and_verify_password():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_rejects_malformed_hash():
    assert not verify_password("anything", "not-a-bcrypt-hash")


def test_authenticate_returns_admin_user(auth_config):
    user = authenticate(" admin@example.com ", "correct horse", auth_config)
    assert user is not None
    assert user.role == ADMIN_ROLE
    assert user.is_admin
    assert user.name == "Site Owner"
    assert user.email == "Admin@Example.com"


@pytest.mark.parametrize("email,password", [
    ("admin@example.com", "wrong"),
    ("someone@example.com", "correct horse"),
])
def test_authenticate_rejects_bad_credentials(auth_config, email, password):
    assert authenticate(email, password, auth_config) is None


def test_authenticate_disabled_without_hash():
    assert authenticate("admin@example.com", "anything", AuthConfig()) is None


def test_session_user_roles():
    assert not SessionUser(id="1", name="Viewer", email="v@example.com").is_admin
    assert SessionUser(id="1", name="Admin", email="a@example.com", role="admin").is_admin
