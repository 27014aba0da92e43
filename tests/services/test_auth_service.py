# tests/services/test_auth_service.py
"""Tests for registration, login, logout and token helpers."""

from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from agora.core.errors import ConflictError, UnauthorizedError
from agora.core.security import (
    create_access_token,
    decode_access_token,
    token_seconds_remaining,
)
from agora.core.settings import settings
from agora.services.auth import AuthService
from tests.conftest import TEST_PASSWORD


@pytest.fixture()
def auth(db_session, token_blacklist):
    return AuthService(db_session, token_blacklist)


def test_register_hashes_password(auth) -> None:
    user = auth.register(
        name="Pedro Barbosa", username="pedzero", email="pedzero@example.com", password="12345678"
    )
    assert user.id
    assert user.password_hash != "12345678"
    assert user.reputation == 0


def test_register_duplicate_email_and_username(auth, test_user) -> None:
    with pytest.raises(ConflictError, match="Email is already in use"):
        auth.register(name="Other", username="other", email=test_user.email, password="12345678")
    with pytest.raises(ConflictError, match="Username already taken"):
        auth.register(
            name="Other", username=test_user.username, email="new@example.com", password="12345678"
        )


def test_login_returns_token_for_user(auth, test_user) -> None:
    result = auth.login(email=test_user.email, password=TEST_PASSWORD)
    assert result.token_type == "bearer"
    assert result.user.id == test_user.id
    assert decode_access_token(result.token)["sub"] == test_user.id


@pytest.mark.parametrize(("email", "password"), [("alice@example.com", "wrong"), ("nobody@example.com", TEST_PASSWORD)])
def test_login_invalid_credentials(auth, test_user, email, password) -> None:
    with pytest.raises(UnauthorizedError, match="Invalid credentials"):
        auth.login(email=email, password=password)


def test_logout_revokes_for_remaining_lifetime(auth, fake_redis, token_blacklist, test_user) -> None:
    token = create_access_token(test_user.id, test_user.email)

    assert auth.logout(token) == "Logged out successfully"

    assert token_blacklist.is_revoked(token)
    _, ttl = fake_redis.values[f"blacklist:{token}"]
    assert 0 < ttl <= settings.access_token_expire_minutes * 60


def test_decode_rejects_expired_and_tampered_tokens(test_user) -> None:
    expired = jwt.encode(
        {"sub": test_user.id, "exp": datetime.now(UTC) - timedelta(minutes=1)},
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(UnauthorizedError, match="Invalid or expired token"):
        decode_access_token(expired)
    with pytest.raises(UnauthorizedError):
        decode_access_token(create_access_token(test_user.id) + "x")


def test_token_seconds_remaining_has_floor() -> None:
    past = (datetime.now(UTC) - timedelta(hours=1)).timestamp()
    assert token_seconds_remaining({"exp": past}) == 1
