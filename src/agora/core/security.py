"""Password hashing and access-token helpers."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from agora.core.errors import UnauthorizedError
from agora.core.settings import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return a bcrypt hash of the provided password."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches the stored hash."""
    return pwd_context.verify(password, password_hash)


def create_access_token(user_id: str, email: str | None = None) -> str:
    """Create a signed JWT identifying ``user_id``."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode: dict[str, Any] = {"sub": user_id, "exp": expire}
    if email is not None:
        to_encode["email"] = email
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT, returning its claims.

    Raises:
        UnauthorizedError: If the token is malformed, expired or has no subject.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise UnauthorizedError("Invalid or expired token") from err
    if not payload.get("sub"):
        raise UnauthorizedError("Invalid or expired token")
    return payload


def token_seconds_remaining(payload: dict[str, Any]) -> int:
    """Return how many seconds the decoded token stays valid (at least 1)."""
    exp = payload.get("exp")
    if exp is None:
        return settings.access_token_expire_minutes * 60
    remaining = int(exp - datetime.now(UTC).timestamp())
    return max(remaining, 1)
