"""Registration, login and logout."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from agora.core.errors import ConflictError, UnauthorizedError
from agora.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    token_seconds_remaining,
    verify_password,
)
from agora.db.transaction import atomic
from agora.models import User
from agora.repositories import UserRepository
from agora.services.token_blacklist import TokenBlacklist

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User
    token_type: str = "bearer"


class AuthService:
    """Credential checks and token lifecycle."""

    def __init__(self, db: Session, blacklist: TokenBlacklist | None = None) -> None:
        self.db = db
        self.blacklist = blacklist
        self.users = UserRepository(db)

    def register(self, *, name: str, username: str, email: str, password: str) -> User:
        """Create an account.

        Raises:
            ConflictError: If the email or username is already registered.
        """
        if self.users.get_by_email(email) is not None:
            raise ConflictError("Email is already in use")
        if self.users.get_by_username(username) is not None:
            raise ConflictError("Username already taken")

        with atomic(self.db, conflict_detail="Email or username already in use"):
            user = self.users.create(
                name=name,
                username=username,
                email=email,
                password_hash=hash_password(password),
            )
        logger.info("Registered user %s (@%s)", user.id, username)
        return user

    def login(self, *, email: str, password: str) -> LoginResult:
        user = self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise UnauthorizedError("Invalid credentials")
        token = create_access_token(user.id, user.email)
        return LoginResult(token=token, user=user)

    def logout(self, token: str) -> str:
        """Revoke ``token`` for the rest of its lifetime."""
        if self.blacklist is None:
            raise RuntimeError("Logout requires a token blacklist")
        payload = decode_access_token(token)
        self.blacklist.revoke(token, token_seconds_remaining(payload))
        logger.info("Token revoked for user %s", payload.get("sub"))
        return "Logged out successfully"
