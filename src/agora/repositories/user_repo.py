"""Data access helpers for working with user accounts."""
from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from agora.models.user import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, user_id: str) -> User | None:
        """Return a user by identifier."""
        return self.session.get(User, user_id)

    def get_by_username(self, username: str) -> User | None:
        return self.session.execute(
            select(User).where(User.username == username)
        ).scalars().first()

    def get_by_email(self, email: str) -> User | None:
        return self.session.execute(
            select(User).where(User.email == email)
        ).scalars().first()

    def search_by_username(self, query: str, limit: int) -> list[User]:
        """Return users whose username contains ``query`` (case-insensitive)."""
        escaped = query.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        result = self.session.execute(
            select(User)
            .where(func.lower(User.username).like(pattern, escape="\\"))
            .order_by(User.username)
            .limit(limit)
        )
        return list(result.scalars())

    def create(self, **fields: object) -> User:
        """Stage a new user and flush so its identifier is assigned."""
        user = User(**fields)
        self.session.add(user)
        self.session.flush()
        return user

    def delete(self, user: User) -> None:
        self.session.delete(user)

    def adjust_reputation(self, user_id: str, delta: int) -> None:
        """Apply ``delta`` to the user's reputation in a single UPDATE statement."""
        if delta == 0:
            return
        self.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(reputation=User.reputation + delta)
            .execution_options(synchronize_session=False)
        )
