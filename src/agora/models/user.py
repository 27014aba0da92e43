# src/agora/models/user.py
"""SQLAlchemy model for user accounts."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agora.db.session import Base
from agora.db.time import utcnow

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .follow import Follow
    from .post import Post
    from .vote import PostVote


def new_id() -> str:
    """Return a fresh opaque identifier."""
    return str(uuid.uuid4())


class User(Base):
    """Registered account; owns posts, votes and both ends of follow edges."""

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    profile_picture: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Object-store key backing profile_picture, needed to delete the object later.
    profile_picture_key: Mapped[str | None] = mapped_column(Text, nullable=True)
    reputation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    posts: Mapped[list[Post]] = relationship(
        "Post",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    votes: Mapped[list[PostVote]] = relationship(
        "PostVote",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    # Edges where this user is the follower.
    following_edges: Mapped[list[Follow]] = relationship(
        "Follow",
        foreign_keys="Follow.follower_id",
        back_populates="follower",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    # Edges where this user is being followed.
    follower_edges: Mapped[list[Follow]] = relationship(
        "Follow",
        foreign_keys="Follow.following_id",
        back_populates="following",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
