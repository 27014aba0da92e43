# src/agora/models/post.py
"""SQLAlchemy models for posts and their photos."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agora.db.session import Base
from agora.db.time import utcnow

from .user import new_id

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .user import User
    from .vote import PostVote


class PostVisibility(str, enum.Enum):
    """Who may read a post besides its owner."""

    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"  # owner and accepted followers only


class Post(Base):
    """Geotagged post carrying one to three photos."""

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_user_created", "user_id", "created_at"),
        Index("ix_post_visibility_created", "visibility", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    visibility: Mapped[PostVisibility] = mapped_column(
        Enum(PostVisibility, name="post_visibility"),
        nullable=False,
        default=PostVisibility.PUBLIC,
    )
    # Changed only by vote transitions.
    reputation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User", back_populates="posts")
    photos: Mapped[list[PostPhoto]] = relationship(
        "PostPhoto",
        back_populates="post",
        order_by="PostPhoto.position",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    votes: Mapped[list[PostVote]] = relationship(
        "PostVote",
        back_populates="post",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def photo_urls(self) -> list[str]:
        """Return photo URLs in display order."""
        return [photo.url for photo in self.photos]


class PostPhoto(Base):
    """A stored photo attached to a post; ``position`` is its display order."""

    __tablename__ = "post_photo"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url: Mapped[str] = mapped_column(Text, nullable=False)
    object_key: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    post: Mapped[Post] = relationship("Post", back_populates="photos")
