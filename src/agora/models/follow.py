# src/agora/models/follow.py
"""Directed follow edges between users."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agora.db.session import Base
from agora.db.time import utcnow

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .user import User


class FollowStatus(str, enum.Enum):
    """Lifecycle of a follow edge."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"


class Follow(Base):
    """Edge ``follower -> following``.

    The composite primary key allows one edge per ordered pair; ``(A, B)`` and
    ``(B, A)`` are independent rows.
    """

    __tablename__ = "follow"
    __table_args__ = (
        CheckConstraint("follower_id <> following_id", name="ck_follow_no_self"),
        Index("ix_follow_following_status", "following_id", "status"),
    )

    follower_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    following_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    status: Mapped[FollowStatus] = mapped_column(
        Enum(FollowStatus, name="follow_status"),
        nullable=False,
        default=FollowStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    follower: Mapped[User] = relationship(
        "User", foreign_keys=[follower_id], back_populates="following_edges"
    )
    following: Mapped[User] = relationship(
        "User", foreign_keys=[following_id], back_populates="follower_edges"
    )
