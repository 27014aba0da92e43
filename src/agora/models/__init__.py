# src/agora/models/__init__.py
"""SQLAlchemy models for the Agora application."""

from .follow import Follow, FollowStatus
from .post import Post, PostPhoto, PostVisibility
from .user import User
from .vote import PostVote, VoteType

__all__ = [
    "Follow", "FollowStatus",
    "Post", "PostPhoto", "PostVisibility",
    "User",
    "PostVote", "VoteType",
]
