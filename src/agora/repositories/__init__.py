"""Data access layer over the SQLAlchemy session."""

from .follow_repo import FollowRepository
from .post_repo import PostRepository
from .user_repo import UserRepository
from .vote_repo import VoteRepository

__all__ = ["FollowRepository", "PostRepository", "UserRepository", "VoteRepository"]
