# src/agora/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import MessageResponse
from .follow import FollowResponse
from .post import PostCreate, PostResponse, PostUpdate
from .user import (
    LoginRequest,
    LoginResponse,
    OwnProfileResponse,
    ProfileUpdateRequest,
    PublicProfileResponse,
    RegisterRequest,
    UserSummary,
)
from .vote import VoteResponse

__all__ = [
    "MessageResponse",
    "FollowResponse",
    "PostCreate", "PostResponse", "PostUpdate",
    "LoginRequest", "LoginResponse", "OwnProfileResponse", "ProfileUpdateRequest",
    "PublicProfileResponse", "RegisterRequest", "UserSummary",
    "VoteResponse",
]
