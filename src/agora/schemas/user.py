"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from agora.models import FollowStatus

USERNAME_PATTERN = r"^[A-Za-z0-9_.]+$"


class RegisterRequest(BaseModel):
    """Schema for account registration."""

    name: str = Field(..., min_length=2, description="Full name")
    username: str = Field(..., min_length=1, max_length=64, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=8, description="Plain-text password (hashed server-side)")


class LoginRequest(BaseModel):
    """Schema for login submissions."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UserSummary(BaseModel):
    """Minimal user card used in lists and search results."""

    id: str
    name: str
    username: str
    profile_picture: str | None = None

    model_config = ConfigDict(from_attributes=True)


class OwnProfileResponse(BaseModel):
    """Profile of the authenticated user."""

    id: str
    name: str
    email: str
    username: str
    profile_picture: str | None = None
    reputation: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    """Response returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(..., description="Token type (typically 'bearer')")
    user: UserSummary


class ProfileUpdateRequest(BaseModel):
    """Text fields accepted by the profile update form."""

    name: str | None = Field(None, min_length=2)
    username: str | None = Field(None, min_length=1, max_length=64, pattern=USERNAME_PATTERN)
    password: str | None = Field(None, min_length=8)


class PublicProfileResponse(BaseModel):
    """Another user's profile along with the caller's relationship to them."""

    id: str
    name: str
    username: str
    profile_picture: str | None = None
    reputation: int
    created_at: datetime
    followers_count: int
    followings_count: int
    follow_status: FollowStatus | None = Field(
        None, description="Status of the caller's edge towards this user"
    )
    follows_you: FollowStatus | None = Field(
        None, description="Status of this user's edge towards the caller"
    )
