# src/agora/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from agora.models import PostVisibility


def _normalize_visibility(value: object) -> object:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class PostCreate(BaseModel):
    """Text fields of the post creation form."""

    description: str | None = Field(None, max_length=500)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    visibility: PostVisibility

    @field_validator("visibility", mode="before")
    @classmethod
    def normalize_visibility(cls, v: object) -> object:
        """Accept visibility in any letter case."""
        return _normalize_visibility(v)


class PostUpdate(BaseModel):
    """Text fields of the post update form."""

    description: str | None = Field(None, max_length=500)
    visibility: PostVisibility | None = None
    remove_photos: list[str] = Field(default_factory=list, max_length=3)

    @field_validator("visibility", mode="before")
    @classmethod
    def normalize_visibility(cls, v: object) -> object:
        """Accept visibility in any letter case."""
        return _normalize_visibility(v)


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    author_id: str
    author_username: str
    description: str | None
    latitude: float
    longitude: float
    visibility: PostVisibility
    reputation: int
    photos: list[str]
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="before")
    @classmethod
    def _flatten_orm(cls, data: object) -> object:
        if isinstance(data, dict):
            return data
        return {
            "id": data.id,
            "author_id": data.user_id,
            "author_username": data.author.username,
            "description": data.description,
            "latitude": data.latitude,
            "longitude": data.longitude,
            "visibility": data.visibility,
            "reputation": data.reputation,
            "photos": data.photo_urls,
            "created_at": data.created_at,
            "updated_at": data.updated_at,
        }

    model_config = ConfigDict(from_attributes=True)
