# src/agora/api/v1/endpoints/posts.py
"""Post-related endpoints for the Agora API."""

from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from agora.api.v1.dependencies import (
    ContentServiceDep,
    CurrentUserDep,
    OptionalUserDep,
    parse_form,
    read_upload,
)
from agora.schemas import MessageResponse, PostCreate, PostResponse, PostUpdate

router = APIRouter(prefix="/posts", tags=["posts"])

PhotosField = Annotated[list[UploadFile] | None, File(description="Image files, in display order")]


@router.get("/feed", response_model=list[PostResponse])
async def get_feed(
    current_user: OptionalUserDep,
    content: ContentServiceDep,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int | None, Query()] = None,
) -> list[PostResponse]:
    """Return one page of the feed.

    Authenticated callers get posts from the people they follow first, then
    public posts from everyone else. Anonymous callers get the newest public
    posts and ``limit`` is ignored.
    """
    if current_user is None:
        posts = content.get_public_feed(page)
    else:
        posts = content.get_feed(current_user.id, page=page, limit=limit)
    return [PostResponse.model_validate(post) for post in posts]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    current_user: OptionalUserDep,
    content: ContentServiceDep,
) -> PostResponse:
    """Fetch a single post if the caller is allowed to see it."""
    post = content.get_post(current_user.id if current_user else None, post_id)
    return PostResponse.model_validate(post)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    current_user: CurrentUserDep,
    content: ContentServiceDep,
    latitude: Annotated[str | None, Form()] = None,
    longitude: Annotated[str | None, Form()] = None,
    visibility: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
    photos: PhotosField = None,
) -> PostResponse:
    """Create a post with one to three photos."""
    form = parse_form(
        PostCreate,
        latitude=latitude,
        longitude=longitude,
        visibility=visibility,
        description=description,
    )
    uploads = [await read_upload(photo) for photo in photos or []]
    post = content.create_post(
        current_user.id,
        latitude=form.latitude,
        longitude=form.longitude,
        visibility=form.visibility,
        description=form.description,
        photos=uploads,
    )
    return PostResponse.model_validate(post)


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    current_user: CurrentUserDep,
    content: ContentServiceDep,
    description: Annotated[str | None, Form()] = None,
    visibility: Annotated[str | None, Form()] = None,
    remove_photos: Annotated[list[str] | None, Form(description="Photo URLs to remove")] = None,
    photos: PhotosField = None,
) -> PostResponse:
    """Edit the caller's own post: text fields, removed photos and appended photos."""
    form = parse_form(
        PostUpdate,
        description=description,
        visibility=visibility,
        remove_photos=remove_photos,
    )
    uploads = [await read_upload(photo) for photo in photos or []]
    post = content.update_post(
        current_user.id,
        post_id,
        description=form.description,
        visibility=form.visibility,
        remove_photo_urls=form.remove_photos,
        add_photos=uploads,
    )
    return PostResponse.model_validate(post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    current_user: CurrentUserDep,
    content: ContentServiceDep,
) -> MessageResponse:
    content.delete_post(current_user.id, post_id)
    return MessageResponse(message="Post deleted successfully")
