# src/agora/api/v1/endpoints/users.py
"""User profile, directory and follow-graph endpoints."""

from typing import Annotated

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from agora.api.v1.dependencies import (
    ContentServiceDep,
    CurrentUserDep,
    GraphServiceDep,
    OptionalUserDep,
    ProfileServiceDep,
    parse_form,
    read_upload,
)
from agora.schemas import (
    FollowResponse,
    MessageResponse,
    OwnProfileResponse,
    PostResponse,
    ProfileUpdateRequest,
    PublicProfileResponse,
    UserSummary,
)
from agora.services.social_graph import FollowResult

router = APIRouter(prefix="/users", tags=["users"])


def _follow_response(result: FollowResult) -> FollowResponse:
    return FollowResponse(username=result.username, status=result.status, message=result.message)


# --- own profile ------------------------------------------------------------------------


@router.get("/me", response_model=OwnProfileResponse)
async def get_me(current_user: CurrentUserDep, profiles: ProfileServiceDep) -> OwnProfileResponse:
    """Return the authenticated user's profile."""
    return OwnProfileResponse.model_validate(profiles.get_own_profile(current_user.id))


@router.patch("/me", response_model=OwnProfileResponse)
async def update_me(
    current_user: CurrentUserDep,
    profiles: ProfileServiceDep,
    name: Annotated[str | None, Form()] = None,
    username: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    profile_picture: Annotated[UploadFile | None, File()] = None,
) -> OwnProfileResponse:
    """Partially update the profile; fields left out are unchanged."""
    form = parse_form(ProfileUpdateRequest, name=name, username=username, password=password)
    picture = await read_upload(profile_picture) if profile_picture is not None else None
    user = profiles.update_own_profile(
        current_user.id,
        name=form.name,
        username=form.username,
        password=form.password,
        profile_picture=picture,
    )
    return OwnProfileResponse.model_validate(user)


@router.delete("/me", response_model=MessageResponse)
async def delete_me(current_user: CurrentUserDep, profiles: ProfileServiceDep) -> MessageResponse:
    """Delete the account along with its posts, votes, follow edges and stored photos."""
    return MessageResponse(message=profiles.delete_own_profile(current_user.id))


@router.get("/me/follow-requests", response_model=list[UserSummary])
async def list_follow_requests(
    current_user: CurrentUserDep,
    profiles: ProfileServiceDep,
) -> list[UserSummary]:
    users = profiles.get_pending_follow_requests(current_user.id)
    return [UserSummary.model_validate(user) for user in users]


# --- directory --------------------------------------------------------------------------


@router.get("/search", response_model=list[UserSummary])
async def search_users(
    profiles: ProfileServiceDep,
    username: Annotated[str | None, Query(max_length=64)] = None,
) -> list[UserSummary]:
    """Case-insensitive substring search on usernames."""
    return [UserSummary.model_validate(user) for user in profiles.search_users(username)]


@router.get("/{username}", response_model=PublicProfileResponse)
async def get_user(
    username: str,
    current_user: OptionalUserDep,
    profiles: ProfileServiceDep,
) -> PublicProfileResponse:
    profile = profiles.get_user_by_username(current_user.id if current_user else None, username)
    user = profile.user
    return PublicProfileResponse(
        id=user.id,
        name=user.name,
        username=user.username,
        profile_picture=user.profile_picture,
        reputation=user.reputation,
        created_at=user.created_at,
        followers_count=profile.followers_count,
        followings_count=profile.followings_count,
        follow_status=profile.follow_status,
        follows_you=profile.follows_you,
    )


@router.get("/{username}/posts", response_model=list[PostResponse])
async def get_user_posts(
    username: str,
    current_user: OptionalUserDep,
    content: ContentServiceDep,
) -> list[PostResponse]:
    """List a user's posts; PRIVATE ones only for the owner and accepted followers."""
    posts = content.get_user_posts(current_user.id if current_user else None, username)
    return [PostResponse.model_validate(post) for post in posts]


@router.get("/{username}/followers", response_model=list[UserSummary])
async def get_followers(username: str, profiles: ProfileServiceDep) -> list[UserSummary]:
    return [UserSummary.model_validate(user) for user in profiles.get_followers(username)]


@router.get("/{username}/followings", response_model=list[UserSummary])
async def get_followings(username: str, profiles: ProfileServiceDep) -> list[UserSummary]:
    return [UserSummary.model_validate(user) for user in profiles.get_followings(username)]


# --- follow graph -----------------------------------------------------------------------


@router.post(
    "/{username}/follow",
    response_model=FollowResponse,
    status_code=status.HTTP_201_CREATED,
)
async def follow_user(
    username: str,
    current_user: CurrentUserDep,
    graph: GraphServiceDep,
) -> FollowResponse:
    """Send a follow request; it stays PENDING until the target accepts it."""
    return _follow_response(graph.request_follow(current_user.id, username))


@router.delete("/{username}/unfollow", response_model=FollowResponse)
async def unfollow_user(
    username: str,
    current_user: CurrentUserDep,
    graph: GraphServiceDep,
) -> FollowResponse:
    """Unfollow a user or cancel a pending request."""
    return _follow_response(graph.unfollow(current_user.id, username))


@router.post("/{username}/follow-requests/accept", response_model=FollowResponse)
async def accept_follow_request(
    username: str,
    current_user: CurrentUserDep,
    graph: GraphServiceDep,
) -> FollowResponse:
    return _follow_response(graph.accept_follow(current_user.id, username))


@router.delete("/{username}/follow-requests/reject", response_model=FollowResponse)
async def reject_follow_request(
    username: str,
    current_user: CurrentUserDep,
    graph: GraphServiceDep,
) -> FollowResponse:
    return _follow_response(graph.reject_follow(current_user.id, username))


@router.delete("/{username}/followers", response_model=FollowResponse)
async def remove_follower(
    username: str,
    current_user: CurrentUserDep,
    graph: GraphServiceDep,
) -> FollowResponse:
    """Remove ``username`` from the authenticated user's followers."""
    return _follow_response(graph.remove_follower(current_user.id, username))
