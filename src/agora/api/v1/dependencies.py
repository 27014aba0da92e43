"""Shared API dependencies for authentication and service construction."""

from typing import Annotated, TypeVar

from fastapi import Depends, Request, UploadFile
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from agora.core.errors import BadRequestError, UnauthorizedError
from agora.core.security import decode_access_token
from agora.db.session import get_db
from agora.models import User
from agora.repositories import UserRepository
from agora.services import (
    AuthService,
    ContentService,
    ObjectStore,
    PhotoUpload,
    ProfileService,
    SocialGraphService,
    TokenBlacklist,
    VotingService,
)

FormModelT = TypeVar("FormModelT", bound=BaseModel)

# auto_error=False so a missing header surfaces as our own UnauthorizedError
bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_object_store(request: Request) -> ObjectStore:
    """Return the object store built at application startup."""
    return request.app.state.object_store


def get_token_blacklist(request: Request) -> TokenBlacklist:
    """Return the revoked-token list built at application startup."""
    return request.app.state.token_blacklist


ObjectStoreDep = Annotated[ObjectStore, Depends(get_object_store)]
TokenBlacklistDep = Annotated[TokenBlacklist, Depends(get_token_blacklist)]


def get_bearer_token(credentials: CredentialsDep) -> str:
    """Return the raw bearer token or fail with 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Missing or invalid authorization header")
    return credentials.credentials


BearerTokenDep = Annotated[str, Depends(get_bearer_token)]


def _authenticate(token: str, db: Session, blacklist: TokenBlacklist) -> User:
    if blacklist.is_revoked(token):
        raise UnauthorizedError("Token revoked")
    payload = decode_access_token(token)
    user = UserRepository(db).get_by_id(payload["sub"])
    if user is None:
        raise UnauthorizedError("User not found")
    return user


def get_current_user(token: BearerTokenDep, db: SessionDep, blacklist: TokenBlacklistDep) -> User:
    """Get the current authenticated user from the JWT bearer token.

    Raises:
        UnauthorizedError: If the header is missing, the token is revoked or
            invalid, or its user no longer exists.
    """
    return _authenticate(token, db, blacklist)


def get_optional_user(
    credentials: CredentialsDep,
    db: SessionDep,
    blacklist: TokenBlacklistDep,
) -> User | None:
    """Like ``get_current_user`` but returns None when no token is sent."""
    if credentials is None:
        return None
    return _authenticate(credentials.credentials, db, blacklist)


CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def get_graph_service(db: SessionDep) -> SocialGraphService:
    return SocialGraphService(db)


def get_content_service(db: SessionDep, store: ObjectStoreDep) -> ContentService:
    return ContentService(db, store)


def get_voting_service(db: SessionDep) -> VotingService:
    return VotingService(db)


def get_profile_service(db: SessionDep, store: ObjectStoreDep) -> ProfileService:
    return ProfileService(db, store)


def get_auth_service(db: SessionDep, blacklist: TokenBlacklistDep) -> AuthService:
    return AuthService(db, blacklist)


GraphServiceDep = Annotated[SocialGraphService, Depends(get_graph_service)]
ContentServiceDep = Annotated[ContentService, Depends(get_content_service)]
VotingServiceDep = Annotated[VotingService, Depends(get_voting_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


async def read_upload(upload: UploadFile) -> PhotoUpload:
    """Read an uploaded file into a framework-neutral ``PhotoUpload``."""
    data = await upload.read()
    return PhotoUpload(
        filename=upload.filename or "upload",
        content_type=upload.content_type or "application/octet-stream",
        data=data,
    )


def parse_form(model: type[FormModelT], **fields: object) -> FormModelT:
    """Validate multipart form fields with a Pydantic model.

    Raises:
        BadRequestError: With the first validation message when a field is invalid.
    """
    try:
        return model(**{key: value for key, value in fields.items() if value is not None})
    except ValidationError as err:
        first = err.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = f"{location}: {first['msg']}" if location else first["msg"]
        raise BadRequestError(detail) from err
