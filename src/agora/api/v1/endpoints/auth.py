# src/agora/api/v1/endpoints/auth.py
"""Authentication endpoints for the Agora API."""

from fastapi import APIRouter, status

from agora.api.v1.dependencies import AuthServiceDep, BearerTokenDep
from agora.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    OwnProfileResponse,
    RegisterRequest,
    UserSummary,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=OwnProfileResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, auth: AuthServiceDep) -> OwnProfileResponse:
    """Create a new account. The password hash is never returned."""
    user = auth.register(
        name=payload.name,
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    return OwnProfileResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, auth: AuthServiceDep) -> LoginResponse:
    """Exchange email and password for a bearer token."""
    result = auth.login(email=payload.email, password=payload.password)
    return LoginResponse(
        access_token=result.token,
        token_type=result.token_type,
        user=UserSummary.model_validate(result.user),
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(token: BearerTokenDep, auth: AuthServiceDep) -> MessageResponse:
    """Revoke the bearer token used for this request."""
    return MessageResponse(message=auth.logout(token))
