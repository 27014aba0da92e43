"""Follow-related Pydantic schemas."""

from pydantic import BaseModel

from agora.models import FollowStatus


class FollowResponse(BaseModel):
    """Result of a follow-graph mutation."""

    username: str
    status: FollowStatus | None
    message: str
