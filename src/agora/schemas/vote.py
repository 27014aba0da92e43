"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field

from agora.models import VoteType


class VoteResponse(BaseModel):
    """Vote state after an upvote, downvote or removal."""

    post_id: str
    vote: VoteType | None = Field(..., description="UP, DOWN or null when no vote remains")
    reputation: int = Field(..., description="Post reputation after the change")
