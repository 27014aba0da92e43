# src/agora/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Agora API."""

from fastapi import APIRouter, status

from agora.api.v1.dependencies import CurrentUserDep, VotingServiceDep
from agora.schemas import VoteResponse
from agora.services.voting import VoteOutcome

router = APIRouter(prefix="/posts", tags=["votes"])


def _vote_response(outcome: VoteOutcome) -> VoteResponse:
    return VoteResponse(post_id=outcome.post_id, vote=outcome.vote, reputation=outcome.reputation)


@router.post("/{post_id}/upvote", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
async def upvote_post(
    post_id: str,
    current_user: CurrentUserDep,
    voting: VotingServiceDep,
) -> VoteResponse:
    """Upvote a post, switching an existing downvote if there is one."""
    return _vote_response(voting.upvote(current_user.id, post_id))


@router.post(
    "/{post_id}/downvote",
    response_model=VoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def downvote_post(
    post_id: str,
    current_user: CurrentUserDep,
    voting: VotingServiceDep,
) -> VoteResponse:
    """Downvote a post, switching an existing upvote if there is one."""
    return _vote_response(voting.downvote(current_user.id, post_id))


@router.delete("/{post_id}/vote", response_model=VoteResponse)
async def remove_vote(
    post_id: str,
    current_user: CurrentUserDep,
    voting: VotingServiceDep,
) -> VoteResponse:
    return _vote_response(voting.remove_vote(current_user.id, post_id))


@router.get("/{post_id}/my-vote", response_model=VoteResponse)
async def get_my_vote(
    post_id: str,
    current_user: CurrentUserDep,
    voting: VotingServiceDep,
) -> VoteResponse:
    """Return the caller's current vote on a post they can see."""
    post = voting.get_visible_post(current_user.id, post_id)
    return VoteResponse(
        post_id=post.id,
        vote=voting.current_vote(current_user.id, post_id),
        reputation=post.reputation,
    )
