"""One vote per (user, post), and the reputation ledger it drives.

Each vote mutation commits together with the post's reputation change and,
when the voter is not the author, the author's reputation change.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from agora.core.errors import AppError, ConflictError, NotFoundError, UnauthorizedError
from agora.db.transaction import atomic
from agora.models import Post, VoteType
from agora.repositories import PostRepository, UserRepository, VoteRepository
from agora.services.social_graph import SocialGraphService

logger = logging.getLogger(__name__)

STALE_VOTE_DETAIL = "Vote changed by another request, try again"


class VoteAction(str, enum.Enum):
    UPVOTE = "upvote"
    DOWNVOTE = "downvote"
    REMOVE = "remove"


@dataclass(frozen=True)
class VoteTransition:
    """Deltas applied when moving from one vote state to ``result``."""

    post_delta: int
    author_delta: int
    result: VoteType | None


# (current vote, action) -> transition
VOTE_TRANSITIONS: dict[tuple[VoteType | None, VoteAction], VoteTransition] = {
    (None, VoteAction.UPVOTE): VoteTransition(+1, +1, VoteType.UP),
    (None, VoteAction.DOWNVOTE): VoteTransition(-1, 0, VoteType.DOWN),
    (VoteType.DOWN, VoteAction.UPVOTE): VoteTransition(+2, +1, VoteType.UP),
    (VoteType.UP, VoteAction.DOWNVOTE): VoteTransition(-2, -1, VoteType.DOWN),
    (VoteType.UP, VoteAction.REMOVE): VoteTransition(-1, -1, None),
    (VoteType.DOWN, VoteAction.REMOVE): VoteTransition(+1, 0, None),
}

# (current vote, action) -> rejection
VOTE_REJECTIONS: dict[tuple[VoteType | None, VoteAction], tuple[type[AppError], str]] = {
    (VoteType.UP, VoteAction.UPVOTE): (ConflictError, "Post already upvoted"),
    (VoteType.DOWN, VoteAction.DOWNVOTE): (ConflictError, "Post already downvoted"),
    (None, VoteAction.REMOVE): (NotFoundError, "Vote not found"),
}


def resolve_transition(current: VoteType | None, action: VoteAction) -> VoteTransition:
    """Look up the transition for ``(current, action)`` or raise its rejection."""
    rejection = VOTE_REJECTIONS.get((current, action))
    if rejection is not None:
        error_cls, detail = rejection
        raise error_cls(detail)
    return VOTE_TRANSITIONS[(current, action)]


@dataclass(frozen=True)
class VoteOutcome:
    """Vote state and post reputation after a committed transition."""

    post_id: str
    vote: VoteType | None
    reputation: int


class VotingService:
    """Applies vote transitions for an actor."""

    def __init__(self, db: Session, graph: SocialGraphService | None = None) -> None:
        self.db = db
        self.graph = graph or SocialGraphService(db)
        self.posts = PostRepository(db)
        self.users = UserRepository(db)
        self.votes = VoteRepository(db)

    def upvote(self, actor_id: str, post_id: str) -> VoteOutcome:
        return self._apply(actor_id, post_id, VoteAction.UPVOTE)

    def downvote(self, actor_id: str, post_id: str) -> VoteOutcome:
        return self._apply(actor_id, post_id, VoteAction.DOWNVOTE)

    def remove_vote(self, actor_id: str, post_id: str) -> VoteOutcome:
        return self._apply(actor_id, post_id, VoteAction.REMOVE)

    def current_vote(self, actor_id: str, post_id: str) -> VoteType | None:
        vote = self.votes.get(actor_id, post_id)
        return vote.type if vote is not None else None

    def get_visible_post(self, actor_id: str, post_id: str) -> Post:
        post = self.posts.get_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        if not self.graph.can_access(actor_id, post.user_id, post.visibility):
            raise UnauthorizedError("You are not allowed to vote on this post")
        return post

    def _apply(self, actor_id: str, post_id: str, action: VoteAction) -> VoteOutcome:
        post = self.get_visible_post(actor_id, post_id)
        existing = self.votes.get(actor_id, post_id)
        current = existing.type if existing is not None else None
        transition = resolve_transition(current, action)

        # A racing insert for the same (user, post) fails the primary key; a
        # vote changed since it was read matches no row below.
        with atomic(self.db, conflict_detail="Vote already registered"):
            if current is None:
                self.votes.create(actor_id, post_id, transition.result)
            elif transition.result is None:
                if not self.votes.delete_if_type(actor_id, post_id, current):
                    raise ConflictError(STALE_VOTE_DETAIL)
            elif not self.votes.switch_type(actor_id, post_id, current, transition.result):
                raise ConflictError(STALE_VOTE_DETAIL)

            self.posts.adjust_reputation(post_id, transition.post_delta)
            if post.user_id != actor_id:
                self.users.adjust_reputation(post.user_id, transition.author_delta)

        self.db.refresh(post)
        logger.info(
            "Vote %s on post %s by %s: %s -> %s (post %+d)",
            action.value,
            post_id,
            actor_id,
            current.value if current else None,
            transition.result.value if transition.result else None,
            transition.post_delta,
        )
        return VoteOutcome(post_id=post_id, vote=transition.result, reputation=post.reputation)
