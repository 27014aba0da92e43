"""Data access helpers for post votes."""
from __future__ import annotations

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from agora.models.vote import PostVote, VoteType

__all__ = ["VoteRepository"]


class VoteRepository:
    """Votes are keyed by ``(user_id, post_id)``.

    Changes to an existing vote are conditioned on the type the caller read,
    so a request working from a stale read matches no row.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str, post_id: str) -> PostVote | None:
        return self.session.get(PostVote, (user_id, post_id))

    def create(self, user_id: str, post_id: str, vote_type: VoteType) -> PostVote:
        vote = PostVote(user_id=user_id, post_id=post_id, type=vote_type)
        self.session.add(vote)
        return vote

    def delete_if_type(self, user_id: str, post_id: str, expected: VoteType) -> bool:
        """Delete the vote only while it still has type ``expected``."""
        result = self.session.execute(
            delete(PostVote)
            .where(
                PostVote.user_id == user_id,
                PostVote.post_id == post_id,
                PostVote.type == expected,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def switch_type(
        self,
        user_id: str,
        post_id: str,
        expected: VoteType,
        new: VoteType,
    ) -> bool:
        """Change ``expected`` to ``new``; False when the row no longer matches."""
        result = self.session.execute(
            update(PostVote)
            .where(
                PostVote.user_id == user_id,
                PostVote.post_id == post_id,
                PostVote.type == expected,
            )
            .values(type=new)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
