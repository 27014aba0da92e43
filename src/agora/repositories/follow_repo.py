"""Data access helpers for follow edges."""
from __future__ import annotations

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.orm import Session

from agora.models.follow import Follow, FollowStatus
from agora.models.user import User

__all__ = ["FollowRepository"]


class FollowRepository:
    """Lookups and mutations keyed on the ordered pair ``(follower, following)``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, follower_id: str, following_id: str) -> Follow | None:
        """Return the edge for the exact ordered pair, if any."""
        return self.session.get(Follow, (follower_id, following_id))

    def create(self, follower_id: str, following_id: str, status: FollowStatus) -> Follow:
        edge = Follow(follower_id=follower_id, following_id=following_id, status=status)
        self.session.add(edge)
        return edge

    def set_status_if(
        self,
        follower_id: str,
        following_id: str,
        expected: FollowStatus,
        new: FollowStatus,
    ) -> bool:
        """Move the edge from ``expected`` to ``new``; False when it no longer matches."""
        result = self.session.execute(
            update(Follow)
            .where(
                Follow.follower_id == follower_id,
                Follow.following_id == following_id,
                Follow.status == expected,
            )
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def delete_if(
        self,
        follower_id: str,
        following_id: str,
        status: FollowStatus | None = None,
    ) -> bool:
        """Delete the edge, restricted to ``status`` when given. False if nothing matched."""
        stmt = delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
        if status is not None:
            stmt = stmt.where(Follow.status == status)
        result = self.session.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount == 1

    def is_accepted(self, follower_id: str, following_id: str) -> bool:
        """Return True if ``follower_id`` follows ``following_id`` with ACCEPTED status."""
        stmt = select(Follow.follower_id).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
            Follow.status == FollowStatus.ACCEPTED,
        )
        return self.session.execute(stmt).first() is not None

    def accepted_following_ids(self, follower_id: str) -> Select[tuple[str]]:
        """Return a subquery of users ``follower_id`` follows with ACCEPTED status."""
        return select(Follow.following_id).where(
            Follow.follower_id == follower_id,
            Follow.status == FollowStatus.ACCEPTED,
        )

    def list_followers(self, user_id: str, status: FollowStatus) -> list[User]:
        """Return users on edges pointing at ``user_id``, newest edge first."""
        result = self.session.execute(
            select(User)
            .join(Follow, Follow.follower_id == User.id)
            .where(Follow.following_id == user_id, Follow.status == status)
            .order_by(Follow.created_at.desc(), User.username)
        )
        return list(result.scalars())

    def list_followings(self, user_id: str, status: FollowStatus) -> list[User]:
        """Return users ``user_id`` points at, newest edge first."""
        result = self.session.execute(
            select(User)
            .join(Follow, Follow.following_id == User.id)
            .where(Follow.follower_id == user_id, Follow.status == status)
            .order_by(Follow.created_at.desc(), User.username)
        )
        return list(result.scalars())

    def count_followers(self, user_id: str) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(Follow)
            .where(Follow.following_id == user_id, Follow.status == FollowStatus.ACCEPTED)
        ).scalar_one()

    def count_followings(self, user_id: str) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(Follow)
            .where(Follow.follower_id == user_id, Follow.status == FollowStatus.ACCEPTED)
        ).scalar_one()
