"""Follow relationship state machine and the content access predicate.

Per ordered pair (follower -> followee)::

    [no edge] --request--> PENDING --accept--> ACCEPTED
    PENDING   --reject / cancel--> [no edge]
    ACCEPTED  --unfollow / remove follower--> [no edge]

``can_access`` is the only place that decides whether an actor may read
content owned by someone else.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from agora.core.errors import BadRequestError, ConflictError, NotFoundError
from agora.db.transaction import atomic
from agora.models import Follow, FollowStatus, PostVisibility, User
from agora.repositories import FollowRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowResult:
    """Outcome of a follow-graph mutation."""

    username: str
    status: FollowStatus | None
    message: str


class SocialGraphService:
    """Owns follow edges and answers visibility questions."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.users = UserRepository(db)
        self.follows = FollowRepository(db)

    def _resolve(self, username: str, detail: str = "User not found") -> User:
        user = self.users.get_by_username(username)
        if user is None:
            raise NotFoundError(detail)
        return user

    # --- state machine --------------------------------------------------------------

    def request_follow(self, follower_id: str, target_username: str) -> FollowResult:
        """Create a PENDING edge ``follower -> target``.

        Raises:
            NotFoundError: If the target does not exist.
            BadRequestError: If the follower targets themselves.
            ConflictError: If an edge already exists for the ordered pair.
        """
        target = self._resolve(target_username, "Target user not found")
        if target.id == follower_id:
            raise BadRequestError("You cannot follow yourself")

        existing = self.follows.get(follower_id, target.id)
        if existing is not None:
            if existing.status == FollowStatus.PENDING:
                raise ConflictError("Follow request already sent")
            raise ConflictError("Target user already followed")

        # The composite key rejects a racing duplicate at commit time.
        with atomic(self.db, conflict_detail="Follow request already sent"):
            self.follows.create(follower_id, target.id, FollowStatus.PENDING)

        logger.info("Follow requested %s -> %s", follower_id, target.id)
        return FollowResult(
            username=target.username,
            status=FollowStatus.PENDING,
            message=f"Follow request sent to @{target.username}",
        )

    def accept_follow(self, target_id: str, requester_username: str) -> FollowResult:
        """Accept the PENDING edge ``requester -> target``."""
        requester = self._resolve(requester_username)
        edge = self.follows.get(requester.id, target_id)
        if edge is None:
            raise NotFoundError("Follow request does not exist")
        if edge.status == FollowStatus.ACCEPTED:
            raise ConflictError("User already follows you")

        with atomic(self.db):
            if not self.follows.set_status_if(
                requester.id, target_id, FollowStatus.PENDING, FollowStatus.ACCEPTED
            ):
                raise ConflictError("Follow request changed, try again")

        logger.info("Follow accepted %s -> %s", requester.id, target_id)
        return FollowResult(
            username=requester.username,
            status=FollowStatus.ACCEPTED,
            message=f"@{requester.username} now follows you",
        )

    def reject_follow(self, target_id: str, requester_username: str) -> FollowResult:
        """Delete the PENDING edge ``requester -> target``.

        An ACCEPTED edge cannot be rejected; use ``remove_follower`` instead.
        """
        requester = self._resolve(requester_username)
        edge = self.follows.get(requester.id, target_id)
        if edge is None:
            raise NotFoundError("Follow request does not exist")
        if edge.status == FollowStatus.ACCEPTED:
            raise ConflictError("User already follows you")

        with atomic(self.db):
            if not self.follows.delete_if(requester.id, target_id, FollowStatus.PENDING):
                raise ConflictError("Follow request changed, try again")

        logger.info("Follow rejected %s -> %s", requester.id, target_id)
        return FollowResult(
            username=requester.username,
            status=None,
            message=f"Follow request from @{requester.username} rejected",
        )

    def unfollow(self, follower_id: str, target_username: str) -> FollowResult:
        """Delete the edge ``follower -> target`` whatever its status."""
        target = self._resolve(target_username)
        if target.id == follower_id:
            raise BadRequestError("You cannot unfollow yourself")

        edge = self.follows.get(follower_id, target.id)
        if edge is None:
            raise ConflictError("User not followed")

        was_pending = edge.status == FollowStatus.PENDING
        with atomic(self.db):
            if not self.follows.delete_if(follower_id, target.id):
                raise ConflictError("User not followed")

        logger.info("Follow removed by follower %s -> %s", follower_id, target.id)
        if was_pending:
            message = f"Follow request to @{target.username} cancelled"
        else:
            message = f"You unfollowed @{target.username}"
        return FollowResult(username=target.username, status=None, message=message)

    def remove_follower(self, target_id: str, follower_username: str) -> FollowResult:
        """Delete the ACCEPTED edge ``follower -> target`` on behalf of the target."""
        follower = self._resolve(follower_username)
        edge = self.follows.get(follower.id, target_id)
        if edge is None:
            raise NotFoundError("User does not follow you")
        if edge.status == FollowStatus.PENDING:
            raise ConflictError("Follow request not accepted yet")

        with atomic(self.db):
            if not self.follows.delete_if(follower.id, target_id, FollowStatus.ACCEPTED):
                raise ConflictError("Follower changed, try again")

        logger.info("Follower removed by target %s -> %s", follower.id, target_id)
        return FollowResult(
            username=follower.username,
            status=None,
            message=f"@{follower.username} no longer follows you",
        )

    # --- queries --------------------------------------------------------------------

    def edge_status(self, follower_id: str, following_id: str) -> FollowStatus | None:
        """Return the status of the exact ordered pair, or None without an edge."""
        edge: Follow | None = self.follows.get(follower_id, following_id)
        return edge.status if edge is not None else None

    def is_accepted_follower(self, actor_id: str | None, owner_id: str) -> bool:
        """Return True if ``actor_id`` follows ``owner_id`` with ACCEPTED status."""
        if actor_id is None:
            return False
        return self.follows.is_accepted(actor_id, owner_id)

    def can_access(
        self,
        actor_id: str | None,
        owner_id: str,
        visibility: PostVisibility,
    ) -> bool:
        """Return True if ``actor_id`` may read content owned by ``owner_id``.

        Public content is readable by anyone; otherwise the actor must be the
        owner or an accepted follower of the owner. Reciprocal edges do not
        count: only ``actor -> owner`` is consulted.
        """
        if visibility == PostVisibility.PUBLIC:
            return True
        if actor_id is not None and actor_id == owner_id:
            return True
        return self.is_accepted_follower(actor_id, owner_id)

    def get_followers(self, username: str) -> list[User]:
        user = self._resolve(username)
        return self.follows.list_followers(user.id, FollowStatus.ACCEPTED)

    def get_followings(self, username: str) -> list[User]:
        user = self._resolve(username)
        return self.follows.list_followings(user.id, FollowStatus.ACCEPTED)

    def get_pending_requests(self, user_id: str) -> list[User]:
        """Return users waiting for ``user_id`` to accept their request."""
        return self.follows.list_followers(user_id, FollowStatus.PENDING)

    def count_followers(self, user_id: str) -> int:
        return self.follows.count_followers(user_id)

    def count_followings(self, user_id: str) -> int:
        return self.follows.count_followings(user_id)
