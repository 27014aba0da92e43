"""Profile CRUD and the user directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from agora.core.errors import ConflictError, NotFoundError
from agora.core.security import hash_password
from agora.core.settings import settings
from agora.db.transaction import atomic
from agora.models import FollowStatus, User
from agora.repositories import PostRepository, UserRepository
from agora.services.content import PhotoUpload, validate_photo
from agora.services.social_graph import SocialGraphService
from agora.services.storage import ObjectStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublicProfile:
    """A user as seen by another (possibly anonymous) actor."""

    user: User
    followers_count: int
    followings_count: int
    follow_status: FollowStatus | None
    follows_you: FollowStatus | None


class ProfileService:
    """Own-profile management plus lookups over other users."""

    def __init__(
        self,
        db: Session,
        store: ObjectStore,
        graph: SocialGraphService | None = None,
    ) -> None:
        self.db = db
        self.store = store
        self.graph = graph or SocialGraphService(db)
        self.users = UserRepository(db)
        self.posts = PostRepository(db)

    def _get_user_or_404(self, user_id: str) -> User:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def get_own_profile(self, actor_id: str) -> User:
        return self._get_user_or_404(actor_id)

    def update_own_profile(
        self,
        actor_id: str,
        *,
        name: str | None = None,
        username: str | None = None,
        password: str | None = None,
        profile_picture: PhotoUpload | None = None,
    ) -> User:
        """Apply a partial profile update.

        A replaced profile picture is deleted from storage only after the new
        reference has been committed.
        """
        user = self._get_user_or_404(actor_id)

        if username and username != user.username:
            existing = self.users.get_by_username(username)
            if existing is not None:
                raise ConflictError("Username already taken")

        stored = None
        if profile_picture is not None:
            validate_photo(profile_picture)
            stored = self.store.put(
                profile_picture.data, profile_picture.content_type, profile_picture.filename
            )

        old_picture_key = user.profile_picture_key
        with atomic(self.db, conflict_detail="Username already taken"):
            if name:
                user.name = name
            if username:
                user.username = username
            if password:
                user.password_hash = hash_password(password)
            if stored is not None:
                user.profile_picture = stored.url
                user.profile_picture_key = stored.key

        if stored is not None and old_picture_key:
            self.store.delete(old_picture_key)
        logger.info("Profile %s updated", actor_id)
        return self._get_user_or_404(actor_id)

    def delete_own_profile(self, actor_id: str) -> str:
        """Delete every stored object the user owns, then the account and its graph."""
        user = self._get_user_or_404(actor_id)

        for key in self.posts.list_photo_keys_by_owner(actor_id):
            self.store.delete(key)
        if user.profile_picture_key:
            self.store.delete(user.profile_picture_key)

        with atomic(self.db):
            self.users.delete(user)
        logger.info("User %s deleted", actor_id)
        return "User deleted successfully"

    def search_users(self, query: str | None) -> list[User]:
        """Return users whose username contains ``query``."""
        query = (query or "").strip()
        if not query:
            return []
        return self.users.search_by_username(query, settings.search_result_limit)

    def get_user_by_username(self, actor_id: str | None, username: str) -> PublicProfile:
        user = self.users.get_by_username(username)
        if user is None:
            raise NotFoundError("User not found")

        follow_status = follows_you = None
        if actor_id is not None and actor_id != user.id:
            follow_status = self.graph.edge_status(actor_id, user.id)
            follows_you = self.graph.edge_status(user.id, actor_id)

        return PublicProfile(
            user=user,
            followers_count=self.graph.count_followers(user.id),
            followings_count=self.graph.count_followings(user.id),
            follow_status=follow_status,
            follows_you=follows_you,
        )

    def get_followers(self, username: str) -> list[User]:
        return self.graph.get_followers(username)

    def get_followings(self, username: str) -> list[User]:
        return self.graph.get_followings(username)

    def get_pending_follow_requests(self, actor_id: str) -> list[User]:
        return self.graph.get_pending_requests(actor_id)
