"""Visibility-gated post access, post lifecycle and the two-tier feed."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from agora.core.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from agora.core.settings import settings
from agora.db.time import utcnow
from agora.db.transaction import atomic
from agora.models import Post, PostPhoto, PostVisibility
from agora.repositories import FollowRepository, PostRepository, UserRepository
from agora.services.social_graph import SocialGraphService
from agora.services.storage import ObjectStore, StoredObject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhotoUpload:
    """An uploaded photo, independent of the web framework that received it."""

    filename: str
    content_type: str
    data: bytes


def validate_photo(photo: PhotoUpload) -> None:
    """Reject non-image or oversized uploads before anything is stored."""
    if not (photo.content_type or "").startswith("image/"):
        raise BadRequestError(f"File {photo.filename!r} is not an image")
    if not photo.data:
        raise BadRequestError(f"File {photo.filename!r} is empty")
    if len(photo.data) > settings.max_photo_bytes:
        raise BadRequestError("The uploaded file size is too large")


class ContentService:
    """Reads and writes posts on behalf of an actor."""

    def __init__(
        self,
        db: Session,
        store: ObjectStore,
        graph: SocialGraphService | None = None,
    ) -> None:
        self.db = db
        self.store = store
        self.graph = graph or SocialGraphService(db)
        self.posts = PostRepository(db)
        self.users = UserRepository(db)
        self.follows = FollowRepository(db)

    def _get_post_or_404(self, post_id: str) -> Post:
        post = self.posts.get_by_id(post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def _upload_all(self, photos: list[PhotoUpload]) -> list[StoredObject]:
        return [self.store.put(photo.data, photo.content_type, photo.filename) for photo in photos]

    # --- reads ----------------------------------------------------------------------

    def get_post(self, actor_id: str | None, post_id: str) -> Post:
        """Return a post the actor is allowed to see.

        Raises:
            NotFoundError: If the post does not exist.
            UnauthorizedError: If the actor may not see it.
        """
        post = self._get_post_or_404(post_id)
        if not self.graph.can_access(actor_id, post.user_id, post.visibility):
            raise UnauthorizedError("You are not allowed to see this post")
        return post

    def get_user_posts(self, actor_id: str | None, owner_username: str) -> list[Post]:
        """Return the owner's posts, PRIVATE ones only for the owner and accepted followers."""
        owner = self.users.get_by_username(owner_username)
        if owner is None:
            raise NotFoundError("User not found")
        include_private = actor_id == owner.id or self.graph.is_accepted_follower(
            actor_id, owner.id
        )
        return self.posts.list_by_owner(owner.id, include_private=include_private)

    def get_feed(self, actor_id: str, page: int = 1, limit: int | None = None) -> list[Post]:
        """Return one page of the actor's two-tier feed.

        The feed is the concatenation of every post by authors the actor follows
        (ACCEPTED), newest first, followed by PUBLIC posts from everyone else
        except the actor, newest first. Tiers are never interleaved.
        """
        limit = settings.feed_default_limit if limit is None else limit
        if page < 1:
            raise BadRequestError("Page must be greater than or equal to 1")
        if limit < 1 or limit > settings.feed_max_limit:
            raise BadRequestError(f"Limit must be between 1 and {settings.feed_max_limit}")

        offset = (page - 1) * limit
        followed = self.follows.accepted_following_ids(actor_id)

        tier_one = self.posts.list_by_authors(followed, limit=limit, offset=offset)
        shortfall = limit - len(tier_one)
        if shortfall == 0:
            return tier_one

        # Followed authors' posts all belong to tier one, so tier two skips them.
        followed_total = self.posts.count_by_authors(followed)
        tier_two = self.posts.list_public(
            limit=shortfall,
            offset=max(0, offset - followed_total),
            exclude_author_id=actor_id,
            exclude_author_ids=followed,
        )
        return tier_one + tier_two

    def get_public_feed(self, page: int = 1) -> list[Post]:
        """Return the newest PUBLIC posts for an anonymous caller."""
        if page < 1:
            raise BadRequestError("Page must be greater than or equal to 1")
        size = settings.public_feed_size
        return self.posts.list_public(limit=size, offset=(page - 1) * size)

    # --- writes ---------------------------------------------------------------------

    def create_post(
        self,
        actor_id: str,
        *,
        latitude: float,
        longitude: float,
        visibility: PostVisibility,
        photos: list[PhotoUpload],
        description: str | None = None,
    ) -> Post:
        """Upload the photos in order, then persist the post and its photo rows together."""
        if not photos:
            raise BadRequestError("At least one photo is required")
        if len(photos) > settings.max_photos_per_post:
            raise BadRequestError(
                f"A post can have at most {settings.max_photos_per_post} photos"
            )
        for photo in photos:
            validate_photo(photo)

        stored = self._upload_all(photos)
        with atomic(self.db):
            post = self.posts.create(
                user_id=actor_id,
                description=description,
                latitude=latitude,
                longitude=longitude,
                visibility=visibility,
                photos=[(obj.url, obj.key) for obj in stored],
            )
        logger.info("Post %s created by %s with %d photo(s)", post.id, actor_id, len(stored))
        return self._get_post_or_404(post.id)

    def update_post(
        self,
        actor_id: str,
        post_id: str,
        *,
        description: str | None = None,
        visibility: PostVisibility | None = None,
        remove_photo_urls: list[str] | None = None,
        add_photos: list[PhotoUpload] | None = None,
    ) -> Post:
        """Edit a post the actor owns.

        Every check runs before any object is deleted or uploaded, so a
        rejected update has no side effects. Removed objects are deleted from
        storage before their rows.

        Raises:
            NotFoundError: If the post does not exist.
            UnauthorizedError: If the actor is not the owner, a URL to remove
                is not one of the post's photos, or the resulting photo count
                would exceed the per-post maximum.
        """
        post = self._get_post_or_404(post_id)
        if post.user_id != actor_id:
            raise UnauthorizedError("You can only edit your own posts")

        to_remove_urls = list(dict.fromkeys(remove_photo_urls or []))
        if len(to_remove_urls) > settings.max_photos_per_post:
            raise BadRequestError(
                f"Cannot remove more than {settings.max_photos_per_post} photos"
            )
        new_photos = add_photos or []

        by_url = {photo.url: photo for photo in post.photos}
        unknown = [url for url in to_remove_urls if url not in by_url]
        if unknown:
            raise UnauthorizedError("Photo does not belong to this post")

        resulting = len(post.photos) - len(to_remove_urls) + len(new_photos)
        if resulting > settings.max_photos_per_post:
            raise UnauthorizedError(
                f"A post can have at most {settings.max_photos_per_post} photos"
            )
        for photo in new_photos:
            validate_photo(photo)

        removed: list[PostPhoto] = [by_url[url] for url in to_remove_urls]
        for photo in removed:
            self.store.delete(photo.object_key)
        stored = self._upload_all(new_photos)

        with atomic(self.db):
            for photo in removed:
                post.photos.remove(photo)
            for obj in stored:
                post.photos.append(PostPhoto(url=obj.url, object_key=obj.key))
            for position, photo in enumerate(post.photos):
                photo.position = position
            if description is not None:
                post.description = description
            if visibility is not None:
                post.visibility = visibility
            post.updated_at = utcnow()

        logger.info(
            "Post %s updated by %s (-%d/+%d photos)", post_id, actor_id, len(removed), len(stored)
        )
        self.db.expire(post)
        return self._get_post_or_404(post_id)

    def delete_post(self, actor_id: str, post_id: str) -> None:
        """Delete the post's photo objects, then the post itself."""
        post = self._get_post_or_404(post_id)
        if post.user_id != actor_id:
            raise ConflictError("You can only delete your own posts")

        for photo in post.photos:
            self.store.delete(photo.object_key)
        with atomic(self.db):
            self.posts.delete(post)
        logger.info("Post %s deleted by %s", post_id, actor_id)
