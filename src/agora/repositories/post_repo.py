"""Data access helpers for working with posts."""
from __future__ import annotations

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session, selectinload

from agora.models.post import Post, PostPhoto, PostVisibility

__all__ = ["PostRepository"]


def _newest_first(stmt: Select[tuple[Post]]) -> Select[tuple[Post]]:
    return stmt.order_by(Post.created_at.desc(), Post.id.desc())


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _select(self) -> Select[tuple[Post]]:
        return select(Post).options(selectinload(Post.photos), selectinload(Post.author))

    def _all(self, stmt: Select[tuple[Post]]) -> list[Post]:
        return list(self.session.execute(stmt).scalars())

    def get_by_id(self, post_id: str) -> Post | None:
        """Return a post by identifier."""
        return self.session.execute(
            self._select().where(Post.id == post_id)
        ).scalars().first()

    def list_by_owner(self, owner_id: str, *, include_private: bool) -> list[Post]:
        """Return every post by ``owner_id``, newest first.

        Args:
            owner_id: Author whose posts are listed.
            include_private: When False only PUBLIC posts are returned.
        """
        stmt = self._select().where(Post.user_id == owner_id)
        if not include_private:
            stmt = stmt.where(Post.visibility == PostVisibility.PUBLIC)
        return self._all(_newest_first(stmt))

    def list_by_authors(self, author_ids: Select[tuple[str]], *, limit: int, offset: int) -> list[Post]:
        """Return posts (any visibility) whose author is in ``author_ids``."""
        stmt = self._select().where(Post.user_id.in_(author_ids))
        return self._all(_newest_first(stmt).offset(offset).limit(limit))

    def count_by_authors(self, author_ids: Select[tuple[str]]) -> int:
        return self.session.execute(
            select(func.count()).select_from(Post).where(Post.user_id.in_(author_ids))
        ).scalar_one()

    def list_public(
        self,
        *,
        limit: int,
        offset: int = 0,
        exclude_author_id: str | None = None,
        exclude_author_ids: Select[tuple[str]] | None = None,
    ) -> list[Post]:
        """Return PUBLIC posts newest first, optionally skipping some authors."""
        stmt = self._select().where(Post.visibility == PostVisibility.PUBLIC)
        if exclude_author_id is not None:
            stmt = stmt.where(Post.user_id != exclude_author_id)
        if exclude_author_ids is not None:
            stmt = stmt.where(Post.user_id.not_in(exclude_author_ids))
        return self._all(_newest_first(stmt).offset(offset).limit(limit))

    def list_photo_keys_by_owner(self, owner_id: str) -> list[str]:
        """Return object keys of every photo on posts owned by ``owner_id``."""
        result = self.session.execute(
            select(PostPhoto.object_key).join(Post).where(Post.user_id == owner_id)
        )
        return list(result.scalars())

    def create(
        self,
        *,
        user_id: str,
        description: str | None,
        latitude: float,
        longitude: float,
        visibility: PostVisibility,
        photos: list[tuple[str, str]],
    ) -> Post:
        """Stage a new post and its photos.

        Args:
            photos: ``(url, object_key)`` pairs in display order.
        """
        post = Post(
            user_id=user_id,
            description=description,
            latitude=latitude,
            longitude=longitude,
            visibility=visibility,
            photos=[
                PostPhoto(url=url, object_key=key, position=position)
                for position, (url, key) in enumerate(photos)
            ],
        )
        self.session.add(post)
        return post

    def delete(self, post: Post) -> None:
        self.session.delete(post)

    def adjust_reputation(self, post_id: str, delta: int) -> None:
        """Apply ``delta`` to the post's reputation in a single UPDATE statement."""
        if delta == 0:
            return
        self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(reputation=Post.reputation + delta, updated_at=Post.updated_at)
            .execution_options(synchronize_session=False)
        )
