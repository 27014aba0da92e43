# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count
from pathlib import Path
from typing import Any

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from agora.api.v1.dependencies import get_object_store, get_token_blacklist
from agora.core.security import create_access_token, hash_password
from agora.db.session import Base, enable_sqlite_foreign_keys
from agora.db.session import get_db as app_get_session
from agora.main import app as fastapi_app
from agora.models import Follow, FollowStatus, Post, PostPhoto, PostVisibility, User
from agora.services.content import PhotoUpload
from agora.services.storage import StoredObject, build_object_key
from agora.services.token_blacklist import TokenBlacklist

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse"
STORE_BASE_URL = "http://storage.test/agora-media"

_USER_COUNTER = count(1)
_POST_CLOCK = count(1)
_BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)
_PASSWORD_HASH: str | None = None


def _password_hash() -> str:
    global _PASSWORD_HASH
    if _PASSWORD_HASH is None:
        _PASSWORD_HASH = hash_password(TEST_PASSWORD)
    return _PASSWORD_HASH


class FakeObjectStore:
    """In-memory stand-in for the S3 object store."""

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.put_keys: list[str] = []
        self.deleted_keys: list[str] = []

    def put(self, data: bytes, content_type: str, filename: str) -> StoredObject:
        key = build_object_key(filename)
        self.objects[key] = data
        self.put_keys.append(key)
        return StoredObject(key=key, url=f"{STORE_BASE_URL}/{key}")

    def delete(self, object_key: str) -> None:
        self.objects.pop(object_key, None)
        self.deleted_keys.append(object_key)


class FakeRedis:
    """Just enough of the redis client API for the token blacklist."""

    def __init__(self) -> None:
        self.values: dict[str, tuple[str, int | None]] = {}

    def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.values[key] = (value, ex)
        return True

    def exists(self, key: str) -> int:
        return int(key in self.values)

    def close(self) -> None:
        pass


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so each test cleans up every table explicitly.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def file_sessionmaker(tmp_path: Path) -> Iterator[sessionmaker[Session]]:
    """Session factory on a file database, so each session owns a connection.

    Used to interleave two requests that read before the other one commits.
    """
    file_engine = create_engine(f"sqlite:///{tmp_path / 'agora.db'}")
    enable_sqlite_foreign_keys(file_engine)
    Base.metadata.create_all(bind=file_engine)
    try:
        yield sessionmaker(bind=file_engine, autocommit=False, autoflush=False)
    finally:
        file_engine.dispose()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def token_blacklist(fake_redis: FakeRedis) -> TokenBlacklist:
    return TokenBlacklist(fake_redis)


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    db_session: Session,
    object_store: FakeObjectStore,
    token_blacklist: TokenBlacklist,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    overrides: dict[Callable[..., Any], Callable[..., Any]] = {
        app_get_session: _get_session_override,
        get_object_store: lambda: object_store,
        get_token_blacklist: lambda: token_blacklist,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with the shared test password."""

    def _make_user(username: str | None = None, **fields: Any) -> User:
        n = next(_USER_COUNTER)
        username = username or f"user{n}"
        user = User(
            username=username,
            email=fields.pop("email", f"{username}@example.com"),
            name=fields.pop("name", username.title()),
            password_hash=_password_hash(),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary test user."""
    return make_user("alice")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second persisted user."""
    return make_user("bob")


@pytest.fixture()
def third_user(make_user: Callable[..., User]) -> User:
    return make_user("carol")


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers(other_user)


@pytest.fixture()
def make_follow(db_session: Session) -> Callable[..., Follow]:
    def _make_follow(
        follower: User,
        following: User,
        status: FollowStatus = FollowStatus.ACCEPTED,
    ) -> Follow:
        edge = Follow(follower_id=follower.id, following_id=following.id, status=status)
        db_session.add(edge)
        db_session.commit()
        return edge

    return _make_follow


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory persisting posts with strictly increasing ``created_at``."""

    def _make_post(
        author: User,
        visibility: PostVisibility = PostVisibility.PUBLIC,
        *,
        description: str | None = "A view",
        photos: int = 1,
        created_at: datetime | None = None,
    ) -> Post:
        created_at = created_at or _BASE_TIME + timedelta(minutes=next(_POST_CLOCK))
        post = Post(
            user_id=author.id,
            description=description,
            latitude=-23.55,
            longitude=-46.63,
            visibility=visibility,
            created_at=created_at,
            updated_at=created_at,
            photos=[
                PostPhoto(
                    url=f"{STORE_BASE_URL}/seed-{author.username}-{i}.jpg",
                    object_key=f"seed-{author.username}-{i}.jpg",
                    position=i,
                )
                for i in range(photos)
            ],
        )
        db_session.add(post)
        db_session.commit()
        return post

    return _make_post


def photo(name: str = "photo.jpg", data: bytes = b"\xff\xd8\xff\xe0jpeg", content_type: str = "image/jpeg") -> PhotoUpload:
    """Build an upload value for service-level tests."""
    return PhotoUpload(filename=name, content_type=content_type, data=data)


def photo_file(name: str = "photo.jpg", data: bytes = b"\xff\xd8\xff\xe0jpeg") -> tuple[str, tuple[str, bytes, str]]:
    """Build a multipart ``photos`` entry for HTTP tests."""
    return ("photos", (name, data, "image/jpeg"))


def persist_users(session: Session, *usernames: str) -> list[User]:
    """Commit one user per name on ``session`` and return them in order."""
    users = [
        User(
            username=name,
            email=f"{name}@example.com",
            name=name.title(),
            password_hash=_password_hash(),
        )
        for name in usernames
    ]
    session.add_all(users)
    session.commit()
    return users
