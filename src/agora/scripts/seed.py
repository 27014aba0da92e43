"""Seed the configured database with a small demo social graph."""
from __future__ import annotations

import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agora.core.errors import AppError
from agora.core.security import hash_password
from agora.db.session import SessionLocal, create_tables
from agora.db.transaction import atomic
from agora.models import FollowStatus, User
from agora.repositories import FollowRepository, UserRepository

DEMO_PASSWORD = "12345678"

DEMO_USERS = (
    ("Pedro Barbosa", "pedzero", "pedzero@example.com"),
    ("John Doe", "johndoe", "johndoe@example.com"),
    ("Jane Doe", "janedoe", "janedoe@example.com"),
)

DEMO_EDGES = (
    ("pedzero", "johndoe", FollowStatus.ACCEPTED),
    ("johndoe", "janedoe", FollowStatus.ACCEPTED),
    ("janedoe", "johndoe", FollowStatus.ACCEPTED),
    ("janedoe", "pedzero", FollowStatus.PENDING),
)


def seed(db: Session) -> tuple[int, int]:
    """Insert the demo users and follow edges that are not there yet.

    Returns the number of users and edges created.
    """
    users = UserRepository(db)
    follows = FollowRepository(db)
    created_users = created_edges = 0

    with atomic(db):
        password_hash = hash_password(DEMO_PASSWORD)
        by_username: dict[str, User] = {}
        for name, username, email in DEMO_USERS:
            user = users.get_by_username(username)
            if user is None:
                user = users.create(
                    name=name, username=username, email=email, password_hash=password_hash
                )
                created_users += 1
            by_username[username] = user

        for follower, following, status in DEMO_EDGES:
            follower_id = by_username[follower].id
            following_id = by_username[following].id
            if follows.get(follower_id, following_id) is None:
                follows.create(follower_id, following_id, status)
                created_edges += 1

    return created_users, created_edges


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the database with demo users")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before seeding (instead of running migrations).",
    )
    args = parser.parse_args()

    try:
        if args.create_tables:
            create_tables()
        with SessionLocal() as db:
            created_users, created_edges = seed(db)
    except (AppError, SQLAlchemyError) as exc:
        print(f"[seed] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"[seed] created {created_users} user(s) and {created_edges} follow edge(s)")
    print(f"[seed] demo password for every user: {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
