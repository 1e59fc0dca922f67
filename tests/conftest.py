# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "campus-feed-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from campus_feed.core.security import create_access_token
from campus_feed.db.session import Base, make_engine
from campus_feed.db.session import get_db as app_get_session
from campus_feed.main import app as fastapi_app
from campus_feed.models import Comment, CommentVote, Post, PostVote, User
from campus_feed.schemas.comment import CommentRecord
from campus_feed.schemas.vote import VoteRecord

TEST_DB_URL = "sqlite://"

BASE_TIME = datetime(2024, 9, 1, 12, 0, tzinfo=UTC)


def at(seconds: int) -> datetime:
    """Return a timestamp ``seconds`` after a fixed base time."""
    return BASE_TIME + timedelta(seconds=seconds)


def make_record(
    comment_id: str,
    *,
    parent_id: str | None = None,
    t: int = 0,
    post_id: str = "post-1",
    author_id: str | None = "author-1",
    likes: int = 0,
    dislikes: int = 0,
    votes: dict[str, int] | None = None,
) -> CommentRecord:
    """Build a flat comment row for tree and session tests."""
    return CommentRecord(
        id=comment_id,
        post_id=post_id,
        parent_id=parent_id,
        author_id=author_id,
        author_name="Author",
        body=f"comment {comment_id}",
        created_at=at(t),
        like_count=likes,
        dislike_count=dislikes,
        vote_records=[
            VoteRecord(voter_id=voter, direction=direction)
            for voter, direction in (votes or {}).items()
        ],
    )


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = make_engine(TEST_DB_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def restart_savepoint(sess: Session, trans) -> None:  # pragma: no cover - SQLAlchemy internals
        if trans.nested and not getattr(trans._parent, "nested", False):
            session.begin_nested()

    try:
        yield session
    finally:
        event.remove(session, "after_transaction_end", restart_savepoint)
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def test_user(db_session: Session) -> Iterator[User]:
    """Create and return a persisted test user."""
    user = User(id="user-alice", name="Alice", avatar_url="https://cdn.test/alice.png")
    db_session.add(user)
    db_session.flush()
    yield user


@pytest.fixture()
def other_user(db_session: Session) -> Iterator[User]:
    """Create and return a second persisted user."""
    user = User(id="user-bob", name="Bob")
    db_session.add(user)
    db_session.flush()
    yield user


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return {"Authorization": f"Bearer {create_access_token(test_user.id)}"}


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}


@pytest.fixture()
def test_post(db_session: Session, test_user: User) -> Iterator[Post]:
    """Create a baseline post by the primary user with 3 likes and 1 dislike."""
    post = Post(
        id="post-1",
        author_id=test_user.id,
        body="Test post content",
        created_at=at(0),
        like_count=3,
        dislike_count=1,
    )
    db_session.add(post)
    db_session.flush()
    yield post


@pytest.fixture()
def add_comment(db_session: Session, test_post: Post) -> Callable[..., Comment]:
    """Return a factory that persists comments on ``test_post``."""

    def _add(
        comment_id: str,
        *,
        author: User,
        parent_id: str | None = None,
        t: int = 0,
        body: str | None = None,
    ) -> Comment:
        comment = Comment(
            id=comment_id,
            post_id=test_post.id,
            parent_id=parent_id,
            author_id=author.id,
            body=body or f"comment {comment_id}",
            created_at=at(t),
        )
        db_session.add(comment)
        db_session.flush()
        return comment

    return _add


@pytest.fixture()
def add_vote(db_session: Session) -> Callable[..., Any]:
    """Return a factory that persists a vote row and bumps the matching aggregate."""

    def _add(entity: Post | Comment, voter: User, direction: int) -> None:
        if isinstance(entity, Post):
            db_session.add(PostVote(post_id=entity.id, user_id=voter.id, vote_type=direction))
        else:
            db_session.add(CommentVote(comment_id=entity.id, user_id=voter.id, vote_type=direction))
        if direction == 1:
            entity.like_count += 1
        else:
            entity.dislike_count += 1
        db_session.flush()

    return _add
