"""Data access helpers for working with posts."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from campus_feed.models import Comment, CommentVote, Post, PostVote
from campus_feed.schemas.post import PostRecord, PostSort
from campus_feed.schemas.vote import VoteRecord
from campus_feed.services.errors import StoreError

__all__ = ["PostRepository", "to_post_record"]

# Configure logger for this module
logger = logging.getLogger(__name__)


def to_post_record(post: Post, comment_count: int) -> PostRecord:
    """Convert a Post ORM instance to a record with its votes embedded."""
    author = post.author
    return PostRecord(
        id=post.id,
        author_id=post.author_id,
        author_name=author.name if author is not None else None,
        author_avatar_url=author.avatar_url if author is not None else None,
        body=post.body,
        image_url=post.image_url,
        is_anonymous=post.is_anonymous,
        created_at=post.created_at,
        like_count=post.like_count,
        dislike_count=post.dislike_count,
        comment_count=comment_count,
        vote_records=[
            VoteRecord(voter_id=vote.user_id, direction=vote.vote_type)
            for vote in post.votes
        ],
    )


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _comment_counts(self, post_ids: Sequence[str]) -> dict[str, int]:
        if not post_ids:
            return {}
        rows = self.session.execute(
            select(Comment.post_id, func.count(Comment.id))
            .where(Comment.post_id.in_(post_ids))
            .group_by(Comment.post_id)
        ).all()
        return {post_id: count for post_id, count in rows}

    async def get_by_id(self, post_id: str) -> Post | None:
        """Return a post by identifier."""
        try:
            return self.session.get(Post, post_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not load post {post_id}") from exc

    async def get_post(self, post_id: str) -> PostRecord | None:
        """Return a post with its votes embedded and its comments counted."""
        stmt = (
            select(Post)
            .where(Post.id == post_id)
            .options(selectinload(Post.votes))
            .execution_options(populate_existing=True)
        )
        try:
            post = self.session.execute(stmt).scalars().first()
            if post is None:
                return None
            counts = self._comment_counts([post.id])
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not load post {post_id}") from exc
        return to_post_record(post, counts.get(post.id, 0))

    async def list_posts(
        self,
        *,
        sort: PostSort = PostSort.RECENT,
        search: str | None = None,
        author_id: str | None = None,
        with_media: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PostRecord]:
        """Return a page of the feed.

        Args:
            sort: ``recent`` orders newest first, ``liked`` by like count.
            search: Case-insensitive substring the body must contain.
            author_id: Only posts written by this user.
            with_media: Only posts with an attached image.
            limit: Page size.
            offset: Number of posts to skip.
        """
        stmt = select(Post).options(selectinload(Post.votes))
        if search:
            stmt = stmt.where(Post.body.ilike(f"%{search}%"))
        if author_id is not None:
            stmt = stmt.where(Post.author_id == author_id)
        if with_media:
            stmt = stmt.where(Post.image_url.is_not(None))

        if sort is PostSort.LIKED:
            stmt = stmt.order_by(Post.like_count.desc(), Post.created_at.desc(), Post.id)
        else:
            stmt = stmt.order_by(Post.created_at.desc(), Post.id)
        stmt = stmt.limit(limit).offset(offset).execution_options(populate_existing=True)

        try:
            posts = self.session.execute(stmt).scalars().all()
            counts = self._comment_counts([post.id for post in posts])
        except SQLAlchemyError as exc:
            raise StoreError("Could not load posts") from exc
        return [to_post_record(post, counts.get(post.id, 0)) for post in posts]

    async def create_post(
        self,
        *,
        author_id: str,
        body: str,
        image_url: str | None = None,
        is_anonymous: bool = False,
    ) -> PostRecord:
        """Insert a post and return it as a record.

        Anonymous posts still store their author; responses hide it.

        Raises:
            StoreError: If the insert fails.
        """
        post = Post(
            author_id=author_id,
            body=body,
            image_url=image_url,
            is_anonymous=is_anonymous,
        )
        self.session.add(post)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError("Could not save post") from exc
        self.session.refresh(post)
        logger.debug("Created post %s (anonymous=%s)", post.id, is_anonymous)
        return to_post_record(post, 0)

    async def delete_post(self, post_id: str) -> None:
        """Delete a post along with its comments and votes.

        Raises:
            StoreError: If the post does not exist or the delete fails.
        """
        if await self.get_by_id(post_id) is None:
            raise StoreError(f"Post {post_id} not found")

        comment_ids = select(Comment.id).where(Comment.post_id == post_id)
        try:
            self.session.execute(
                delete(CommentVote).where(CommentVote.comment_id.in_(comment_ids))
            )
            self.session.execute(delete(Comment).where(Comment.post_id == post_id))
            self.session.execute(delete(PostVote).where(PostVote.post_id == post_id))
            self.session.execute(delete(Post).where(Post.id == post_id))
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Could not delete post {post_id}") from exc
