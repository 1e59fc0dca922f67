"""Data access helpers for working with comments."""
from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from campus_feed.models import Comment, CommentVote
from campus_feed.schemas.comment import CommentRecord
from campus_feed.schemas.vote import VoteRecord
from campus_feed.services.errors import CommentNotFoundError, StoreError

__all__ = ["CommentRepository", "to_comment_record"]

# Configure logger for this module
logger = logging.getLogger(__name__)


def to_comment_record(comment: Comment) -> CommentRecord:
    """Convert a Comment ORM instance to the flat record consumed by tree building."""
    author = comment.author
    return CommentRecord(
        id=comment.id,
        post_id=comment.post_id,
        parent_id=comment.parent_id,
        author_id=comment.author_id,
        author_name=author.name if author is not None else None,
        author_avatar_url=author.avatar_url if author is not None else None,
        body=comment.body,
        image_url=comment.image_url,
        created_at=comment.created_at,
        like_count=comment.like_count,
        dislike_count=comment.dislike_count,
        vote_records=[
            VoteRecord(voter_id=vote.user_id, direction=vote.vote_type)
            for vote in comment.votes
        ],
    )


class CommentRepository:
    """Comment source and deleter backed by a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    async def get_comment(self, comment_id: str) -> Comment | None:
        """Return a comment by identifier."""
        try:
            return self.session.get(Comment, comment_id)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not load comment {comment_id}") from exc

    async def fetch_comments(self, post_id: str) -> list[CommentRecord]:
        """Return all comments of a post, oldest first, with their votes embedded."""
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .options(selectinload(Comment.votes))
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .execution_options(populate_existing=True)
        )
        try:
            comments = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not load comments for post {post_id}") from exc
        return [to_comment_record(comment) for comment in comments]

    async def create_comment(
        self,
        *,
        post_id: str,
        author_id: str,
        body: str,
        parent_id: str | None = None,
        image_url: str | None = None,
    ) -> CommentRecord:
        """Insert a comment or a reply and return it as a record.

        Raises:
            CommentNotFoundError: If ``parent_id`` is not a comment of the same post.
            StoreError: If the insert fails.
        """
        if parent_id is not None:
            parent = await self.get_comment(parent_id)
            if parent is None or parent.post_id != post_id:
                raise CommentNotFoundError(parent_id)

        comment = Comment(
            post_id=post_id,
            parent_id=parent_id,
            author_id=author_id,
            body=body,
            image_url=image_url,
        )
        self.session.add(comment)
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError("Could not save comment") from exc
        self.session.refresh(comment)
        return to_comment_record(comment)

    async def delete_comment(self, comment_id: str) -> None:
        """Delete a comment together with every reply beneath it.

        Raises:
            StoreError: If the comment does not exist or the delete fails.
        """
        if await self.get_comment(comment_id) is None:
            raise StoreError(f"Comment {comment_id} not found")

        try:
            doomed = [comment_id, *self._descendant_ids(comment_id)]
            self.session.execute(delete(CommentVote).where(CommentVote.comment_id.in_(doomed)))
            self.session.execute(delete(Comment).where(Comment.id.in_(doomed)))
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Could not delete comment {comment_id}") from exc
        logger.debug("Deleted comment %s and %d replies", comment_id, len(doomed) - 1)

    def _descendant_ids(self, comment_id: str) -> list[str]:
        found: list[str] = []
        seen = {comment_id}
        frontier = [comment_id]
        while frontier:
            child_ids = self.session.execute(
                select(Comment.id).where(Comment.parent_id.in_(frontier))
            ).scalars().all()
            frontier = []
            for child_id in child_ids:
                if child_id in seen:
                    continue
                seen.add(child_id)
                found.append(child_id)
                frontier.append(child_id)
        return found
