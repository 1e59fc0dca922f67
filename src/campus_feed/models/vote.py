# src/campus_feed/models/vote.py
"""Models capturing voting interactions on posts and comments."""

from sqlalchemy import CheckConstraint, ForeignKey, Index, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from campus_feed.db.session import Base


class PostVote(Base):
    """Per-user vote on a post."""

    __tablename__ = "post_votes"
    __table_args__ = (
        CheckConstraint("vote_type IN (1, -1)", name="ck_post_votes_vote_type"),
        Index("ix_post_votes_post_id", "post_id"),
    )

    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Composite primary key prevents duplicate votes from the same user.

    # 1 = upvote, -1 = downvote.
    vote_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)


class CommentVote(Base):
    """Per-user vote on a comment."""

    __tablename__ = "comment_votes"
    __table_args__ = (
        CheckConstraint("vote_type IN (1, -1)", name="ck_comment_votes_vote_type"),
        Index("ix_comment_votes_comment_id", "comment_id"),
    )

    comment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_comments.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    vote_type: Mapped[int] = mapped_column(SmallInteger, nullable=False)
