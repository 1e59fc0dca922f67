# src/campus_feed/models/comment.py
"""SQLAlchemy model for threaded comments."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campus_feed.db.session import Base

from ._common import new_id, utcnow


class Comment(Base):
    """Comment on a post, optionally replying to another comment.

    Rows are stored flat; the thread shape is rebuilt from ``parent_id`` on
    every read.
    """

    __tablename__ = "user_comments"
    __table_args__ = (
        Index("ix_user_comments_post_id_created_at", "post_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    post_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("user_posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Root comments have parent_id = NULL.
    parent_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("user_comments.id", ondelete="CASCADE"),
        nullable=True,
    )
    author_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    like_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    dislike_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    post = relationship("Post", back_populates="comments")
    author = relationship("User", lazy="joined")
    votes = relationship(
        "CommentVote",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
