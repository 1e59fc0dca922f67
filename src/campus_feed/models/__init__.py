# src/campus_feed/models/__init__.py
"""SQLAlchemy models for the Campus Feed application."""

from .comment import Comment
from .post import Post
from .user import User
from .vote import CommentVote, PostVote

__all__ = [
    "Comment",
    "Post",
    "User",
    "CommentVote", "PostVote",
]
