# src/campus_feed/services/__init__.py
"""Business logic services for the Campus Feed application."""

from .comment_tree import CommentNode, build_tree
from .errors import (
    CommentDeleteError,
    CommentNotFoundError,
    CommentPermissionError,
    EntityNotFoundError,
    FeedError,
    StoreError,
    UnauthenticatedError,
    VoteConflictError,
    VoteNotFoundError,
)
from .post_detail import PostDetailSession, VoteResult
from .votes import PostSnapshot, VoteOperation, VoteOpKind, VoteTarget, apply_vote, plan_vote

__all__ = [
    "CommentNode", "build_tree",
    "CommentDeleteError", "CommentNotFoundError", "CommentPermissionError", "EntityNotFoundError",
    "FeedError", "StoreError", "UnauthenticatedError",
    "VoteConflictError", "VoteNotFoundError",
    "PostDetailSession", "VoteResult",
    "PostSnapshot", "VoteOperation", "VoteOpKind", "VoteTarget", "apply_vote", "plan_vote",
]
