"""Persistence adapters implementing the feed collaborator protocols."""

from .comment_repo import CommentRepository
from .post_repo import PostRepository
from .vote_repo import VoteRepository

__all__ = ["CommentRepository", "PostRepository", "VoteRepository"]
