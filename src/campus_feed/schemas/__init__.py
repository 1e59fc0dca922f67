# src/campus_feed/schemas/__init__.py
"""
Pydantic schemas for API request/response models and collaborator records.

These schemas define the structure of feed data for serialization and validation.
"""

from .comment import CommentCreate, CommentNodeResponse, CommentRecord
from .post import PostCreate, PostRecord, PostResponse, PostSort
from .vote import MyVoteResponse, VoteDirection, VoteRecord, VoteRequest, VoteTallyResponse

__all__ = [
    "CommentCreate", "CommentNodeResponse", "CommentRecord",
    "PostCreate", "PostRecord", "PostResponse", "PostSort",
    "MyVoteResponse", "VoteDirection", "VoteRecord", "VoteRequest", "VoteTallyResponse",
]
