# src/campus_feed/schemas/comment.py
"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .vote import VoteDirection, VoteRecord


class CommentRecord(BaseModel):
    """Flat comment row as delivered by a comment source."""

    id: str
    post_id: str
    parent_id: str | None = None
    author_id: str | None = None
    author_name: str | None = None
    author_avatar_url: str | None = None
    body: str = ""
    image_url: str | None = None
    created_at: datetime
    like_count: int = Field(default=0, ge=0)
    dislike_count: int = Field(default=0, ge=0)
    vote_records: list[VoteRecord] = Field(default_factory=list)


class CommentCreate(BaseModel):
    """Schema for writing a comment or a reply."""

    body: str = Field(..., min_length=1, description="Comment text")
    parent_id: str | None = Field(None, description="Comment being replied to")
    image_url: str | None = Field(None, description="Public URL of an attached image")


class CommentNodeResponse(BaseModel):
    """Comment with its replies nested, as rendered by post-detail screens."""

    id: str
    post_id: str
    parent_id: str | None
    author_id: str | None
    author_name: str | None
    author_avatar_url: str | None
    body: str
    image_url: str | None
    created_at: datetime
    like_count: int
    dislike_count: int
    viewer_vote: VoteDirection | None
    children: list[CommentNodeResponse]

    model_config = ConfigDict(from_attributes=True)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> int:
        return self.like_count - self.dislike_count
