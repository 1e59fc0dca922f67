# src/campus_feed/schemas/post.py
"""Post-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .vote import VoteDirection, VoteRecord


class PostRecord(BaseModel):
    """Post row with its embedded votes and comment count."""

    id: str
    author_id: str | None = None
    author_name: str | None = None
    author_avatar_url: str | None = None
    body: str = ""
    image_url: str | None = None
    is_anonymous: bool = False
    created_at: datetime
    like_count: int = Field(default=0, ge=0)
    dislike_count: int = Field(default=0, ge=0)
    comment_count: int = Field(default=0, ge=0)
    vote_records: list[VoteRecord] = Field(default_factory=list)


class PostSort(str, Enum):
    """Feed orderings offered by the post list."""

    RECENT = "recent"
    LIKED = "liked"


class PostCreate(BaseModel):
    """Schema for writing a post."""

    body: str = Field(..., min_length=1, description="Post text")
    image_url: str | None = Field(None, description="Public URL of an attached image")
    is_anonymous: bool = Field(False, description="Hide the author from other viewers")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    author_id: str | None
    author_name: str | None
    author_avatar_url: str | None
    body: str
    image_url: str | None
    is_anonymous: bool
    created_at: datetime
    like_count: int
    dislike_count: int
    comment_count: int
    viewer_vote: VoteDirection | None = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def _hide_anonymous_author(cls, data: object) -> object:
        if not isinstance(data, dict):
            extracted: dict[str, object | None] = {}
            for field_name in cls.model_fields:
                extracted[field_name] = getattr(data, field_name, None)
            data = extracted
        else:
            data = dict(data)

        if data.get("is_anonymous"):
            data["author_id"] = None
            data["author_name"] = None
            data["author_avatar_url"] = None

        return data
