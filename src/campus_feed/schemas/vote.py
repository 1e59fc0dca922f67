# src/campus_feed/schemas/vote.py
"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

VoteDirection = Literal[-1, 1]


class VoteRecord(BaseModel):
    """One voter's vote as embedded in a post or comment row."""

    voter_id: str
    direction: VoteDirection

    model_config = ConfigDict(frozen=True)


class VoteRequest(BaseModel):
    """Schema for creating or switching a vote."""

    direction: VoteDirection = Field(..., description="1 for upvote, -1 for downvote")


class VoteTallyResponse(BaseModel):
    """Counts and the caller's own vote after a vote write."""

    entity_id: str
    like_count: int
    dislike_count: int
    viewer_vote: VoteDirection | None = None


class MyVoteResponse(BaseModel):
    """The caller's vote on one entity; 0 when there is none."""

    direction: Literal[-1, 0, 1]
