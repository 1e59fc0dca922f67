"""Three-state vote toggling applied optimistically to post and comment snapshots.

A viewer holds at most one vote per entity. Voting in the same direction again
removes the vote, voting the other way switches it. :func:`apply_vote` is a
pure reducer: it returns the new snapshot together with the single persistence
operation that makes the store agree with it. Performing that operation and
rolling back on failure is left to the caller (see
:mod:`campus_feed.services.post_detail`).
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol, TypeVar

from campus_feed.schemas.post import PostRecord
from campus_feed.schemas.vote import VoteRecord

from .errors import UnauthenticatedError

UPVOTE = 1
DOWNVOTE = -1
_DIRECTIONS = (UPVOTE, DOWNVOTE)


class VoteTarget(str, Enum):
    """Kind of entity a vote is attached to."""

    POST = "posts"
    COMMENT = "comments"


class VoteOpKind(str, Enum):
    """Store mutation needed to persist a vote transition."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class VotePlan:
    """Outcome of one row of the vote transition table."""

    new_vote: int | None
    like_delta: int
    dislike_delta: int
    kind: VoteOpKind


@dataclass(frozen=True)
class VoteOperation:
    """A single vote-record mutation keyed by (entity, voter)."""

    target: VoteTarget
    entity_id: str
    voter_id: str
    kind: VoteOpKind
    # None for deletions.
    direction: int | None


class Votable(Protocol):
    """Snapshot shape shared by posts and comment nodes."""

    id: str
    like_count: int
    dislike_count: int
    viewer_vote: int | None


VotableT = TypeVar("VotableT", bound=Votable)


@dataclass
class PostSnapshot:
    """Displayed state of a post, including the viewer's own vote."""

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
    comment_count: int = 0
    viewer_vote: int | None = None

    @property
    def score(self) -> int:
        return self.like_count - self.dislike_count

    @classmethod
    def from_record(cls, record: PostRecord, viewer_id: str | None) -> PostSnapshot:
        """Build a snapshot from a fetched post row for the given viewer."""
        return cls(
            id=record.id,
            author_id=record.author_id,
            author_name=record.author_name,
            author_avatar_url=record.author_avatar_url,
            body=record.body,
            image_url=record.image_url,
            is_anonymous=record.is_anonymous,
            created_at=record.created_at,
            like_count=record.like_count,
            dislike_count=record.dislike_count,
            comment_count=record.comment_count,
            viewer_vote=viewer_vote_for(record.vote_records, viewer_id),
        )


def viewer_vote_for(records: Iterable[VoteRecord], viewer_id: str | None) -> int | None:
    """Return the viewer's direction among ``records``, or None if they have not voted."""
    if viewer_id is None:
        return None
    for record in records:
        if record.voter_id == viewer_id:
            return record.direction
    return None


def plan_vote(current: int | None, requested: int) -> VotePlan:
    """Look up the transition for the viewer's current vote and a requested direction.

    Raises:
        ValueError: If either vote is not +1/-1 (``current`` may also be None).
    """
    if requested not in _DIRECTIONS:
        raise ValueError(f"Vote direction must be 1 or -1, got {requested!r}")
    if current is not None and current not in _DIRECTIONS:
        raise ValueError(f"Current vote must be 1, -1 or None, got {current!r}")

    if current is None:
        if requested == UPVOTE:
            return VotePlan(UPVOTE, 1, 0, VoteOpKind.CREATE)
        return VotePlan(DOWNVOTE, 0, 1, VoteOpKind.CREATE)

    if current == requested:
        if requested == UPVOTE:
            return VotePlan(None, -1, 0, VoteOpKind.DELETE)
        return VotePlan(None, 0, -1, VoteOpKind.DELETE)

    if requested == UPVOTE:
        return VotePlan(UPVOTE, 1, -1, VoteOpKind.UPDATE)
    return VotePlan(DOWNVOTE, -1, 1, VoteOpKind.UPDATE)


def apply_vote(
    snapshot: VotableT,
    direction: int,
    viewer_id: str | None,
    *,
    target: VoteTarget,
) -> tuple[VotableT, VoteOperation]:
    """Apply a vote to ``snapshot`` and describe the store mutation it needs.

    Args:
        snapshot: Current displayed state of the post or comment node. It is
            not modified; comment nodes keep their ``children`` in the copy.
        direction: Requested vote, 1 or -1.
        viewer_id: The acting viewer.
        target: Whether ``snapshot`` is a post or a comment.

    Returns:
        The updated snapshot and the operation to send to the vote store.

    Raises:
        UnauthenticatedError: If there is no viewer.
        ValueError: If ``direction`` is not 1 or -1.
    """
    if viewer_id is None:
        raise UnauthenticatedError("You must be signed in to vote")

    plan = plan_vote(snapshot.viewer_vote, direction)
    updated = dataclasses.replace(
        snapshot,
        like_count=snapshot.like_count + plan.like_delta,
        dislike_count=snapshot.dislike_count + plan.dislike_delta,
        viewer_vote=plan.new_vote,
    )
    operation = VoteOperation(
        target=target,
        entity_id=snapshot.id,
        voter_id=viewer_id,
        kind=plan.kind,
        direction=None if plan.kind is VoteOpKind.DELETE else plan.new_vote,
    )
    return updated, operation


def rollback(current: VotableT, previous: Votable) -> VotableT:
    """Restore the counts and viewer vote of ``previous`` onto ``current``.

    Everything else on ``current`` (a comment node's replies, for instance) is
    kept as it is now.
    """
    return dataclasses.replace(
        current,
        like_count=previous.like_count,
        dislike_count=previous.dislike_count,
        viewer_vote=previous.viewer_vote,
    )
