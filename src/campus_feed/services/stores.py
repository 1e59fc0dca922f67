"""Collaborator protocols consumed by post-detail sessions.

Any object with matching async methods can serve as a comment source, vote
store or comment deleter: the SQLAlchemy repositories, the HTTP client, or a
test double. Implementations raise :class:`~campus_feed.services.errors.StoreError`
(or a subclass) on failure.
"""

from __future__ import annotations

import logging
from typing import Protocol

from campus_feed.schemas.comment import CommentRecord

from .votes import VoteOperation, VoteOpKind, VoteTarget

# Configure logger for this module
logger = logging.getLogger(__name__)


class CommentSource(Protocol):
    async def fetch_comments(self, post_id: str) -> list[CommentRecord]:
        """Return every comment of ``post_id`` as flat rows with embedded votes."""
        ...


class VoteStore(Protocol):
    async def create_vote(
        self, target: VoteTarget, entity_id: str, voter_id: str, direction: int
    ) -> None: ...

    async def update_vote(
        self, target: VoteTarget, entity_id: str, voter_id: str, direction: int
    ) -> None: ...

    async def delete_vote(self, target: VoteTarget, entity_id: str, voter_id: str) -> None: ...


class CommentDeleter(Protocol):
    async def delete_comment(self, comment_id: str) -> None: ...


async def perform_vote_operation(store: VoteStore, operation: VoteOperation) -> None:
    """Send ``operation`` to the matching method of ``store``."""
    logger.debug(
        "Persisting %s vote on %s %s for %s",
        operation.kind.value,
        operation.target.value,
        operation.entity_id,
        operation.voter_id,
    )
    if operation.kind is VoteOpKind.DELETE:
        await store.delete_vote(operation.target, operation.entity_id, operation.voter_id)
        return

    if operation.direction is None:
        raise ValueError(f"{operation.kind.value} vote operation requires a direction")

    if operation.kind is VoteOpKind.CREATE:
        await store.create_vote(
            operation.target, operation.entity_id, operation.voter_id, operation.direction
        )
    else:
        await store.update_vote(
            operation.target, operation.entity_id, operation.voter_id, operation.direction
        )
