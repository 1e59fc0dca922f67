"""Data access helpers for post and comment votes.

Each write also adjusts the aggregate ``like_count``/``dislike_count`` of the
voted entity, using the same transition table the client applies
optimistically, so a successful write always lands on the counts the client
is already showing. Every database failure, reads included, surfaces as
:class:`~campus_feed.services.errors.StoreError`.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from campus_feed.models import Comment, CommentVote, Post, PostVote
from campus_feed.schemas.vote import VoteTallyResponse
from campus_feed.services.errors import (
    EntityNotFoundError,
    StoreError,
    VoteConflictError,
    VoteNotFoundError,
)
from campus_feed.services.votes import VotePlan, VoteTarget, plan_vote

__all__ = ["VoteRepository"]

# Configure logger for this module
logger = logging.getLogger(__name__)

_ENTITY_MODELS: dict[VoteTarget, type[Post] | type[Comment]] = {
    VoteTarget.POST: Post,
    VoteTarget.COMMENT: Comment,
}


class VoteRepository:
    """Vote store backed by the ``post_votes`` and ``comment_votes`` tables."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def _get(self, model: type[Any], key: Any) -> Any:
        try:
            return self.session.get(model, key)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not read {model.__tablename__}") from exc

    def _entity(self, target: VoteTarget, entity_id: str) -> Post | Comment:
        entity = self._get(_ENTITY_MODELS[target], entity_id)
        if entity is None:
            raise EntityNotFoundError(
                f"{target.value[:-1].capitalize()} {entity_id} not found"
            )
        return entity

    def _vote_row(self, target: VoteTarget, entity_id: str, voter_id: str) -> Any:
        if target is VoteTarget.POST:
            return self._get(PostVote, {"post_id": entity_id, "user_id": voter_id})
        return self._get(CommentVote, {"comment_id": entity_id, "user_id": voter_id})

    def _new_vote_row(
        self, target: VoteTarget, entity_id: str, voter_id: str, direction: int
    ) -> PostVote | CommentVote:
        if target is VoteTarget.POST:
            return PostVote(post_id=entity_id, user_id=voter_id, vote_type=direction)
        return CommentVote(comment_id=entity_id, user_id=voter_id, vote_type=direction)

    @staticmethod
    def _apply_counts(entity: Post | Comment, plan: VotePlan) -> None:
        entity.like_count += plan.like_delta
        entity.dislike_count += plan.dislike_delta

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(f"Could not {action} vote") from exc

    async def get_vote(self, target: VoteTarget, entity_id: str, voter_id: str) -> int | None:
        """Return the voter's direction on the entity, or None."""
        row = self._vote_row(target, entity_id, voter_id)
        return None if row is None else row.vote_type

    async def create_vote(
        self, target: VoteTarget, entity_id: str, voter_id: str, direction: int
    ) -> None:
        """Record a first vote by ``voter_id``.

        Raises:
            ValueError: If ``direction`` is not 1 or -1.
            VoteConflictError: If the voter already voted on the entity.
            EntityNotFoundError: If the entity does not exist.
            StoreError: If the write fails.
        """
        plan = plan_vote(None, direction)
        entity = self._entity(target, entity_id)
        if self._vote_row(target, entity_id, voter_id) is not None:
            raise VoteConflictError("Vote already exists; update or delete it instead")

        self.session.add(self._new_vote_row(target, entity_id, voter_id, direction))
        self._apply_counts(entity, plan)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            # Only a row that appeared since the check above is a duplicate vote.
            if self._vote_row(target, entity_id, voter_id) is not None:
                raise VoteConflictError("Vote already exists; update or delete it instead") from exc
            raise StoreError("Could not create vote") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError("Could not create vote") from exc
        logger.debug("Created %s vote %+d on %s by %s", target.value, direction, entity_id, voter_id)

    async def update_vote(
        self, target: VoteTarget, entity_id: str, voter_id: str, direction: int
    ) -> None:
        """Switch an existing vote to ``direction``.

        Raises:
            VoteNotFoundError: If the voter has no vote on the entity.
            EntityNotFoundError: If the entity does not exist.
            StoreError: If the write fails.
        """
        entity = self._entity(target, entity_id)
        row = self._vote_row(target, entity_id, voter_id)
        if row is None:
            raise VoteNotFoundError("No vote to update")
        if row.vote_type == direction:
            return

        self._apply_counts(entity, plan_vote(row.vote_type, direction))
        row.vote_type = direction
        self._commit("update")

    async def delete_vote(self, target: VoteTarget, entity_id: str, voter_id: str) -> None:
        """Withdraw the voter's vote.

        Raises:
            VoteNotFoundError: If the voter has no vote on the entity.
            EntityNotFoundError: If the entity does not exist.
            StoreError: If the write fails.
        """
        entity = self._entity(target, entity_id)
        row = self._vote_row(target, entity_id, voter_id)
        if row is None:
            raise VoteNotFoundError("No vote to delete")

        self._apply_counts(entity, plan_vote(row.vote_type, row.vote_type))
        self.session.delete(row)
        self._commit("delete")

    async def tally(
        self, target: VoteTarget, entity_id: str, voter_id: str | None
    ) -> VoteTallyResponse:
        """Return the entity's current counts and the voter's own vote."""
        entity = self._entity(target, entity_id)
        viewer_vote = None
        if voter_id is not None:
            viewer_vote = await self.get_vote(target, entity_id, voter_id)
        return VoteTallyResponse(
            entity_id=entity_id,
            like_count=entity.like_count,
            dislike_count=entity.dislike_count,
            viewer_vote=viewer_vote,
        )
