# src/campus_feed/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Campus Feed API.

Each endpoint performs exactly one vote-record mutation. Deciding whether a
tap creates, switches or withdraws a vote is the client's job, so a client
that already shows the optimistic result only has to send the matching call.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from campus_feed.repositories import VoteRepository
from campus_feed.schemas.vote import MyVoteResponse, VoteRequest, VoteTallyResponse
from campus_feed.services.errors import (
    EntityNotFoundError,
    StoreError,
    VoteConflictError,
    VoteNotFoundError,
)
from campus_feed.services.votes import VoteTarget

from ..dependencies import CurrentUserDep, VoteRepoDep

router = APIRouter(prefix="/votes", tags=["votes"])

# Configure logger for this module
logger = logging.getLogger(__name__)


def _unavailable(target: VoteTarget, entity_id: str) -> HTTPException:
    logger.error("Vote store failed for %s %s", target.value, entity_id, exc_info=True)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Failed to record the vote. Please try again.",
    )


def _not_found(target: VoteTarget) -> HTTPException:
    detail = "Post not found" if target is VoteTarget.POST else "Comment not found"
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


async def _tally(
    votes: VoteRepository, target: VoteTarget, entity_id: str, voter_id: str | None
) -> VoteTallyResponse:
    try:
        return await votes.tally(target, entity_id, voter_id)
    except EntityNotFoundError as exc:
        raise _not_found(target) from exc
    except StoreError as exc:
        raise _unavailable(target, entity_id) from exc


@router.post(
    "/{target}/{entity_id}",
    response_model=VoteTallyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_vote(
    target: VoteTarget,
    entity_id: str,
    vote_data: VoteRequest,
    current_user: CurrentUserDep,
    votes: VoteRepoDep,
) -> VoteTallyResponse:
    """Cast the caller's first vote on a post or comment.

    Raises:
        HTTPException: 404 for an unknown entity, 409 if a vote exists, 503 on store failure
    """
    await _tally(votes, target, entity_id, None)
    try:
        await votes.create_vote(target, entity_id, current_user.id, vote_data.direction)
    except VoteConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Vote has already been cast",
        ) from exc
    except EntityNotFoundError as exc:
        raise _not_found(target) from exc
    except StoreError as exc:
        raise _unavailable(target, entity_id) from exc
    return await _tally(votes, target, entity_id, current_user.id)


@router.patch("/{target}/{entity_id}", response_model=VoteTallyResponse)
async def update_vote(
    target: VoteTarget,
    entity_id: str,
    vote_data: VoteRequest,
    current_user: CurrentUserDep,
    votes: VoteRepoDep,
) -> VoteTallyResponse:
    """Switch the caller's existing vote to the other direction."""
    await _tally(votes, target, entity_id, None)
    try:
        await votes.update_vote(target, entity_id, current_user.id, vote_data.direction)
    except VoteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vote not found") from exc
    except EntityNotFoundError as exc:
        raise _not_found(target) from exc
    except StoreError as exc:
        raise _unavailable(target, entity_id) from exc
    return await _tally(votes, target, entity_id, current_user.id)


@router.delete("/{target}/{entity_id}", response_model=VoteTallyResponse)
async def delete_vote(
    target: VoteTarget,
    entity_id: str,
    current_user: CurrentUserDep,
    votes: VoteRepoDep,
) -> VoteTallyResponse:
    """Withdraw the caller's vote."""
    await _tally(votes, target, entity_id, None)
    try:
        await votes.delete_vote(target, entity_id, current_user.id)
    except VoteNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vote not found") from exc
    except EntityNotFoundError as exc:
        raise _not_found(target) from exc
    except StoreError as exc:
        raise _unavailable(target, entity_id) from exc
    return await _tally(votes, target, entity_id, current_user.id)


@router.get("/{target}/{entity_id}/my-vote", response_model=MyVoteResponse)
async def get_my_vote(
    target: VoteTarget,
    entity_id: str,
    current_user: CurrentUserDep,
    votes: VoteRepoDep,
) -> MyVoteResponse:
    """Get the caller's vote on a post or comment; 0 when there is none."""
    try:
        direction = await votes.get_vote(target, entity_id, current_user.id)
    except StoreError as exc:
        raise _unavailable(target, entity_id) from exc
    return MyVoteResponse(direction=direction or 0)
