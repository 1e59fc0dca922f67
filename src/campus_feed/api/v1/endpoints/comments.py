# src/campus_feed/api/v1/endpoints/comments.py
"""Comment-related endpoints for the Campus Feed API."""

import logging

from fastapi import APIRouter, HTTPException, status

from campus_feed.services.errors import StoreError

from ..dependencies import CommentRepoDep, CurrentUserDep

router = APIRouter(prefix="/comments", tags=["comments"])

# Configure logger for this module
logger = logging.getLogger(__name__)


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: str,
    comments: CommentRepoDep,
    current_user: CurrentUserDep,
) -> None:
    """Delete one of the caller's comments along with its replies.

    Raises:
        HTTPException: If the comment is not found or the caller is not its author
    """
    try:
        comment = await comments.get_comment(comment_id)
    except StoreError as exc:
        logger.error("Error loading comment %s", comment_id, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to delete comment. Please try again.",
        ) from exc
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")

    # Only the author can delete their own comments
    if comment.author_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own comments",
        )

    try:
        await comments.delete_comment(comment_id)
    except StoreError as exc:
        logger.error("Error deleting comment %s", comment_id, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to delete comment. Please try again.",
        ) from exc
