# src/campus_feed/api/v1/endpoints/posts.py
"""Post-related endpoints for the Campus Feed API."""

import logging

from fastapi import APIRouter, HTTPException, Query, status

from campus_feed.core.settings import settings
from campus_feed.models import Post
from campus_feed.repositories import PostRepository
from campus_feed.schemas.comment import CommentCreate, CommentNodeResponse, CommentRecord
from campus_feed.schemas.post import PostCreate, PostResponse, PostSort
from campus_feed.services.comment_tree import CommentNode, build_tree
from campus_feed.services.errors import CommentNotFoundError, StoreError
from campus_feed.services.votes import PostSnapshot

from ..dependencies import CommentRepoDep, CurrentUserDep, OptionalUserDep, PostRepoDep

router = APIRouter(prefix="/posts", tags=["posts"])

# Configure logger for this module
logger = logging.getLogger(__name__)


def _unavailable(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


async def _require_post(posts: PostRepository, post_id: str) -> Post:
    try:
        post = await posts.get_by_id(post_id)
    except StoreError as exc:
        logger.error("Error loading post %s", post_id, exc_info=True)
        raise _unavailable("Failed to load the post") from exc
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


@router.get("/", response_model=list[PostResponse])
async def list_posts(
    posts: PostRepoDep,
    viewer: OptionalUserDep,
    sort: PostSort = Query(PostSort.RECENT, description="Order newest first or by likes"),
    q: str | None = Query(None, description="Only posts whose text contains this"),
    mine: bool = Query(False, description="Only the caller's own posts"),
    with_media: bool = Query(False, description="Only posts with an image"),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of posts to return"),
    offset: int = Query(0, ge=0),
) -> list[PostSnapshot]:
    """List feed posts with the caller's own vote on each.

    Raises:
        HTTPException: If ``mine`` is requested without a token, or the feed cannot be read
    """
    if mine and viewer is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    viewer_id = viewer.id if viewer else None
    try:
        records = await posts.list_posts(
            sort=sort,
            search=q,
            author_id=viewer_id if mine else None,
            with_media=with_media,
            limit=limit,
            offset=offset,
        )
    except StoreError as exc:
        logger.error("Error listing posts", exc_info=True)
        raise _unavailable("Failed to load posts") from exc
    return [PostSnapshot.from_record(record, viewer_id) for record in records]


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    posts: PostRepoDep,
    current_user: CurrentUserDep,
) -> PostSnapshot:
    """Write a post, optionally anonymous and with an image.

    Raises:
        HTTPException: If the body is blank or the post cannot be saved
    """
    body = post_data.body.strip()
    if not body:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Post cannot be empty",
        )

    try:
        record = await posts.create_post(
            author_id=current_user.id,
            body=body,
            image_url=post_data.image_url,
            is_anonymous=post_data.is_anonymous,
        )
    except StoreError as exc:
        logger.error("Error creating post", exc_info=True)
        raise _unavailable("Failed to create the post") from exc
    return PostSnapshot.from_record(record, current_user.id)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    posts: PostRepoDep,
    viewer: OptionalUserDep,
) -> PostSnapshot:
    """Get a post with the caller's own vote.

    The author is omitted from the response when the post is anonymous.

    Raises:
        HTTPException: If the post does not exist
    """
    try:
        record = await posts.get_post(post_id)
    except StoreError as exc:
        logger.error("Error loading post %s", post_id, exc_info=True)
        raise _unavailable("Failed to load the post") from exc
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return PostSnapshot.from_record(record, viewer.id if viewer else None)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str,
    posts: PostRepoDep,
    current_user: CurrentUserDep,
) -> None:
    """Delete a post with all of its comments and votes (author only).

    Anonymous posts cannot be deleted, since nothing on screen ties them to
    their author.

    Raises:
        HTTPException: If the post is not found or the caller may not delete it
    """
    post = await _require_post(posts, post_id)
    if post.is_anonymous or post.author_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to delete this post",
        )

    try:
        await posts.delete_post(post_id)
    except StoreError as exc:
        logger.error("Error deleting post %s", post_id, exc_info=True)
        raise _unavailable("Failed to delete the post") from exc


@router.get("/{post_id}/comments", response_model=list[CommentNodeResponse])
async def get_comment_tree(
    post_id: str,
    posts: PostRepoDep,
    comments: CommentRepoDep,
    viewer: OptionalUserDep,
) -> list[CommentNode]:
    """Get the threaded comments of a post, oldest first at every level.

    Raises:
        HTTPException: If the post does not exist or its comments cannot be read
    """
    await _require_post(posts, post_id)
    try:
        records = await comments.fetch_comments(post_id)
    except StoreError as exc:
        logger.error("Error loading comments of post %s", post_id, exc_info=True)
        raise _unavailable("Failed to load comments") from exc
    return build_tree(records, viewer.id if viewer else None)


@router.get("/{post_id}/comments/flat", response_model=list[CommentRecord])
async def get_flat_comments(
    post_id: str,
    posts: PostRepoDep,
    comments: CommentRepoDep,
) -> list[CommentRecord]:
    """Get the comments of a post as flat rows with their votes embedded.

    Raises:
        HTTPException: If the post does not exist or its comments cannot be read
    """
    await _require_post(posts, post_id)
    try:
        return await comments.fetch_comments(post_id)
    except StoreError as exc:
        logger.error("Error loading comments of post %s", post_id, exc_info=True)
        raise _unavailable("Failed to load comments") from exc


@router.post(
    "/{post_id}/comments",
    response_model=CommentRecord,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: str,
    comment_data: CommentCreate,
    posts: PostRepoDep,
    comments: CommentRepoDep,
    current_user: CurrentUserDep,
) -> CommentRecord:
    """Write a comment on a post, or a reply to one of its comments.

    Raises:
        HTTPException: If the post or parent comment is missing, or the body is too long
    """
    await _require_post(posts, post_id)

    body = comment_data.body.strip()
    if not body:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Comment cannot be empty",
        )
    if len(body) > settings.comment_max_length:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Comment is longer than {settings.comment_max_length} characters",
        )

    try:
        return await comments.create_comment(
            post_id=post_id,
            author_id=current_user.id,
            body=body,
            parent_id=comment_data.parent_id,
            image_url=comment_data.image_url,
        )
    except CommentNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Parent comment not found",
        ) from exc
    except StoreError as exc:
        logger.error("Error saving comment on post %s", post_id, exc_info=True)
        raise _unavailable("Failed to save the comment") from exc
