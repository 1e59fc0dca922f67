"""Post-detail session: the state behind one open post screen.

A session owns the post snapshot and the comment tree it fetched. Votes are
optimistic: the new counts are in place before the store is called, and the
pre-vote values are put back if the store fails. Comment deletions are not
optimistic: the node leaves the tree only once the store confirms.

Every mutation computes its next state from what the session holds at the
moment it is called, before its first ``await``. Two quick taps on the same
button therefore toggle twice instead of both starting from the original
state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from campus_feed.core.settings import settings

from .comment_tree import CommentNode, build_tree, find_node, remove_node, replace_node
from .errors import (
    CommentDeleteError,
    CommentNotFoundError,
    CommentPermissionError,
    StoreError,
    UnauthenticatedError,
)
from .stores import CommentDeleter, CommentSource, VoteStore, perform_vote_operation
from .votes import PostSnapshot, VoteOperation, VoteTarget, apply_vote, rollback

# Configure logger for this module
logger = logging.getLogger(__name__)

SnapshotT = TypeVar("SnapshotT", PostSnapshot, CommentNode)


class FeedBackend(CommentSource, VoteStore, CommentDeleter, Protocol):
    """A single collaborator serving comments, votes and deletions."""


@dataclass(frozen=True)
class VoteResult(Generic[SnapshotT]):
    """What a vote left on screen.

    Attributes:
        snapshot: The post or comment node as displayed after the vote settled.
        operation: The store mutation that was attempted.
        committed: False when the store failed and the vote was rolled back.
        error: The store failure, if any.
    """

    snapshot: SnapshotT
    operation: VoteOperation
    committed: bool
    error: StoreError | None = None


class PostDetailSession:
    """View-model for a post and its threaded comments."""

    def __init__(
        self,
        post: PostSnapshot,
        viewer_id: str | None,
        *,
        source: CommentSource,
        votes: VoteStore,
        deleter: CommentDeleter,
        refetch_on_comment_vote_failure: bool | None = None,
    ) -> None:
        self.post = post
        self.viewer_id = viewer_id
        self.comments: list[CommentNode] = []
        self._source = source
        self._votes = votes
        self._deleter = deleter
        if refetch_on_comment_vote_failure is None:
            refetch_on_comment_vote_failure = settings.comment_vote_refetch_on_failure
        self._refetch_on_comment_vote_failure = refetch_on_comment_vote_failure
        self._expanded: dict[str, bool] = {}

    @classmethod
    def with_backend(
        cls,
        post: PostSnapshot,
        viewer_id: str | None,
        backend: FeedBackend,
        **kwargs: bool,
    ) -> PostDetailSession:
        """Create a session whose three collaborators are the same object."""
        return cls(post, viewer_id, source=backend, votes=backend, deleter=backend, **kwargs)

    async def load_comments(self) -> list[CommentNode]:
        """Fetch the post's comments and rebuild the tree from scratch.

        Raises:
            StoreError: If the comment source fails; the held tree is unchanged.
        """
        records = await self._source.fetch_comments(self.post.id)
        self.comments = build_tree(records, self.viewer_id)
        logger.debug("Loaded %d comments for post %s", len(records), self.post.id)
        return self.comments

    async def vote_post(self, direction: int) -> VoteResult[PostSnapshot]:
        """Toggle the viewer's vote on the post.

        Raises:
            UnauthenticatedError: If the session has no viewer.
            ValueError: If ``direction`` is not 1 or -1.
        """
        previous = self.post
        updated, operation = apply_vote(previous, direction, self.viewer_id, target=VoteTarget.POST)
        self.post = updated

        try:
            await perform_vote_operation(self._votes, operation)
        except StoreError as exc:
            logger.warning("Vote on post %s failed, rolling back: %s", previous.id, exc)
            self.post = rollback(self.post, previous)
            return VoteResult(self.post, operation, committed=False, error=exc)

        return VoteResult(self.post, operation, committed=True)

    async def vote_comment(self, comment_id: str, direction: int) -> VoteResult[CommentNode]:
        """Toggle the viewer's vote on one comment anywhere in the tree.

        On failure only that node is rolled back, then the tree is refetched if
        the session is configured to.

        Raises:
            UnauthenticatedError: If the session has no viewer.
            CommentNotFoundError: If ``comment_id`` is not in the held tree.
            ValueError: If ``direction`` is not 1 or -1.
        """
        if self.viewer_id is None:
            raise UnauthenticatedError("You must be signed in to vote")

        previous = find_node(self.comments, comment_id)
        if previous is None:
            raise CommentNotFoundError(comment_id)

        updated, operation = apply_vote(
            previous, direction, self.viewer_id, target=VoteTarget.COMMENT
        )
        self.comments = replace_node(self.comments, updated)

        try:
            await perform_vote_operation(self._votes, operation)
        except StoreError as exc:
            logger.warning("Vote on comment %s failed, rolling back: %s", comment_id, exc)
            current = find_node(self.comments, comment_id)
            if current is not None:
                self.comments = replace_node(self.comments, rollback(current, previous))
            if self._refetch_on_comment_vote_failure:
                await self._refetch_after_failure()
            shown = find_node(self.comments, comment_id) or rollback(updated, previous)
            return VoteResult(shown, operation, committed=False, error=exc)

        return VoteResult(find_node(self.comments, comment_id) or updated, operation, committed=True)

    async def _refetch_after_failure(self) -> None:
        try:
            await self.load_comments()
        except StoreError as exc:
            logger.warning("Refetching comments for post %s failed: %s", self.post.id, exc)

    async def delete_comment(self, comment_id: str) -> None:
        """Delete one of the viewer's own comments.

        The node is removed from the tree only after the store confirms. Its
        replies are removed with it.

        Raises:
            UnauthenticatedError: If the session has no viewer.
            CommentNotFoundError: If ``comment_id`` is not in the held tree.
            CommentPermissionError: If the viewer did not write the comment.
            CommentDeleteError: If the store refuses; the tree is unchanged.
        """
        if self.viewer_id is None:
            raise UnauthenticatedError("You must be signed in to delete comments")

        node = find_node(self.comments, comment_id)
        if node is None:
            raise CommentNotFoundError(comment_id)
        if node.author_id != self.viewer_id:
            raise CommentPermissionError("You can only delete your own comments")

        try:
            await self._deleter.delete_comment(comment_id)
        except StoreError as exc:
            logger.error("Deleting comment %s failed", comment_id, exc_info=True)
            raise CommentDeleteError("Failed to delete comment. Please try again.") from exc

        self.comments = remove_node(self.comments, comment_id)
        self._expanded.pop(comment_id, None)

    def toggle_replies(self, comment_id: str) -> bool:
        """Flip whether the replies of ``comment_id`` are shown; return the new state."""
        expanded = not self._expanded.get(comment_id, False)
        self._expanded[comment_id] = expanded
        return expanded

    def is_expanded(self, comment_id: str) -> bool:
        return self._expanded.get(comment_id, False)
