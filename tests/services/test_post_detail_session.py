# tests/services/test_post_detail_session.py
"""Tests for optimistic voting and confirmed deletion in post-detail sessions."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
from conftest import at, make_record

from campus_feed.services.comment_tree import find_node
from campus_feed.services.errors import (
    CommentDeleteError,
    CommentNotFoundError,
    CommentPermissionError,
    StoreError,
    UnauthenticatedError,
)
from campus_feed.services.post_detail import PostDetailSession
from campus_feed.services.votes import DOWNVOTE, UPVOTE, PostSnapshot, VoteOpKind, VoteTarget

VIEWER = "viewer-1"


def _post(likes: int = 3, dislikes: int = 1) -> PostSnapshot:
    return PostSnapshot(
        id="post-1",
        author_id="author-1",
        author_name="Author",
        author_avatar_url=None,
        body="hello",
        image_url=None,
        is_anonymous=False,
        created_at=at(0),
        like_count=likes,
        dislike_count=dislikes,
    )


class FakeBackend:
    """Comment source, vote store and deleter backed by AsyncMocks."""

    def __init__(self, records=None) -> None:
        self.fetch_comments = AsyncMock(return_value=list(records or []))
        self.create_vote = AsyncMock(return_value=None)
        self.update_vote = AsyncMock(return_value=None)
        self.delete_vote = AsyncMock(return_value=None)
        self.delete_comment = AsyncMock(return_value=None)


def _thread() -> list:
    return [
        make_record("P", t=1, author_id=VIEWER),
        make_record("Q", parent_id="P", t=2, author_id="someone-else"),
        make_record("R", t=3, author_id=VIEWER, likes=2),
    ]


async def _session(records=None, viewer_id: str | None = VIEWER, **kwargs) -> tuple:
    backend = FakeBackend(_thread() if records is None else records)
    session = PostDetailSession.with_backend(_post(), viewer_id, backend, **kwargs)
    await session.load_comments()
    return session, backend


class TestLoadComments:
    @pytest.mark.asyncio
    async def test_load_builds_tree(self) -> None:
        session, backend = await _session()

        assert [node.id for node in session.comments] == ["P", "R"]
        assert [node.id for node in session.comments[0].children] == ["Q"]
        backend.fetch_comments.assert_awaited_once_with("post-1")

    @pytest.mark.asyncio
    async def test_failed_load_keeps_tree(self) -> None:
        session, backend = await _session()
        backend.fetch_comments.side_effect = StoreError("offline")

        with pytest.raises(StoreError):
            await session.load_comments()

        assert [node.id for node in session.comments] == ["P", "R"]


class TestVotePost:
    @pytest.mark.asyncio
    async def test_upvote_is_committed(self) -> None:
        session, backend = await _session()

        result = await session.vote_post(UPVOTE)

        assert result.committed is True
        assert (session.post.like_count, session.post.dislike_count) == (4, 1)
        assert session.post.viewer_vote == UPVOTE
        backend.create_vote.assert_awaited_once_with(VoteTarget.POST, "post-1", VIEWER, UPVOTE)

    @pytest.mark.asyncio
    async def test_failed_upvote_rolls_back(self) -> None:
        """3/1 becomes 4/1 while the write is pending, then 3/1 again when it fails."""
        session, backend = await _session()
        gate = asyncio.Event()
        seen_while_pending = {}

        async def failing_create(*args) -> None:
            seen_while_pending["counts"] = (session.post.like_count, session.post.dislike_count)
            await gate.wait()
            raise StoreError("write failed")

        backend.create_vote.side_effect = failing_create

        task = asyncio.create_task(session.vote_post(UPVOTE))
        await asyncio.sleep(0)
        assert (session.post.like_count, session.post.dislike_count) == (4, 1)
        gate.set()
        result = await task

        assert seen_while_pending["counts"] == (4, 1)
        assert result.committed is False
        assert isinstance(result.error, StoreError)
        assert (session.post.like_count, session.post.dislike_count) == (3, 1)
        assert session.post.viewer_vote is None
        # A failed post vote never refetches comments.
        backend.fetch_comments.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_double_tap_toggles_twice(self) -> None:
        """Two taps before either write settles still end with no vote."""
        session, backend = await _session()

        await asyncio.gather(session.vote_post(UPVOTE), session.vote_post(UPVOTE))

        assert (session.post.like_count, session.post.dislike_count) == (3, 1)
        assert session.post.viewer_vote is None
        backend.create_vote.assert_awaited_once()
        backend.delete_vote.assert_awaited_once_with(VoteTarget.POST, "post-1", VIEWER)

    @pytest.mark.asyncio
    async def test_switch_sends_update(self) -> None:
        session, backend = await _session()
        await session.vote_post(UPVOTE)

        result = await session.vote_post(DOWNVOTE)

        assert result.operation.kind is VoteOpKind.UPDATE
        assert (session.post.like_count, session.post.dislike_count) == (3, 2)
        backend.update_vote.assert_awaited_once_with(VoteTarget.POST, "post-1", VIEWER, DOWNVOTE)

    @pytest.mark.asyncio
    async def test_anonymous_viewer_cannot_vote(self) -> None:
        session, backend = await _session(viewer_id=None)

        with pytest.raises(UnauthenticatedError):
            await session.vote_post(UPVOTE)

        assert (session.post.like_count, session.post.viewer_vote) == (3, None)
        backend.create_vote.assert_not_awaited()


class TestVoteComment:
    @pytest.mark.asyncio
    async def test_vote_on_reply_updates_only_that_node(self) -> None:
        session, backend = await _session()
        sibling = session.comments[1]

        result = await session.vote_comment("Q", DOWNVOTE)

        assert result.committed is True
        node = find_node(session.comments, "Q")
        assert (node.like_count, node.dislike_count, node.viewer_vote) == (0, 1, DOWNVOTE)
        assert session.comments[1] is sibling
        backend.create_vote.assert_awaited_once_with(VoteTarget.COMMENT, "Q", VIEWER, DOWNVOTE)

    @pytest.mark.asyncio
    async def test_failed_vote_rolls_back_and_refetches(self) -> None:
        session, backend = await _session()
        backend.create_vote.side_effect = StoreError("write failed")
        fresh = [*_thread(), make_record("S", t=4)]
        backend.fetch_comments.return_value = fresh

        result = await session.vote_comment("R", UPVOTE)

        assert result.committed is False
        assert backend.fetch_comments.await_count == 2
        assert [node.id for node in session.comments] == ["P", "R", "S"]
        node = find_node(session.comments, "R")
        assert (node.like_count, node.viewer_vote) == (2, None)
        assert result.snapshot.like_count == 2

    @pytest.mark.asyncio
    async def test_failed_vote_without_refetch(self) -> None:
        session, backend = await _session(refetch_on_comment_vote_failure=False)
        backend.update_vote.side_effect = StoreError("write failed")
        backend.delete_vote.side_effect = StoreError("write failed")
        await session.vote_comment("R", UPVOTE)

        result = await session.vote_comment("R", DOWNVOTE)

        assert result.committed is False
        backend.fetch_comments.assert_awaited_once()
        node = find_node(session.comments, "R")
        assert (node.like_count, node.dislike_count, node.viewer_vote) == (3, 0, UPVOTE)

    @pytest.mark.asyncio
    async def test_refetch_failure_is_swallowed(self) -> None:
        session, backend = await _session()
        backend.create_vote.side_effect = StoreError("write failed")
        backend.fetch_comments.side_effect = StoreError("still offline")

        result = await session.vote_comment("Q", UPVOTE)

        assert result.committed is False
        node = find_node(session.comments, "Q")
        assert (node.like_count, node.viewer_vote) == (0, None)

    @pytest.mark.asyncio
    async def test_unknown_comment(self) -> None:
        session, backend = await _session()

        with pytest.raises(CommentNotFoundError):
            await session.vote_comment("missing", UPVOTE)

        backend.create_vote.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_anonymous_viewer_cannot_vote(self) -> None:
        session, backend = await _session(viewer_id=None)

        with pytest.raises(UnauthenticatedError):
            await session.vote_comment("P", UPVOTE)

        backend.create_vote.assert_not_awaited()


class TestDeleteComment:
    @pytest.mark.asyncio
    async def test_delete_removes_node_and_replies(self) -> None:
        session, backend = await _session()
        session.toggle_replies("P")

        await session.delete_comment("P")

        assert [node.id for node in session.comments] == ["R"]
        assert find_node(session.comments, "Q") is None
        assert session.is_expanded("P") is False
        backend.delete_comment.assert_awaited_once_with("P")

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_tree(self) -> None:
        session, backend = await _session()
        backend.delete_comment.side_effect = StoreError("refused")
        before = session.comments

        with pytest.raises(CommentDeleteError):
            await session.delete_comment("R")

        assert session.comments is before
        assert [node.id for node in session.comments] == ["P", "R"]

    @pytest.mark.asyncio
    async def test_cannot_delete_others_comment(self) -> None:
        session, backend = await _session()

        with pytest.raises(CommentPermissionError):
            await session.delete_comment("Q")

        backend.delete_comment.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_comment(self) -> None:
        session, backend = await _session()

        with pytest.raises(CommentNotFoundError):
            await session.delete_comment("missing")

    @pytest.mark.asyncio
    async def test_anonymous_viewer_cannot_delete(self) -> None:
        session, backend = await _session(viewer_id=None)

        with pytest.raises(UnauthenticatedError):
            await session.delete_comment("P")

        backend.delete_comment.assert_not_awaited()


@pytest.mark.asyncio
async def test_toggle_replies() -> None:
    session, _ = await _session()

    assert session.is_expanded("P") is False
    assert session.toggle_replies("P") is True
    assert session.is_expanded("P") is True
    assert session.toggle_replies("P") is False
