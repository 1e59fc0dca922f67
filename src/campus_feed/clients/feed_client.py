"""HTTP client for the Campus Feed API.

:class:`FeedClient` implements the comment source, vote store and comment
deleter protocols over HTTP, so a :class:`~campus_feed.services.post_detail.PostDetailSession`
can run in a separate process from the service. Transport errors and non-2xx
responses are raised as :class:`~campus_feed.services.errors.StoreError`.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter

from campus_feed.core.settings import settings
from campus_feed.schemas.comment import CommentRecord
from campus_feed.schemas.post import PostResponse
from campus_feed.services.errors import StoreError, VoteConflictError, VoteNotFoundError
from campus_feed.services.votes import PostSnapshot, VoteTarget

# Configure logger for this module
logger = logging.getLogger(__name__)

HTTP_NOT_FOUND = 404
HTTP_CONFLICT = 409

T = TypeVar("T")

_POST = TypeAdapter(PostResponse)
_COMMENT = TypeAdapter(CommentRecord)
_COMMENT_LIST = TypeAdapter(list[CommentRecord])


class FeedClient:
    """Async HTTP wrapper around the post, comment and vote endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout_seconds: float | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.api_base_url
        self.token = token
        self.timeout_seconds = (
            settings.http_timeout_seconds if timeout_seconds is None else timeout_seconds
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                headers = {"Accept": "application/json"}
                if self.token:
                    headers["Authorization"] = f"Bearer {self.token}"
                self._client = httpx.AsyncClient(
                    base_url=self.base_url,
                    timeout=httpx.Timeout(self.timeout_seconds),
                    headers=headers,
                    transport=self._transport,
                )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> FeedClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_data: Any | None = None,
        is_vote: bool = False,
    ) -> httpx.Response:
        client = await self._ensure_client()
        try:
            response = await client.request(method, path, json=json_data)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise StoreError(f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            return response

        detail = _error_detail(response)
        logger.debug("%s %s returned %d: %s", method, path, response.status_code, detail)
        if is_vote and response.status_code == HTTP_NOT_FOUND:
            raise VoteNotFoundError(detail)
        if is_vote and response.status_code == HTTP_CONFLICT:
            raise VoteConflictError(detail)
        raise StoreError(f"{method} {path} returned {response.status_code}: {detail}")

    async def fetch_post(self, post_id: str) -> PostSnapshot:
        """Fetch a post as seen by the token's user."""
        response = await self._request("GET", f"/posts/{post_id}")
        payload = _decode(response, _POST)
        return PostSnapshot(**payload.model_dump())

    async def fetch_comments(self, post_id: str) -> list[CommentRecord]:
        """Fetch the flat comment rows of a post."""
        response = await self._request("GET", f"/posts/{post_id}/comments/flat")
        return _decode(response, _COMMENT_LIST)

    async def create_comment(
        self,
        post_id: str,
        body: str,
        *,
        parent_id: str | None = None,
        image_url: str | None = None,
    ) -> CommentRecord:
        """Write a comment or a reply as the token's user."""
        response = await self._request(
            "POST",
            f"/posts/{post_id}/comments",
            json_data={"body": body, "parent_id": parent_id, "image_url": image_url},
        )
        return _decode(response, _COMMENT)

    async def delete_comment(self, comment_id: str) -> None:
        await self._request("DELETE", f"/comments/{comment_id}")

    async def create_vote(
        self, target: VoteTarget, entity_id: str, voter_id: str, direction: int
    ) -> None:
        await self._request(
            "POST",
            f"/votes/{target.value}/{entity_id}",
            json_data={"direction": direction},
            is_vote=True,
        )

    async def update_vote(
        self, target: VoteTarget, entity_id: str, voter_id: str, direction: int
    ) -> None:
        await self._request(
            "PATCH",
            f"/votes/{target.value}/{entity_id}",
            json_data={"direction": direction},
            is_vote=True,
        )

    async def delete_vote(self, target: VoteTarget, entity_id: str, voter_id: str) -> None:
        # The voter is the token's subject; ``voter_id`` only keys the local operation.
        await self._request("DELETE", f"/votes/{target.value}/{entity_id}", is_vote=True)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and "detail" in body:
        return str(body["detail"])
    return str(body)


def _decode(response: httpx.Response, adapter: TypeAdapter[T]) -> T:
    """Parse a successful response body, raising StoreError if it is not the expected shape."""
    try:
        return adapter.validate_python(response.json())
    except ValueError as exc:
        # Covers both invalid JSON and pydantic.ValidationError.
        logger.warning("Unexpected response body from %s: %s", response.request.url, exc)
        raise StoreError(f"Malformed response from {response.request.url.path}") from exc
