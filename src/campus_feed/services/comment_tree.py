"""Rebuild comment threads from flat comment rows.

Comments are stored flat with a nullable ``parent_id``. :func:`build_tree`
links them in two passes over an id-indexed map, so the cost stays linear and
no parent chain is ever followed. A ``parent_id`` that does not match any
fetched comment makes the comment a root.

The remaining helpers work on the built forest without mutating it: they return
new lists and only copy the nodes on the path to the change, so untouched
subtrees keep their identity.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from campus_feed.schemas.comment import CommentRecord

from .votes import viewer_vote_for

__all__ = [
    "CommentNode",
    "build_tree",
    "count_nodes",
    "find_node",
    "iter_nodes",
    "remove_node",
    "replace_node",
]


@dataclass
class CommentNode:
    """A comment annotated with its replies and the viewer's own vote."""

    id: str
    post_id: str
    parent_id: str | None
    author_id: str | None
    author_name: str | None
    author_avatar_url: str | None
    body: str
    image_url: str | None
    created_at: datetime
    like_count: int
    dislike_count: int
    viewer_vote: int | None = None
    children: list[CommentNode] = field(default_factory=list)

    @property
    def score(self) -> int:
        return self.like_count - self.dislike_count

    @classmethod
    def from_record(cls, record: CommentRecord, viewer_id: str | None) -> CommentNode:
        return cls(
            id=record.id,
            post_id=record.post_id,
            parent_id=record.parent_id,
            author_id=record.author_id,
            author_name=record.author_name,
            author_avatar_url=record.author_avatar_url,
            body=record.body,
            image_url=record.image_url,
            created_at=record.created_at,
            like_count=record.like_count,
            dislike_count=record.dislike_count,
            viewer_vote=viewer_vote_for(record.vote_records, viewer_id),
        )


def _by_created_at(node: CommentNode) -> datetime:
    return node.created_at


def build_tree(records: Iterable[CommentRecord], viewer_id: str | None) -> list[CommentNode]:
    """Link the flat comments of one post into an ordered forest.

    Args:
        records: Comment rows for a single post, in any order.
        viewer_id: Viewer whose own vote is copied onto each node, if any.

    Returns:
        Root comments ascending by ``created_at``. Every ``children`` list is
        sorted the same way; equal timestamps keep their input order.
    """
    nodes = [CommentNode.from_record(record, viewer_id) for record in records]
    index = {node.id: node for node in nodes}

    roots: list[CommentNode] = []
    for node in nodes:
        parent = index.get(node.parent_id) if node.parent_id is not None else None
        if parent is None:
            roots.append(node)
        else:
            # A self-parented row lands in its own children and is never a root.
            parent.children.append(node)

    roots.sort(key=_by_created_at)
    for node in nodes:
        if len(node.children) > 1:
            node.children.sort(key=_by_created_at)
    return roots


def iter_nodes(roots: Iterable[CommentNode]) -> Iterator[CommentNode]:
    """Yield every node reachable from ``roots``, depth first, in display order."""
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def count_nodes(roots: Iterable[CommentNode]) -> int:
    return sum(1 for _ in iter_nodes(roots))


def find_node(roots: Iterable[CommentNode], comment_id: str) -> CommentNode | None:
    """Return the node with ``comment_id`` anywhere in the forest, or None."""
    for node in iter_nodes(roots):
        if node.id == comment_id:
            return node
    return None


def replace_node(roots: Sequence[CommentNode], replacement: CommentNode) -> list[CommentNode]:
    """Return a forest where the node sharing ``replacement.id`` is swapped out.

    Ancestors of the replaced node are shallow-copied with a new ``children``
    list; every other node is reused as is. If no node matches, the result is
    a new list holding the same nodes.
    """
    replaced, _ = _replace_in(roots, replacement)
    return replaced


def _replace_in(
    nodes: Sequence[CommentNode],
    replacement: CommentNode,
) -> tuple[list[CommentNode], bool]:
    result = list(nodes)
    for position, node in enumerate(nodes):
        if node.id == replacement.id:
            result[position] = replacement
            return result, True
        if node.children:
            children, found = _replace_in(node.children, replacement)
            if found:
                result[position] = dataclasses.replace(node, children=children)
                return result, True
    return result, False


def remove_node(roots: Sequence[CommentNode], comment_id: str) -> list[CommentNode]:
    """Return a forest without the node ``comment_id``.

    The node is filtered out of the list that holds it. Its replies are not
    promoted to its parent; they leave the rendered tree along with it.
    """
    removed, _ = _remove_in(roots, comment_id)
    return removed


def _remove_in(nodes: Sequence[CommentNode], comment_id: str) -> tuple[list[CommentNode], bool]:
    result: list[CommentNode] = []
    found = False
    for node in nodes:
        if node.id == comment_id:
            found = True
            continue
        if not found and node.children:
            children, found = _remove_in(node.children, comment_id)
            if found:
                node = dataclasses.replace(node, children=children)
        result.append(node)
    return result, found
