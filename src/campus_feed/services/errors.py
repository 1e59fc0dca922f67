"""Exceptions raised by the feed services and their collaborators."""


class FeedError(RuntimeError):
    """Base exception for post, comment and vote failures."""


class UnauthenticatedError(FeedError):
    """Raised when a vote or delete is attempted without a viewer.

    Nothing is sent to any store when this is raised.
    """


class StoreError(FeedError):
    """Raised by a comment source, vote store or comment deleter on failure."""


class VoteConflictError(StoreError):
    """Raised when creating a vote that already exists for the voter."""


class VoteNotFoundError(StoreError):
    """Raised when updating or deleting a vote that does not exist."""


class CommentNotFoundError(FeedError, LookupError):
    """Raised when a comment id is not present in the held tree or the store."""


class CommentPermissionError(FeedError):
    """Raised when a viewer tries to delete a comment they did not write."""


class CommentDeleteError(FeedError):
    """Raised when the store refuses a comment deletion; local state is unchanged."""


class EntityNotFoundError(StoreError, LookupError):
    """Raised by a vote store when the voted post or comment does not exist."""
