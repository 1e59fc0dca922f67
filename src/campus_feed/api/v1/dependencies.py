"""Shared API dependencies for viewer identity and repositories."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from campus_feed.core.security import decode_subject
from campus_feed.db.session import get_db
from campus_feed.models import User
from campus_feed.repositories import CommentRepository, PostRepository, VoteRepository

# HTTP Bearer scheme; missing credentials are handled per endpoint.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Return the viewer behind the bearer token, or None for anonymous reads.

    A token that is present but invalid is still rejected.

    Raises:
        HTTPException: If the token is invalid or names an unknown user
    """
    if credentials is None:
        return None

    user_id = decode_subject(credentials.credentials)
    if user_id is None:
        raise _unauthorized("Could not validate credentials")

    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")
    return user


def get_current_user(user: Annotated[User | None, Depends(get_optional_user)]) -> User:
    """Return the authenticated viewer.

    Raises:
        HTTPException: If no valid bearer token was sent
    """
    if user is None:
        raise _unauthorized("Not authenticated")
    return user


def get_comment_repository(db: SessionDep) -> CommentRepository:
    return CommentRepository(db)


def get_post_repository(db: SessionDep) -> PostRepository:
    return PostRepository(db)


def get_vote_repository(db: SessionDep) -> VoteRepository:
    return VoteRepository(db)


# Type aliases for common dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
CommentRepoDep = Annotated[CommentRepository, Depends(get_comment_repository)]
PostRepoDep = Annotated[PostRepository, Depends(get_post_repository)]
VoteRepoDep = Annotated[VoteRepository, Depends(get_vote_repository)]
