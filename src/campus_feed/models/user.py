# src/campus_feed/models/user.py
"""SQLAlchemy model for campus users."""

from __future__ import annotations

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from campus_feed.db.session import Base

from ._common import new_id


class User(Base):
    """Student or staff account as seen by the feed.

    Sign-up and login live in the hosted auth service; this table only carries
    the display fields embedded in posts and comments.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
