# tests/test_formatting.py
"""Tests for the display helpers used by post and comment views."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from campus_feed.services.formatting import (
    display_author,
    format_relative_time,
    format_vote_rate,
    net_score,
    replies_label,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def test_net_score() -> None:
    assert net_score(4, 1) == 3
    assert net_score(0, 2) == -2


@pytest.mark.parametrize(
    ("likes", "dislikes", "expected"),
    [
        (0, 0, "0%"),
        (3, 1, "75% ↑"),
        (2, 3, "60% ↓"),
        (1, 1, "50% ↑"),
        (2, 1, "67% ↑"),
        (0, 4, "100% ↓"),
    ],
)
def test_format_vote_rate(likes: int, dislikes: int, expected: str) -> None:
    assert format_vote_rate(likes, dislikes) == expected


@pytest.mark.parametrize(
    ("age", "expected"),
    [
        (timedelta(seconds=42), "42s"),
        (timedelta(seconds=60), "60s"),
        (timedelta(minutes=5), "5m"),
        (timedelta(hours=3, minutes=20), "3h"),
        (timedelta(days=2), "2d"),
        (timedelta(days=70), "2mo"),
        (timedelta(days=800), "2y"),
    ],
)
def test_format_relative_time(age: timedelta, expected: str) -> None:
    assert format_relative_time(NOW - age, now=NOW) == expected


def test_format_relative_time_accepts_naive_datetimes() -> None:
    created_at = (NOW - timedelta(hours=2)).replace(tzinfo=None)

    assert format_relative_time(created_at, now=NOW) == "2h"


def test_display_author() -> None:
    assert display_author(True, "Alice") == "Anonymous"
    assert display_author(False, "Alice") == "Alice"
    assert display_author(False, None) == "User"


def test_replies_label() -> None:
    assert replies_label(1, expanded=False) == "1 Reply"
    assert replies_label(3, expanded=False) == "3 Replies"
    assert replies_label(3, expanded=True) == "Hide Replies"
    assert replies_label(1, expanded=True) == "Hide Reply"
