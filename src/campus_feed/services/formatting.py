"""Display helpers shared by post and comment views."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

# Largest unit first; a unit is used once more than one whole unit has passed.
_AGE_UNITS = (
    (31_536_000, "y"),
    (2_592_000, "mo"),
    (86_400, "d"),
    (3_600, "h"),
    (60, "m"),
)


def net_score(like_count: int, dislike_count: int) -> int:
    """Return the signed vote total shown between the vote buttons."""
    return like_count - dislike_count


def _percent(part: int, total: int) -> int:
    ratio = Decimal(part * 100) / Decimal(total)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_vote_rate(like_count: int, dislike_count: int) -> str:
    """Describe the dominant vote share, e.g. ``"75% ↑"`` or ``"60% ↓"``.

    Ties favour the upvote share. A post without votes shows ``"0%"``.
    """
    total = like_count + dislike_count
    if total == 0:
        return "0%"

    upvote_rate = _percent(like_count, total)
    downvote_rate = _percent(dislike_count, total)
    if upvote_rate >= downvote_rate:
        return f"{upvote_rate}% ↑"
    return f"{downvote_rate}% ↓"


def format_relative_time(created_at: datetime, now: datetime | None = None) -> str:
    """Render the age of ``created_at`` compactly: ``"3d"``, ``"5h"``, ``"42s"``.

    Naive datetimes are taken as UTC.
    """
    if now is None:
        now = datetime.now(UTC)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    seconds = int((now - created_at).total_seconds())
    for unit_seconds, suffix in _AGE_UNITS:
        if seconds / unit_seconds > 1:
            return f"{seconds // unit_seconds}{suffix}"
    return f"{seconds}s"


def display_author(is_anonymous: bool, author_name: str | None) -> str:
    """Return the name to show for an author, honouring anonymity."""
    if is_anonymous:
        return "Anonymous"
    return author_name or "User"


def replies_label(count: int, expanded: bool) -> str:
    """Label of the replies toggle: ``"3 Replies"``, or ``"Hide Replies"`` once open."""
    noun = "Reply" if count == 1 else "Replies"
    if expanded:
        return f"Hide {noun}"
    return f"{count} {noun}"
