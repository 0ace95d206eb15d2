"""Per-author writing statistics and the insight sentence built on them."""

from __future__ import annotations

from datetime import UTC, datetime, tzinfo

from pydantic import BaseModel

from taman.content.models import Post, PostStatus, word_count

# Index 0 is Sunday, matching the day numbering the stored data was built with.
DAY_NAMES = ["Minggu", "Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu"]
NO_DATA = "-"


class AuthorStats(BaseModel):
    """Aggregates over an author's non-deleted posts."""

    total_posts: int = 0
    total_words: int = 0
    published_count: int = 0
    last_active: datetime | None = None
    productive_day: str = NO_DATA
    time_of_day: str = NO_DATA


def time_of_day_bucket(hour: int) -> str:
    """Map an hour (0-23) to Pagi, Siang, Sore or Malam."""
    if 5 <= hour < 12:
        return "Pagi"
    if 12 <= hour < 17:
        return "Siang"
    if 17 <= hour < 21:
        return "Sore"
    return "Malam"


def _sunday_first(moment: datetime) -> int:
    return (moment.weekday() + 1) % 7


def compute_stats(posts: list[Post], username: str, tz: tzinfo = UTC) -> AuthorStats:
    """Compute statistics for ``username``.

    Counts and word totals cover published posts only.  Last activity and
    the day/hour habits look at every non-deleted post, drafts included.
    The habit fields stay ``"-"`` until at least one post is published.
    """
    active = [p for p in posts if p.author_username == username and not p.is_deleted]
    published = [p for p in active if p.status == PostStatus.PUBLISHED]

    total_posts = len(published)
    total_words = sum(word_count(p.content) for p in published)
    last_active = max((p.date for p in active), default=None)

    day_counts = [0] * 7
    hour_counts = [0] * 24
    for post in active:
        local = post.date.astimezone(tz)
        day_counts[_sunday_first(local)] += 1
        hour_counts[local.hour] += 1

    productive_day = NO_DATA
    time_of_day = NO_DATA
    if total_posts > 0:
        productive_day = DAY_NAMES[day_counts.index(max(day_counts))]
        time_of_day = time_of_day_bucket(hour_counts.index(max(hour_counts)))

    return AuthorStats(
        total_posts=total_posts,
        total_words=total_words,
        published_count=total_posts,
        last_active=last_active,
        productive_day=productive_day,
        time_of_day=time_of_day,
    )


def insight_text(stats: AuthorStats) -> str:
    """One-line encouragement derived from the author's statistics."""
    if stats.total_posts == 0:
        return "Mulailah menulis untuk melihat polamu."

    insight = f"Kamu paling produktif di {stats.time_of_day.lower()} hari. "
    if stats.total_words > 5000:
        insight += "Kata-katamu mulai mengalir deras."
    elif stats.total_words > 1000:
        insight += "Konsistensi mulai terbentuk."
    else:
        insight += "Setiap kata adalah langkah awal."
    return insight
