"""Tests for author statistics and insight text."""

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

import pytest
from taman.content.models import Post, PostStatus
from taman.content.stats import AuthorStats, compute_stats, insight_text, time_of_day_bucket

JAKARTA = ZoneInfo("Asia/Jakarta")


def _post(post_id: str, date: datetime, content: str = "a b c", **kwargs: object) -> Post:
    return Post(
        id=post_id,
        title="t",
        content=content,
        date=date,
        status=kwargs.pop("status", PostStatus.PUBLISHED),  # type: ignore[arg-type]
        author_username=kwargs.pop("author", "irsal"),  # type: ignore[arg-type]
        **kwargs,  # type: ignore[arg-type]
    )


class TestTimeOfDayBucket:
    @pytest.mark.parametrize(
        ("hour", "bucket"),
        [
            (4, "Malam"),
            (5, "Pagi"),
            (11, "Pagi"),
            (12, "Siang"),
            (16, "Siang"),
            (17, "Sore"),
            (20, "Sore"),
            (21, "Malam"),
            (0, "Malam"),
        ],
    )
    def test_boundaries(self, hour: int, bucket: str):
        assert time_of_day_bucket(hour) == bucket


class TestComputeStats:
    def test_no_posts(self):
        stats = compute_stats([], "irsal")
        assert stats == AuthorStats()
        assert stats.last_active is None

    def test_counts_only_published(self):
        posts = [
            _post("a", datetime(2024, 1, 7, 3, tzinfo=UTC), content="satu dua"),
            _post("b", datetime(2024, 1, 7, 3, tzinfo=UTC), status=PostStatus.DRAFT),
            _post("c", datetime(2024, 1, 7, 3, tzinfo=UTC), is_deleted=True),
            _post("d", datetime(2024, 1, 7, 3, tzinfo=UTC), author="budi"),
        ]
        stats = compute_stats(posts, "irsal", JAKARTA)
        assert stats.total_posts == 1
        assert stats.published_count == 1
        assert stats.total_words == 2

    def test_habits_use_local_time(self):
        # Saturday 2024-01-06 23:00 UTC is Sunday 06:00 in Jakarta
        posts = [_post("a", datetime(2024, 1, 6, 23, tzinfo=UTC))]
        stats = compute_stats(posts, "irsal", JAKARTA)
        assert stats.productive_day == "Minggu"
        assert stats.time_of_day == "Pagi"

    def test_habits_include_drafts(self):
        posts = [
            _post("a", datetime(2024, 1, 8, 14, tzinfo=UTC)),  # Monday 21:00 WIB
            _post("b", datetime(2024, 1, 9, 1, tzinfo=UTC), status=PostStatus.DRAFT),
            _post("c", datetime(2024, 1, 9, 2, tzinfo=UTC), status=PostStatus.DRAFT),
        ]
        stats = compute_stats(posts, "irsal", JAKARTA)
        assert stats.productive_day == "Selasa"
        assert stats.time_of_day == "Pagi"

    def test_habits_hidden_until_something_is_published(self):
        posts = [_post("a", datetime(2024, 1, 8, 1, tzinfo=UTC), status=PostStatus.DRAFT)]
        stats = compute_stats(posts, "irsal", JAKARTA)
        assert stats.productive_day == "-"
        assert stats.time_of_day == "-"
        assert stats.last_active == datetime(2024, 1, 8, 1, tzinfo=UTC)

    def test_last_active_is_latest_date(self):
        posts = [
            _post("a", datetime(2024, 1, 1, tzinfo=UTC)),
            _post("b", datetime(2024, 2, 1, tzinfo=UTC), status=PostStatus.DRAFT),
        ]
        assert compute_stats(posts, "irsal").last_active == datetime(2024, 2, 1, tzinfo=UTC)


class TestInsightText:
    def test_empty(self):
        assert insight_text(AuthorStats()) == "Mulailah menulis untuk melihat polamu."

    def test_beginner(self):
        text = insight_text(AuthorStats(total_posts=1, total_words=300, time_of_day="Pagi"))
        assert text == "Kamu paling produktif di pagi hari. Setiap kata adalah langkah awal."

    def test_consistent(self):
        text = insight_text(AuthorStats(total_posts=3, total_words=1500, time_of_day="Malam"))
        assert text.endswith("Konsistensi mulai terbentuk.")

    def test_prolific(self):
        text = insight_text(AuthorStats(total_posts=9, total_words=6000, time_of_day="Sore"))
        assert text.endswith("Kata-katamu mulai mengalir deras.")
