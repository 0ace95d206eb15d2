"""Trash retention policy.

States: ``active`` → ``trashed`` → purged.  A trashed post becomes
eligible for purging once its ``deleted_at`` is older than the retention
window.  Eligibility is evaluated only when a sweep runs; nothing is
purged at the exact moment the window closes.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from enum import StrEnum

from taman.content.models import Post

logger = logging.getLogger(__name__)

DEFAULT_TRASH_DAYS = 30


class TrashState(StrEnum):
    ACTIVE = "active"
    TRASHED = "trashed"


def state_of(post: Post) -> TrashState:
    return TrashState.TRASHED if post.is_deleted else TrashState.ACTIVE


class RetentionPolicy:
    """Decides which trashed posts have outlived the retention window."""

    def __init__(self, days: int = DEFAULT_TRASH_DAYS) -> None:
        self.window = timedelta(days=days)

    def cutoff(self, now: datetime) -> datetime:
        return now - self.window

    def is_expired(self, post: Post, now: datetime) -> bool:
        """True if the post is trashed and ``deleted_at`` predates the cutoff.

        A trashed post without ``deleted_at`` never expires.
        """
        if not post.is_deleted or post.deleted_at is None:
            return False
        return post.deleted_at <= self.cutoff(now)

    def sweep(self, posts: list[Post], now: datetime) -> tuple[list[Post], list[Post]]:
        """Split ``posts`` into (kept, purged), preserving order."""
        kept: list[Post] = []
        purged: list[Post] = []
        for post in posts:
            (purged if self.is_expired(post, now) else kept).append(post)
        if purged:
            logger.info(
                "Retention sweep purged %d post(s) trashed before %s",
                len(purged),
                self.cutoff(now).isoformat(),
            )
        return kept, purged
