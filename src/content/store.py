"""Key-value backed post repository.

The whole post collection lives under one store key.  Every operation
reads the collection, mutates it in memory and writes it back; there are
no partial writes and no cross-writer coordination (last write wins).

Failure policy: an unparseable collection is treated as empty and
logged, never raised.  The next write re-establishes a valid collection.
"""

from __future__ import annotations

import logging
from datetime import UTC, tzinfo
from typing import Any, Protocol

from taman.content.models import (
    CURRENT_SCHEMA_VERSION,
    Comment,
    Post,
    PostFilter,
    PostStatus,
    migrate_post,
    new_id,
)
from taman.content.retention import RetentionPolicy
from taman.content.seed import example_posts
from taman.content.stats import AuthorStats, compute_stats, insight_text
from taman.shared.clock import Clock, utcnow
from taman.shared.errors import CorruptDataError, ValidationError
from taman.storage import KeyValueStore, read_json, write_json

logger = logging.getLogger(__name__)

POSTS_KEY = "lumina_posts"
TRENDING_LIMIT = 3

class SnapshotSink(Protocol):
    """Anything that can drop the recovery snapshots of a draft."""

    def clear(self, key: str) -> None: ...


class PostRepository:
    """Single source of truth for Post records.

    Structural invariants (soft-delete overlay, preserved engagement
    counters, edit stamps, trash retention) are enforced here rather
    than by callers.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = POSTS_KEY,
        snapshots: SnapshotSink | None = None,
        retention: RetentionPolicy | None = None,
        sweep_on_save: bool = True,
        seed_examples: bool = True,
        clock: Clock = utcnow,
        tz: tzinfo = UTC,
    ) -> None:
        self._store = store
        self._key = key
        self._snapshots = snapshots
        self._retention = retention or RetentionPolicy()
        self._sweep_on_save = sweep_on_save
        self._seed_examples = seed_examples
        self._clock = clock
        self._tz = tz

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> list[Post]:
        try:
            raw = read_json(self._store, self._key)
        except CorruptDataError:
            logger.warning("Corrupt post collection under %s, treating as empty", self._key)
            return []

        if raw is None:
            if not self._seed_examples:
                return []
            posts = example_posts(self._clock())
            self._write(posts)
            logger.info("Seeded %d example posts", len(posts))
            return posts

        if not isinstance(raw, list):
            logger.warning("Post collection under %s is not a list, treating as empty", self._key)
            return []

        return self._upgrade(raw)

    def _upgrade(self, raw: list[Any]) -> list[Post]:
        """Migrate every record and persist the result if anything changed."""
        posts: list[Post] = []
        stale = 0
        for item in raw:
            post = migrate_post(item)
            if post is None or post.to_stored() != item:
                stale += 1
            if post is not None:
                posts.append(post)
        if stale:
            logger.info("Migrated %d post record(s) to schema v%d", stale, CURRENT_SCHEMA_VERSION)
            self._write(posts)
        return posts

    def _write(self, posts: list[Post]) -> None:
        write_json(self._store, self._key, [p.to_stored() for p in posts])

    @staticmethod
    def _index(posts: list[Post], post_id: str) -> int:
        for i, post in enumerate(posts):
            if post.id == post_id:
                return i
        return -1

    def _clear_snapshot(self, post_id: str) -> None:
        if self._snapshots is not None:
            self._snapshots.clear(post_id)

    # ── Read operations ──────────────────────────────────────────

    def list(self) -> list[Post]:
        """Return every post, trashed ones included, in stored order."""
        return self._load()

    def get(self, post_id: str) -> Post | None:
        """Return a post by id (trashed posts included), or None."""
        for post in self._load():
            if post.id == post_id:
                return post
        return None

    def search(self, query: str = "") -> list[Post]:
        """Case-insensitive match over title, content and tags.

        Only published, non-deleted posts are searched.  An empty query
        returns all of them.
        """
        posts = [p for p in self._load() if p.is_public]
        if not query:
            return posts
        needle = query.lower()
        return [
            p
            for p in posts
            if needle in p.title.lower()
            or needle in p.content.lower()
            or any(needle in tag.lower() for tag in p.tags)
        ]

    def trending(self, limit: int = TRENDING_LIMIT) -> list[Post]:
        """Top public posts by likes + comments + shares.

        The sort is stable, so equal scores keep their stored order.
        """
        posts = [p for p in self._load() if p.is_public]
        return sorted(posts, key=lambda p: p.engagement, reverse=True)[:limit]

    def list_for_author(self, username: str, include_drafts: bool = False) -> list[Post]:
        """An author's non-deleted posts, most recently changed first."""
        posts = [p for p in self._load() if p.author_username == username and not p.is_deleted]
        if not include_drafts:
            posts = [p for p in posts if p.status == PostStatus.PUBLISHED]
        return sorted(posts, key=lambda p: p.last_touched, reverse=True)

    def list_for_admin(
        self,
        username: str,
        status: PostFilter = PostFilter.ALL,
        query: str = "",
    ) -> list[Post]:
        """The author dashboard listing.

        ``TRASH`` shows only deleted posts; every other filter hides them.
        ``query`` matches title or content, case-insensitively.
        """
        posts = [p for p in self._load() if p.author_username == username]
        if status == PostFilter.TRASH:
            posts = [p for p in posts if p.is_deleted]
        else:
            posts = [p for p in posts if not p.is_deleted]
            if status != PostFilter.ALL:
                posts = [p for p in posts if p.status == status.value]
        if query:
            needle = query.lower()
            posts = [p for p in posts if needle in p.title.lower() or needle in p.content.lower()]
        return sorted(posts, key=lambda p: p.last_touched, reverse=True)

    def trash(self, username: str | None = None) -> list[Post]:
        """Soft-deleted posts, optionally restricted to one author."""
        return [
            p
            for p in self._load()
            if p.is_deleted and (username is None or p.author_username == username)
        ]

    def stats_for(self, username: str) -> AuthorStats:
        return compute_stats(self._load(), username, self._tz)

    def insight_for(self, username: str) -> str:
        return insight_text(self.stats_for(username))

    # ── Write operations ─────────────────────────────────────────

    def save(self, post: Post) -> Post:
        """Insert or update a post by id and return the stored record.

        Updates keep the stored likes, shares and comments whatever the
        caller passes.  New posts start with zero engagement and go to the
        front of the collection.  Every save stamps ``last_edited``, runs
        the trash sweep (when enabled) and drops the post's snapshots.
        """
        posts = self._load()
        purged: list[Post] = []
        if self._sweep_on_save:
            posts, purged = self._retention.sweep(posts, self._clock())

        now = self._clock()
        index = self._index(posts, post.id)
        if index >= 0:
            existing = posts[index]
            stored = post.model_copy(
                update={
                    "last_edited": now,
                    "schema_version": CURRENT_SCHEMA_VERSION,
                    "likes": existing.likes,
                    "shares": existing.shares,
                    "comments": existing.comments,
                }
            )
            posts[index] = stored
        else:
            stored = post.model_copy(
                update={
                    "last_edited": now,
                    "schema_version": CURRENT_SCHEMA_VERSION,
                    "likes": 0,
                    "shares": 0,
                    "comments": [],
                }
            )
            posts.insert(0, stored)

        self._write(posts)
        for old in purged:
            self._clear_snapshot(old.id)
        self._clear_snapshot(post.id)
        logger.debug("Saved post %s (%s)", stored.id, stored.status)
        return stored

    def soft_delete(self, post_id: str) -> bool:
        """Move a post to the trash.  Returns False if the id is unknown.

        Repeating it re-stamps ``deleted_at``.
        """
        posts = self._load()
        index = self._index(posts, post_id)
        if index < 0:
            return False
        posts[index] = posts[index].model_copy(
            update={"is_deleted": True, "deleted_at": self._clock()}
        )
        self._write(posts)
        return True

    def restore(self, post_id: str) -> bool:
        """Bring a post back from the trash with its previous status."""
        posts = self._load()
        index = self._index(posts, post_id)
        if index < 0:
            return False
        posts[index] = posts[index].model_copy(update={"is_deleted": False, "deleted_at": None})
        self._write(posts)
        return True

    def purge(self, post_id: str) -> bool:
        """Remove a post permanently, along with any snapshot of it."""
        posts = self._load()
        remaining = [p for p in posts if p.id != post_id]
        self._write(remaining)
        self._clear_snapshot(post_id)
        return len(remaining) != len(posts)

    def cleanup_trash(self, posts: list[Post]) -> list[Post]:
        """Drop trashed posts whose retention window has closed."""
        kept, _purged = self._retention.sweep(posts, self._clock())
        return kept

    def sweep_trash(self) -> list[str]:
        """Run the retention sweep on its own and return the purged ids."""
        posts = self._load()
        kept, purged = self._retention.sweep(posts, self._clock())
        if purged:
            self._write(kept)
            for post in purged:
                self._clear_snapshot(post.id)
        return [p.id for p in purged]

    def soft_delete_by_author(self, username: str) -> int:
        """Trash every active post of ``username``.  Returns how many."""
        posts = self._load()
        now = self._clock()
        count = 0
        for i, post in enumerate(posts):
            if post.author_username == username and not post.is_deleted:
                posts[i] = post.model_copy(update={"is_deleted": True, "deleted_at": now})
                count += 1
        if count:
            self._write(posts)
        return count

    # ── Engagement ───────────────────────────────────────────────

    def _bump(self, post_id: str, field: str) -> int:
        posts = self._load()
        index = self._index(posts, post_id)
        if index < 0:
            return 0
        value = getattr(posts[index], field) + 1
        posts[index] = posts[index].model_copy(update={field: value})
        self._write(posts)
        return value

    def like(self, post_id: str) -> int:
        """Add a like and return the new count (0 for unknown ids)."""
        return self._bump(post_id, "likes")

    def share(self, post_id: str) -> int:
        """Count a share and return the new count (0 for unknown ids)."""
        return self._bump(post_id, "shares")

    def add_comment(self, post_id: str, content: str, author_username: str) -> Comment | None:
        """Append a comment.  Returns None if the post does not exist.

        Raises:
            ValidationError: If the comment body is blank.
        """
        if not content.strip():
            raise ValidationError("Komentar tidak boleh kosong.", field="content")
        posts = self._load()
        index = self._index(posts, post_id)
        if index < 0:
            return None
        now = self._clock()
        comment = Comment(
            id=new_id(now),
            author_username=author_username,
            content=content,
            date=now,
        )
        post = posts[index]
        posts[index] = post.model_copy(update={"comments": [*post.comments, comment]})
        self._write(posts)
        return comment
