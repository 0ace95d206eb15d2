"""Headless editor session implementing the draft recovery protocol.

Opening the editor consults the snapshot cache:

* for an existing post, a snapshot is offered only when it is strictly
  newer than the post's last durable change;
* for a new post, any snapshot under the new-post key is offered.

Accepting loads the snapshot into the buffer and marks it dirty;
declining drops the snapshot.  While the buffer is dirty every edit
re-arms the autosave debouncer, and a durable save (or an explicit
discard) clears the snapshots for the draft.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

from taman.content.models import (
    Post,
    PostStatus,
    compute_read_time,
    default_excerpt,
    new_id,
)
from taman.content.store import PostRepository
from taman.drafts.models import DraftFields, RecoveryOffer
from taman.drafts.snapshots import (
    DEFAULT_AUTOSAVE_DELAY,
    NEW_POST_KEY,
    AutosaveDebouncer,
    SnapshotCache,
    should_offer_recovery,
)
from taman.identity.models import Session
from taman.shared.clock import Clock, utcnow
from taman.shared.errors import NotAuthenticatedError, ValidationError

logger = logging.getLogger(__name__)


def parse_tags(value: str | list[str] | None) -> list[str]:
    """Split a comma-separated tag string, trimming blanks away."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else value
    return [t.strip() for t in items if t and t.strip()]


class EditorSession:
    """The state of one editor: which draft, its buffer, and whether it is dirty."""

    def __init__(
        self,
        posts: PostRepository,
        snapshots: SnapshotCache,
        session: Session | None,
        *,
        new_post_key: str = NEW_POST_KEY,
        autosave_delay: timedelta = DEFAULT_AUTOSAVE_DELAY,
        words_per_minute: int = 200,
        clock: Clock = utcnow,
    ) -> None:
        self._posts = posts
        self._snapshots = snapshots
        self._session = session
        self._new_post_key = new_post_key
        self._words_per_minute = words_per_minute
        self._clock = clock
        self._debouncer = AutosaveDebouncer(self._write_snapshot, delay=autosave_delay, clock=clock)

        self.editing_id: str | None = None
        self.buffer = DraftFields()
        self.dirty = False
        self.offer: RecoveryOffer | None = None
        self._created: datetime | None = None
        self._autosave_key: str | None = None

    @property
    def draft_key(self) -> str:
        """Snapshot key for the current draft: its post id or the new-post key."""
        return self.editing_id or self._new_post_key

    @property
    def autosave_pending(self) -> bool:
        return self._debouncer.pending

    # ── Opening ──────────────────────────────────────────────────

    def _reset(self) -> None:
        self._debouncer.cancel()
        self.editing_id = None
        self.buffer = DraftFields(status=PostStatus.DRAFT)
        self.dirty = False
        self.offer = None
        self._created = None

    def _load_post(self, post: Post) -> None:
        self.editing_id = post.id
        self.buffer = DraftFields(
            title=post.title,
            content=post.content,
            excerpt=post.excerpt,
            tags=list(post.tags),
            status=post.status,
        )
        self._created = post.date
        self.dirty = False

    def open_new(self) -> RecoveryOffer | None:
        """Start a new draft, offering any unsaved new-post snapshot."""
        self._reset()
        snapshot = self._snapshots.get(self._new_post_key)
        if should_offer_recovery(snapshot, None):
            assert snapshot is not None
            self.offer = RecoveryOffer(key=self._new_post_key, snapshot=snapshot, is_new_post=True)
        return self.offer

    def open_existing(self, post: Post | str) -> RecoveryOffer | None:
        """Open a durable post, offering a snapshot only if it is newer.

        Raises:
            KeyError: If ``post`` is an id that does not exist.
        """
        if isinstance(post, str):
            found = self._posts.get(post)
            if found is None:
                raise KeyError(post)
            post = found

        self._reset()
        self._load_post(post)
        snapshot = self._snapshots.get(post.id)
        if should_offer_recovery(snapshot, post):
            assert snapshot is not None
            self.offer = RecoveryOffer(key=post.id, snapshot=snapshot, saved_at=post.last_touched)
        return self.offer

    def accept_recovery(self) -> DraftFields:
        """Load the offered snapshot into the buffer and mark it dirty."""
        if self.offer is None:
            raise RuntimeError("No recovery offer to accept")
        recovered = self.offer.snapshot.fields
        self.buffer = self.buffer.merged(**recovered.model_dump())
        if self.buffer.status is None:
            self.buffer = self.buffer.merged(status=PostStatus.DRAFT)
        self.dirty = True
        self.offer = None
        logger.info("Recovered unsaved edits for %s", self.draft_key)
        return self.buffer

    def decline_recovery(self) -> None:
        """Drop the offered snapshot and keep the durable version."""
        if self.offer is None:
            return
        self._snapshots.clear(self.offer.key)
        self.offer = None

    # ── Editing ──────────────────────────────────────────────────

    def edit(self, **changes: Any) -> DraftFields:
        """Apply field changes to the buffer and re-arm the autosave timer.

        ``tags`` may be given as a comma-separated string.
        """
        if "tags" in changes:
            changes["tags"] = parse_tags(changes["tags"])
        self.buffer = DraftFields.model_validate({**self.buffer.model_dump(), **changes})
        self.dirty = True
        self._autosave_key = self.draft_key
        self._debouncer.touch(self.buffer)
        return self.buffer

    def tick(self) -> bool:
        """Perform the pending autosave if its quiet period has passed."""
        if not self.dirty:
            self._debouncer.cancel()
            return False
        return self._debouncer.poll()

    def _write_snapshot(self, fields: DraftFields) -> None:
        self._snapshots.save(self._autosave_key or self.draft_key, fields)

    # ── Saving & leaving ─────────────────────────────────────────

    def save(self, target_status: PostStatus | None = None) -> Post:
        """Validate the buffer and persist it as a durable post.

        Raises:
            NotAuthenticatedError: No session.
            ValidationError: Title or content is empty.  Nothing is written.
        """
        if self._session is None:
            raise NotAuthenticatedError("Sesi telah berakhir demi keamanan. Mohon login kembali.")

        title = (self.buffer.title or "").strip()
        content = self.buffer.content or ""
        if not title:
            raise ValidationError(
                "Tulisan ini membutuhkan judul sebelum bisa disimpan.", field="title"
            )
        if not content.strip():
            raise ValidationError("Konten tulisan masih kosong.", field="content")

        now = self._clock()
        status = target_status or self.buffer.status or PostStatus.DRAFT
        source = self._posts.get(self.editing_id) if self.editing_id else None
        was_new = self.editing_id is None

        post = Post(
            id=self.editing_id or new_id(now),
            title=self.buffer.title or "Tanpa Judul",
            content=content,
            excerpt=self.buffer.excerpt or default_excerpt(content),
            date=self._created or now,
            read_time=compute_read_time(content, self._words_per_minute),
            tags=parse_tags(self.buffer.tags),
            likes=source.likes if source else 0,
            shares=source.shares if source else 0,
            author_username=source.author_username if source else self._session.username,
            comments=source.comments if source else [],
            status=status,
            is_deleted=False,
        )
        stored = self._posts.save(post)

        self._debouncer.cancel()
        if was_new:
            self._snapshots.clear(self._new_post_key)
        self._snapshots.clear(stored.id)

        self.editing_id = stored.id
        self._created = stored.date
        self.buffer = self.buffer.merged(status=stored.status)
        self.dirty = False
        return stored

    def discard(self) -> None:
        """Leave the editor without saving, dropping unsaved snapshots."""
        if self.dirty:
            self._snapshots.clear(self.draft_key)
        self._reset()
