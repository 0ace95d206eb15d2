"""Session-scoped draft snapshot cache.

Snapshots record in-progress edits so a crash or an accidental
navigation does not lose them.  They live in a session store, never in
the durable post collection, and keep a short history per draft key
(newest first).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from pydantic import ValidationError as PydanticValidationError

from taman.content.models import Post
from taman.drafts.models import DraftFields, Snapshot
from taman.shared.clock import Clock, utcnow
from taman.shared.errors import CorruptDataError
from taman.storage import KeyValueStore, read_json

logger = logging.getLogger(__name__)

SNAPSHOT_KEY_PREFIX = "lumina_snapshot_"
NEW_POST_KEY = "new_temp"
DEFAULT_MAX_SNAPSHOTS = 3
DEFAULT_AUTOSAVE_DELAY = timedelta(milliseconds=2000)


class SnapshotCache:
    """Bounded, newest-first snapshot history per draft key."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_snapshots: int = DEFAULT_MAX_SNAPSHOTS,
        clock: Clock = utcnow,
    ) -> None:
        self._store = store
        self._max = max_snapshots
        self._clock = clock

    @staticmethod
    def _store_key(key: str) -> str:
        return f"{SNAPSHOT_KEY_PREFIX}{key}"

    def history(self, key: str) -> list[Snapshot]:
        """All retained snapshots for ``key``, newest first.

        A single-object payload from older editors counts as a history of
        one.  Unreadable payloads are treated as no history.
        """
        try:
            data = read_json(self._store, self._store_key(key))
            if data is None:
                return []
            if not isinstance(data, list):
                data = [data]
            return [Snapshot.model_validate(item) for item in data]
        except (CorruptDataError, PydanticValidationError):
            logger.warning("Unreadable snapshot history for %s, ignoring it", key)
            return []

    def save(self, key: str, fields: DraftFields) -> Snapshot:
        """Prepend a snapshot of ``fields`` and drop anything past the bound."""
        snapshot = Snapshot(id=key, timestamp=self._clock(), **fields.model_dump())
        history = [snapshot, *self.history(key)][: self._max]
        self._store.set(
            self._store_key(key),
            json.dumps([s.model_dump(mode="json") for s in history], ensure_ascii=False),
        )
        logger.debug("Snapshot saved for %s (%d retained)", key, len(history))
        return snapshot

    def get(self, key: str) -> Snapshot | None:
        """Most recent snapshot for ``key``, or None."""
        history = self.history(key)
        return history[0] if history else None

    def clear(self, key: str) -> None:
        self._store.remove(self._store_key(key))


def should_offer_recovery(snapshot: Snapshot | None, post: Post | None) -> bool:
    """Decide whether a snapshot should be proposed when opening the editor.

    For an existing post the snapshot must be strictly newer than the
    post's last durable change.  For a new draft there is no durable
    record to compare against, so any snapshot qualifies.
    """
    if snapshot is None:
        return False
    if post is None:
        return True
    return snapshot.timestamp > post.last_touched


class AutosaveDebouncer:
    """Coalesces rapid edits into a single deferred snapshot write.

    Each ``touch`` restarts the quiet period and replaces the pending
    fields; ``poll`` performs the write once the quiet period has elapsed.
    Only the latest pending write ever fires.
    """

    def __init__(
        self,
        write: Callable[[DraftFields], object],
        *,
        delay: timedelta = DEFAULT_AUTOSAVE_DELAY,
        clock: Clock = utcnow,
    ) -> None:
        self._write = write
        self._delay = delay
        self._clock = clock
        self._pending: DraftFields | None = None
        self._deadline: datetime | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def deadline(self) -> datetime | None:
        return self._deadline

    def touch(self, fields: DraftFields) -> None:
        self._pending = fields
        self._deadline = self._clock() + self._delay

    def poll(self) -> bool:
        """Fire the pending write if it is due.  Returns True if it fired."""
        if self._pending is None or self._deadline is None:
            return False
        if self._clock() < self._deadline:
            return False
        fields = self._pending
        self.cancel()
        self._write(fields)
        return True

    def cancel(self) -> None:
        self._pending = None
        self._deadline = None
