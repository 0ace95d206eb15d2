"""Wiring: build every store and repository from a TamanConfig."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from taman.config import TamanConfig
from taman.content.retention import RetentionPolicy
from taman.content.store import PostRepository
from taman.drafts.editor import EditorSession
from taman.drafts.snapshots import SnapshotCache
from taman.identity.directory import SessionStore, UserDirectory
from taman.identity.models import Session
from taman.messaging.log import MessageLog
from taman.shared.clock import Clock, utcnow
from taman.storage import FileStore, KeyValueStore, MemoryStore


@dataclass
class Garden:
    """All collaborators of one running instance."""

    config: TamanConfig
    durable: KeyValueStore
    session_store: KeyValueStore
    posts: PostRepository
    snapshots: SnapshotCache
    users: UserDirectory
    messages: MessageLog
    clock: Clock = utcnow

    def editor(self, session: Session | None) -> EditorSession:
        drafts = self.config.drafts
        return EditorSession(
            self.posts,
            self.snapshots,
            session,
            new_post_key=drafts.new_post_key,
            autosave_delay=timedelta(milliseconds=drafts.autosave_delay_ms),
            words_per_minute=self.config.stats.words_per_minute,
            clock=self.clock,
        )


def build_garden(
    config: TamanConfig,
    *,
    durable: KeyValueStore | None = None,
    session_store: KeyValueStore | None = None,
    clock: Clock = utcnow,
) -> Garden:
    """Assemble a Garden.  Defaults to a FileStore under the configured directory."""
    durable = durable if durable is not None else FileStore(config.storage_path)
    session_store = session_store if session_store is not None else MemoryStore()

    snapshots = SnapshotCache(
        session_store, max_snapshots=config.drafts.max_snapshots, clock=clock
    )
    posts = PostRepository(
        durable,
        key=config.storage.posts_key,
        snapshots=snapshots,
        retention=RetentionPolicy(days=config.retention.trash_days),
        sweep_on_save=config.retention.sweep_on_save,
        seed_examples=config.storage.seed_examples,
        clock=clock,
        tz=config.stats.tzinfo,
    )
    users = UserDirectory(
        durable,
        key=config.storage.users_key,
        sessions=SessionStore(durable, config.storage.session_key),
        posts=posts,
    )
    messages = MessageLog(durable, key=config.storage.messages_key, clock=clock)
    return Garden(
        config=config,
        durable=durable,
        session_store=session_store,
        posts=posts,
        snapshots=snapshots,
        users=users,
        messages=messages,
        clock=clock,
    )
