"""Tests for the snapshot cache, recovery rule and autosave debouncer."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from taman.content.models import Post
from taman.drafts.models import DraftFields, Snapshot
from taman.drafts.snapshots import (
    SNAPSHOT_KEY_PREFIX,
    AutosaveDebouncer,
    SnapshotCache,
    should_offer_recovery,
)
from taman.storage import FileStore, MemoryStore

START = datetime(2024, 4, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def cache(store: MemoryStore, clock: FakeClock) -> SnapshotCache:
    return SnapshotCache(store, clock=clock)


class TestSnapshotCache:
    def test_get_missing(self, cache: SnapshotCache):
        assert cache.get("p1") is None
        assert cache.history("p1") == []

    def test_history_bounded_newest_first(self, cache: SnapshotCache, clock: FakeClock):
        for i in range(4):
            cache.save("p1", DraftFields(title=f"v{i}"))
            clock.advance(seconds=1)
        history = cache.history("p1")
        assert [s.title for s in history] == ["v3", "v2", "v1"]

    def test_get_returns_latest(self, cache: SnapshotCache, clock: FakeClock):
        for i in range(4):
            cache.save("p1", DraftFields(title=f"v{i}"))
            clock.advance(seconds=1)
        latest = cache.get("p1")
        assert latest is not None
        assert latest.title == "v3"
        assert latest.id == "p1"

    def test_custom_bound(self, store: MemoryStore, clock: FakeClock):
        cache = SnapshotCache(store, max_snapshots=1, clock=clock)
        cache.save("p1", DraftFields(title="a"))
        cache.save("p1", DraftFields(title="b"))
        assert [s.title for s in cache.history("p1")] == ["b"]

    def test_keys_are_independent(self, cache: SnapshotCache):
        cache.save("p1", DraftFields(title="satu"))
        cache.save("p2", DraftFields(title="dua"))
        cache.clear("p1")
        assert cache.get("p1") is None
        snapshot = cache.get("p2")
        assert snapshot is not None
        assert snapshot.title == "dua"

    def test_stored_layout(self, cache: SnapshotCache, store: MemoryStore):
        cache.save("new_temp", DraftFields(title="Draf", tags=["a"]))
        raw = json.loads(store.get(f"{SNAPSHOT_KEY_PREFIX}new_temp") or "null")
        assert isinstance(raw, list)
        assert raw[0]["id"] == "new_temp"
        assert raw[0]["title"] == "Draf"
        assert raw[0]["timestamp"] == int(START.timestamp() * 1000)

    def test_single_object_payload_is_a_history_of_one(self, store: MemoryStore):
        store.set(
            f"{SNAPSHOT_KEY_PREFIX}p1",
            json.dumps({"id": "p1", "title": "lama", "timestamp": 1_700_000_000_000}),
        )
        history = SnapshotCache(store).history("p1")
        assert [s.title for s in history] == ["lama"]
        assert history[0].timestamp == datetime.fromtimestamp(1_700_000_000, tz=UTC)

    def test_unreadable_payload_is_ignored(self, store: MemoryStore):
        store.set(f"{SNAPSHOT_KEY_PREFIX}p1", "{broken")
        assert SnapshotCache(store).get("p1") is None

    def test_invalid_utf8_file_is_ignored(self, tmp_path):
        (tmp_path / f"{SNAPSHOT_KEY_PREFIX}p1.json").write_bytes(b"\xff\xfe[")
        assert SnapshotCache(FileStore(tmp_path)).history("p1") == []

    def test_partial_fields(self, cache: SnapshotCache):
        cache.save("p1", DraftFields(content="hanya isi"))
        snapshot = cache.get("p1")
        assert snapshot is not None
        assert snapshot.title is None
        assert snapshot.fields == DraftFields(content="hanya isi")


class TestShouldOfferRecovery:
    def _post(self, **kwargs: object) -> Post:
        return Post(id="p1", title="t", date=START, **kwargs)  # type: ignore[arg-type]

    def _snapshot(self, when: datetime) -> Snapshot:
        return Snapshot(id="p1", timestamp=when, title="draf")

    def test_no_snapshot(self):
        assert should_offer_recovery(None, self._post()) is False
        assert should_offer_recovery(None, None) is False

    def test_new_post_always_offered(self):
        assert should_offer_recovery(self._snapshot(START - timedelta(days=9)), None) is True

    def test_newer_than_last_edit(self):
        post = self._post(last_edited=START + timedelta(hours=1))
        assert should_offer_recovery(self._snapshot(START + timedelta(hours=2)), post) is True

    def test_older_than_last_edit(self):
        post = self._post(last_edited=START + timedelta(hours=1))
        assert should_offer_recovery(self._snapshot(START + timedelta(minutes=30)), post) is False

    def test_equal_timestamp_not_offered(self):
        post = self._post(last_edited=START)
        assert should_offer_recovery(self._snapshot(START), post) is False

    def test_falls_back_to_creation_date(self):
        post = self._post()
        assert should_offer_recovery(self._snapshot(START + timedelta(seconds=1)), post) is True


class TestAutosaveDebouncer:
    def test_fires_after_quiet_period(self, clock: FakeClock):
        written: list[DraftFields] = []
        debouncer = AutosaveDebouncer(written.append, clock=clock)
        debouncer.touch(DraftFields(title="a"))
        clock.advance(milliseconds=1999)
        assert debouncer.poll() is False
        clock.advance(milliseconds=1)
        assert debouncer.poll() is True
        assert written == [DraftFields(title="a")]
        assert debouncer.pending is False

    def test_rapid_edits_coalesce_to_latest(self, clock: FakeClock):
        written: list[DraftFields] = []
        debouncer = AutosaveDebouncer(written.append, clock=clock)
        for title in ("a", "ab", "abc"):
            debouncer.touch(DraftFields(title=title))
            clock.advance(milliseconds=500)
            debouncer.poll()
        clock.advance(seconds=2)
        debouncer.poll()
        assert written == [DraftFields(title="abc")]

    def test_each_touch_restarts_timer(self, clock: FakeClock):
        debouncer = AutosaveDebouncer(lambda fields: None, clock=clock)
        debouncer.touch(DraftFields(title="a"))
        clock.advance(seconds=1)
        debouncer.touch(DraftFields(title="b"))
        assert debouncer.deadline == clock.now + timedelta(seconds=2)

    def test_cancel(self, clock: FakeClock):
        written: list[DraftFields] = []
        debouncer = AutosaveDebouncer(written.append, clock=clock)
        debouncer.touch(DraftFields(title="a"))
        debouncer.cancel()
        clock.advance(seconds=5)
        assert debouncer.poll() is False
        assert written == []

    def test_custom_delay(self, clock: FakeClock):
        written: list[DraftFields] = []
        debouncer = AutosaveDebouncer(written.append, delay=timedelta(0), clock=clock)
        debouncer.touch(DraftFields(title="a"))
        assert debouncer.poll() is True
