"""Tests for the background refresh worker."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from backend.app.refresh_worker import RefreshWorker, WorkerState
from listingproxy.collectors import UpstreamError
from listingproxy.models.listing import CacheSnapshot
from listingproxy.storage import SnapshotStore

NOW = datetime(2024, 5, 1, 18, 0, tzinfo=timezone.utc)


class FakeClient:
    """Stands in for BuildoutClient.fetch_listings."""

    def __init__(self, records=None, error: Exception | None = None, delay: float = 0):
        self.records = records or []
        self.error = error
        self.delay = delay
        self.calls = 0
        self.active = 0
        self.max_active = 0

    async def fetch_listings(self):
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error:
                raise self.error
            return list(self.records)
        finally:
            self.active -= 1


class BrokenStore(SnapshotStore):
    """Store whose writes always fail."""

    def save(self, snapshot):
        raise OSError("disk full")


def make_worker(client, store, **kwargs) -> RefreshWorker:
    kwargs.setdefault("enabled", False)
    return RefreshWorker(client, store, clock=lambda: NOW, **kwargs)


def upstream_down() -> UpstreamError:
    return UpstreamError("properties", "HTTP error: 503", status_code=503)


class TestBoot:
    """Test startup from the persisted snapshot."""

    @pytest.mark.asyncio
    async def test_fresh_file_skips_upstream(self, store: SnapshotStore, snapshot: CacheSnapshot):
        store.save(snapshot)
        client = FakeClient(records=[{"id": 1}])
        worker = make_worker(client, store)

        await worker.start()

        assert client.calls == 0
        assert worker.snapshot == snapshot
        assert worker.state == WorkerState.SERVING
        assert worker.get_status()["last_source"] == "disk"

    @pytest.mark.asyncio
    async def test_stale_file_triggers_refresh(self, store: SnapshotStore, snapshot: CacheSnapshot):
        store.save(snapshot)
        client = FakeClient(records=[{"id": 1}, {"id": 2}])
        worker = make_worker(client, store, interval_hours=1)

        await worker.start()

        assert client.calls == 1
        assert worker.snapshot.count == 2
        assert worker.snapshot.last_updated == NOW
        assert store.load().count == 2

    @pytest.mark.asyncio
    async def test_stale_file_kept_when_refresh_fails(self, store: SnapshotStore, snapshot: CacheSnapshot):
        store.save(snapshot)
        worker = make_worker(FakeClient(error=upstream_down()), store, interval_hours=1)

        await worker.start()

        assert worker.snapshot == snapshot
        assert worker.get_status()["last_source"] == "memory"

    @pytest.mark.asyncio
    async def test_no_file_fetches(self, store: SnapshotStore):
        client = FakeClient(records=[{"id": 7, "city": "Reno"}])
        worker = make_worker(client, store)

        await worker.start()

        assert client.calls == 1
        assert [l.id for l in worker.snapshot.listings] == [7]
        assert store.exists()

    @pytest.mark.asyncio
    async def test_no_file_and_upstream_down_serves_empty(self, store: SnapshotStore):
        worker = make_worker(FakeClient(error=upstream_down()), store)

        await worker.start()

        assert worker.snapshot.listings == ()
        assert worker.snapshot.last_updated is None
        status = worker.get_status()
        assert status["last_source"] == "empty"
        assert "503" in status["last_error"]

    @pytest.mark.asyncio
    async def test_corrupt_file_treated_as_missing(self, store: SnapshotStore):
        store.path.parent.mkdir(parents=True)
        store.path.write_text("not json", encoding="utf-8")
        client = FakeClient(records=[{"id": 1}])
        worker = make_worker(client, store)

        await worker.start()

        assert client.calls == 1
        assert worker.snapshot.count == 1


class TestFallbackChain:
    """Test what is served when a refresh fails."""

    @pytest.mark.asyncio
    async def test_memory_wins_over_disk(self, store: SnapshotStore, snapshot: CacheSnapshot):
        client = FakeClient(records=[{"id": 1}])
        worker = make_worker(client, store)
        await worker.refresh()

        # Disk now holds something different from memory
        store.save(snapshot)
        client.error = upstream_down()
        served = await worker.refresh()

        assert [l.id for l in served.listings] == [1]
        assert worker.get_status()["last_source"] == "memory"

    @pytest.mark.asyncio
    async def test_disk_used_when_memory_empty(self, store: SnapshotStore, snapshot: CacheSnapshot):
        worker = make_worker(FakeClient(error=upstream_down()), store)
        await worker.refresh()
        assert worker.snapshot.count == 0

        store.save(snapshot)
        served = await worker.refresh()

        assert served == snapshot
        assert worker.get_status()["last_source"] == "disk"

    @pytest.mark.asyncio
    async def test_invalid_records_count_as_failure(self, store: SnapshotStore, snapshot: CacheSnapshot):
        store.save(snapshot)
        worker = make_worker(FakeClient(records=[{"city": "missing id"}]), store)

        served = await worker.refresh()

        assert served == snapshot
        assert worker.get_status()["last_source"] == "disk"

    @pytest.mark.asyncio
    async def test_invalid_records_skipped_when_others_parse(self, store: SnapshotStore):
        records = [{"id": 1}, {"city": "missing id"}, {"id": 2}]
        worker = make_worker(FakeClient(records=records), store)

        served = await worker.refresh()

        assert [l.id for l in served.listings] == [1, 2]
        assert worker.get_status()["last_source"] == "upstream"
        assert store.load().count == 2

    @pytest.mark.asyncio
    async def test_custom_chain_order(self, store: SnapshotStore):
        worker = make_worker(FakeClient(error=upstream_down()), store)
        worker.fallbacks = [("empty", lambda: CacheSnapshot.empty())]

        await worker.refresh()

        assert worker.get_status()["last_source"] == "empty"


class TestRefresh:
    """Test refresh bookkeeping and serialization."""

    @pytest.mark.asyncio
    async def test_persist_failure_still_serves_new_data(self, tmp_path):
        worker = make_worker(FakeClient(records=[{"id": 1}]), BrokenStore(tmp_path / "listings.json"))

        served = await worker.refresh()

        assert served.count == 1
        assert worker.get_status()["last_source"] == "upstream"

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_never_overlap(self, store: SnapshotStore):
        client = FakeClient(records=[{"id": 1}], delay=0.01)
        worker = make_worker(client, store)

        results = await asyncio.gather(worker.refresh(), worker.refresh(), worker.refresh())

        assert client.calls == 3
        assert client.max_active == 1
        assert all(r.count == 1 for r in results)
        assert worker.get_status()["refresh_count"] == 3
        assert not worker.is_refreshing

    @pytest.mark.asyncio
    async def test_status_after_refresh(self, store: SnapshotStore):
        worker = make_worker(FakeClient(records=[{"id": 1}, {"id": 2}]), store)
        await worker.refresh()

        status = worker.get_status()
        assert status["state"] == "serving"
        assert status["listing_count"] == 2
        assert status["last_updated"] == NOW.isoformat()
        assert status["last_error"] is None
        assert status["last_run_duration_sec"] == 0.0


class TestFreshness:
    """Test the freshness window."""

    def test_unpopulated_is_stale(self, store: SnapshotStore):
        worker = make_worker(FakeClient(), store)
        assert not worker.is_fresh(CacheSnapshot.empty())

    def test_window_boundary(self, store: SnapshotStore):
        worker = make_worker(FakeClient(), store, interval_hours=24)
        recent = CacheSnapshot(last_updated=NOW - timedelta(hours=23, minutes=59))
        old = CacheSnapshot(last_updated=NOW - timedelta(hours=24))

        assert worker.is_fresh(recent)
        assert not worker.is_fresh(old)

    def test_naive_timestamp_read_as_utc(self, store: SnapshotStore):
        worker = make_worker(FakeClient(), store)
        naive = CacheSnapshot(last_updated=datetime(2024, 5, 1, 17, 0))
        assert worker.is_fresh(naive)


class TestLifecycle:
    """Test start/stop of the scheduled loop."""

    @pytest.mark.asyncio
    async def test_start_schedules_and_stop_cancels(self, store: SnapshotStore, snapshot: CacheSnapshot):
        store.save(snapshot)
        worker = make_worker(FakeClient(), store, enabled=True)

        await worker.start()
        await asyncio.sleep(0)
        task = worker._task
        assert task is not None and not task.done()
        assert worker.get_status()["next_run_at"] is not None

        await worker.stop()
        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_disabled_starts_no_task(self, store: SnapshotStore, snapshot: CacheSnapshot):
        store.save(snapshot)
        worker = make_worker(FakeClient(), store, enabled=False)

        await worker.start()
        assert worker._task is None
        await worker.stop()
