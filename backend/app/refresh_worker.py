"""Background worker that keeps the listings snapshot populated.

Lifecycle: BOOTING -> SERVING, with REFRESHING entered for each scheduled or
manual refresh and left again whatever the outcome.

A refresh fetches every listing page from upstream. On success the new
snapshot replaces the old one and is persisted. On failure the fallback
chain runs left to right and the first strategy that yields a snapshot wins:
keep the populated in-memory snapshot, reload the persisted file, or serve
an explicit empty snapshot.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from listingproxy.collectors import BuildoutClient, UpstreamError
from listingproxy.models.listing import CacheSnapshot, Listing
from listingproxy.storage import CorruptCache, SnapshotNotFound, SnapshotStore

logger = logging.getLogger(__name__)

FallbackStrategy = Callable[[], Optional[CacheSnapshot]]


class WorkerState(str, Enum):
    BOOTING = "booting"
    SERVING = "serving"
    REFRESHING = "refreshing"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RefreshWorker:
    """Owns the listings snapshot and the only code path that replaces it.

    Readers call `snapshot` and get an immutable CacheSnapshot; a refresh swaps
    the reference in one assignment, so a reader sees either the old or the
    new snapshot. Refreshes are serialized by a lock: a request that arrives
    while one is running waits for it to finish, then runs its own.
    """

    def __init__(
        self,
        client: BuildoutClient,
        store: SnapshotStore,
        interval_hours: float = 24,
        enabled: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._client = client
        self._store = store
        self._interval = timedelta(hours=interval_hours)
        self._enabled = enabled
        self._clock = clock
        self._snapshot = CacheSnapshot.empty()
        self._state = WorkerState.BOOTING
        self._lock = asyncio.Lock()
        self._task: asyncio.Task | None = None
        self.fallbacks: list[tuple[str, FallbackStrategy]] = [
            ("memory", self._keep_current),
            ("disk", self._load_persisted),
            ("empty", self._empty),
        ]
        self._status: dict = {
            "last_run_started": None,
            "last_run_completed": None,
            "last_run_duration_sec": None,
            "last_source": None,
            "last_error": None,
            "refresh_count": 0,
            "next_run_at": None,
        }

    @property
    def snapshot(self) -> CacheSnapshot:
        return self._snapshot

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def is_refreshing(self) -> bool:
        return self._lock.locked()

    def get_status(self) -> dict:
        """Return current worker status."""
        last_updated = self._snapshot.last_updated
        return {
            **self._status,
            "state": self._state.value,
            "listing_count": self._snapshot.count,
            "last_updated": last_updated.isoformat() if last_updated else None,
            "interval_hours": self._interval.total_seconds() / 3600,
        }

    async def start(self) -> None:
        """Load or fetch the initial snapshot, then launch the refresh loop."""
        await self.boot()
        if not self._enabled:
            logger.info("Scheduled refresh disabled")
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Refresh worker started (interval={self._interval})")

    async def stop(self) -> None:
        """Cancel the background task."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Refresh worker stopped")

    def is_fresh(self, snapshot: CacheSnapshot) -> bool:
        """True when the snapshot is younger than the refresh interval."""
        if snapshot.last_updated is None:
            return False
        last_updated = snapshot.last_updated
        if last_updated.tzinfo is None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)
        return self._clock() - last_updated < self._interval

    async def boot(self) -> CacheSnapshot:
        """Serve the persisted snapshot if fresh, otherwise refresh now."""
        self._state = WorkerState.BOOTING
        try:
            loaded = self._store.load()
        except SnapshotNotFound:
            logger.info("No persisted listings found")
        except CorruptCache as e:
            logger.warning(f"Ignoring unreadable listings file: {e}")
        else:
            self._snapshot = loaded
            if self.is_fresh(loaded):
                self._state = WorkerState.SERVING
                self._status["last_source"] = "disk"
                logger.info(
                    f"Using persisted data with {loaded.count} listings; "
                    "skipping immediate refresh"
                )
                return self._snapshot
            logger.info("Persisted listings are stale; refreshing")

        return await self.refresh()

    async def refresh(self) -> CacheSnapshot:
        """Fetch all listings and replace the snapshot.

        Never raises for upstream or persistence failures; the fallback chain
        decides what is served instead.

        Returns:
            The snapshot being served after the refresh
        """
        async with self._lock:
            self._state = WorkerState.REFRESHING
            start_time = self._clock()
            self._status["last_run_started"] = start_time.isoformat()
            error: Optional[str] = None

            try:
                logger.info("Fetching listings from upstream...")
                records = await self._client.fetch_listings()
                snapshot = CacheSnapshot(
                    listings=self._parse_listings(records),
                    last_updated=self._clock(),
                )
            except UpstreamError as e:
                error = str(e)
                logger.error(f"Error loading listings: {e}")
                source = self._fall_back()
            else:
                self._snapshot = snapshot
                source = "upstream"
                logger.info(f"Listings cache loaded: {snapshot.count} listings")
                self._persist(snapshot)
            finally:
                self._state = WorkerState.SERVING

            end_time = self._clock()
            self._status.update({
                "last_run_completed": end_time.isoformat(),
                "last_run_duration_sec": round((end_time - start_time).total_seconds(), 1),
                "last_source": source,
                "last_error": error,
                "refresh_count": self._status["refresh_count"] + 1,
            })
            return self._snapshot

    def _parse_listings(self, records: list[dict]) -> tuple[Listing, ...]:
        """Validate upstream records, skipping the ones that do not parse.

        A fetch in which every record is invalid counts as a failure.
        """
        listings = []
        for record in records:
            try:
                listings.append(Listing.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping invalid listing record: {e.error_count()} error(s)")

        skipped = len(records) - len(listings)
        if records and not listings:
            raise UpstreamError("properties", f"All {skipped} listing records are invalid")
        if skipped:
            logger.warning(f"Skipped {skipped} of {len(records)} listing records")
        return tuple(listings)

    def _persist(self, snapshot: CacheSnapshot) -> None:
        try:
            self._store.save(snapshot)
        except OSError:
            logger.exception(f"Failed to persist listings to {self._store.path}")

    def _fall_back(self) -> str:
        """Run the fallback chain and install the first snapshot produced."""
        for name, strategy in self.fallbacks:
            snapshot = strategy()
            if snapshot is not None:
                self._snapshot = snapshot
                logger.warning(
                    f"Serving fallback '{name}' with {snapshot.count} listings "
                    f"(last updated {snapshot.last_updated})"
                )
                return name
        # Chain exhausted without a snapshot
        self._snapshot = CacheSnapshot.empty()
        return "empty"

    def _keep_current(self) -> Optional[CacheSnapshot]:
        return self._snapshot if self._snapshot.is_populated else None

    def _load_persisted(self) -> Optional[CacheSnapshot]:
        try:
            return self._store.load()
        except SnapshotNotFound:
            return None
        except CorruptCache as e:
            logger.error(f"Failed to read fallback cache file: {e}")
            return None

    def _empty(self) -> Optional[CacheSnapshot]:
        return CacheSnapshot.empty()

    async def _loop(self) -> None:
        """Main loop: sleep one interval, refresh, repeat."""
        while True:
            next_run = self._clock() + self._interval
            self._status["next_run_at"] = next_run.isoformat()
            await asyncio.sleep(self._interval.total_seconds())
            logger.info("Performing scheduled cache refresh")
            try:
                await self.refresh()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Scheduled refresh failed unexpectedly")
