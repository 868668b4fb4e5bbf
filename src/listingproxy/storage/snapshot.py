"""File-backed store for the listings snapshot.

The snapshot lives in one JSON document:

    {"lastUpdated": "2024-05-01T12:00:00Z", "listings": [...]}

Writes go to a sibling temporary file which is then renamed over the
canonical file, so readers never see a half-written document.
"""

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from ..models.listing import CacheSnapshot

logger = logging.getLogger(__name__)


class SnapshotNotFound(Exception):
    """Raised when no persisted snapshot exists."""


class CorruptCache(Exception):
    """Raised when the persisted snapshot cannot be parsed.

    Callers treat this the same as a missing file.
    """


class SnapshotStore:
    """Persists a CacheSnapshot across process restarts.

    Example:
        store = SnapshotStore(Path("data/listings.json"))
        store.save(snapshot)
        restored = store.load()
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def tmp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, snapshot: CacheSnapshot) -> None:
        """Write the snapshot, replacing any previous file atomically.

        Args:
            snapshot: Snapshot to persist
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "lastUpdated": snapshot.last_updated.isoformat() if snapshot.last_updated else None,
            "listings": [
                listing.model_dump(mode="json", exclude_unset=True)
                for listing in snapshot.listings
            ],
        }

        tmp = self.tmp_path
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise

        logger.info(f"Persisted {snapshot.count} listings to {self.path}")

    def load(self) -> CacheSnapshot:
        """Read the persisted snapshot.

        Returns:
            The stored CacheSnapshot

        Raises:
            SnapshotNotFound: If the file does not exist
            CorruptCache: If the file is unreadable or not a valid snapshot
        """
        if not self.path.exists():
            raise SnapshotNotFound(str(self.path))

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            raise CorruptCache(f"{self.path}: {e}") from e

        if not isinstance(data, dict):
            raise CorruptCache(f"{self.path}: expected a JSON object")

        try:
            snapshot = CacheSnapshot.model_validate(
                {
                    "listings": data.get("listings") or [],
                    "lastUpdated": data.get("lastUpdated"),
                }
            )
        except ValidationError as e:
            raise CorruptCache(f"{self.path}: {e.error_count()} invalid field(s)") from e

        logger.info(
            f"Loaded {snapshot.count} listings from {self.path} "
            f"(last updated {snapshot.last_updated})"
        )
        return snapshot

    def clear(self) -> bool:
        """Delete the persisted snapshot.

        Returns:
            True if a file was removed
        """
        if self.path.exists():
            self.path.unlink()
            return True
        return False
