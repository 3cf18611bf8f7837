"""Instant snapshot cache for the clean first page of the feed."""

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

from pydantic import TypeAdapter, ValidationError

from marketfeed.cache.store import KeyValueStore
from marketfeed.data import FeedCursors, Listing, Snapshot

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
ANONYMOUS_VIEWER = "anonymous"
KEY_PREFIX = "feed-snapshot"

DEFAULT_FRESHNESS = timedelta(minutes=1)
DEFAULT_MAX_AGE = timedelta(hours=24)

_snapshot_adapter: TypeAdapter[Snapshot] = TypeAdapter(Snapshot)


def snapshot_key(viewer_id: str | None) -> str:
    return f"{KEY_PREFIX}:{viewer_id or ANONYMOUS_VIEWER}"


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class SnapshotCache:
    """Persist and serve the most recent clean first page per viewer.

    Reads are local lookups and never touch the network. Anything that cannot
    be decoded, carries another format version, or is older than ``max_age``
    reads as a miss. Writes within ``freshness`` of the previous snapshot for
    the same viewer are skipped.

    Args:
        store: Byte store holding the encoded snapshots.
        freshness: Minimum age of an existing snapshot before it is replaced.
        max_age: Snapshots older than this are ignored on read.
        clock: Returns the current aware datetime.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        freshness: timedelta = DEFAULT_FRESHNESS,
        max_age: timedelta = DEFAULT_MAX_AGE,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._freshness = freshness
        self._max_age = max_age
        self._clock = clock

    def read(self, viewer_id: str | None) -> Snapshot | None:
        snapshot = self._load(viewer_id)
        if snapshot is None:
            return None
        if self._clock() - snapshot.captured_at > self._max_age:
            logger.debug("Snapshot for %s expired (captured %s)", viewer_id, snapshot.captured_at)
            return None
        return snapshot

    def write(
        self,
        viewer_id: str | None,
        listings: Sequence[Listing],
        cursors: FeedCursors,
    ) -> bool:
        """Replace the viewer's snapshot.

        Returns:
            True if a snapshot was persisted, False if the write was skipped.
        """
        if not listings:
            return False

        now = self._clock()
        existing = self._load(viewer_id)
        if existing is not None and now - existing.captured_at < self._freshness:
            logger.debug("Skipping snapshot write for %s: existing one is still fresh", viewer_id)
            return False

        snapshot = Snapshot(
            listings=tuple(listings),
            cursors=cursors,
            captured_at=now,
            version=SNAPSHOT_VERSION,
        )
        self._store.set(snapshot_key(viewer_id), _snapshot_adapter.dump_json(snapshot))
        logger.debug("Saved snapshot of %d listings for %s", len(listings), viewer_id)
        return True

    def _load(self, viewer_id: str | None) -> Snapshot | None:
        raw = self._store.get(snapshot_key(viewer_id))
        if raw is None:
            return None
        try:
            snapshot = _snapshot_adapter.validate_json(raw)
        except ValidationError:
            logger.debug("Discarding unreadable snapshot for %s", viewer_id)
            return None
        if snapshot.version != SNAPSHOT_VERSION:
            logger.debug("Ignoring snapshot version %d for %s", snapshot.version, viewer_id)
            return None
        return snapshot
