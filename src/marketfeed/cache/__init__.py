"""Snapshot cache and its key-value stores."""

from marketfeed.cache.snapshot import (
    ANONYMOUS_VIEWER,
    DEFAULT_FRESHNESS,
    DEFAULT_MAX_AGE,
    SNAPSHOT_VERSION,
    SnapshotCache,
    snapshot_key,
)
from marketfeed.cache.store import FileStore, KeyValueStore, MemoryStore

__all__ = [
    "ANONYMOUS_VIEWER",
    "DEFAULT_FRESHNESS",
    "DEFAULT_MAX_AGE",
    "SNAPSHOT_VERSION",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "SnapshotCache",
    "snapshot_key",
]
