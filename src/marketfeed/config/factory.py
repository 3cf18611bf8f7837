"""Factory functions to create components from configuration."""

from datetime import timedelta
from pathlib import Path

from marketfeed.cache import FileStore, KeyValueStore, MemoryStore, SnapshotCache
from marketfeed.config.models import (
    DebounceConfig,
    FileStoreConfig,
    MarketFeedConfig,
    MemoryStoreConfig,
    RpcQueryConfig,
    SnapshotConfig,
    StaticQueryConfig,
)
from marketfeed.data import SourceKind
from marketfeed.feed import DebounceSettings, FeedOrchestrator
from marketfeed.fetch import MultiSourceFetcher
from marketfeed.filters import FilterIntent
from marketfeed.query import QueryService, RequestCoalescer, RpcQueryService, StaticQueryService


def create_query_service(config: RpcQueryConfig | StaticQueryConfig) -> QueryService:
    """Create a query service from config.

    Uses explicit type matching rather than getattr.
    """
    if isinstance(config, RpcQueryConfig):
        return RpcQueryService(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            functions={
                SourceKind.OFFER: config.offer_function,
                SourceKind.REQUEST: config.request_function,
            },
        )
    if isinstance(config, StaticQueryConfig):
        if config.fixtures is None:
            return StaticQueryService()
        return StaticQueryService.from_file(Path(config.fixtures))
    msg = f"Unknown query config type: {type(config)}"
    raise ValueError(msg)


def create_store(config: MemoryStoreConfig | FileStoreConfig) -> KeyValueStore:
    """Create a snapshot store from config."""
    if isinstance(config, MemoryStoreConfig):
        return MemoryStore()
    if isinstance(config, FileStoreConfig):
        return FileStore(Path(config.directory))
    msg = f"Unknown store config type: {type(config)}"
    raise ValueError(msg)


def create_snapshot_cache(config: SnapshotConfig) -> SnapshotCache | None:
    """Create the snapshot cache, or None when snapshots are disabled."""
    if not config.enabled:
        return None
    return SnapshotCache(
        create_store(config.store),
        freshness=timedelta(seconds=config.freshness_seconds),
        max_age=timedelta(seconds=config.max_age_seconds),
    )


def create_debounce(config: DebounceConfig) -> DebounceSettings:
    return DebounceSettings(
        initial_with_snapshot=config.initial_with_snapshot_ms / 1000,
        initial=config.initial_ms / 1000,
        subsequent=config.subsequent_ms / 1000,
    )


def create_from_config(
    config: MarketFeedConfig,
    *,
    viewer_id: str | None = None,
    intent: FilterIntent | None = None,
    snapshot_cache: SnapshotCache | None = None,
) -> tuple[FeedOrchestrator, FilterIntent]:
    """Create a complete feed from root config.

    Args:
        config: Root configuration.
        viewer_id: Viewer identity for the snapshot key.
        intent: Existing filter intent to drive the feed (a new one otherwise).
        snapshot_cache: Shared cache to reuse instead of building one.

    Returns:
        Tuple of (orchestrator, filter_intent). The orchestrator is not
        started yet.
    """
    intent = intent or FilterIntent()
    service = RequestCoalescer(create_query_service(config.query))
    fetcher = MultiSourceFetcher(service, page_size=config.feed.page_size)
    cache = snapshot_cache or create_snapshot_cache(config.snapshot)

    orchestrator = FeedOrchestrator(
        intent,
        fetcher,
        cache,
        viewer_id=viewer_id,
        debounce=create_debounce(config.feed.debounce),
        enable_snapshot=config.snapshot.enabled,
    )
    return (orchestrator, intent)
