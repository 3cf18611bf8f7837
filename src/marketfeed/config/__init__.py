"""Configuration module for the marketplace feed."""

from marketfeed.config.factory import (
    create_debounce,
    create_from_config,
    create_query_service,
    create_snapshot_cache,
    create_store,
)
from marketfeed.config.loader import get_default_config_path, load_config
from marketfeed.config.models import (
    DebounceConfig,
    FeedConfig,
    FileStoreConfig,
    LoggingConfig,
    MarketFeedConfig,
    MemoryStoreConfig,
    QueryConfig,
    RpcQueryConfig,
    SnapshotConfig,
    StaticQueryConfig,
    StoreConfig,
)

__all__ = [
    "DebounceConfig",
    "FeedConfig",
    "FileStoreConfig",
    "LoggingConfig",
    "MarketFeedConfig",
    "MemoryStoreConfig",
    "QueryConfig",
    "RpcQueryConfig",
    "SnapshotConfig",
    "StaticQueryConfig",
    "StoreConfig",
    "create_debounce",
    "create_from_config",
    "create_query_service",
    "create_snapshot_cache",
    "create_store",
    "get_default_config_path",
    "load_config",
]
