"""Pydantic configuration models for the marketplace feed."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

# ============================================================
# Query Service Configs
# ============================================================


class RpcQueryConfig(BaseModel):
    """Configuration for RpcQueryService.

    The URL and key fall back to MARKETFEED_API_URL / MARKETFEED_API_KEY.
    """

    type: Literal["rpc"] = "rpc"
    base_url: str | None = None
    timeout_seconds: float = 30.0
    offer_function: str = "get_services_cursor_paginated_v2"
    request_function: str = "get_jobs_cursor_paginated_v2"

    model_config = {"frozen": True}


class StaticQueryConfig(BaseModel):
    """Configuration for StaticQueryService (fixture file, JSON or YAML)."""

    type: Literal["static"] = "static"
    fixtures: str | None = None

    model_config = {"frozen": True}


QueryConfig = Annotated[
    RpcQueryConfig | StaticQueryConfig,
    Field(discriminator="type"),
]


# ============================================================
# Snapshot Store Configs
# ============================================================


class MemoryStoreConfig(BaseModel):
    """Process-local snapshot store."""

    type: Literal["memory"] = "memory"

    model_config = {"frozen": True}


class FileStoreConfig(BaseModel):
    """Directory-backed snapshot store."""

    type: Literal["file"] = "file"
    directory: str = ".marketfeed/snapshots"

    model_config = {"frozen": True}


StoreConfig = Annotated[
    MemoryStoreConfig | FileStoreConfig,
    Field(discriminator="type"),
]


class SnapshotConfig(BaseModel):
    """Instant snapshot settings."""

    enabled: bool = True
    freshness_seconds: float = 60.0
    max_age_seconds: float = 24 * 60 * 60
    store: MemoryStoreConfig | FileStoreConfig = Field(
        default_factory=MemoryStoreConfig, discriminator="type"
    )

    model_config = {"frozen": True}


# ============================================================
# Feed Configs
# ============================================================


class DebounceConfig(BaseModel):
    """Reset-fetch delays in milliseconds."""

    initial_with_snapshot_ms: int = 0
    initial_ms: int = 50
    subsequent_ms: int = 300

    model_config = {"frozen": True}


class FeedConfig(BaseModel):
    """Pagination and debounce settings."""

    page_size: int = Field(default=20, gt=0)
    debounce: DebounceConfig = Field(default_factory=DebounceConfig)

    model_config = {"frozen": True}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for process logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class MarketFeedConfig(BaseModel):
    """Root configuration for the marketplace feed."""

    query: RpcQueryConfig | StaticQueryConfig = Field(
        default_factory=StaticQueryConfig, discriminator="type"
    )
    feed: FeedConfig = Field(default_factory=FeedConfig)
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
