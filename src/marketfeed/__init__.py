"""marketfeed: merged, cursor-paginated discovery feed for a two-sided marketplace."""

from marketfeed.cache import FileStore, KeyValueStore, MemoryStore, SnapshotCache
from marketfeed.config import MarketFeedConfig, create_from_config, load_config
from marketfeed.data import (
    BudgetRange,
    Cursor,
    FeedCursors,
    FeedPage,
    FixedPrice,
    Listing,
    Location,
    OwnerRef,
    PriceInfo,
    QuoteRequired,
    Snapshot,
    SourceKind,
)
from marketfeed.feed import (
    DebounceSettings,
    FeedOrchestrator,
    FeedState,
    FeedView,
    FetchSession,
    select_debounce_delay,
)
from marketfeed.fetch import FeedFetchError, MultiSourceFetcher, normalize_record
from marketfeed.filters import FilterActions, FilterCriteria, FilterIntent, ListingType, SortMode
from marketfeed.query import (
    QueryResult,
    QueryService,
    RequestCoalescer,
    RpcQueryService,
    StaticQueryService,
)

__all__ = [
    # Models
    "BudgetRange",
    "Cursor",
    "FeedCursors",
    "FeedPage",
    "FixedPrice",
    "Listing",
    "Location",
    "OwnerRef",
    "PriceInfo",
    "QuoteRequired",
    "Snapshot",
    "SourceKind",
    # Filters
    "FilterActions",
    "FilterCriteria",
    "FilterIntent",
    "ListingType",
    "SortMode",
    # Protocols
    "KeyValueStore",
    "QueryService",
    # Query services
    "QueryResult",
    "RequestCoalescer",
    "RpcQueryService",
    "StaticQueryService",
    # Fetching
    "FeedFetchError",
    "MultiSourceFetcher",
    "normalize_record",
    # Cache
    "FileStore",
    "MemoryStore",
    "SnapshotCache",
    # Orchestration
    "DebounceSettings",
    "FeedOrchestrator",
    "FeedState",
    "FeedView",
    "FetchSession",
    "select_debounce_delay",
    # Config
    "MarketFeedConfig",
    "create_from_config",
    "load_config",
]
