"""Multi-source fetching and record normalization."""

from marketfeed.fetch.fetcher import (
    DEFAULT_PAGE_SIZE,
    FeedFetchError,
    MultiSourceFetcher,
    matches_price_bounds,
    merge_reset_page,
)
from marketfeed.fetch.normalize import (
    normalize_offer,
    normalize_record,
    normalize_request,
    parse_photos,
    parse_timestamp,
    to_float,
)

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "FeedFetchError",
    "MultiSourceFetcher",
    "matches_price_bounds",
    "merge_reset_page",
    "normalize_offer",
    "normalize_record",
    "normalize_request",
    "parse_photos",
    "parse_timestamp",
    "to_float",
]
