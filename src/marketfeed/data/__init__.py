"""Data models for the marketplace feed."""

from marketfeed.data.models import (
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
    SourceKind,
    Snapshot,
)

__all__ = [
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
]
