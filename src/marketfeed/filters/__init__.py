"""Filter criteria and the filter intent state machine."""

from marketfeed.filters.criteria import (
    DEFAULT_CRITERIA,
    OFFER_SUBTYPES,
    FilterCriteria,
    ListingType,
    SortMode,
)
from marketfeed.filters.intent import FilterActions, FilterIntent

__all__ = [
    "DEFAULT_CRITERIA",
    "OFFER_SUBTYPES",
    "FilterActions",
    "FilterCriteria",
    "FilterIntent",
    "ListingType",
    "SortMode",
]
