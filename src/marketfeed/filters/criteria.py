"""Immutable filter criteria and their pure transitions."""

from dataclasses import dataclass, replace
from enum import StrEnum

from marketfeed.data import SourceKind


class SortMode(StrEnum):
    """Sort orders understood by the query service."""

    RELEVANCE = "relevance"
    NEWEST = "recent"
    PRICE_LOW = "price_low"
    PRICE_HIGH = "price_high"
    DISTANCE = "distance"
    RATING = "rating"
    POPULAR = "popular"


class ListingType(StrEnum):
    """Restriction on which sources (and offer subtypes) feed the list."""

    ALL = "all"
    OFFER = "offer"
    SERVICE = "Service"
    CUSTOM_SERVICE = "CustomService"
    REQUEST = "request"


OFFER_SUBTYPES: tuple[str, ...] = (ListingType.SERVICE.value, ListingType.CUSTOM_SERVICE.value)

DEFAULT_DISTANCE_MILES = 25


@dataclass(frozen=True)
class FilterCriteria:
    """Snapshot of query intent.

    Transition methods return a new value and never mutate ``self``.
    """

    search_text: str = ""
    categories: frozenset[str] = frozenset()
    location_text: str = ""
    price_min: float | None = None
    price_max: float | None = None
    distance_miles: int | None = DEFAULT_DISTANCE_MILES
    viewer_latitude: float | None = None
    viewer_longitude: float | None = None
    min_rating: float = 0.0
    sort: SortMode = SortMode.RELEVANCE
    verified_only: bool = False
    listing_type: ListingType = ListingType.ALL

    @property
    def is_clean(self) -> bool:
        """True when the criteria are eligible for the instant snapshot.

        Sort, rating, distance and listing type do not affect cleanliness.
        """
        return (
            not self.search_text.strip()
            and not self.categories
            and not self.location_text.strip()
            and self.price_min is None
            and self.price_max is None
        )

    @property
    def has_price_bounds(self) -> bool:
        return self.price_min is not None or self.price_max is not None

    @property
    def has_viewer_coordinates(self) -> bool:
        return self.viewer_latitude is not None and self.viewer_longitude is not None

    @property
    def sources(self) -> tuple[SourceKind, ...]:
        """Sources enabled by the listing-type restriction, in fetch order."""
        if self.listing_type is ListingType.REQUEST:
            return (SourceKind.REQUEST,)
        if self.listing_type is ListingType.ALL:
            return (SourceKind.OFFER, SourceKind.REQUEST)
        return (SourceKind.OFFER,)

    @property
    def offer_subtypes(self) -> tuple[str, ...]:
        if self.listing_type in (ListingType.SERVICE, ListingType.CUSTOM_SERVICE):
            return (self.listing_type.value,)
        return OFFER_SUBTYPES

    def with_listing_type(self, listing_type: ListingType) -> "FilterCriteria":
        return replace(self, listing_type=listing_type)

    def with_category_toggled(self, category_id: str) -> "FilterCriteria":
        if category_id in self.categories:
            return replace(self, categories=self.categories - {category_id})
        return replace(self, categories=self.categories | {category_id})

    def with_price_range(
        self, price_min: float | None, price_max: float | None
    ) -> "FilterCriteria":
        return replace(self, price_min=price_min, price_max=price_max)

    def with_sort(self, sort: SortMode) -> "FilterCriteria":
        return replace(self, sort=sort)

    def with_verified_toggled(self) -> "FilterCriteria":
        return replace(self, verified_only=not self.verified_only)

    def with_coordinates(self, latitude: float | None, longitude: float | None) -> "FilterCriteria":
        return replace(self, viewer_latitude=latitude, viewer_longitude=longitude)

    def with_location_text(self, location_text: str) -> "FilterCriteria":
        return replace(self, location_text=location_text)

    def with_distance(self, distance_miles: int | None) -> "FilterCriteria":
        return replace(self, distance_miles=distance_miles)

    def with_min_rating(self, min_rating: float) -> "FilterCriteria":
        return replace(self, min_rating=min_rating)

    def with_search_text(self, search_text: str) -> "FilterCriteria":
        return replace(self, search_text=search_text)


DEFAULT_CRITERIA = FilterCriteria()
