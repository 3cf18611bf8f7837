"""Core data models for the marketplace feed."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Literal


class SourceKind(StrEnum):
    """The two record sources merged into the feed.

    - ``OFFER``: provider-posted listings (services available for booking).
    - ``REQUEST``: customer-posted listings (jobs seeking a provider).
    """

    OFFER = "offer"
    REQUEST = "request"


@dataclass(frozen=True)
class FixedPrice:
    """A single fixed amount."""

    amount: float
    kind: Literal["fixed"] = "fixed"


@dataclass(frozen=True)
class BudgetRange:
    """A budget range; either end may be open."""

    minimum: float | None = None
    maximum: float | None = None
    kind: Literal["budget"] = "budget"


@dataclass(frozen=True)
class QuoteRequired:
    """No price published; the poster expects a quote."""

    kind: Literal["quote"] = "quote"


PriceInfo = FixedPrice | BudgetRange | QuoteRequired


@dataclass(frozen=True)
class Location:
    """Where a listing is, as far as the source knows."""

    latitude: float | None = None
    longitude: float | None = None
    display_text: str = ""

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class OwnerRef:
    """Display fields of the posting party. Not an ownership edge."""

    id: str
    full_name: str | None = None
    avatar_url: str | None = None
    location_text: str | None = None
    user_type: str | None = None


@dataclass(frozen=True)
class Listing:
    """A unified feed entry normalized from an offer or a request record."""

    id: str
    source_kind: SourceKind
    title: str
    created_at: datetime
    description: str = ""
    price: PriceInfo = field(default_factory=QuoteRequired)
    location: Location | None = None
    distance_miles: float | None = None
    owner: OwnerRef | None = None
    photos: tuple[str, ...] = ()
    featured_image_url: str | None = None
    category_id: str | None = None
    status: str | None = None
    subtype: str | None = None
    rating: float = 0.0

    @property
    def key(self) -> tuple[SourceKind, str]:
        """Identity within the merged feed (ids are only unique per source)."""
        return (self.source_kind, self.id)

    @property
    def feed_order_key(self) -> tuple[float, str]:
        """Sort key for feed order: newest first, ties by id ascending."""
        return (-self.created_at.timestamp(), self.id)


@dataclass(frozen=True)
class Cursor:
    """Pagination position within one source: the last record received."""

    created_at: datetime
    id: str

    @classmethod
    def after(cls, listing: Listing) -> "Cursor":
        return cls(created_at=listing.created_at, id=listing.id)

    def is_newer_than(self, other: "Cursor") -> bool:
        """True if this cursor points to a newer position than ``other``.

        Sources page from newest to oldest, so a cursor with a later
        ``created_at`` sits earlier in the feed.
        """
        return self.created_at > other.created_at


@dataclass(frozen=True)
class FeedCursors:
    """Per-source cursors, plus the sources whose last page came back short."""

    offer: Cursor | None = None
    request: Cursor | None = None
    exhausted: frozenset[SourceKind] = frozenset()

    def get(self, source: SourceKind) -> Cursor | None:
        return self.offer if source is SourceKind.OFFER else self.request

    def advance(
        self,
        source: SourceKind,
        candidate: Cursor | None,
        *,
        exhausted: bool = False,
    ) -> "FeedCursors":
        """Return a copy with ``source`` moved to ``candidate``.

        The cursor never moves backwards: a candidate pointing to a newer
        position than the current cursor is ignored.
        """
        current = self.get(source)
        cursor = current
        if candidate is not None and (current is None or not candidate.is_newer_than(current)):
            cursor = candidate

        done = self.exhausted | {source} if exhausted else self.exhausted - {source}
        if source is SourceKind.OFFER:
            return FeedCursors(offer=cursor, request=self.request, exhausted=done)
        return FeedCursors(offer=self.offer, request=cursor, exhausted=done)


@dataclass(frozen=True)
class Snapshot:
    """A persisted copy of the most recent clean first page."""

    listings: tuple[Listing, ...]
    cursors: FeedCursors
    captured_at: datetime
    version: int = 1


@dataclass(frozen=True)
class FeedPage:
    """Result of one multi-source fetch."""

    listings: tuple[Listing, ...]
    cursors: FeedCursors
    has_more: bool
    failed_sources: tuple[SourceKind, ...] = ()
