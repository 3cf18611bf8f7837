"""Multi-source cursor fetcher."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from marketfeed.data import (
    BudgetRange,
    Cursor,
    FeedCursors,
    FeedPage,
    FixedPrice,
    Listing,
    QuoteRequired,
    SourceKind,
)
from marketfeed.fetch.normalize import normalize_record
from marketfeed.filters import FilterCriteria
from marketfeed.query.base import QueryResult, QueryService
from marketfeed.query.params import build_params

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class FeedFetchError(Exception):
    """Every enabled source failed for one fetch."""

    def __init__(self, errors: dict[SourceKind, str]) -> None:
        self.errors = errors
        detail = "; ".join(f"{source.value}: {error}" for source, error in errors.items())
        super().__init__(f"Failed to fetch listings ({detail})")


@dataclass(frozen=True)
class _SourcePage:
    source: SourceKind
    listings: list[Listing]
    cursor: Cursor | None
    full_page: bool


def matches_price_bounds(
    listing: Listing,
    price_min: float | None,
    price_max: float | None,
) -> bool:
    """Client-side price guard.

    Listings that ask for a quote always pass. Budget ranges must sit inside
    the bounds: the low end (``minimum``) is checked against ``price_min``
    and the high end (``maximum``, else ``minimum``) against ``price_max``.
    """
    if price_min is None and price_max is None:
        return True
    price = listing.price
    if isinstance(price, QuoteRequired):
        return True
    if isinstance(price, FixedPrice):
        low = high = price.amount
    elif isinstance(price, BudgetRange):
        if price.minimum is None and price.maximum is None:
            return True
        low = price.minimum if price.minimum is not None else price.maximum
        high = price.maximum if price.maximum is not None else price.minimum
    else:
        return True
    if price_min is not None and low is not None and low < price_min:
        return False
    if price_max is not None and high is not None and high > price_max:
        return False
    return True


def merge_reset_page(listings: list[Listing]) -> list[Listing]:
    """Order a reset page assembled from several sources.

    A single stable sort: newest first with ties by id ascending.
    """
    return sorted(listings, key=lambda listing: listing.feed_order_key)


class MultiSourceFetcher:
    """Fetch one page from every enabled source and merge the results.

    Flow:
    1. Pick sources from the criteria's listing-type restriction, skipping
       sources already exhausted when paginating
    2. Query all of them concurrently, one call each, with their own cursor
    3. Normalize records into ``Listing`` and apply the price guard
    4. Advance each source's cursor to its own last record

    Args:
        service: Query service (normally a ``RequestCoalescer``).
        page_size: Records requested from each source per page.
    """

    def __init__(self, service: QueryService, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self._service = service
        self._page_size = page_size

    @property
    def page_size(self) -> int:
        return self._page_size

    async def fetch(
        self,
        criteria: FilterCriteria,
        cursors: FeedCursors,
        *,
        reset: bool,
        page_size: int | None = None,
    ) -> FeedPage:
        """Fetch the next page (or the first page, when ``reset``).

        Args:
            criteria: Active filter criteria.
            cursors: Current per-source cursors; ignored on reset.
            reset: Start every source from the beginning of the feed.
            page_size: Override the fetcher's page size.

        Returns:
            The merged page, its new cursors and whether more is available.

        Raises:
            FeedFetchError: If every queried source failed.
        """
        limit = page_size or self._page_size
        if reset:
            cursors = FeedCursors()

        sources: Sequence[SourceKind] = criteria.sources
        if not reset:
            sources = [s for s in sources if s not in cursors.exhausted]
        if not sources:
            return FeedPage(listings=(), cursors=cursors, has_more=False)

        tasks = [
            self._fetch_source(source, criteria, cursors.get(source), limit) for source in sources
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        pages: list[_SourcePage] = []
        errors: dict[SourceKind, str] = {}
        for source, result in zip(sources, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("Error fetching %s listings. Error: %s", source.value, result)
                errors[source] = str(result) or type(result).__name__
                continue
            pages.append(result)

        if not pages:
            raise FeedFetchError(errors)

        listings: list[Listing] = []
        has_more = False
        for page in pages:
            listings.extend(page.listings)
            has_more = has_more or page.full_page
            cursors = cursors.advance(page.source, page.cursor, exhausted=not page.full_page)
        # A failed source keeps its cursor and is retried on the next page.
        has_more = has_more or any(source not in cursors.exhausted for source in errors)

        if reset and len(pages) > 1:
            listings = merge_reset_page(listings)

        return FeedPage(
            listings=tuple(listings),
            cursors=cursors,
            has_more=has_more,
            failed_sources=tuple(errors),
        )

    async def _fetch_source(
        self,
        source: SourceKind,
        criteria: FilterCriteria,
        cursor: Cursor | None,
        limit: int,
    ) -> _SourcePage:
        result: QueryResult = await self._service.query_page(
            source, build_params(source, criteria, cursor, limit)
        )
        if result.error is not None:
            raise RuntimeError(result.error)

        normalized = [normalize_record(source, record) for record in result.records]
        placed = [listing for listing in normalized if listing is not None]

        next_cursor = Cursor.after(placed[-1]) if placed else None
        full_page = len(result.records) >= limit
        if full_page and next_cursor is None:
            logger.warning(
                "No placeable %s records in a full page; treating source as exhausted",
                source.value,
            )
            full_page = False

        kept = [
            listing
            for listing in placed
            if matches_price_bounds(listing, criteria.price_min, criteria.price_max)
        ]
        return _SourcePage(
            source=source,
            listings=kept,
            cursor=next_cursor,
            full_page=full_page,
        )
