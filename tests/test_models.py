"""Tests for core data models."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime

import pytest

from marketfeed.data import (
    Cursor,
    FeedCursors,
    FixedPrice,
    Listing,
    Location,
    QuoteRequired,
    SourceKind,
)


def _listing(
    id: str,
    hour: int,
    source: SourceKind = SourceKind.OFFER,
) -> Listing:
    return Listing(
        id=id,
        source_kind=source,
        title=f"Listing {id}",
        created_at=datetime(2026, 3, 1, hour, tzinfo=UTC),
    )


class TestListing:
    """Tests for Listing."""

    def test_defaults(self) -> None:
        listing = _listing("a", 10)
        assert listing.price == QuoteRequired()
        assert listing.photos == ()
        assert listing.location is None
        assert listing.rating == 0.0

    def test_is_frozen(self) -> None:
        listing = _listing("a", 10)
        with pytest.raises(FrozenInstanceError):
            listing.title = "changed"  # type: ignore[misc]

    def test_key_includes_source(self) -> None:
        """Ids are only unique per source, so the key carries the source."""
        offer = _listing("1", 10, SourceKind.OFFER)
        request = _listing("1", 10, SourceKind.REQUEST)
        assert offer.key != request.key
        assert offer.key == (SourceKind.OFFER, "1")

    def test_feed_order_newest_first(self) -> None:
        older = _listing("a", 8)
        newer = _listing("b", 10)
        assert sorted([older, newer], key=lambda x: x.feed_order_key) == [newer, older]

    def test_feed_order_ties_by_id_ascending(self) -> None:
        b = _listing("b", 10)
        a = _listing("a", 10, SourceKind.REQUEST)
        assert sorted([b, a], key=lambda x: x.feed_order_key) == [a, b]


class TestLocation:
    """Tests for Location."""

    def test_has_coordinates(self) -> None:
        assert Location(latitude=1.0, longitude=2.0).has_coordinates
        assert not Location(latitude=1.0).has_coordinates
        assert not Location(display_text="Austin, TX").has_coordinates


class TestCursor:
    """Tests for Cursor."""

    def test_after_listing(self) -> None:
        listing = _listing("x", 9)
        cursor = Cursor.after(listing)
        assert cursor.id == "x"
        assert cursor.created_at == listing.created_at

    def test_is_newer_than(self) -> None:
        newer = Cursor(created_at=datetime(2026, 3, 1, 10, tzinfo=UTC), id="a")
        older = Cursor(created_at=datetime(2026, 3, 1, 9, tzinfo=UTC), id="b")
        assert newer.is_newer_than(older)
        assert not older.is_newer_than(newer)
        assert not newer.is_newer_than(newer)


class TestFeedCursors:
    """Tests for per-source cursor bookkeeping."""

    def test_empty_by_default(self) -> None:
        cursors = FeedCursors()
        assert cursors.get(SourceKind.OFFER) is None
        assert cursors.get(SourceKind.REQUEST) is None
        assert cursors.exhausted == frozenset()

    def test_advance_moves_only_that_source(self) -> None:
        cursor = Cursor(created_at=datetime(2026, 3, 1, 9, tzinfo=UTC), id="o-1")
        cursors = FeedCursors().advance(SourceKind.OFFER, cursor)
        assert cursors.offer == cursor
        assert cursors.request is None

    def test_advance_never_moves_backwards(self) -> None:
        older = Cursor(created_at=datetime(2026, 3, 1, 8, tzinfo=UTC), id="o-2")
        newer = Cursor(created_at=datetime(2026, 3, 1, 10, tzinfo=UTC), id="o-0")
        cursors = FeedCursors().advance(SourceKind.OFFER, older)

        cursors = cursors.advance(SourceKind.OFFER, newer)

        assert cursors.offer == older

    def test_advance_with_no_candidate_keeps_cursor(self) -> None:
        cursor = Cursor(created_at=datetime(2026, 3, 1, 9, tzinfo=UTC), id="r-1")
        cursors = FeedCursors().advance(SourceKind.REQUEST, cursor)
        assert cursors.advance(SourceKind.REQUEST, None).request == cursor

    def test_advance_tracks_exhaustion(self) -> None:
        cursors = FeedCursors().advance(SourceKind.REQUEST, None, exhausted=True)
        assert cursors.exhausted == frozenset({SourceKind.REQUEST})

        cursors = cursors.advance(SourceKind.REQUEST, None, exhausted=False)
        assert cursors.exhausted == frozenset()


class TestPriceInfo:
    """Tests for price variants."""

    def test_variants_are_distinguishable(self) -> None:
        assert FixedPrice(10.0).kind == "fixed"
        assert QuoteRequired().kind == "quote"
        assert FixedPrice(10.0) != QuoteRequired()
