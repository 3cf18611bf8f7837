"""Tests for wire parameter building."""

from __future__ import annotations

from datetime import UTC, datetime

from marketfeed.data import Cursor, SourceKind
from marketfeed.filters import FilterCriteria, ListingType, SortMode
from marketfeed.query import build_offer_params, build_params, build_request_params


class TestBuildParams:
    """Tests for build_params."""

    def test_first_page_has_no_cursor(self) -> None:
        params = build_offer_params(FilterCriteria(), None, 20)
        assert params["p_cursor_created_at"] is None
        assert params["p_cursor_id"] is None
        assert params["p_limit"] == 20

    def test_cursor_is_serialized(self) -> None:
        cursor = Cursor(created_at=datetime(2026, 3, 1, 10, tzinfo=UTC), id="o-9")
        params = build_request_params(FilterCriteria(), cursor, 10)
        assert params["p_cursor_created_at"] == "2026-03-01T10:00:00+00:00"
        assert params["p_cursor_id"] == "o-9"

    def test_offer_price_and_subtypes(self) -> None:
        criteria = FilterCriteria(
            price_min=50,
            price_max=500,
            min_rating=4.0,
            listing_type=ListingType.SERVICE,
        )
        params = build_offer_params(criteria, None, 20)
        assert params["p_min_price"] == 50
        assert params["p_max_price"] == 500
        assert params["p_min_rating"] == 4.0
        assert params["p_listing_types"] == ["Service"]
        assert "p_min_budget" not in params

    def test_request_uses_budget_bounds(self) -> None:
        criteria = FilterCriteria(price_min=50, price_max=500)
        params = build_request_params(criteria, None, 20)
        assert params["p_min_budget"] == 50
        assert params["p_max_budget"] == 500
        assert "p_min_price" not in params
        assert "p_listing_types" not in params

    def test_shared_filters(self) -> None:
        criteria = FilterCriteria(
            search_text="  fence ",
            categories=frozenset({"b", "a"}),
            sort=SortMode.NEWEST,
            verified_only=True,
        )
        params = build_params(SourceKind.REQUEST, criteria, None, 20)
        assert params["p_search"] == "fence"
        assert params["p_category_ids"] == ["a", "b"]
        assert params["p_sort_by"] == "recent"
        assert params["p_verified"] is True

    def test_unset_filters_are_none(self) -> None:
        params = build_params(SourceKind.OFFER, FilterCriteria(), None, 20)
        assert params["p_search"] is None
        assert params["p_category_ids"] is None
        assert params["p_verified"] is None
        assert params["p_min_rating"] is None
        assert params["p_listing_types"] == ["Service", "CustomService"]

    def test_distance_requires_coordinates(self) -> None:
        without = build_params(SourceKind.OFFER, FilterCriteria(distance_miles=10), None, 20)
        assert without["p_distance"] is None

        criteria = FilterCriteria(distance_miles=10, viewer_latitude=30.0, viewer_longitude=-97.0)
        params = build_params(SourceKind.OFFER, criteria, None, 20)
        assert params["p_distance"] == 10
        assert params["p_user_lat"] == 30.0
        assert params["p_user_lng"] == -97.0

    def test_equal_criteria_build_equal_params(self) -> None:
        """Category set order must not change the wire parameters."""
        a = FilterCriteria(categories=frozenset({"x", "y", "z"}))
        b = FilterCriteria(categories=frozenset({"z", "y", "x"}))
        assert build_params(SourceKind.OFFER, a, None, 20) == build_params(
            SourceKind.OFFER, b, None, 20
        )
