"""Tests for the filter intent state machine."""

from __future__ import annotations

from unittest.mock import MagicMock

from marketfeed.filters import (
    DEFAULT_CRITERIA,
    FilterCriteria,
    FilterIntent,
    ListingType,
    SortMode,
)


class TestFilterIntent:
    """Tests for FilterIntent."""

    def test_starts_at_default(self) -> None:
        intent = FilterIntent()
        assert intent.criteria == DEFAULT_CRITERIA

    def test_starts_at_initial(self) -> None:
        initial = FilterCriteria(search_text="tutor")
        intent = FilterIntent(initial)
        assert intent.criteria == initial
        assert intent.default == DEFAULT_CRITERIA

    def test_actions_identity_is_stable(self) -> None:
        """The action set is created once per intent."""
        intent = FilterIntent()
        first = intent.actions
        intent.actions.set_search_text("changed")
        assert intent.actions is first
        assert intent.actions.toggle_category == first.toggle_category

    def test_actions_update_criteria(self) -> None:
        intent = FilterIntent()
        actions = intent.actions

        actions.set_listing_type(ListingType.REQUEST)
        actions.toggle_category("cat-1")
        actions.set_price_range(50, 500)
        actions.set_sort(SortMode.PRICE_LOW)
        actions.toggle_verified()
        actions.set_coordinates(30.27, -97.74)
        actions.set_location("Austin, TX")
        actions.set_distance(10)
        actions.set_min_rating(4.5)
        actions.set_search_text("fence")

        assert intent.criteria == FilterCriteria(
            search_text="fence",
            categories=frozenset({"cat-1"}),
            location_text="Austin, TX",
            price_min=50,
            price_max=500,
            distance_miles=10,
            viewer_latitude=30.27,
            viewer_longitude=-97.74,
            min_rating=4.5,
            sort=SortMode.PRICE_LOW,
            verified_only=True,
            listing_type=ListingType.REQUEST,
        )

    def test_action_returns_new_criteria(self) -> None:
        intent = FilterIntent()
        result = intent.actions.set_search_text("drums")
        assert result is intent.criteria

    def test_reset_restores_default(self) -> None:
        intent = FilterIntent()
        intent.actions.set_search_text("drums")
        intent.actions.toggle_category("music")

        intent.actions.reset()

        assert intent.criteria == DEFAULT_CRITERIA

    def test_reset_with_listing_type(self) -> None:
        intent = FilterIntent()
        intent.actions.set_search_text("drums")

        intent.actions.reset(ListingType.SERVICE)

        assert intent.criteria == DEFAULT_CRITERIA.with_listing_type(ListingType.SERVICE)

    def test_replace_all(self) -> None:
        intent = FilterIntent()
        target = FilterCriteria(search_text="x", price_max=100)
        intent.actions.replace_all(target)
        assert intent.criteria == target


class TestSubscribe:
    """Tests for criteria change notifications."""

    def test_listener_called_on_change(self) -> None:
        intent = FilterIntent()
        listener = MagicMock()
        intent.subscribe(listener)

        intent.actions.set_search_text("guitar")

        listener.assert_called_once_with(intent.criteria)

    def test_no_notification_without_change(self) -> None:
        """Transitions that produce an equal value are not observable."""
        intent = FilterIntent()
        listener = MagicMock()
        intent.subscribe(listener)

        intent.actions.set_sort(SortMode.RELEVANCE)
        intent.actions.reset()
        intent.actions.set_price_range(None, None)

        listener.assert_not_called()

    def test_unsubscribe(self) -> None:
        intent = FilterIntent()
        listener = MagicMock()
        unsubscribe = intent.subscribe(listener)

        unsubscribe()
        intent.actions.set_search_text("guitar")

        listener.assert_not_called()

    def test_unsubscribe_twice_is_harmless(self) -> None:
        intent = FilterIntent()
        unsubscribe = intent.subscribe(MagicMock())
        unsubscribe()
        unsubscribe()
