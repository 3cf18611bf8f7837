"""Filter intent state machine.

Owns the current ``FilterCriteria`` and exposes a fixed set of transition
actions. Actions never fetch anything; observers watch the criteria through
``subscribe`` and decide what to do with a change.
"""

import logging
from collections.abc import Callable

from marketfeed.filters.criteria import DEFAULT_CRITERIA, FilterCriteria, ListingType, SortMode

logger = logging.getLogger(__name__)

CriteriaListener = Callable[[FilterCriteria], None]


class FilterActions:
    """Bound transition actions for one ``FilterIntent``.

    Created once per intent, so ``intent.actions.toggle_category`` is the same
    object on every access and can be handed to callers without churn.
    """

    def __init__(self, intent: "FilterIntent") -> None:
        self._intent = intent

    def set_listing_type(self, listing_type: ListingType) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_listing_type(listing_type))

    def toggle_category(self, category_id: str) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_category_toggled(category_id))

    def set_price_range(self, price_min: float | None, price_max: float | None) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_price_range(price_min, price_max))

    def set_sort(self, sort: SortMode) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_sort(sort))

    def toggle_verified(self) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_verified_toggled())

    def set_coordinates(self, latitude: float | None, longitude: float | None) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_coordinates(latitude, longitude))

    def set_location(self, location_text: str) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_location_text(location_text))

    def set_distance(self, distance_miles: int | None) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_distance(distance_miles))

    def set_min_rating(self, min_rating: float) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_min_rating(min_rating))

    def set_search_text(self, search_text: str) -> FilterCriteria:
        return self._intent._apply(self._intent.criteria.with_search_text(search_text))

    def reset(self, listing_type: ListingType | None = None) -> FilterCriteria:
        """Restore the intent's default, optionally pinned to a listing type."""
        default = self._intent.default
        if listing_type is not None:
            default = default.with_listing_type(listing_type)
        return self._intent._apply(default)

    def replace_all(self, criteria: FilterCriteria) -> FilterCriteria:
        return self._intent._apply(criteria)


class FilterIntent:
    """Holds the active criteria and notifies watchers when they change.

    Args:
        initial: Starting criteria (defaults to ``default``).
        default: Criteria restored by ``actions.reset``.
    """

    def __init__(
        self,
        initial: FilterCriteria | None = None,
        *,
        default: FilterCriteria = DEFAULT_CRITERIA,
    ) -> None:
        self._default = default
        self._criteria = initial if initial is not None else default
        self._listeners: list[CriteriaListener] = []
        self._actions = FilterActions(self)

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def default(self) -> FilterCriteria:
        return self._default

    @property
    def actions(self) -> FilterActions:
        return self._actions

    def subscribe(self, listener: CriteriaListener) -> Callable[[], None]:
        """Watch criteria changes.

        Returns:
            A callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _apply(self, criteria: FilterCriteria) -> FilterCriteria:
        if criteria == self._criteria:
            return self._criteria
        self._criteria = criteria
        logger.debug("Filter criteria changed: %s", criteria)
        for listener in list(self._listeners):
            listener(criteria)
        return criteria
