"""Build wire parameters for the paginated source queries."""

from typing import Any

from marketfeed.data import Cursor, SourceKind
from marketfeed.filters import FilterCriteria


def _cursor_params(cursor: Cursor | None, limit: int) -> dict[str, Any]:
    return {
        "p_cursor_created_at": cursor.created_at.isoformat() if cursor else None,
        "p_cursor_id": cursor.id if cursor else None,
        "p_limit": limit,
    }


def _shared_params(criteria: FilterCriteria) -> dict[str, Any]:
    search = criteria.search_text.strip()
    return {
        "p_category_ids": sorted(criteria.categories) if criteria.categories else None,
        "p_search": search or None,
        "p_sort_by": criteria.sort.value,
        "p_verified": True if criteria.verified_only else None,
        "p_user_lat": criteria.viewer_latitude,
        "p_user_lng": criteria.viewer_longitude,
        "p_distance": criteria.distance_miles if criteria.has_viewer_coordinates else None,
    }


def build_offer_params(
    criteria: FilterCriteria,
    cursor: Cursor | None,
    limit: int,
) -> dict[str, Any]:
    """Parameters for the offer query."""
    params = _cursor_params(cursor, limit)
    params.update(_shared_params(criteria))
    params.update(
        {
            "p_min_price": criteria.price_min,
            "p_max_price": criteria.price_max,
            "p_min_rating": criteria.min_rating or None,
            "p_listing_types": list(criteria.offer_subtypes),
        }
    )
    return params


def build_request_params(
    criteria: FilterCriteria,
    cursor: Cursor | None,
    limit: int,
) -> dict[str, Any]:
    """Parameters for the request query. Requests are filtered by budget."""
    params = _cursor_params(cursor, limit)
    params.update(_shared_params(criteria))
    params.update(
        {
            "p_min_budget": criteria.price_min,
            "p_max_budget": criteria.price_max,
        }
    )
    return params


def build_params(
    source: SourceKind,
    criteria: FilterCriteria,
    cursor: Cursor | None,
    limit: int,
) -> dict[str, Any]:
    if source is SourceKind.OFFER:
        return build_offer_params(criteria, cursor, limit)
    return build_request_params(criteria, cursor, limit)
