"""Normalize source-native records into ``Listing``.

Records arrive with loosely typed optional fields: photos as a list or a
JSON-encoded string, coordinates as strings or numbers, prices spread over
several columns. Nothing here raises on malformed input; a record is only
dropped when it lacks an id or a usable ``created_at``, since those form the
pagination cursor.
"""

import json
import logging
import math
from datetime import UTC, datetime
from typing import Any

from marketfeed.data import (
    BudgetRange,
    FixedPrice,
    Listing,
    Location,
    OwnerRef,
    PriceInfo,
    QuoteRequired,
    SourceKind,
)

logger = logging.getLogger(__name__)

QUOTE_BASED = "quote_based"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Naive timestamps are taken as UTC. Returns None when unparseable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def to_float(value: Any) -> float | None:
    """Coerce a number or numeric string to float; None for anything else."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return result if math.isfinite(result) else None


def _text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _optional_text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return _text(value)


def parse_photos(value: Any) -> tuple[str, ...]:
    """Accept a list of URLs or a JSON string holding one."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return ()
    if not isinstance(value, list):
        return ()
    return tuple(p for p in value if isinstance(p, str) and p)


def _location(record: dict[str, Any], display_text: str) -> Location | None:
    latitude = to_float(record.get("latitude"))
    longitude = to_float(record.get("longitude"))
    if latitude is None and longitude is None and not display_text:
        return None
    return Location(latitude=latitude, longitude=longitude, display_text=display_text)


def _identity(record: dict[str, Any]) -> tuple[str, datetime] | None:
    record_id = record.get("id")
    created_at = parse_timestamp(record.get("created_at"))
    if record_id is None or record_id == "" or created_at is None:
        return None
    return (_text(record_id), created_at)


def offer_price(record: dict[str, Any]) -> PriceInfo:
    if record.get("pricing_type") == QUOTE_BASED:
        return QuoteRequired()
    amount = to_float(record.get("price"))
    if amount is None:
        amount = to_float(record.get("base_price"))
    return FixedPrice(amount) if amount is not None else QuoteRequired()


def request_price(record: dict[str, Any]) -> PriceInfo:
    if record.get("pricing_type") == QUOTE_BASED:
        return QuoteRequired()
    fixed = to_float(record.get("fixed_price"))
    if fixed is not None:
        return FixedPrice(fixed)
    budget_min = to_float(record.get("budget_min"))
    budget_max = to_float(record.get("budget_max"))
    if budget_min is not None or budget_max is not None:
        return BudgetRange(minimum=budget_min, maximum=budget_max)
    budget = to_float(record.get("budget"))
    return FixedPrice(budget) if budget is not None else QuoteRequired()


def normalize_offer(record: dict[str, Any]) -> Listing | None:
    """Convert an offer record. Returns None if it cannot be placed in the feed."""
    identity = _identity(record)
    if identity is None:
        return None
    record_id, created_at = identity

    photos = parse_photos(record.get("photos"))
    featured = _optional_text(record.get("featured_image_url")) or _optional_text(
        record.get("image_url")
    )
    if not photos and featured:
        photos = (featured,)

    owner_id = record.get("provider_id")
    owner = None
    if owner_id:
        owner = OwnerRef(
            id=_text(owner_id),
            full_name=_optional_text(record.get("provider_full_name")),
            avatar_url=_optional_text(record.get("provider_avatar")),
            location_text=_optional_text(record.get("provider_location")),
            user_type=_optional_text(record.get("provider_user_type")),
        )

    display = _text(record.get("location")) or _text(record.get("provider_location"))
    return Listing(
        id=record_id,
        source_kind=SourceKind.OFFER,
        title=_text(record.get("title")) or "Untitled",
        created_at=created_at,
        description=_text(record.get("description")),
        price=offer_price(record),
        location=_location(record, display),
        distance_miles=to_float(record.get("distance_miles")),
        owner=owner,
        photos=photos,
        featured_image_url=featured or (photos[0] if photos else None),
        category_id=_optional_text(record.get("category_id")),
        status=_optional_text(record.get("status")),
        subtype=_optional_text(record.get("listing_type")) or "Service",
        rating=to_float(record.get("rating")) or 0.0,
    )


def normalize_request(record: dict[str, Any]) -> Listing | None:
    """Convert a request record. Returns None if it cannot be placed in the feed."""
    identity = _identity(record)
    if identity is None:
        return None
    record_id, created_at = identity

    photos = parse_photos(record.get("photos"))
    featured = _optional_text(record.get("featured_image_url"))
    if not photos and featured:
        photos = (featured,)

    owner_id = record.get("customer_id")
    owner = None
    if owner_id:
        owner = OwnerRef(
            id=_text(owner_id),
            full_name=_optional_text(record.get("customer_full_name")),
            avatar_url=_optional_text(record.get("customer_avatar")),
            location_text=_optional_text(record.get("customer_location")),
            user_type=_optional_text(record.get("customer_user_type")),
        )

    city = _text(record.get("city"))
    state = _text(record.get("state"))
    display = _text(record.get("location")) or ", ".join(p for p in (city, state) if p)
    return Listing(
        id=record_id,
        source_kind=SourceKind.REQUEST,
        title=_text(record.get("title")) or "Untitled Job",
        created_at=created_at,
        description=_text(record.get("description")),
        price=request_price(record),
        location=_location(record, display),
        distance_miles=to_float(record.get("distance_miles")),
        owner=owner,
        photos=photos,
        featured_image_url=featured or (photos[0] if photos else None),
        category_id=_optional_text(record.get("category_id")),
        status=_optional_text(record.get("status")),
    )


def normalize_record(source: SourceKind, record: Any) -> Listing | None:
    """Normalize one record from ``source``, logging and skipping bad ones."""
    if not isinstance(record, dict):
        logger.warning("Skipping non-object %s record: %r", source.value, record)
        return None
    try:
        if source is SourceKind.OFFER:
            listing = normalize_offer(record)
        else:
            listing = normalize_request(record)
    except Exception:
        logger.warning(
            "Failed to normalize %s record %r", source.value, record.get("id"), exc_info=True
        )
        return None
    if listing is None:
        logger.warning(
            "Skipping %s record without id or created_at: %r", source.value, record.get("id")
        )
    return listing
