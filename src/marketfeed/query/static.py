"""Offline query service over in-memory fixture records."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from marketfeed.data import SourceKind
from marketfeed.fetch.normalize import QUOTE_BASED, parse_timestamp, to_float
from marketfeed.query.base import QueryResult

logger = logging.getLogger(__name__)


def _order_key(record: dict[str, Any]) -> tuple[float, str]:
    created_at = parse_timestamp(record.get("created_at"))
    return (-created_at.timestamp() if created_at else 0.0, str(record.get("id", "")))


def _after_cursor(record: dict[str, Any], cursor_created_at: Any, cursor_id: Any) -> bool:
    if cursor_created_at is None:
        return True
    cursor_ts = parse_timestamp(cursor_created_at)
    created_at = parse_timestamp(record.get("created_at"))
    if cursor_ts is None or created_at is None:
        return False
    if created_at != cursor_ts:
        return created_at < cursor_ts
    return str(record.get("id", "")) > str(cursor_id or "")


def _price_range(source: SourceKind, record: dict[str, Any]) -> tuple[float | None, float | None]:
    if source is SourceKind.OFFER:
        price = to_float(record.get("price"))
        return (price, price)
    fixed = to_float(record.get("fixed_price"))
    if fixed is not None:
        return (fixed, fixed)
    low = to_float(record.get("budget_min"))
    high = to_float(record.get("budget_max"))
    return (low, high if high is not None else low)


def _matches(source: SourceKind, record: dict[str, Any], params: dict[str, Any]) -> bool:
    search = params.get("p_search")
    if search:
        text = f"{record.get('title') or ''} {record.get('description') or ''}".lower()
        if search.lower() not in text:
            return False

    categories = params.get("p_category_ids")
    if categories and record.get("category_id") not in categories:
        return False

    if source is SourceKind.OFFER:
        listing_types = params.get("p_listing_types")
        if listing_types and (record.get("listing_type") or "Service") not in listing_types:
            return False
        min_rating = params.get("p_min_rating")
        if min_rating and (to_float(record.get("rating")) or 0.0) < min_rating:
            return False
        price_min, price_max = params.get("p_min_price"), params.get("p_max_price")
    else:
        price_min, price_max = params.get("p_min_budget"), params.get("p_max_budget")

    if price_min is None and price_max is None:
        return True
    if record.get("pricing_type") == QUOTE_BASED:
        return True
    low, high = _price_range(source, record)
    if low is None and high is None:
        return source is SourceKind.REQUEST
    if price_min is not None and (low is None or low < price_min):
        return False
    if price_max is not None and (high is None or high > price_max):
        return False
    return True


class StaticQueryService:
    """Serve pages from fixture records with server-style cursor semantics.

    Records are ordered newest first (ties by id ascending), filtered by the
    wire parameters the real service understands, and sliced after the
    cursor. Useful for demos and offline runs.

    Args:
        records: Raw records per source.
    """

    def __init__(self, records: dict[SourceKind, list[dict[str, Any]]] | None = None) -> None:
        self._records = {source: list((records or {}).get(source, [])) for source in SourceKind}
        self.calls: list[tuple[SourceKind, dict[str, Any]]] = []

    @classmethod
    def from_file(cls, path: Path | str) -> "StaticQueryService":
        """Load fixtures from a JSON or YAML file with ``offers``/``requests`` lists."""
        path = Path(path)
        with path.open() as f:
            raw = json.load(f) if path.suffix == ".json" else yaml.safe_load(f)
        raw = raw or {}
        return cls(
            {
                SourceKind.OFFER: list(raw.get("offers", [])),
                SourceKind.REQUEST: list(raw.get("requests", [])),
            }
        )

    async def query_page(
        self,
        source: SourceKind,
        params: dict[str, Any],
    ) -> QueryResult:
        self.calls.append((source, dict(params)))
        cursor_created_at = params.get("p_cursor_created_at")
        cursor_id = params.get("p_cursor_id")
        limit = int(params.get("p_limit") or 20)

        rows = [
            record
            for record in self._records[source]
            if _matches(source, record, params)
            and _after_cursor(record, cursor_created_at, cursor_id)
        ]
        rows.sort(key=_order_key)
        logger.debug("Static %s query matched %d records", source.value, len(rows))
        return QueryResult(records=rows[:limit])
