#!/usr/bin/env python
"""CLI for the marketplace discovery feed."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import BaseModel, field_validator

from marketfeed.config import create_from_config, get_default_config_path, load_config
from marketfeed.data import BudgetRange, FixedPrice, Listing
from marketfeed.feed import FeedState
from marketfeed.filters import ListingType, SortMode

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    config: Path
    search: str = ""
    listing_type: ListingType = ListingType.ALL
    sort: SortMode = SortMode.RELEVANCE
    price_min: float | None = None
    price_max: float | None = None
    pages: int = 1
    viewer: str | None = None

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    @field_validator("pages")
    @classmethod
    def pages_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("--pages must be at least 1")
        return v


def _format_price(listing: Listing) -> str:
    price = listing.price
    if isinstance(price, FixedPrice):
        return f"${price.amount:,.2f}"
    if isinstance(price, BudgetRange):
        low = f"${price.minimum:,.0f}" if price.minimum is not None else "?"
        high = f"${price.maximum:,.0f}" if price.maximum is not None else "?"
        return f"{low}-{high}"
    return "quote"


async def run(args: CLIArgs) -> int:
    """Load the feed with the given filters and print the requested pages.

    Args:
        args: Validated CLI arguments.

    Returns:
        Process exit code.
    """
    config = load_config(args.config)
    logging.getLogger().setLevel(config.logging.level)

    orchestrator, intent = create_from_config(config, viewer_id=args.viewer)
    actions = intent.actions
    actions.set_search_text(args.search)
    actions.set_listing_type(args.listing_type)
    actions.set_sort(args.sort)
    actions.set_price_range(args.price_min, args.price_max)

    logger.info(f"Config: {args.config}")
    orchestrator.start()
    if orchestrator.state is FeedState.SNAPSHOT_SERVED:
        logger.info(f"Snapshot: {len(orchestrator.listings)} listings shown instantly")

    await orchestrator.wait_until_settled()
    for _ in range(args.pages - 1):
        if not orchestrator.has_more:
            break
        await orchestrator.fetch_more()

    view = orchestrator.view
    await orchestrator.close()

    if view.error:
        logger.error(f"Error: {view.error}")

    print(f"\n{len(view.listings)} listings (more available: {view.has_more}):\n")
    for i, listing in enumerate(view.listings, 1):
        logger.info(f"{i}. [{listing.source_kind.value}] {listing.title}")
        logger.info(f"   Price: {_format_price(listing)}")
        logger.info(f"   Posted: {listing.created_at.isoformat()}")
        if listing.location and listing.location.display_text:
            logger.info(f"   Where: {listing.location.display_text}")

    return 1 if view.error and not view.listings else 0


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Browse the merged marketplace feed.")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument("--search", "-s", default="", help="Free-text search term")
    parser.add_argument(
        "--type",
        dest="listing_type",
        choices=[t.value for t in ListingType],
        default=ListingType.ALL.value,
        help="Restrict the feed to one listing type",
    )
    parser.add_argument(
        "--sort",
        choices=[s.value for s in SortMode],
        default=SortMode.RELEVANCE.value,
        help="Sort order passed to the query service",
    )
    parser.add_argument("--min-price", type=float, default=None, help="Lower price bound")
    parser.add_argument("--max-price", type=float, default=None, help="Upper price bound")
    parser.add_argument("--pages", type=int, default=1, help="Number of pages to load (default: 1)")
    parser.add_argument("--viewer", default=None, help="Viewer id used to key the snapshot")

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            config=config_path,
            search=ns.search,
            listing_type=ns.listing_type,
            sort=ns.sort,
            price_min=ns.min_price,
            price_max=ns.max_price,
            pages=ns.pages,
            viewer=ns.viewer,
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
