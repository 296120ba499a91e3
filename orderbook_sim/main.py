#!/usr/bin/env python3
"""
Order Book Simulator - live venue order book with market impact simulation.

Usage:
    python -m orderbook_sim.main ETH-USD --venue bybit --levels 25

    Or via the installed script:
    orderbook-sim BTC-USD

Controls:
    1/2/3 - Switch venue (OKX / Bybit / Deribit)
    c     - Clear simulated order
    q     - Quit
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from .config import Settings
from .types import Venue

VENUE_CHOICES = {v.value.lower(): v for v in Venue}


def configure_logging(settings: Settings) -> None:
    """Log to a file; stdout belongs to the TUI."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        filename=settings.log_file,
    )


async def main(settings: Settings) -> None:
    """Main entry point - runs data feed and UI on one event loop."""

    # Import here to avoid slow startup for --help
    from .datafeed.feed_client import FeedClient
    from .store import OrderBookStore
    from .ui.book_view import run_ui

    logger = logging.getLogger("orderbook_sim")
    logger.info("Starting Order Book Simulator: %s %s", settings.venue.value, settings.symbol)

    store = OrderBookStore(venue=settings.venue, symbol=settings.symbol)
    client = FeedClient(store, settings)

    try:
        # Run UI (blocks until quit); the feed runs as an app worker
        await run_ui(store, client, settings)
    finally:
        client.stop()
        logger.info("Order Book Simulator stopped")


def cli() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Order Book Simulator - live order book + market impact for OKX, Bybit and Deribit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    orderbook-sim BTC-USD
    orderbook-sim ETH-USD --venue bybit --levels 30
    orderbook-sim BTC-USD --venue deribit --log-level DEBUG
        """
    )

    parser.add_argument(
        "symbol",
        nargs="?",
        default=None,
        help="Symbol as BASE-QUOTE (default: BTC-USD)"
    )

    parser.add_argument(
        "--venue",
        choices=sorted(VENUE_CHOICES),
        default=None,
        help="Venue to connect to (default: okx)"
    )

    parser.add_argument(
        "--levels",
        type=int,
        default=None,
        help="Number of price levels to show per side (default: 25)"
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-file",
        default=None,
        help="Log file path (default: orderbook_sim.log)"
    )

    args = parser.parse_args()

    overrides = {
        "symbol": args.symbol.upper() if args.symbol else None,
        "venue": VENUE_CHOICES[args.venue] if args.venue else None,
        "levels": args.levels,
        "log_level": args.log_level,
        "log_file": args.log_file,
    }
    settings = Settings(**{k: v for k, v in overrides.items() if v is not None})
    configure_logging(settings)

    # Run
    try:
        asyncio.run(main(settings))
    except KeyboardInterrupt:
        print("\nShutdown requested.")
        sys.exit(0)


if __name__ == "__main__":
    cli()
