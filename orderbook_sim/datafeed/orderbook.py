"""
Local order book: snapshot + incremental delta reconciliation.

HOT PATH: apply_delta() is called for every book message from the venue
(10-100x per second) with anywhere from one to hundreds of levels.

Strategy:
1. dict[float, PriceLevel] keyed by parsed price for O(1) upsert/delete
2. Re-sort once per batch, never per level
3. Publish the sorted side as a tuple, swapped in with a single assignment,
   so readers never observe a half-applied batch

Numeric contract: price and quantity strings are parsed with float().
The parsed price is the identity of a level, so "100" and "100.0" are the
same level. Non-finite values and negative quantities are rejected as
malformed.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterable

from ..errors import MalformedLevelError
from ..types import BookSideName, NormalizedMessage, PriceLevel

logger = logging.getLogger(__name__)


def parse_level(level: PriceLevel) -> tuple[float, float]:
    """Parse (price, quantity) of a level. Raises MalformedLevelError."""
    try:
        price = float(level[0])
        qty = float(level[1])
    except (TypeError, ValueError, IndexError) as exc:
        raise MalformedLevelError(level, str(exc)) from exc
    if not (math.isfinite(price) and math.isfinite(qty)):
        raise MalformedLevelError(level, "non-finite value")
    if qty < 0:
        raise MalformedLevelError(level, "negative quantity")
    return price, qty


class BookSide:
    """
    One side (bids or asks) of one order book.

    Bids are kept sorted descending, asks ascending, so index 0 is always
    the best price.

    Thread-safety: NOT thread-safe. Designed for single-threaded async use.
    """

    __slots__ = ('name', 'descending', '_by_price', '_levels', 'dropped_count')

    def __init__(self, name: BookSideName) -> None:
        self.name = name
        self.descending = name == "bid"

        # price -> level, the source of truth
        self._by_price: dict[float, PriceLevel] = {}
        # Sorted view handed to readers
        self._levels: tuple[PriceLevel, ...] = ()

        # Levels skipped because they failed to parse
        self.dropped_count: int = 0

    def _parse_or_drop(self, level: PriceLevel) -> tuple[float, float] | None:
        try:
            return parse_level(level)
        except MalformedLevelError as exc:
            self.dropped_count += 1
            logger.warning("Dropping %s level: %s", self.name, exc)
            return None

    def _publish(self) -> None:
        """Rebuild the sorted tuple from the price map."""
        ordered = sorted(self._by_price.items(), key=lambda kv: kv[0], reverse=self.descending)
        self._levels = tuple(level for _, level in ordered)

    def apply_snapshot(self, levels: Iterable[PriceLevel]) -> None:
        """
        Replace the whole side. A snapshot is authoritative: nothing from the
        previous state survives.

        Duplicate prices inside the snapshot collapse to the last one.
        """
        by_price: dict[float, PriceLevel] = {}
        for level in levels:
            parsed = self._parse_or_drop(level)
            if parsed is None:
                continue
            by_price[parsed[0]] = level

        self._by_price = by_price
        self._publish()

    def apply_delta(self, levels: Iterable[PriceLevel]) -> None:
        """
        Merge an incremental update.

        Quantity 0 deletes the price (no-op if absent); anything else
        overwrites the level at that price. Quantities are replaced, never
        added, so applying the same batch twice gives the same side.

        HOT PATH.
        """
        by_price = dict(self._by_price)
        for level in levels:
            parsed = self._parse_or_drop(level)
            if parsed is None:
                continue
            price, qty = parsed
            if qty == 0:
                by_price.pop(price, None)
            else:
                by_price[price] = level

        self._by_price = by_price
        self._publish()

    def clear(self) -> None:
        self._by_price = {}
        self._levels = ()

    @property
    def levels(self) -> tuple[PriceLevel, ...]:
        """Levels best-first."""
        return self._levels

    @property
    def best_price(self) -> float:
        """Best price on this side. Returns 0.0 if empty."""
        if not self._levels:
            return 0.0
        return float(self._levels[0].price)

    def __len__(self) -> int:
        return len(self._levels)

    def __iter__(self):
        return iter(self._levels)

    def __repr__(self) -> str:
        return f"BookSide({self.name!r}, levels={len(self._levels)})"


class OrderBook:
    """
    Bid and ask sides for one (venue, symbol).

    The sides never interact during reconciliation.
    """

    __slots__ = ('bids', 'asks', '_update_count', '_update_start_time')

    def __init__(self) -> None:
        self.bids = BookSide("bid")
        self.asks = BookSide("ask")

        # Performance tracking
        self._update_count: int = 0
        self._update_start_time: float = time.perf_counter()

    def apply_snapshot(self, message: NormalizedMessage) -> None:
        self.bids.apply_snapshot(message.bids)
        self.asks.apply_snapshot(message.asks)
        self._update_count += 1

    def apply_update(self, message: NormalizedMessage) -> None:
        self.bids.apply_delta(message.bids)
        self.asks.apply_delta(message.asks)
        self._update_count += 1

    def clear(self) -> None:
        self.bids.clear()
        self.asks.clear()
        self.reset_perf_counters()

    def side(self, name: BookSideName) -> BookSide:
        return self.bids if name == "bid" else self.asks

    @property
    def best_bid(self) -> float:
        """Best bid price. Returns 0.0 if no bids."""
        return self.bids.best_price

    @property
    def best_ask(self) -> float:
        """Best ask price. Returns 0.0 if no asks."""
        return self.asks.best_price

    @property
    def mid_price(self) -> float:
        """Mid price. Returns 0.0 if no book."""
        bb, ba = self.best_bid, self.best_ask
        if bb > 0 and ba > 0:
            return (bb + ba) / 2.0
        return bb or ba

    @property
    def spread_bps(self) -> float:
        mid = self.mid_price
        bb, ba = self.best_bid, self.best_ask
        if mid <= 0 or bb <= 0 or ba <= 0:
            return 0.0
        return (ba - bb) / mid * 10000

    def get_updates_per_sec(self) -> float:
        """Return update rate for performance monitoring."""
        elapsed = time.perf_counter() - self._update_start_time
        if elapsed < 0.001:
            return 0.0
        return self._update_count / elapsed

    def reset_perf_counters(self) -> None:
        """Reset performance counters."""
        self._update_count = 0
        self._update_start_time = time.perf_counter()
