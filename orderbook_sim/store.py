"""
Order book state container.

Owns the book, the connection flag, the selected venue/symbol and the
active simulated order. Listeners registered with subscribe() are called
after every state change.

Thread-safety: NOT thread-safe. The feed client is the only writer and
runs on the same event loop as the readers.
"""

from __future__ import annotations

import logging
from typing import Callable

from .datafeed.orderbook import OrderBook
from .engine.impact import estimate_order_impact
from .engine.selector import ORDER_SIDE_LADDER, find_simulated_index
from .types import BookSideName, MarketImpactMetrics, NormalizedMessage, SimulatedOrder, Venue

logger = logging.getLogger(__name__)

DEFAULT_VENUE = Venue.OKX
DEFAULT_SYMBOL = "BTC-USD"

Listener = Callable[["OrderBookStore"], None]


class OrderBookStore:
    """
    Single owner of book/connection/order state.

    Usage:
        store = OrderBookStore()
        store.subscribe(lambda s: print(s.book.best_bid))
        store.process_message(msg)
    """

    __slots__ = (
        'book', 'is_connected', 'selected_venue', 'selected_symbol',
        'simulated_order', '_listeners',
    )

    def __init__(self, venue: Venue = DEFAULT_VENUE, symbol: str = DEFAULT_SYMBOL) -> None:
        self.book = OrderBook()
        self.is_connected: bool = False
        self.selected_venue: Venue = venue
        self.selected_symbol: str = symbol
        self.simulated_order: SimulatedOrder | None = None
        self._listeners: list[Listener] = []

    # --- observers ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Store listener %r failed", listener)

    # --- selection ---

    def _reset(self) -> None:
        self.book.clear()
        self.simulated_order = None
        self.is_connected = False

    def select_venue(self, venue: Venue) -> None:
        """Switch venue. Drops the book and the simulated order unconditionally."""
        self.selected_venue = Venue(venue)
        self._reset()
        logger.info("Venue selected: %s", self.selected_venue.value)
        self._notify()

    def select_symbol(self, symbol: str) -> None:
        """Switch symbol. Drops the book and the simulated order unconditionally."""
        self.selected_symbol = symbol
        self._reset()
        logger.info("Symbol selected: %s", symbol)
        self._notify()

    def set_connection_status(self, connected: bool) -> None:
        self.is_connected = connected
        self._notify()

    def submit_simulated_order(self, order: SimulatedOrder | None) -> None:
        """Replace the active simulated order (None clears it)."""
        self.simulated_order = order
        self._notify()

    # --- book data ---

    def process_snapshot(self, message: NormalizedMessage) -> None:
        self.book.apply_snapshot(message)
        self._notify()

    def process_update(self, message: NormalizedMessage) -> None:
        self.book.apply_update(message)
        self._notify()

    def process_message(self, message: NormalizedMessage) -> None:
        """Apply a normalized message according to its kind."""
        if message.kind == "snapshot":
            self.process_snapshot(message)
        else:
            self.process_update(message)

    # --- derived reads ---

    def metrics(self) -> MarketImpactMetrics | None:
        """Impact metrics for the active order, or None without one."""
        if self.simulated_order is None:
            return None
        return estimate_order_impact(
            self.simulated_order, self.book.bids.levels, self.book.asks.levels,
        )

    def selected_index(self, side_name: BookSideName) -> int | None:
        """Row to highlight on one ladder. Only the order's own side is highlighted."""
        order = self.simulated_order
        if order is None or ORDER_SIDE_LADDER[order.side] != side_name:
            return None
        return find_simulated_index(order, self.book.side(side_name).levels, side_name)
