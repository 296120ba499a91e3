"""Smoke tests for the TUI, driven headless with a stub feed."""

import asyncio

from textual.widgets import Input

from orderbook_sim.config import Settings
from orderbook_sim.store import OrderBookStore
from orderbook_sim.types import NormalizedMessage, PriceLevel, Side, Venue
from orderbook_sim.ui.book_view import BookApp, format_qty, sparkline


class StubFeed:
    def __init__(self, store):
        self.store = store
        self.stopped = False
        self.switches = []

    async def run(self):
        await asyncio.Event().wait()

    async def switch(self, venue=None, symbol=None):
        self.switches.append((venue, symbol))
        if venue is not None:
            self.store.select_venue(venue)
        if symbol is not None:
            self.store.select_symbol(symbol)

    def stop(self):
        self.stopped = True


def _loaded_store():
    store = OrderBookStore()
    store.process_message(NormalizedMessage(
        "snapshot",
        [PriceLevel("100", "1"), PriceLevel("99", "1")],
        [PriceLevel("101", "2"), PriceLevel("102", "3")],
    ))
    return store


class TestHelpers:
    def test_format_qty(self):
        assert format_qty(2500) == "2.5K"
        assert format_qty(1.5) == "1.50"
        assert format_qty(0.25) == "0.2500"

    def test_sparkline_width(self):
        assert len(sparkline([1.0, 2.0, 3.0], 10)) == 10
        assert sparkline([], 10) == ""


class TestBookApp:
    def test_form_validation_and_submit(self):
        store = _loaded_store()
        feed = StubFeed(store)

        async def scenario():
            app = BookApp(store, feed, Settings())
            async with app.run_test(size=(160, 60)) as pilot:
                app._submit_order()
                await pilot.pause()
                assert store.simulated_order is None

                app.query_one("#price", Input).value = "99.5"
                app.query_one("#quantity", Input).value = "2"
                app._submit_order()
                await pilot.pause()
                assert store.simulated_order.side == Side.BUY
                assert store.simulated_order.price == 99.5
                assert store.selected_index("bid") == 1

        asyncio.run(scenario())

    def test_venue_switch_clears_order(self):
        store = _loaded_store()
        feed = StubFeed(store)

        async def scenario():
            app = BookApp(store, feed, Settings())
            async with app.run_test(size=(160, 60)) as pilot:
                app.query_one("#quantity", Input).value = "1"
                app.query_one("#price", Input).value = "100"
                app._submit_order()
                app.action_select_venue("Bybit")
                await pilot.pause()
                await pilot.pause()

        asyncio.run(scenario())
        assert feed.switches == [(Venue.BYBIT, None)]
        assert store.selected_venue == Venue.BYBIT
        assert store.simulated_order is None
        assert len(store.book.bids) == 0
