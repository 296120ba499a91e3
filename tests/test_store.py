"""Tests for the order book state container."""

import pytest

from orderbook_sim.store import DEFAULT_SYMBOL, DEFAULT_VENUE, OrderBookStore
from orderbook_sim.types import MARKET_PRICE, NormalizedMessage, PriceLevel, Side, SimulatedOrder, Venue


def _snapshot():
    return NormalizedMessage(
        "snapshot",
        [PriceLevel("100", "1"), PriceLevel("99", "1")],
        [PriceLevel("101", "2"), PriceLevel("102", "3")],
    )


@pytest.fixture
def store():
    s = OrderBookStore()
    s.set_connection_status(True)
    s.process_message(_snapshot())
    return s


class TestDefaults:
    def test_initial_state(self):
        s = OrderBookStore()
        assert s.selected_venue == DEFAULT_VENUE == Venue.OKX
        assert s.selected_symbol == DEFAULT_SYMBOL == "BTC-USD"
        assert not s.is_connected
        assert s.simulated_order is None
        assert s.metrics() is None


class TestSelection:
    def test_symbol_switch_resets_everything(self, store):
        store.submit_simulated_order(SimulatedOrder(Side.BUY, 100, 1))
        store.select_symbol("ETH-USD")
        assert store.selected_symbol == "ETH-USD"
        assert len(store.book.bids) == 0
        assert len(store.book.asks) == 0
        assert store.simulated_order is None
        assert store.is_connected is False

    def test_venue_switch_resets_everything(self, store):
        store.submit_simulated_order(SimulatedOrder(Side.SELL, MARKET_PRICE, 1))
        store.select_venue(Venue.DERIBIT)
        assert store.selected_venue == Venue.DERIBIT
        assert len(store.book.bids) == 0
        assert store.simulated_order is None
        assert store.is_connected is False

    def test_reselecting_same_symbol_still_resets(self, store):
        store.select_symbol(store.selected_symbol)
        assert len(store.book.asks) == 0

    def test_connection_flag_does_not_touch_book(self, store):
        store.set_connection_status(False)
        assert len(store.book.bids) == 2


class TestMessages:
    def test_update_after_snapshot(self, store):
        store.process_message(NormalizedMessage("update", [PriceLevel("100", "0")], [PriceLevel("100.5", "1")]))
        assert [lvl.price for lvl in store.book.bids.levels] == ["99"]
        assert [lvl.price for lvl in store.book.asks.levels] == ["100.5", "101", "102"]

    def test_snapshot_replaces(self, store):
        store.process_message(NormalizedMessage("snapshot", [PriceLevel("50", "1")], []))
        assert [lvl.price for lvl in store.book.bids.levels] == ["50"]
        assert len(store.book.asks) == 0


class TestSimulatedOrder:
    def test_submission_replaces(self, store):
        store.submit_simulated_order(SimulatedOrder(Side.BUY, 100, 1))
        second = SimulatedOrder(Side.SELL, 200, 2)
        store.submit_simulated_order(second)
        assert store.simulated_order == second

    def test_metrics_for_market_buy(self, store):
        store.submit_simulated_order(SimulatedOrder(Side.BUY, MARKET_PRICE, 3))
        m = store.metrics()
        assert m.estimated_fill_price == pytest.approx((202 + 102) / 3)

    def test_metrics_follow_book_updates(self, store):
        store.submit_simulated_order(SimulatedOrder(Side.BUY, MARKET_PRICE, 1))
        store.process_message(NormalizedMessage("update", [], [PriceLevel("101", "0")]))
        assert store.metrics().estimated_fill_price == pytest.approx(102.0)

    def test_selected_index_only_on_own_side(self, store):
        store.submit_simulated_order(SimulatedOrder(Side.BUY, 99.5, 1))
        assert store.selected_index("bid") == 1
        assert store.selected_index("ask") is None

    def test_selected_index_sell_on_asks(self, store):
        store.submit_simulated_order(SimulatedOrder(Side.SELL, 101.5, 1))
        assert store.selected_index("ask") == 1
        assert store.selected_index("bid") is None

    def test_clear_order(self, store):
        store.submit_simulated_order(SimulatedOrder(Side.BUY, 100, 1))
        store.submit_simulated_order(None)
        assert store.metrics() is None


class TestListeners:
    def test_listener_called_on_changes(self):
        s = OrderBookStore()
        calls = []
        s.subscribe(calls.append)
        s.process_message(_snapshot())
        s.set_connection_status(True)
        assert calls == [s, s]

    def test_unsubscribe(self):
        s = OrderBookStore()
        calls = []
        unsubscribe = s.subscribe(calls.append)
        unsubscribe()
        s.select_symbol("ETH-USD")
        assert calls == []

    def test_failing_listener_does_not_block_others(self):
        s = OrderBookStore()
        calls = []

        def boom(_):
            raise RuntimeError("listener failure")

        s.subscribe(boom)
        s.subscribe(calls.append)
        s.set_connection_status(True)
        assert calls == [s]
