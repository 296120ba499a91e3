"""Tests for simulated level selection."""

from orderbook_sim.engine.selector import find_simulated_index
from orderbook_sim.types import MARKET_PRICE, PriceLevel, Side, SimulatedOrder

BIDS = [PriceLevel("100", "1"), PriceLevel("99", "1")]
ASKS = [PriceLevel("101", "1"), PriceLevel("102", "1")]


def _order(price, side=Side.BUY):
    return SimulatedOrder(side=side, price=price, quantity=1)


class TestFindSimulatedIndex:
    def test_bid_boundary(self):
        assert find_simulated_index(_order(99.5), BIDS, "bid") == 1

    def test_bid_exact_price(self):
        assert find_simulated_index(_order(100), BIDS, "bid") == 0

    def test_bid_below_book(self):
        assert find_simulated_index(_order(98), BIDS, "bid") is None

    def test_ask_first_at_or_above(self):
        assert find_simulated_index(_order(101.5, Side.SELL), ASKS, "ask") == 1

    def test_ask_above_book(self):
        assert find_simulated_index(_order(200, Side.SELL), ASKS, "ask") is None

    def test_market_order_selects_nothing(self):
        assert find_simulated_index(_order(MARKET_PRICE), BIDS, "bid") is None

    def test_no_order(self):
        assert find_simulated_index(None, BIDS, "bid") is None

    def test_empty_levels(self):
        assert find_simulated_index(_order(100), [], "ask") is None
