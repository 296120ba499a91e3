"""Map a simulated limit order onto the ladder row it would land on."""

from __future__ import annotations

from collections.abc import Sequence

from ..types import BookSideName, PriceLevel, Side, SimulatedOrder

# Ladder an order is displayed against
ORDER_SIDE_LADDER: dict[Side, BookSideName] = {Side.BUY: "bid", Side.SELL: "ask"}


def find_simulated_index(
    order: SimulatedOrder | None,
    levels: Sequence[PriceLevel],
    side_name: BookSideName,
) -> int | None:
    """
    Index of the first level the order interacts with, or None.

    bid: first level priced <= order price.
    ask: first level priced >= order price.
    Market orders never select a level.
    """
    if order is None or order.is_market:
        return None

    target = order.price
    if side_name == "bid":
        for i, level in enumerate(levels):
            if float(level.price) <= target:
                return i
    else:
        for i, level in enumerate(levels):
            if float(level.price) >= target:
                return i
    return None
