"""
Market impact simulator.

Walks one side of the book from the best price outward, consuming resting
liquidity until the order is filled or the side runs out.

Pure computation, no I/O. Callers are expected to validate orders first
(see engine.orders); this module only guards against empty books and
non-positive quantities.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..types import EMPTY_METRICS, MarketImpactMetrics, PriceLevel, Side, SimulatedOrder


def simulate_market_impact(order: SimulatedOrder, book: Sequence[PriceLevel]) -> MarketImpactMetrics:
    """
    Walk the book for `order`.

    Args:
        order: The simulated order. Its price is ignored here.
        book: The side the order consumes, best first (asks for a buy,
            bids for a sell).

    Returns EMPTY_METRICS (fill_percentage 100, everything else 0) when the
    order has no quantity or nothing could be filled. A book too shallow
    for the order shows up as fill_percentage < 100.
    """
    if order.quantity <= 0 or not book:
        return EMPTY_METRICS

    ideal_price = float(book[0].price)

    remaining = order.quantity
    cost = 0.0
    filled = 0.0

    for level in book:
        if remaining <= 0:
            break

        price = float(level.price)
        available = float(level.quantity)

        take = min(remaining, available)
        cost += take * price
        filled += take
        remaining -= take

    if filled == 0:
        return EMPTY_METRICS

    fill_price = cost / filled
    slippage = abs(fill_price - ideal_price) / ideal_price * 100 if ideal_price else 0.0

    return MarketImpactMetrics(
        estimated_fill_price=fill_price,
        slippage_percent=slippage,
        fill_percentage=filled / order.quantity * 100,
        market_impact_value=cost,
        filled_quantity=filled,
    )


def estimate_order_impact(
    order: SimulatedOrder,
    bids: Sequence[PriceLevel],
    asks: Sequence[PriceLevel],
) -> MarketImpactMetrics:
    """
    Metrics for an order against the current book.

    A limit order (price > 0) is assumed to fill completely at its own
    price, so the book is not walked. A market order buys from the asks or
    sells into the bids.
    """
    if not order.is_market:
        return MarketImpactMetrics(
            estimated_fill_price=order.price,
            slippage_percent=0.0,
            fill_percentage=100.0,
            market_impact_value=order.price * order.quantity,
            filled_quantity=order.quantity,
        )

    book = asks if order.side == Side.BUY else bids
    return simulate_market_impact(order, book)
