"""
Validation of user input for simulated orders.

Everything here runs before an order reaches the store, so the simulator
can assume a structurally valid SimulatedOrder.
"""

from __future__ import annotations

import math

from ..errors import InvalidOrderInput
from ..types import MARKET_PRICE, OrderType, Side, SimulatedOrder

INVALID_QUANTITY_MSG = "Please enter a valid quantity."
INVALID_PRICE_MSG = "Please enter a valid price for a limit order."
EMPTY_SYMBOL_MSG = "Symbol cannot be empty."


def _parse_positive(text: str | float | None) -> float | None:
    """Parse a positive finite number, or None."""
    if text is None:
        return None
    try:
        value = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def build_simulated_order(
    side: Side | str,
    order_type: OrderType | str,
    price: str | float | None,
    quantity: str | float | None,
) -> SimulatedOrder:
    """
    Build a SimulatedOrder from form input.

    Raises InvalidOrderInput with a user-facing message on bad quantity,
    or on a limit order without a positive price. Market orders get the
    MARKET_PRICE sentinel regardless of `price`.
    """
    side = Side(side)
    order_type = OrderType(order_type)

    qty = _parse_positive(quantity)
    if qty is None:
        raise InvalidOrderInput(INVALID_QUANTITY_MSG)

    if order_type == OrderType.MARKET:
        return SimulatedOrder(side=side, price=MARKET_PRICE, quantity=qty)

    limit_price = _parse_positive(price)
    if limit_price is None:
        raise InvalidOrderInput(INVALID_PRICE_MSG)

    return SimulatedOrder(side=side, price=limit_price, quantity=qty)


def validate_symbol(text: str) -> str:
    """Upper-cased symbol, or InvalidOrderInput if blank."""
    symbol = text.strip()
    if not symbol:
        raise InvalidOrderInput(EMPTY_SYMBOL_MSG)
    return symbol.upper()
