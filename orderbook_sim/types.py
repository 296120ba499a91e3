"""
Data types for the order book simulator.

Notes:
- NamedTuple for immutable, memory-efficient structures
- Prices and quantities in PriceLevel stay as the strings the venue sent;
  they are parsed to float only where arithmetic happens
"""

from __future__ import annotations

from enum import Enum
from typing import Literal, NamedTuple

# Sentinel price for market orders (anything <= 0 is treated as market)
MARKET_PRICE = -1.0

# Placeholder for the two reserved level fields
RESERVED = "0"

BookSideName = Literal["bid", "ask"]
MessageKind = Literal["snapshot", "update"]


class Venue(str, Enum):
    OKX = "OKX"
    BYBIT = "Bybit"
    DERIBIT = "Deribit"


class Side(str, Enum):
    BUY = "Buy"
    SELL = "Sell"


class OrderType(str, Enum):
    MARKET = "Market"
    LIMIT = "Limit"


class PriceLevel(NamedTuple):
    """Single price level from the order book, in canonical 4-field form."""
    price: str
    quantity: str
    reserved1: str = RESERVED
    reserved2: str = RESERVED


class NormalizedMessage(NamedTuple):
    """Venue-independent book message produced by a venue adapter."""
    kind: MessageKind
    bids: list[PriceLevel]
    asks: list[PriceLevel]


class SimulatedOrder(NamedTuple):
    """
    Hypothetical order to run against the book.

    price <= 0 means market order (fill at best available prices).
    """
    side: Side
    price: float
    quantity: float

    @property
    def is_market(self) -> bool:
        return self.price <= 0


class MarketImpactMetrics(NamedTuple):
    """Result of walking the book for a simulated order."""
    estimated_fill_price: float
    slippage_percent: float
    fill_percentage: float
    market_impact_value: float
    filled_quantity: float = 0.0


# Defined no-op result for empty books / zero quantity
EMPTY_METRICS = MarketImpactMetrics(0.0, 0.0, 100.0, 0.0, 0.0)
