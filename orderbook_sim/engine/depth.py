"""
Cumulative depth for the ladder "Total" column and depth bars.

Vectorized with numpy; books are at most a few hundred levels deep but
this runs on every UI refresh.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray

from ..types import PriceLevel


def _column(levels: Sequence[PriceLevel], field: int) -> NDArray[np.float64]:
    """One numeric column of the levels; unparseable entries become 0."""
    values = np.zeros(len(levels), dtype=np.float64)
    for i, level in enumerate(levels):
        try:
            values[i] = float(level[field])
        except (TypeError, ValueError):
            values[i] = 0.0
    return np.nan_to_num(values, nan=0.0, posinf=0.0, neginf=0.0)


def cumulative_quantities(levels: Sequence[PriceLevel]) -> NDArray[np.float64]:
    """Running quantity total from the best price outward."""
    if not levels:
        return np.zeros(0, dtype=np.float64)
    return np.cumsum(_column(levels, 1))


def depth_curve(
    bids: Sequence[PriceLevel],
    asks: Sequence[PriceLevel],
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    """
    Depth chart data ordered by ascending price.

    Returns (prices, bid_depth, ask_depth). Bid points carry 0 ask depth and
    vice versa. Bids are reversed so the curve reads low -> high price.
    """
    bid_prices = _column(bids, 0)[::-1]
    bid_depth = cumulative_quantities(bids)[::-1]
    ask_prices = _column(asks, 0)
    ask_depth = cumulative_quantities(asks)

    prices = np.concatenate([bid_prices, ask_prices])
    bid_col = np.concatenate([bid_depth, np.zeros(len(asks))])
    ask_col = np.concatenate([np.zeros(len(bids)), ask_depth])
    return prices, bid_col, ask_col
