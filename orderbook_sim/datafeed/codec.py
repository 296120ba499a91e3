"""
Level codec: venue raw price levels -> canonical PriceLevel.

Shapes seen on the wire:
- OKX:     ["price", "qty", "liquidated", "orders"]  (4 strings)
- Bybit:   ["price", "qty"]                           (2 strings)
- Deribit: ["new" | "change" | "delete", price, amount]  (numbers)

Only structure is checked here. Numeric parsing happens in the reconciler,
so a bad number is dropped per level there instead of failing the message.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..errors import LevelDecodeError
from ..types import RESERVED, PriceLevel


def _as_str(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise LevelDecodeError(f"expected number or string, got {type(value).__name__}")


def _check_sequence(raw: object, min_len: int) -> Sequence:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise LevelDecodeError(f"level must be a list, got {raw!r}")
    if len(raw) < min_len:
        raise LevelDecodeError(f"level {raw!r} has {len(raw)} fields, need {min_len}")
    return raw


def decode_pair(raw: object) -> PriceLevel:
    """Decode a [price, qty, ...] level. Extra venue fields are discarded."""
    fields = _check_sequence(raw, 2)
    return PriceLevel(_as_str(fields[0]), _as_str(fields[1]), RESERVED, RESERVED)


def decode_positional(raw: object) -> PriceLevel:
    """Decode a Deribit [action, price, amount] level."""
    fields = _check_sequence(raw, 3)
    return PriceLevel(_as_str(fields[1]), _as_str(fields[2]), RESERVED, RESERVED)


def decode_levels(raw_levels: object, positional: bool = False) -> list[PriceLevel]:
    """Decode a whole side. Any structurally bad level fails the batch."""
    if raw_levels is None:
        return []
    if isinstance(raw_levels, (str, bytes)) or not isinstance(raw_levels, Iterable):
        raise LevelDecodeError(f"levels must be a list, got {raw_levels!r}")
    decode = decode_positional if positional else decode_pair
    return [decode(raw) for raw in raw_levels]
