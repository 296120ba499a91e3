"""Exception hierarchy for the order book simulator."""

from __future__ import annotations


class OrderBookSimError(Exception):
    """Base class for all package errors."""


class MessageDecodeError(OrderBookSimError):
    """A venue message does not have the expected structure."""


class LevelDecodeError(MessageDecodeError):
    """A raw price level is missing fields."""


class MalformedLevelError(OrderBookSimError):
    """A level's price or quantity does not parse as a finite number."""

    def __init__(self, level: object, reason: str = "") -> None:
        self.level = level
        msg = f"malformed price level {level!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class VenueError(OrderBookSimError):
    """The venue sent an error frame (bad symbol, rejected subscription, ...)."""


class InvalidOrderInput(OrderBookSimError):
    """User input for a simulated order (or symbol) was rejected."""
