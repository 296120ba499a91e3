"""
Venue adapters: one per exchange, all producing NormalizedMessage.

Each adapter knows its WebSocket URL, how to format a user symbol for the
venue, the subscribe/unsubscribe/keep-alive frames, and how to turn a book
message into canonical levels. Adapters share a protocol, not a base class.
"""

from __future__ import annotations

import re
from typing import Any, Protocol

from ..errors import MessageDecodeError, VenueError
from ..types import NormalizedMessage, Venue
from .codec import decode_levels

# Used when the user symbol has no recognizable BASE-QUOTE form
FALLBACK_SYMBOL = "BTC-PERPETUAL"

_SYMBOL_SPLIT = re.compile(r"[-/]")


def split_symbol(user_input: str) -> tuple[str, str] | None:
    """'eth/usd' -> ('ETH', 'USD'); None if base or quote is missing."""
    parts = _SYMBOL_SPLIT.split(user_input.upper())
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


class VenueAdapter(Protocol):
    venue: Venue
    ws_url: str

    def format_symbol(self, user_input: str) -> str: ...
    def subscribe_message(self, symbol: str) -> dict[str, Any]: ...
    def unsubscribe_message(self, symbol: str) -> dict[str, Any]: ...
    def ping_message(self) -> str | dict[str, Any]: ...
    def is_control(self, message: dict[str, Any]) -> bool: ...
    def parse_message(self, message: dict[str, Any]) -> NormalizedMessage | None: ...


class OKXAdapter:
    """OKX v5 public 'books' channel (400 levels, snapshot then updates)."""

    venue = Venue.OKX
    ws_url = "wss://ws.okx.com:8443/ws/v5/public"

    def format_symbol(self, user_input: str) -> str:
        pair = split_symbol(user_input)
        if pair is None:
            return FALLBACK_SYMBOL
        return f"{pair[0]}-{pair[1]}-SWAP"

    def _args(self, symbol: str) -> list[dict[str, str]]:
        return [{"channel": "books", "instId": symbol}]

    def subscribe_message(self, symbol: str) -> dict[str, Any]:
        return {"op": "subscribe", "args": self._args(symbol)}

    def unsubscribe_message(self, symbol: str) -> dict[str, Any]:
        return {"op": "unsubscribe", "args": self._args(symbol)}

    def ping_message(self) -> str:
        return "ping"

    def is_control(self, message: dict[str, Any]) -> bool:
        """Subscribe/unsubscribe acks and connection notices."""
        return message.get("event") in ("subscribe", "unsubscribe", "channel-conn-count")

    def parse_message(self, message: dict[str, Any]) -> NormalizedMessage | None:
        if message.get("event") == "error":
            raise VenueError(message.get("msg") or "OKX error")
        action = message.get("action")
        data = message.get("data")
        if not action or not data:
            # subscribe acks, channel notices
            return None
        if action not in ("snapshot", "update"):
            raise MessageDecodeError(f"unknown OKX action {action!r}")
        try:
            book = data[0]
            bids, asks = book["bids"], book["asks"]
        except (IndexError, KeyError, TypeError) as exc:
            raise MessageDecodeError(f"malformed OKX book message: {exc}") from exc
        return NormalizedMessage(action, decode_levels(bids), decode_levels(asks))


class BybitAdapter:
    """Bybit v5 linear 'orderbook.50' topic (snapshot then deltas)."""

    venue = Venue.BYBIT
    ws_url = "wss://stream.bybit.com/v5/public/linear"

    def format_symbol(self, user_input: str) -> str:
        pair = split_symbol(user_input)
        if pair is None:
            return FALLBACK_SYMBOL
        base, quote = pair
        if quote == "USD":
            quote = "USDT"
        return f"{base}{quote}"

    def _topic(self, symbol: str) -> str:
        return f"orderbook.50.{symbol}"

    def subscribe_message(self, symbol: str) -> dict[str, Any]:
        return {"op": "subscribe", "args": [self._topic(symbol)]}

    def unsubscribe_message(self, symbol: str) -> dict[str, Any]:
        return {"op": "unsubscribe", "args": [self._topic(symbol)]}

    def ping_message(self) -> dict[str, Any]:
        return {"op": "ping"}

    def is_control(self, message: dict[str, Any]) -> bool:
        """Successful op responses (subscribe, ping/pong)."""
        return "op" in message and message.get("success") is not False

    def parse_message(self, message: dict[str, Any]) -> NormalizedMessage | None:
        if message.get("success") is False:
            raise VenueError(message.get("ret_msg") or "Bybit error")
        kind = message.get("type")
        data = message.get("data")
        if not kind or not data:
            # op responses: subscribe / pong
            return None
        try:
            bids, asks = data["b"], data["a"]
        except (KeyError, TypeError) as exc:
            raise MessageDecodeError(f"malformed Bybit book message: {exc}") from exc
        return NormalizedMessage(
            "update" if kind == "delta" else "snapshot",
            decode_levels(bids),
            decode_levels(asks),
        )


class DeribitAdapter:
    """Deribit JSON-RPC 'book.<instrument>.100ms' channel."""

    venue = Venue.DERIBIT
    ws_url = "wss://www.deribit.com/ws/api/v2"

    def format_symbol(self, user_input: str) -> str:
        pair = split_symbol(user_input)
        if pair is None:
            return FALLBACK_SYMBOL
        return f"{pair[0]}-PERPETUAL"

    def _channels(self, symbol: str) -> list[str]:
        return [f"book.{symbol}.100ms"]

    def subscribe_message(self, symbol: str) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "method": "public/subscribe", "params": {"channels": self._channels(symbol)}}

    def unsubscribe_message(self, symbol: str) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "method": "public/unsubscribe", "params": {"channels": self._channels(symbol)}}

    def ping_message(self) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "method": "public/test", "params": {}}

    def is_control(self, message: dict[str, Any]) -> bool:
        """Heartbeats and successful RPC results."""
        if message.get("method") == "heartbeat":
            return True
        return "result" in message and "error" not in message

    def parse_message(self, message: dict[str, Any]) -> NormalizedMessage | None:
        error = message.get("error")
        if error:
            text = error.get("message") if isinstance(error, dict) else str(error)
            raise VenueError(text or "Deribit error")
        params = message.get("params")
        if not isinstance(params, dict) or not params.get("data"):
            # RPC results, heartbeats
            return None
        data = params["data"]
        try:
            bids, asks = data["bids"], data["asks"]
        except (KeyError, TypeError) as exc:
            raise MessageDecodeError(f"malformed Deribit book message: {exc}") from exc
        kind = "snapshot" if data.get("type") == "snapshot" else "update"
        return NormalizedMessage(
            kind,
            decode_levels(bids, positional=True),
            decode_levels(asks, positional=True),
        )


_ADAPTERS: dict[Venue, VenueAdapter] = {
    Venue.OKX: OKXAdapter(),
    Venue.BYBIT: BybitAdapter(),
    Venue.DERIBIT: DeribitAdapter(),
}


def get_adapter(venue: Venue) -> VenueAdapter:
    return _ADAPTERS[Venue(venue)]
