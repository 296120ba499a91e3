"""
Venue WebSocket feed with async orchestration.

Handles:
1. Connect + subscribe to the selected venue/symbol book channel
2. Keep-alive pings on the venue's schedule
3. Reconnect with exponential backoff
4. Venue/symbol switches: tear down, reset the store, resubscribe

Every connection is tagged with a subscription generation. A switch bumps
the generation, and anything still arriving for an older one is dropped
before it can reach the store.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
import orjson

from ..config import Settings
from ..errors import MessageDecodeError, VenueError
from ..store import OrderBookStore
from ..types import Venue
from .venues import VenueAdapter, get_adapter

logger = logging.getLogger(__name__)


def encode_frame(frame: str | dict[str, Any]) -> str:
    """Text frame for the socket. Plain strings (OKX 'ping') go out as-is."""
    if isinstance(frame, str):
        return frame
    return orjson.dumps(frame).decode()


class FeedClient:
    """
    Async client keeping an OrderBookStore in sync with one venue.

    Usage:
        client = FeedClient(store, Settings())
        task = asyncio.create_task(client.run())
        ...
        await client.switch(venue=Venue.BYBIT)
        client.stop()
    """

    def __init__(self, store: OrderBookStore, settings: Settings) -> None:
        self.store = store
        self.settings = settings

        self._running = False
        self._generation = 0
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        # Set by switch()/stop() to cut a reconnect backoff short
        self._wake = asyncio.Event()

        self.messages_applied: int = 0
        self.messages_dropped: int = 0

    @property
    def generation(self) -> int:
        return self._generation

    def _current_subscription(self) -> tuple[VenueAdapter, str]:
        adapter = get_adapter(self.store.selected_venue)
        return adapter, adapter.format_symbol(self.store.selected_symbol)

    async def _keepalive(self, ws: aiohttp.ClientWebSocketResponse, adapter: VenueAdapter) -> None:
        """Send the venue's ping frame every ping_interval_sec."""
        frame = encode_frame(adapter.ping_message())
        while not ws.closed:
            await asyncio.sleep(self.settings.ping_interval_sec)
            if ws.closed:
                break
            try:
                await ws.send_str(frame)
            except (aiohttp.ClientError, ConnectionResetError) as exc:
                logger.warning("[%s] Keep-alive failed: %s", adapter.venue.value, exc)
                break

    def _handle_ws_message(self, raw: str, generation: int, adapter: VenueAdapter) -> None:
        """
        Handle one text frame.

        HOT PATH - called for every message.
        """
        if generation != self._generation:
            self.messages_dropped += 1
            logger.debug("Discarding message from superseded subscription %d", generation)
            return

        if raw == "pong":
            return

        try:
            message = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            self.messages_dropped += 1
            logger.warning("[%s] Undecodable frame: %s", adapter.venue.value, exc)
            return

        if not isinstance(message, dict) or adapter.is_control(message):
            return

        try:
            normalized = adapter.parse_message(message)
        except VenueError as exc:
            self.messages_dropped += 1
            logger.error("[%s] API error: %s", adapter.venue.value, exc)
            return
        except MessageDecodeError as exc:
            self.messages_dropped += 1
            logger.warning("[%s] Dropping malformed message: %s", adapter.venue.value, exc)
            return

        if normalized is None:
            return

        self.store.process_message(normalized)
        self.messages_applied += 1

    async def _run_connection(self, session: aiohttp.ClientSession, generation: int) -> None:
        adapter, symbol = self._current_subscription()

        async with session.ws_connect(adapter.ws_url) as ws:
            if generation != self._generation:
                # Switched while the handshake was in flight
                return

            self._ws = ws
            logger.info("[%s] WebSocket connected. Subscribing to %s", adapter.venue.value, symbol)
            self.store.set_connection_status(True)
            await ws.send_str(encode_frame(adapter.subscribe_message(symbol)))

            keepalive = asyncio.create_task(self._keepalive(ws, adapter))
            try:
                async for msg in ws:
                    if not self._running or generation != self._generation:
                        break

                    if msg.type == aiohttp.WSMsgType.TEXT:
                        self._handle_ws_message(msg.data, generation, adapter)
                    elif msg.type == aiohttp.WSMsgType.ERROR:
                        logger.error("[%s] WebSocket error: %s", adapter.venue.value, ws.exception())
                        break
            finally:
                keepalive.cancel()
                self._ws = None

        logger.info("[%s] WebSocket disconnected.", adapter.venue.value)

    async def run(self) -> None:
        """
        Main run loop. Connects to the selected venue and feeds the store.

        Reconnects with exponential backoff until stop() is called.
        """
        self._running = True
        delay = self.settings.reconnect_delay_sec

        async with aiohttp.ClientSession() as session:
            while self._running:
                generation = self._generation
                try:
                    await self._run_connection(session, generation)
                    delay = self.settings.reconnect_delay_sec
                except (aiohttp.ClientError, OSError) as exc:
                    logger.error("[%s] Connection failed: %s", self.store.selected_venue.value, exc)

                if generation == self._generation:
                    self.store.set_connection_status(False)

                if not self._running:
                    break
                if generation != self._generation:
                    # Switched venue/symbol: resubscribe right away
                    continue

                logger.info("Reconnecting in %.1fs...", delay)
                self._wake.clear()
                try:
                    await asyncio.wait_for(self._wake.wait(), delay)
                except asyncio.TimeoutError:
                    pass

                if generation != self._generation:
                    delay = self.settings.reconnect_delay_sec
                else:
                    delay = min(delay * 2, self.settings.reconnect_max_delay_sec)

    async def switch(self, venue: Venue | None = None, symbol: str | None = None) -> None:
        """
        Move to a new venue and/or symbol.

        The old subscription is torn down first and the store is reset, so no
        level from the previous instrument survives the switch.
        """
        old_adapter, old_symbol = self._current_subscription()
        self._generation += 1
        self._wake.set()

        ws = self._ws
        if ws is not None and not ws.closed:
            try:
                await ws.send_str(encode_frame(old_adapter.unsubscribe_message(old_symbol)))
            except (aiohttp.ClientError, ConnectionResetError) as exc:
                logger.warning("[%s] Error unsubscribing: %s", old_adapter.venue.value, exc)
            await ws.close()

        if venue is not None:
            self.store.select_venue(venue)
        if symbol is not None:
            self.store.select_symbol(symbol)

    def stop(self) -> None:
        """Signal the client to stop."""
        self._running = False
        self._generation += 1
        self._wake.set()
