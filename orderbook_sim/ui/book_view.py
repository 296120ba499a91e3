"""
Order book TUI using Textual.

Displays:
- Top: status bar (venue, symbol, connection, best bid/ask, spread)
- Left: bid and ask ladders with cumulative totals and depth bars; the
  level a simulated limit order lands on is highlighted
- Right: simulation form + market impact metrics
- Bottom: depth curve

Notes:
- Widgets read the store directly; refresh is driven by a timer at
  ~10 FPS instead of per message
- The feed client runs as a worker on the app's event loop
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.console import RenderableType
from rich.style import Style
from rich.table import Table
from rich.text import Text

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Footer, Input, Select, Static

from ..engine.depth import cumulative_quantities, depth_curve
from ..engine.orders import build_simulated_order, validate_symbol
from ..errors import InvalidOrderInput
from ..types import OrderType, Side, Venue

if TYPE_CHECKING:
    from ..config import Settings
    from ..datafeed.feed_client import FeedClient
    from ..store import OrderBookStore
    from ..types import BookSideName

logger = logging.getLogger(__name__)

# Color scheme (dark theme)
BID_COLOR = "#22c55e"      # Green
ASK_COLOR = "#ef4444"      # Red
PRICE_COLOR = "#f8fafc"
HEADER_COLOR = "#94a3b8"
BAR_BG = "#1e293b"
HIGHLIGHT_BG = "#1e40af"

SPARK_CHARS = " ▁▂▃▄▅▆▇█"

TIMING_OPTIONS = [
    ("Immediate", 0.0),
    ("5s Delay", 5.0),
    ("10s Delay", 10.0),
    ("30s Delay", 30.0),
]


def format_qty(qty: float) -> str:
    """Format quantity for display."""
    if qty >= 1000:
        return f"{qty/1000:.1f}K"
    elif qty >= 1:
        return f"{qty:.2f}"
    else:
        return f"{qty:.4f}"


def make_bar(value: float, max_value: float, width: int, color: str) -> Text:
    """Create a horizontal bar using block characters."""
    if max_value <= 0:
        return Text(" " * width)

    fill_ratio = min(1.0, value / max_value)
    fill_width = int(fill_ratio * width)

    bar = "█" * fill_width + " " * (width - fill_width)
    return Text(bar, style=Style(color=color, bgcolor=BAR_BG))


def sparkline(values, width: int) -> str:
    """Downsample `values` to `width` columns of block characters."""
    n = len(values)
    if n == 0 or width <= 0:
        return ""
    top = max(values) or 1.0
    cols = []
    for c in range(width):
        v = values[min(n - 1, c * n // width)]
        cols.append(SPARK_CHARS[int(v / top * (len(SPARK_CHARS) - 1))])
    return "".join(cols)


class BookTable(Static):
    """One side of the ladder."""

    DEFAULT_CSS = """
    BookTable {
        width: 1fr;
        height: 100%;
        padding: 0 1;
    }
    """

    def __init__(self, store: OrderBookStore, side_name: BookSideName, levels: int) -> None:
        super().__init__(id=f"{side_name}-table")
        self.store = store
        self.side_name = side_name
        self.levels = levels

    def render(self) -> RenderableType:
        is_bid = self.side_name == "bid"
        color = BID_COLOR if is_bid else ASK_COLOR
        title = "Bids" if is_bid else "Asks"

        levels = self.store.book.side(self.side_name).levels[: self.levels]
        if not levels:
            return Text(f"{title}: waiting for data...", style="dim")

        totals = cumulative_quantities(levels)
        max_total = float(totals[-1]) if len(totals) else 0.0
        highlight = self.store.selected_index(self.side_name)

        table = Table(
            title=Text(title, style=f"bold {color}"),
            show_header=True,
            header_style=HEADER_COLOR,
            box=None,
            padding=(0, 1),
            collapse_padding=True,
        )
        table.add_column("Price", justify="left", width=12)
        table.add_column("Quantity", justify="right", width=10)
        table.add_column("Total", justify="right", width=10)
        table.add_column("Depth", justify="left", width=12, no_wrap=True)

        for i, level in enumerate(levels):
            row_style = Style(bgcolor=HIGHLIGHT_BG, bold=True) if i == highlight else None
            table.add_row(
                Text(f"{float(level.price):.2f}", style=color),
                Text(format_qty(float(level.quantity)), style=PRICE_COLOR),
                Text(format_qty(float(totals[i])), style=PRICE_COLOR),
                make_bar(float(totals[i]), max_total, 12, color),
                style=row_style,
            )

        return table


class StatusBar(Static):
    """Status bar showing venue, symbol, connection and top of book."""

    DEFAULT_CSS = """
    StatusBar {
        dock: top;
        height: 1;
        padding: 0 2;
        background: #0f172a;
    }
    """

    def __init__(self, store: OrderBookStore) -> None:
        super().__init__()
        self.store = store

    def render(self) -> RenderableType:
        store = self.store
        book = store.book

        if store.is_connected:
            conn = Text(f"● Connected to {store.selected_venue.value}", style=BID_COLOR)
        else:
            conn = Text("● Disconnected", style=ASK_COLOR)

        parts = [
            Text(f" {store.selected_venue.value} ", style="bold white on #1e40af"),
            Text(f" {store.selected_symbol} ", style="bold"),
            Text("  "),
            conn,
            Text("  Bid: ", style="dim"),
            Text(f"{book.best_bid:.2f}", style=BID_COLOR),
            Text("  Ask: ", style="dim"),
            Text(f"{book.best_ask:.2f}", style=ASK_COLOR),
            Text("  Spread: ", style="dim"),
            Text(f"{book.spread_bps:.1f}bps", style="yellow"),
            Text("  │  ", style="dim"),
            Text("Updates/s: ", style="dim"),
            Text(f"{book.get_updates_per_sec():.0f}", style="cyan"),
        ]

        result = Text()
        for p in parts:
            result.append(p)
        return result


class MetricsPanel(Static):
    """Market impact of the active simulated order."""

    DEFAULT_CSS = """
    MetricsPanel {
        height: auto;
        padding: 1 1;
    }
    """

    def __init__(self, store: OrderBookStore) -> None:
        super().__init__(id="metrics")
        self.store = store

    def render(self) -> RenderableType:
        metrics = self.store.metrics()
        if metrics is None:
            return Text("Fill out the form to simulate an order and see its market impact.", style="dim")

        table = Table(title="Impact Metrics", show_header=False, box=None, padding=(0, 1))
        table.add_column("Metric", style="dim")
        table.add_column("Value", justify="right", style="bold")
        table.add_row("Est. Fill Price", f"{metrics.estimated_fill_price:,.2f} USD")
        table.add_row("Slippage", f"{metrics.slippage_percent:.4f} %")
        table.add_row("Est. Fill Amount", f"{metrics.fill_percentage:.2f}%")
        table.add_row("Market Impact (Value)", f"${metrics.market_impact_value:,.2f}")
        return table


class DepthChart(Static):
    """Cumulative bid/ask depth, low price on the left."""

    DEFAULT_CSS = """
    DepthChart {
        height: 3;
        padding: 0 2;
    }
    """

    def __init__(self, store: OrderBookStore) -> None:
        super().__init__(id="depth")
        self.store = store

    def render(self) -> RenderableType:
        book = self.store.book
        prices, bid_depth, ask_depth = depth_curve(book.bids.levels, book.asks.levels)
        if len(prices) == 0:
            return Text("Awaiting data for depth chart...", style="dim")

        width = max(10, self.size.width - 4)
        n_bids = len(book.bids)
        n_total = len(prices)
        bid_width = width * n_bids // n_total
        ask_width = width - bid_width

        line = Text()
        line.append(sparkline(bid_depth[:n_bids].tolist(), bid_width), style=BID_COLOR)
        line.append(sparkline(ask_depth[n_bids:].tolist(), ask_width), style=ASK_COLOR)

        scale = Text(f"{prices[0]:.2f}", style="dim")
        scale.append(" " * max(1, width - 20))
        scale.append(f"{prices[-1]:.2f}", style="dim")

        result = Text()
        result.append(line)
        result.append("\n")
        result.append(scale)
        return result


class SimulationForm(Vertical):
    """Inputs for a simulated order and the symbol selector."""

    DEFAULT_CSS = """
    SimulationForm {
        height: auto;
        padding: 0 1;
    }
    SimulationForm Horizontal {
        height: auto;
    }
    #form-error {
        color: #f87171;
        height: auto;
    }
    """

    def __init__(self, symbol: str) -> None:
        super().__init__(id="sim-form")
        self._symbol = symbol

    def compose(self) -> ComposeResult:
        with Horizontal():
            yield Input(value=self._symbol, placeholder="e.g., ETH-USD", id="symbol")
            yield Button("Update", id="symbol-update")
        with Horizontal():
            yield Button("OKX", id="venue-OKX")
            yield Button("Bybit", id="venue-Bybit")
            yield Button("Deribit", id="venue-Deribit")
        yield Select([(s.value, s.value) for s in Side], value=Side.BUY.value, allow_blank=False, id="side")
        yield Select(
            [(t.value, t.value) for t in (OrderType.LIMIT, OrderType.MARKET)],
            value=OrderType.LIMIT.value, allow_blank=False, id="order-type",
        )
        yield Input(placeholder="Price (USD), e.g., 3500.00", id="price")
        yield Input(placeholder="Quantity, e.g., 10.5", id="quantity")
        yield Select(TIMING_OPTIONS, value=0.0, allow_blank=False, id="timing")
        yield Static("", id="form-error")
        yield Button("Simulate Order", variant="primary", id="simulate")


class BookApp(App):
    """Main order book simulator application."""

    CSS = """
    Screen {
        background: #0f172a;
    }

    #main {
        height: 1fr;
    }

    #side-panel {
        width: 48;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("c", "clear_order", "Clear Order"),
        ("1", "select_venue('OKX')", "OKX"),
        ("2", "select_venue('Bybit')", "Bybit"),
        ("3", "select_venue('Deribit')", "Deribit"),
    ]

    def __init__(self, store: OrderBookStore, client: FeedClient, settings: Settings) -> None:
        super().__init__()
        self.store = store
        self.client = client
        self.settings = settings

    def compose(self) -> ComposeResult:
        yield StatusBar(self.store)
        with Horizontal(id="main"):
            yield BookTable(self.store, "bid", self.settings.levels)
            yield BookTable(self.store, "ask", self.settings.levels)
            with Vertical(id="side-panel"):
                yield SimulationForm(self.store.selected_symbol)
                yield MetricsPanel(self.store)
        yield DepthChart(self.store)
        yield Footer()

    async def on_mount(self) -> None:
        """Start the feed and the refresh timer."""
        self.run_worker(self.client.run(), group="feed", exclusive=True)
        self.set_interval(self.settings.refresh_interval_ms / 1000, self._refresh_views)

    def _refresh_views(self) -> None:
        for widget in self.query(Static):
            if isinstance(widget, (StatusBar, BookTable, MetricsPanel, DepthChart)):
                widget.refresh()

    def _show_error(self, message: str) -> None:
        self.query_one("#form-error", Static).update(message)

    def _switch(self, venue: Venue | None = None, symbol: str | None = None) -> None:
        self.run_worker(self.client.switch(venue=venue, symbol=symbol), group="switch", exclusive=True)

    def action_select_venue(self, venue: str) -> None:
        self._switch(venue=Venue(venue))

    def action_clear_order(self) -> None:
        self.store.submit_simulated_order(None)

    def _update_symbol(self) -> None:
        try:
            symbol = validate_symbol(self.query_one("#symbol", Input).value)
        except InvalidOrderInput as exc:
            self._show_error(str(exc))
            return
        self._show_error("")
        self._switch(symbol=symbol)

    def _submit_order(self) -> None:
        self._show_error("")
        try:
            order = build_simulated_order(
                self.query_one("#side", Select).value,
                self.query_one("#order-type", Select).value,
                self.query_one("#price", Input).value,
                self.query_one("#quantity", Input).value,
            )
        except InvalidOrderInput as exc:
            self._show_error(str(exc))
            return

        logger.info("Simulated order submitted: %s", order)
        delay = float(self.query_one("#timing", Select).value)
        if delay <= 0:
            self.store.submit_simulated_order(order)
            return

        # Only submit if the book is still the one the order was made for
        target = (self.store.selected_venue, self.store.selected_symbol)

        def submit_later() -> None:
            if (self.store.selected_venue, self.store.selected_symbol) == target:
                self.store.submit_simulated_order(order)

        self._show_error(f"Order scheduled in {delay:.0f}s")
        self.set_timer(delay, submit_later)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "symbol":
            self._update_symbol()
        else:
            self._submit_order()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        if button_id == "simulate":
            self._submit_order()
        elif button_id == "symbol-update":
            self._update_symbol()
        elif button_id.startswith("venue-"):
            self._switch(venue=Venue(button_id.removeprefix("venue-")))


async def run_ui(store: OrderBookStore, client: FeedClient, settings: Settings) -> None:
    """Run the TUI application."""
    app = BookApp(store, client, settings)
    await app.run_async()
