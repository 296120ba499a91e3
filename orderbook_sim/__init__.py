"""
Order Book Simulator - live limit order book + market impact estimation
for OKX, Bybit and Deribit.

Architecture:
- datafeed/: venue adapters, WebSocket feed, local order book reconciliation
- engine/: market impact simulation, level selection, depth, order validation
- store.py: single owner of book/connection/order state
- ui/: ladders, simulation form and metrics (Textual TUI)
"""

__version__ = "0.1.0"
