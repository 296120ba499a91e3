#!/usr/bin/env python3
"""
Micro-benchmark for the order book simulator.

Tests:
1. Delta reconciliation throughput
2. Market impact simulation speed
3. Cumulative depth generation speed

Usage:
    python -m orderbook_sim.benchmark
"""

from __future__ import annotations

import random
import time
from statistics import mean, stdev

from .datafeed.orderbook import OrderBook
from .engine.depth import cumulative_quantities, depth_curve
from .engine.impact import simulate_market_impact
from .types import MARKET_PRICE, NormalizedMessage, PriceLevel, Side, SimulatedOrder


def generate_mock_snapshot(base_price: float = 60000.0, levels: int = 400) -> NormalizedMessage:
    """Generate a mock order book snapshot."""
    tick_size = 0.5

    bids = []
    asks = []

    for i in range(levels):
        bid_price = base_price - (i + 1) * tick_size
        ask_price = base_price + (i + 1) * tick_size

        bids.append(PriceLevel(str(bid_price), str(random.uniform(0.01, 5))))
        asks.append(PriceLevel(str(ask_price), str(random.uniform(0.01, 5))))

    return NormalizedMessage("snapshot", bids, asks)


def generate_mock_update(base_price: float, changes: int = 50) -> NormalizedMessage:
    """Generate a mock delta."""
    tick_size = 0.5

    bids = []
    asks = []

    for _ in range(changes // 2):
        offset = random.randint(1, 400)
        bid_price = base_price - offset * tick_size
        ask_price = base_price + offset * tick_size

        # Random qty (0 = remove level)
        bid_qty = random.uniform(0.01, 5) if random.random() > 0.2 else 0
        ask_qty = random.uniform(0.01, 5) if random.random() > 0.2 else 0

        bids.append(PriceLevel(str(bid_price), str(bid_qty)))
        asks.append(PriceLevel(str(ask_price), str(ask_qty)))

    return NormalizedMessage("update", bids, asks)


def benchmark_orderbook_updates(iterations: int = 10000) -> None:
    """Benchmark delta reconciliation throughput."""
    print("\n=== Order Book Delta Benchmark ===")

    ob = OrderBook()
    ob.apply_snapshot(generate_mock_snapshot())

    # Pre-generate updates
    updates = [generate_mock_update(60000.0, changes=50) for _ in range(iterations)]

    # Warm up
    for u in updates[:100]:
        ob.apply_update(u)

    # Benchmark
    start = time.perf_counter()
    for u in updates:
        ob.apply_update(u)
    elapsed = time.perf_counter() - start

    rate = iterations / elapsed
    print(f"  Deltas applied: {iterations:,}")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Rate: {rate:,.0f} deltas/sec")
    print(f"  Per delta: {elapsed/iterations*1_000_000:.1f}µs")


def benchmark_market_impact(iterations: int = 10000) -> None:
    """Benchmark book walking for market orders of random size."""
    print("\n=== Market Impact Benchmark ===")

    ob = OrderBook()
    ob.apply_snapshot(generate_mock_snapshot())
    asks = ob.asks.levels

    orders = [
        SimulatedOrder(Side.BUY, MARKET_PRICE, random.uniform(0.1, 500))
        for _ in range(iterations)
    ]

    start = time.perf_counter()
    for order in orders:
        simulate_market_impact(order, asks)
    elapsed = time.perf_counter() - start

    print(f"  Simulations: {iterations:,}")
    print(f"  Time: {elapsed*1000:.1f}ms")
    print(f"  Per simulation: {elapsed/iterations*1_000_000:.1f}µs")


def benchmark_depth(iterations: int = 1000) -> None:
    """Benchmark cumulative depth generation (what the UI needs per frame)."""
    print("\n=== Depth Generation Benchmark ===")

    ob = OrderBook()
    ob.apply_snapshot(generate_mock_snapshot())

    # Warm up
    for _ in range(10):
        depth_curve(ob.bids.levels, ob.asks.levels)

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        cumulative_quantities(ob.bids.levels[:25])
        cumulative_quantities(ob.asks.levels[:25])
        depth_curve(ob.bids.levels, ob.asks.levels)
        times.append(time.perf_counter() - start)

    avg_time = mean(times) * 1000
    std_time = stdev(times) * 1000

    print(f"  Iterations: {iterations}")
    print(f"  Avg time: {avg_time:.3f}ms")
    print(f"  Std dev: {std_time:.3f}ms")
    print(f"  Max FPS possible: {1000/avg_time:,.0f}")


def main() -> None:
    """Run all benchmarks."""
    print("=" * 60)
    print("Order Book Simulator Performance Benchmark")
    print("=" * 60)

    benchmark_orderbook_updates()
    benchmark_market_impact()
    benchmark_depth()

    print("\n" + "=" * 60)
    print("Benchmark complete.")
    print("=" * 60)


if __name__ == "__main__":
    main()
