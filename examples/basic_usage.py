#!/usr/bin/env python3
"""
Basic Usage Example - Trade Advisor

This script demonstrates the basic usage of the trade advisor engine with
simulated market data. It shows how to:
- Initialize the engine
- Build per-venue payloads (daily and hourly candles, order book, trades)
- Produce a trade plan synchronously from payloads
- Fan out async venue fetchers and a sentiment provider

Run: python examples/basic_usage.py
"""

import asyncio
import json
import math
from typing import Any

from trade_advisor.analysis.sentiment import StaticSentimentProvider, build_sentiment
from trade_advisor.engine import TradeAdvisorEngine
from trade_advisor.logging import configure_logging

DAY_MS = 86_400_000
HOUR_MS = 3_600_000
START_MS = 1_700_000_000_000


def create_candles(count: int, step_ms: int, start_price: float, drift: float,
                   volume: float, wave: float = 0.02) -> list[dict[str, Any]]:
    """Create a trending, gently oscillating candle series."""
    candles = []
    price = start_price
    for i in range(count):
        open_price = price
        close_price = price * (1.0 + drift + wave * math.sin(i / 2.0))
        candles.append({
            "openTime": START_MS + i * step_ms,
            "open": open_price,
            "high": max(open_price, close_price) * 1.01,
            "low": min(open_price, close_price) * 0.99,
            "close": close_price,
            "volume": volume * (1.0 + 0.3 * math.cos(i / 3.0)),
        })
        price = close_price
    return candles


def create_venue_payload(venue: str, price: float, volume: float) -> dict[str, Any]:
    """Create one venue's payload in the collaborator format."""
    daily = create_candles(220, DAY_MS, price, 0.004, volume)
    last_close = daily[-1]["close"]
    hourly = create_candles(72, HOUR_MS, last_close, 0.0005, volume / 24.0, wave=0.004)

    return {
        "venue": venue,
        "klines": {"1d": daily, "1h": hourly},
        "orderBook": {
            "bids": [[last_close * (1 - 0.001 * i), 5.0 + i] for i in range(1, 21)],
            "asks": [[last_close * (1 + 0.001 * i), 2.0 + i * 0.5] for i in range(1, 21)],
        },
        "recentTrades": {"buyVolume": 1800.0, "sellVolume": 1200.0},
    }


def print_recommendation(recommendation: dict[str, Any]) -> None:
    """Print the serialized recommendation."""
    print(f"  Recommendation: {recommendation['recommendation']}")
    print(f"  Confidence: {recommendation['confidence']}")

    if recommendation["recommendation"] == "neutral":
        print(f"  Reason: {recommendation['reason']}")
        return

    print("  Entries:")
    for entry in recommendation["entries"]:
        print(f"    {entry['type']:<6} {entry['price']:>12.2f}  ({entry['allocation']:.0%}) - {entry['reason']}")
    print("  Take profits:")
    for tp in recommendation["take_profits"]:
        print(f"    {tp['price']:>12.2f}  ({tp['allocation']:.0%}, +{tp['percentage_gain']:.2f}%) - {tp['reason']}")
    stop = recommendation["stop_loss"]
    print(f"  Stop loss: {stop['price']:.2f} (-{stop['percentage_loss']:.2f}%) - {stop['reason']}")
    leverage = recommendation["leverage"]
    print(f"  Leverage: {leverage['recommended']}x ({leverage['risk_level']} risk)")
    print("  Reasoning:")
    for reason in recommendation["reasoning"]:
        print(f"    - {reason}")


def main():
    """Main demonstration function."""
    configure_logging(level="WARNING")

    print("Trade Advisor - Basic Usage Demo")
    print("=" * 60)

    print("1. Initializing the trade advisor engine...")
    engine = TradeAdvisorEngine()
    print()

    print("2. Building venue payloads...")
    payloads = [
        create_venue_payload("binance", 30000.0, 12000.0),
        create_venue_payload("kucoin", 30050.0, 4000.0),
        create_venue_payload("bybit", 29980.0, 6000.0),
    ]
    sentiment = build_sentiment("BTCUSDT", social_score=0.45, news_score=0.35,
                                fear_greed_value=68, funding_average=0.0006)
    print()

    print("3. Synchronous analysis from payloads...")
    recommendation = engine.analyze_payload("BTCUSDT", payloads, sentiment)
    print_recommendation(recommendation.to_dict())
    print()

    print("4. Async fan-out with fetchers and a sentiment provider...")

    def make_fetcher(payload):
        async def fetch(symbol: str) -> dict[str, Any]:
            await asyncio.sleep(0)
            return payload
        return fetch

    async def failing_fetcher(symbol: str) -> dict[str, Any]:
        raise ConnectionError("venue unavailable")

    fetchers = [make_fetcher(p) for p in payloads] + [failing_fetcher]
    provider = StaticSentimentProvider({"BTCUSDT": sentiment})
    recommendation = asyncio.run(engine.run("BTCUSDT", fetchers, provider))
    print(json.dumps(recommendation.to_dict(), indent=2, default=str)[:1500])


if __name__ == "__main__":
    main()
