"""Pytest configuration and shared fixtures."""

import pytest
from typing import Any, Callable, Dict, List, Optional, Sequence
from datetime import datetime, timedelta, timezone

from trade_advisor.analysis.sentiment import build_sentiment
from trade_advisor.data.models import (
    DAILY,
    HOURLY,
    BookLevel,
    Candle,
    OrderBookSnapshot,
    RecentTrades,
    VenueData,
)
from trade_advisor.utils.time import datetime_to_ms

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def build_candles(closes: Sequence[float], step: timedelta = timedelta(days=1),
                  volume: float = 1000.0, volumes: Optional[Sequence[float]] = None,
                  start: datetime = BASE_TIME, wick: float = 0.01) -> List[Candle]:
    """Candles whose open is the previous close and whose wicks extend `wick` beyond the body."""
    candles = []
    previous = closes[0]
    for i, close in enumerate(closes):
        open_price = previous
        candles.append(Candle(
            open_time=start + step * i,
            open=open_price,
            high=max(open_price, close) * (1 + wick),
            low=min(open_price, close) * (1 - wick),
            close=close,
            volume=volumes[i] if volumes is not None else volume,
        ))
        previous = close
    return candles


def build_book(mid: float, bid_qty: float, ask_qty: float, depth: int = 10) -> OrderBookSnapshot:
    return OrderBookSnapshot(
        bids=tuple(BookLevel(price=mid * (1 - 0.001 * i), quantity=bid_qty) for i in range(1, depth + 1)),
        asks=tuple(BookLevel(price=mid * (1 + 0.001 * i), quantity=ask_qty) for i in range(1, depth + 1)),
    )


def build_venue(closes: Sequence[float], venue: str = "binance", symbol: str = "BTCUSDT",
                volume: float = 1000.0, hourly: bool = True,
                book: Optional[OrderBookSnapshot] = None,
                trades: Optional[RecentTrades] = None) -> VenueData:
    """Venue with the given daily closes and, optionally, 48 flat hourly candles at the last close."""
    daily = build_candles(closes, volume=volume)
    klines = {DAILY: tuple(daily)}
    if hourly:
        last = daily[-1]
        klines[HOURLY] = tuple(build_candles(
            [last.close] * 48,
            step=timedelta(hours=1),
            volume=volume / 24,
            start=last.open_time - timedelta(hours=24),
        ))
    return VenueData(venue=venue, symbol=symbol, klines=klines, order_book=book, recent_trades=trades)


def candles_to_payload(candles: Sequence[Candle]) -> List[Dict[str, Any]]:
    return [
        {
            "openTime": datetime_to_ms(c.open_time),
            "open": c.open,
            "high": c.high,
            "low": c.low,
            "close": c.close,
            "volume": c.volume,
        }
        for c in candles
    ]


def venue_to_payload(venue: VenueData) -> Dict[str, Any]:
    """camelCase payload equivalent to a VenueData."""
    payload: Dict[str, Any] = {
        "venue": venue.venue,
        "symbol": venue.symbol,
        "klines": {tf: candles_to_payload(candles) for tf, candles in venue.klines.items()},
    }
    if venue.order_book is not None:
        payload["orderBook"] = {
            "bids": [[level.price, level.quantity] for level in venue.order_book.bids],
            "asks": [{"price": level.price, "quantity": level.quantity} for level in venue.order_book.asks],
        }
    if venue.recent_trades is not None:
        payload["recentTrades"] = {
            "buyVolume": venue.recent_trades.buy_volume,
            "sellVolume": venue.recent_trades.sell_volume,
        }
    return payload


def uptrend_closes(count: int = 220, start: float = 100.0) -> List[float]:
    return [start * 1.01 ** i for i in range(count)]


def downtrend_closes(count: int = 220, start: float = 1000.0) -> List[float]:
    return [start * 0.99 ** i for i in range(count)]


@pytest.fixture
def candle_factory() -> Callable[..., List[Candle]]:
    """Factory building candles from a close series."""
    return build_candles


@pytest.fixture
def venue_factory() -> Callable[..., VenueData]:
    """Factory building VenueData from a daily close series."""
    return build_venue


@pytest.fixture
def book_factory() -> Callable[..., OrderBookSnapshot]:
    return build_book


@pytest.fixture
def payload_factory() -> Callable[[VenueData], Dict[str, Any]]:
    """Converts VenueData into the fetch layer's camelCase payload."""
    return venue_to_payload


@pytest.fixture
def uptrend_venue() -> VenueData:
    """Steady 1% daily climb with a bid-heavy book and buy-heavy trades."""
    closes = uptrend_closes()
    return build_venue(
        closes,
        book=build_book(closes[-1], bid_qty=10.0, ask_qty=2.0),
        trades=RecentTrades(buy_volume=1800.0, sell_volume=1200.0),
    )


@pytest.fixture
def downtrend_venue() -> VenueData:
    """Steady 1% daily decline with an ask-heavy book and sell-heavy trades."""
    closes = downtrend_closes()
    return build_venue(
        closes,
        book=build_book(closes[-1], bid_qty=2.0, ask_qty=10.0),
        trades=RecentTrades(buy_volume=1000.0, sell_volume=2000.0),
    )


@pytest.fixture
def secondary_venues() -> List[VenueData]:
    """Two smaller venues tracking the uptrend."""
    closes = uptrend_closes()
    return [
        build_venue([c * 1.001 for c in closes], venue="kucoin", volume=300.0),
        build_venue([c * 0.999 for c in closes], venue="bybit", volume=200.0),
    ]


@pytest.fixture
def bullish_sentiment():
    """Very bullish overall sentiment with extreme greed."""
    return build_sentiment("BTCUSDT", social_score=0.7, news_score=0.7,
                           fear_greed_value=80, funding_average=0.002,
                           headlines=("ETF inflows accelerate",))


@pytest.fixture
def bearish_sentiment():
    """Very bearish overall sentiment with extreme fear."""
    return build_sentiment("BTCUSDT", social_score=-0.7, news_score=-0.7,
                           fear_greed_value=10, funding_average=-0.002)


@pytest.fixture
def sentiment_payload() -> Dict[str, Any]:
    """Sentiment in the collaborator's plain-dict shape."""
    return {
        "symbol": "BTCUSDT",
        "social": {"score": 0.7, "sentiment": "very bullish", "volume": "high"},
        "news": {"score": 0.7, "sentiment": "very bullish", "headlines": ["ETF inflows accelerate"]},
        "fearGreedIndex": {"value": 80, "classification": "extreme greed"},
        "fundingRates": {"average": 0.002, "sentiment": "very bullish"},
        "overallSentiment": {"score": 0.57, "classification": "very bullish"},
    }
