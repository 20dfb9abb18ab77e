"""
Canonical data models for normalized market data.

This module defines immutable data structures that represent clean, validated
per-venue market data as handed over by the fetch layer.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

HOURLY = "1h"
DAILY = "1d"


@dataclass(frozen=True)
class Candle:
    """Normalized candlestick data with UTC timestamps."""
    open_time: datetime                       # UTC market timestamp of the bar open
    open: float
    high: float
    low: float
    close: float
    volume: float                             # Base volume
    quote_volume: Optional[float] = None
    trade_count: Optional[int] = None
    taker_buy_volume: Optional[float] = None  # Base volume bought by takers, when the venue reports it

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


@dataclass(frozen=True)
class BookLevel:
    """Single order book level with price and quantity."""
    price: float
    quantity: float


@dataclass(frozen=True)
class OrderBookSnapshot:
    """Order book snapshot with sorted levels."""
    bids: tuple[BookLevel, ...]       # Sorted by price descending
    asks: tuple[BookLevel, ...]       # Sorted by price ascending

    @property
    def bid_sum(self) -> float:
        """Total bid quantity."""
        return sum(level.quantity for level in self.bids)

    @property
    def ask_sum(self) -> float:
        """Total ask quantity."""
        return sum(level.quantity for level in self.asks)

    @property
    def best_bid(self) -> Optional[float]:
        """Best bid price, None if no bids."""
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> Optional[float]:
        """Best ask price, None if no asks."""
        return self.asks[0].price if self.asks else None

    @property
    def spread(self) -> Optional[float]:
        """Bid-ask spread, None if missing either side."""
        if self.best_bid is None or self.best_ask is None:
            return None
        return self.best_ask - self.best_bid

    @property
    def spread_percentage(self) -> Optional[float]:
        """Spread as a percentage of the best bid, None if missing either side."""
        spread = self.spread
        if spread is None or self.best_bid <= 0:
            return None
        return spread / self.best_bid * 100.0


@dataclass(frozen=True)
class RecentTrades:
    """Aggregated taker volumes from the venue's recent trades."""
    buy_volume: float
    sell_volume: float

    @property
    def buy_sell_ratio(self) -> float:
        # Matches the candle approximation: an empty sell side divides by 1
        return self.buy_volume / (self.sell_volume or 1.0)


@dataclass(frozen=True)
class VenueData:
    """Everything one venue supplies for a single analysis request."""
    venue: str
    symbol: str
    klines: Mapping[str, tuple[Candle, ...]] = field(default_factory=dict)
    order_book: Optional[OrderBookSnapshot] = None
    recent_trades: Optional[RecentTrades] = None

    def candles(self, timeframe: str) -> tuple[Candle, ...]:
        """Candles for a timeframe, empty when the venue did not supply it."""
        return tuple(self.klines.get(timeframe, ()))

    def has_timeframe(self, timeframe: str) -> bool:
        return len(self.klines.get(timeframe, ())) > 0

    def highs(self, timeframe: str = DAILY) -> list[float]:
        return [c.high for c in self.candles(timeframe)]

    def lows(self, timeframe: str = DAILY) -> list[float]:
        return [c.low for c in self.candles(timeframe)]

    def volumes(self, timeframe: str = DAILY) -> list[float]:
        return [c.volume for c in self.candles(timeframe)]

    def latest_close(self, timeframe: str = DAILY) -> Optional[float]:
        """Close of the most recent candle, None when the series is empty."""
        candles = self.candles(timeframe)
        return candles[-1].close if candles else None

    def latest_open_time(self, timeframe: str = DAILY) -> Optional[datetime]:
        candles = self.candles(timeframe)
        return candles[-1].open_time if candles else None


def venue_labels(venues: Sequence[VenueData]) -> list[str]:
    """
    One distinct label per venue, in order.

    Repeated names (several unnamed payloads all parse as "unknown") get a
    "#n" suffix from their second occurrence on, so per-venue maps keep
    every venue.
    """
    seen: dict[str, int] = {}
    labels = []
    for venue in venues:
        count = seen.get(venue.venue, 0) + 1
        seen[venue.venue] = count
        labels.append(venue.venue if count == 1 else f"{venue.venue}#{count}")
    return labels
