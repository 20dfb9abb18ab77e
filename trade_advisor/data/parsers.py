"""
Parsers for the per-venue input contract.

The fetch layer hands over plain dictionaries with camelCase keys:

    {
        "venue": "binance",
        "symbol": "BTCUSDT",
        "klines": {
            "1h": [{"openTime": 1700000000000, "open": 1.0, "high": 1.1, "low": 0.9,
                    "close": 1.05, "volume": 1200.0, "quoteVolume": 1260.0, "tradeCount": 42}],
            "1d": [...]
        },
        "orderBook": {"bids": [{"price": 1.0, "quantity": 3.0}], "asks": [[1.01, 2.5]],
                      "bidSum": 3.0, "askSum": 2.5, "spread": 0.01, "spreadPercentage": 1.0},
        "recentTrades": {"buyVolume": 10.0, "sellVolume": 8.0, "buySellRatio": 1.25}
    }

This module converts them into the immutable models of ``data.models``.
Derived order book fields (bidSum, askSum, spread...) are recomputed from the
levels rather than trusted.
"""

from collections.abc import Mapping
from typing import Any, Optional

from ..errors import MalformedDataError
from ..utils.time import ms_to_datetime
from .models import BookLevel, Candle, OrderBookSnapshot, RecentTrades, VenueData

CANDLE_FORMAT = "{openTime, open, high, low, close, volume[, quoteVolume, tradeCount, takerBuyVolume]}"
LEVEL_FORMAT = "{price, quantity} or [price, quantity]"


def _to_float(value: Any, name: str, raw: Any, expected: str) -> float:
    if isinstance(value, bool):
        raise MalformedDataError(f"Invalid {name}: {value!r}", raw_data=raw, expected_format=expected)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MalformedDataError(
            f"Invalid {name}: {value!r}", raw_data=raw, expected_format=expected
        ) from e


def _optional_float(data: Mapping[str, Any], key: str, raw: Any) -> Any:
    value = data.get(key)
    if value is None:
        return None
    return _to_float(value, key, raw, CANDLE_FORMAT)


def parse_candle(data: Mapping[str, Any]) -> Candle:
    """
    Parse a single candle record.

    Raises:
        MalformedDataError: If a field is missing, non-numeric, or OHLC values are inconsistent
    """
    if not isinstance(data, Mapping):
        raise MalformedDataError("Candle must be a mapping", raw_data=data, expected_format=CANDLE_FORMAT)

    missing = [key for key in ("openTime", "open", "high", "low", "close", "volume") if key not in data]
    if missing:
        raise MalformedDataError(
            f"Candle missing fields: {missing}", raw_data=data, expected_format=CANDLE_FORMAT
        )

    try:
        open_time = ms_to_datetime(data["openTime"])
    except ValueError as e:
        raise MalformedDataError(str(e), raw_data=data, expected_format=CANDLE_FORMAT) from e

    open_price = _to_float(data["open"], "open", data, CANDLE_FORMAT)
    high_price = _to_float(data["high"], "high", data, CANDLE_FORMAT)
    low_price = _to_float(data["low"], "low", data, CANDLE_FORMAT)
    close_price = _to_float(data["close"], "close", data, CANDLE_FORMAT)
    volume = _to_float(data["volume"], "volume", data, CANDLE_FORMAT)

    if any(price <= 0 for price in (open_price, high_price, low_price, close_price)):
        raise MalformedDataError(
            f"All prices must be positive: O={open_price}, H={high_price}, L={low_price}, C={close_price}",
            raw_data=data, expected_format=CANDLE_FORMAT
        )

    if volume < 0:
        raise MalformedDataError(
            f"Volume must be non-negative: {volume}", raw_data=data, expected_format=CANDLE_FORMAT
        )

    if high_price < max(open_price, close_price) or low_price > min(open_price, close_price):
        raise MalformedDataError(
            f"High/low prices inconsistent with open/close: "
            f"O={open_price}, H={high_price}, L={low_price}, C={close_price}",
            raw_data=data, expected_format=CANDLE_FORMAT
        )

    trade_count = data.get("tradeCount")
    if trade_count is not None:
        trade_count = int(_to_float(trade_count, "tradeCount", data, CANDLE_FORMAT))

    return Candle(
        open_time=open_time,
        open=open_price,
        high=high_price,
        low=low_price,
        close=close_price,
        volume=volume,
        quote_volume=_optional_float(data, "quoteVolume", data),
        trade_count=trade_count,
        taker_buy_volume=_optional_float(data, "takerBuyVolume", data),
    )


def parse_candles(records: Any) -> tuple[Candle, ...]:
    """Parse a candle sequence and order it by ascending open time."""
    if not isinstance(records, (list, tuple)):
        raise MalformedDataError(
            "Candle series must be a list", raw_data=records, expected_format=f"[{CANDLE_FORMAT}, ...]"
        )

    candles = [parse_candle(record) for record in records]
    candles.sort(key=lambda c: c.open_time)
    return tuple(candles)


def parse_klines(klines: Any) -> dict[str, tuple[Candle, ...]]:
    """Parse a {timeframe -> candle list} mapping."""
    if not isinstance(klines, Mapping):
        raise MalformedDataError(
            "klines must map timeframe labels to candle lists",
            raw_data=klines, expected_format="{timeframe: [candle, ...]}"
        )

    return {str(timeframe): parse_candles(records) for timeframe, records in klines.items()}


def _parse_book_levels(levels_data: Any, side: str) -> list[BookLevel]:
    """Parse order book levels given as mappings or [price, quantity] pairs."""
    if not isinstance(levels_data, (list, tuple)):
        raise MalformedDataError(
            f"Order book {side}s must be a list", raw_data=levels_data, expected_format=f"[{LEVEL_FORMAT}, ...]"
        )

    levels = []
    for i, level_data in enumerate(levels_data):
        if isinstance(level_data, Mapping):
            price_raw, quantity_raw = level_data.get("price"), level_data.get("quantity")
        elif isinstance(level_data, (list, tuple)) and len(level_data) >= 2:
            price_raw, quantity_raw = level_data[0], level_data[1]
        else:
            raise MalformedDataError(
                f"Invalid {side} level at index {i}", raw_data=level_data, expected_format=LEVEL_FORMAT
            )

        price = _to_float(price_raw, f"{side} price", level_data, LEVEL_FORMAT)
        quantity = _to_float(quantity_raw, f"{side} quantity", level_data, LEVEL_FORMAT)

        if price <= 0:
            raise MalformedDataError(
                f"Invalid {side} level at index {i}: price must be positive, got {price}",
                raw_data=level_data, expected_format=LEVEL_FORMAT
            )

        if quantity < 0:
            raise MalformedDataError(
                f"Invalid {side} level at index {i}: quantity must be non-negative, got {quantity}",
                raw_data=level_data, expected_format=LEVEL_FORMAT
            )

        # Skip zero-size levels
        if quantity == 0:
            continue

        levels.append(BookLevel(price=price, quantity=quantity))

    return levels


def parse_order_book(data: Any) -> OrderBookSnapshot:
    """
    Parse an order book record into a sorted snapshot.

    Bids are sorted by price descending and asks ascending (best price first).

    Raises:
        MalformedDataError: If levels are malformed or the book is crossed
    """
    if not isinstance(data, Mapping):
        raise MalformedDataError(
            "Order book must be a mapping", raw_data=data, expected_format="{bids, asks}"
        )

    bids = _parse_book_levels(data.get("bids", []), "bid")
    asks = _parse_book_levels(data.get("asks", []), "ask")

    bids.sort(key=lambda x: x.price, reverse=True)
    asks.sort(key=lambda x: x.price)

    if bids and asks and bids[0].price >= asks[0].price:
        raise MalformedDataError(
            f"Invalid spread: bid {bids[0].price} >= ask {asks[0].price}",
            raw_data=data, expected_format="{bids, asks}"
        )

    return OrderBookSnapshot(bids=tuple(bids), asks=tuple(asks))


def parse_recent_trades(data: Any) -> RecentTrades:
    """Parse recent trade totals; the ratio is recomputed from the volumes."""
    expected = "{buyVolume, sellVolume[, buySellRatio]}"
    if not isinstance(data, Mapping) or "buyVolume" not in data or "sellVolume" not in data:
        raise MalformedDataError("recentTrades requires buyVolume and sellVolume",
                                 raw_data=data, expected_format=expected)

    buy_volume = _to_float(data["buyVolume"], "buyVolume", data, expected)
    sell_volume = _to_float(data["sellVolume"], "sellVolume", data, expected)
    if buy_volume < 0 or sell_volume < 0:
        raise MalformedDataError("Trade volumes must be non-negative", raw_data=data, expected_format=expected)

    return RecentTrades(buy_volume=buy_volume, sell_volume=sell_volume)


def parse_venue_payload(payload: Any, venue: Optional[str] = None, symbol: Optional[str] = None) -> VenueData:
    """
    Parse one venue's payload into VenueData.

    Args:
        payload: Venue dictionary following the input contract
        venue: Venue name, overrides payload["venue"]
        symbol: Symbol, overrides payload["symbol"]

    Returns:
        Immutable VenueData

    Raises:
        MalformedDataError: If any part of the payload is malformed
    """
    if not isinstance(payload, Mapping):
        raise MalformedDataError("Venue payload must be a mapping", raw_data=payload,
                                 expected_format="{klines, orderBook?, recentTrades?}")

    venue_name = venue or payload.get("venue") or payload.get("exchange") or "unknown"
    symbol_name = symbol or payload.get("symbol") or ""

    order_book = payload.get("orderBook")
    recent_trades = payload.get("recentTrades")

    return VenueData(
        venue=str(venue_name),
        symbol=str(symbol_name),
        klines=parse_klines(payload.get("klines", {})),
        order_book=parse_order_book(order_book) if order_book is not None else None,
        recent_trades=parse_recent_trades(recent_trades) if recent_trades is not None else None,
    )
