"""Tests for venue payload parsing."""

from datetime import datetime, timezone

import pytest

from trade_advisor.data.models import DAILY, HOURLY
from trade_advisor.data.parsers import (
    parse_candle,
    parse_candles,
    parse_klines,
    parse_order_book,
    parse_recent_trades,
    parse_venue_payload,
)
from trade_advisor.errors import DataQualityError, MalformedDataError


def candle_record(open_time=1700000000000, open_=100.0, high=105.0, low=95.0, close=102.0, volume=10.0, **extra):
    record = {"openTime": open_time, "open": open_, "high": high, "low": low, "close": close, "volume": volume}
    record.update(extra)
    return record


class TestCandleParsing:
    """Test candle record parsing."""

    def test_parse_valid_candle(self):
        candle = parse_candle(candle_record(quoteVolume=1020.0, tradeCount=42, takerBuyVolume=6.0))

        assert candle.open_time == datetime.fromtimestamp(1700000000, tz=timezone.utc)
        assert candle.open == 100.0
        assert candle.high == 105.0
        assert candle.low == 95.0
        assert candle.close == 102.0
        assert candle.volume == 10.0
        assert candle.quote_volume == 1020.0
        assert candle.trade_count == 42
        assert candle.taker_buy_volume == 6.0

    def test_numeric_strings_accepted(self):
        candle = parse_candle(candle_record(open_time="1700000000000", open_="100", close="102.5"))
        assert candle.open == 100.0
        assert candle.close == 102.5

    def test_optional_fields_default_to_none(self):
        candle = parse_candle(candle_record())
        assert candle.quote_volume is None
        assert candle.trade_count is None
        assert candle.taker_buy_volume is None

    def test_missing_fields(self):
        record = candle_record()
        del record["close"]
        with pytest.raises(MalformedDataError, match="missing fields") as exc_info:
            parse_candle(record)
        assert exc_info.value.raw_data is record
        assert exc_info.value.expected_format

    def test_non_numeric_price(self):
        with pytest.raises(MalformedDataError, match="Invalid high"):
            parse_candle(candle_record(high="abc"))

    def test_boolean_rejected(self):
        with pytest.raises(MalformedDataError):
            parse_candle(candle_record(volume=True))

    def test_invalid_open_time(self):
        with pytest.raises(MalformedDataError, match="Invalid epoch"):
            parse_candle(candle_record(open_time="yesterday"))

    def test_non_positive_price(self):
        with pytest.raises(MalformedDataError, match="positive"):
            parse_candle(candle_record(low=0.0))

    def test_negative_volume(self):
        with pytest.raises(MalformedDataError, match="non-negative"):
            parse_candle(candle_record(volume=-1.0))

    def test_inconsistent_high_low(self):
        with pytest.raises(MalformedDataError, match="inconsistent"):
            parse_candle(candle_record(high=101.0))
        with pytest.raises(MalformedDataError, match="inconsistent"):
            parse_candle(candle_record(low=101.0))

    def test_not_a_mapping(self):
        with pytest.raises(MalformedDataError):
            parse_candle([1700000000000, 100, 105, 95, 102, 10])

    def test_is_data_quality_error(self):
        with pytest.raises(DataQualityError):
            parse_candle({})


class TestCandleSeries:
    """Test series and kline parsing."""

    def test_sorted_by_open_time(self):
        records = [candle_record(open_time=3000), candle_record(open_time=1000), candle_record(open_time=2000)]
        candles = parse_candles(records)
        assert [c.open_time for c in candles] == sorted(c.open_time for c in candles)
        assert isinstance(candles, tuple)

    def test_series_must_be_list(self):
        with pytest.raises(MalformedDataError, match="must be a list"):
            parse_candles({"openTime": 1})

    def test_empty_series(self):
        assert parse_candles([]) == ()

    def test_parse_klines(self):
        klines = parse_klines({"1h": [candle_record()], "1d": [candle_record(), candle_record(open_time=1700086400000)]})
        assert len(klines[HOURLY]) == 1
        assert len(klines[DAILY]) == 2

    def test_klines_must_be_mapping(self):
        with pytest.raises(MalformedDataError):
            parse_klines([candle_record()])


class TestOrderBookParsing:
    """Test order book parsing."""

    def test_mixed_level_shapes(self):
        book = parse_order_book({
            "bids": [[99.0, 1.0], {"price": 99.5, "quantity": 2.0}],
            "asks": [{"price": 101.0, "quantity": 3.0}, [100.5, 4.0]],
        })

        assert [level.price for level in book.bids] == [99.5, 99.0]
        assert [level.price for level in book.asks] == [100.5, 101.0]
        assert book.best_bid == 99.5
        assert book.best_ask == 100.5
        assert book.bid_sum == 3.0
        assert book.ask_sum == 7.0

    def test_derived_fields_recomputed(self):
        book = parse_order_book({
            "bids": [[99.0, 1.0]],
            "asks": [[101.0, 1.0]],
            "bidSum": 999.0,
            "spread": 50.0,
        })
        assert book.bid_sum == 1.0
        assert book.spread == pytest.approx(2.0)

    def test_zero_quantity_skipped(self):
        book = parse_order_book({"bids": [[99.0, 0.0], [98.0, 1.0]], "asks": []})
        assert len(book.bids) == 1
        assert book.best_bid == 98.0

    def test_crossed_book(self):
        with pytest.raises(MalformedDataError, match="Invalid spread"):
            parse_order_book({"bids": [[101.0, 1.0]], "asks": [[100.0, 1.0]]})

    def test_negative_quantity(self):
        with pytest.raises(MalformedDataError, match="non-negative"):
            parse_order_book({"bids": [[99.0, -1.0]], "asks": []})

    def test_invalid_level_shape(self):
        with pytest.raises(MalformedDataError, match="index 0"):
            parse_order_book({"bids": [[99.0]], "asks": []})

    def test_levels_must_be_list(self):
        with pytest.raises(MalformedDataError):
            parse_order_book({"bids": "99@1", "asks": []})


class TestRecentTradesParsing:
    """Test recent trade totals."""

    def test_ratio_recomputed(self):
        trades = parse_recent_trades({"buyVolume": 30.0, "sellVolume": 20.0, "buySellRatio": 9.0})
        assert trades.buy_sell_ratio == pytest.approx(1.5)

    def test_missing_volume(self):
        with pytest.raises(MalformedDataError, match="buyVolume and sellVolume"):
            parse_recent_trades({"buyVolume": 30.0})

    def test_negative_volume(self):
        with pytest.raises(MalformedDataError):
            parse_recent_trades({"buyVolume": -1.0, "sellVolume": 2.0})


class TestVenuePayload:
    """Test whole venue payload parsing."""

    def test_round_trip_from_fixture(self, uptrend_venue, payload_factory):
        venue = parse_venue_payload(payload_factory(uptrend_venue))

        assert venue.venue == "binance"
        assert venue.symbol == "BTCUSDT"
        assert len(venue.candles(DAILY)) == len(uptrend_venue.candles(DAILY))
        assert len(venue.candles(HOURLY)) == 48
        assert venue.latest_close(DAILY) == pytest.approx(uptrend_venue.latest_close(DAILY))
        assert venue.order_book.best_bid == pytest.approx(uptrend_venue.order_book.best_bid)
        assert venue.recent_trades.buy_volume == 1800.0

    def test_optional_sections(self):
        venue = parse_venue_payload({"venue": "kraken", "klines": {"1d": [candle_record()]}})
        assert venue.order_book is None
        assert venue.recent_trades is None

    def test_name_overrides_and_fallbacks(self):
        payload = {"exchange": "okx", "symbol": "ETHUSDT", "klines": {}}
        assert parse_venue_payload(payload).venue == "okx"
        assert parse_venue_payload(payload, venue="bybit", symbol="BTCUSDT").venue == "bybit"
        assert parse_venue_payload(payload, symbol="BTCUSDT").symbol == "BTCUSDT"
        assert parse_venue_payload({"klines": {}}).venue == "unknown"

    def test_payload_must_be_mapping(self):
        with pytest.raises(MalformedDataError):
            parse_venue_payload(["binance"])

    def test_nested_error_propagates(self):
        with pytest.raises(MalformedDataError):
            parse_venue_payload({"venue": "binance", "klines": {"1d": [candle_record(close=-1.0)]}})
