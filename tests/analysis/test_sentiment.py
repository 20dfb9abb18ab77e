"""Tests for the sentiment collaborator interface and classification helpers."""

import asyncio

import pytest

from trade_advisor.analysis.sentiment import (
    SentimentProvider,
    StaticSentimentProvider,
    build_sentiment,
    calculate_overall_sentiment,
    classify_fear_greed,
    classify_funding,
    classify_score,
    extract_base_currency,
    neutral_sentiment,
    parse_sentiment,
)
from trade_advisor.errors import MalformedDataError
from trade_advisor.models.signals import ActivityLevel, FearGreed, Signal


class TestExtractBaseCurrency:
    """Test quote currency stripping."""

    @pytest.mark.parametrize("symbol, expected", [
        ("BTCUSDT", "BTC"),
        ("ETHBTC", "ETH"),
        ("SOLUSDC", "SOL"),
        ("XRPUSD", "XRP"),
        ("DOGEEUR", "DOG"),
    ])
    def test_extract(self, symbol, expected):
        assert extract_base_currency(symbol) == expected


class TestClassification:
    """Test score classification helpers."""

    @pytest.mark.parametrize("score, expected", [
        (0.7, Signal.VERY_BULLISH),
        (0.4, Signal.BULLISH),
        (0.0, Signal.NEUTRAL),
        (-0.4, Signal.BEARISH),
        (-0.7, Signal.VERY_BEARISH),
    ])
    def test_score(self, score, expected):
        assert classify_score(score) is expected

    @pytest.mark.parametrize("value, expected", [
        (10, FearGreed.EXTREME_FEAR),
        (25, FearGreed.EXTREME_FEAR),
        (30, FearGreed.FEAR),
        (50, FearGreed.NEUTRAL),
        (70, FearGreed.GREED),
        (90, FearGreed.EXTREME_GREED),
    ])
    def test_fear_greed(self, value, expected):
        assert classify_fear_greed(value) is expected

    def test_funding(self):
        assert classify_funding(0.002) is Signal.VERY_BULLISH
        assert classify_funding(0.0007) is Signal.BULLISH
        assert classify_funding(0.0001) is Signal.NEUTRAL
        assert classify_funding(-0.0007) is Signal.BEARISH


class TestOverallSentiment:
    """Test the weighted overall score."""

    def test_neutral_inputs(self):
        result = calculate_overall_sentiment(0.0, 0.0, 50, 0.0)
        assert result.score == 0.0
        assert result.classification is Signal.NEUTRAL

    def test_weighted_blend(self):
        # 0.7*0.3 + 0.7*0.2 + 0.6*0.3 + 0.2*0.2
        result = calculate_overall_sentiment(0.7, 0.7, 80, 0.002)
        assert result.score == 0.57
        assert result.classification is Signal.VERY_BULLISH

    def test_rounded_to_two_decimals(self):
        result = calculate_overall_sentiment(0.333, 0.0, 50, 0.0)
        assert result.score == 0.1


class TestBuildSentiment:
    """Test classification of raw provider readings."""

    def test_bullish_readings(self, bullish_sentiment):
        assert bullish_sentiment.social.sentiment is Signal.VERY_BULLISH
        assert bullish_sentiment.news.headlines == ("ETF inflows accelerate",)
        assert bullish_sentiment.fear_greed.classification is FearGreed.EXTREME_GREED
        assert bullish_sentiment.funding.sentiment is Signal.VERY_BULLISH
        assert bullish_sentiment.overall.classification is Signal.VERY_BULLISH
        assert bullish_sentiment.error is None

    def test_bearish_readings(self, bearish_sentiment):
        assert bearish_sentiment.fear_greed.classification is FearGreed.EXTREME_FEAR
        assert bearish_sentiment.overall.classification is Signal.VERY_BEARISH


class TestNeutralSentiment:
    """Test the substituted default."""

    def test_defaults(self):
        result = neutral_sentiment("ETHUSDT", error="provider timeout")
        assert result.symbol == "ETHUSDT"
        assert result.overall.classification is Signal.NEUTRAL
        assert result.fear_greed.value == 50
        assert result.social.volume is ActivityLevel.MEDIUM
        assert result.error == "provider timeout"


class TestParseSentiment:
    """Test parsing of the plain-dict collaborator shape."""

    def test_full_payload(self, sentiment_payload):
        result = parse_sentiment(sentiment_payload)
        assert result.symbol == "BTCUSDT"
        assert result.social.volume is ActivityLevel.HIGH
        assert result.news.headlines == ("ETF inflows accelerate",)
        assert result.fear_greed.classification is FearGreed.EXTREME_GREED
        assert result.overall.score == 0.57
        assert result.overall.classification is Signal.VERY_BULLISH

    def test_missing_overall_is_computed(self, sentiment_payload):
        del sentiment_payload["overallSentiment"]
        result = parse_sentiment(sentiment_payload, symbol="XBTUSD")
        assert result.symbol == "XBTUSD"
        assert result.overall.score == 0.57

    def test_missing_section(self, sentiment_payload):
        del sentiment_payload["news"]
        with pytest.raises(MalformedDataError):
            parse_sentiment(sentiment_payload)

    def test_unknown_classification(self, sentiment_payload):
        sentiment_payload["social"]["sentiment"] = "euphoric"
        with pytest.raises(MalformedDataError) as exc_info:
            parse_sentiment(sentiment_payload)
        assert "euphoric" in str(exc_info.value)

    def test_non_numeric_score(self, sentiment_payload):
        sentiment_payload["fearGreedIndex"]["value"] = "lots"
        with pytest.raises(MalformedDataError):
            parse_sentiment(sentiment_payload)


class TestProviders:
    """Test the provider interface."""

    def test_provider_is_abstract(self):
        with pytest.raises(TypeError):
            SentimentProvider()

    def test_static_provider(self, bullish_sentiment):
        provider = StaticSentimentProvider({"BTCUSDT": bullish_sentiment})
        assert asyncio.run(provider.get_sentiment("BTCUSDT")) is bullish_sentiment

    def test_static_provider_unknown_symbol(self, bullish_sentiment):
        provider = StaticSentimentProvider({"BTCUSDT": bullish_sentiment})
        result = asyncio.run(provider.get_sentiment("ETHUSDT"))
        assert result.symbol == "ETHUSDT"
        assert result.overall.classification is Signal.NEUTRAL

    def test_static_provider_default(self, bearish_sentiment):
        provider = StaticSentimentProvider(default=bearish_sentiment)
        assert asyncio.run(provider.get_sentiment("ETHUSDT")) is bearish_sentiment
