"""
Error handling tests for the analysis pipeline.

Tests cover the error hierarchy, analyzer failure wrapping, and the neutral
fallback produced when data is missing or malformed.
"""

import pytest
from unittest.mock import patch

import structlog
from structlog.testing import capture_logs

from trade_advisor.analysis.technical import TechnicalAnalyzer
from trade_advisor.analysis.volume import VolumeAnalyzer
from trade_advisor.data.models import HOURLY, VenueData
from trade_advisor.engine import TradeAdvisorEngine
from trade_advisor.errors import (
    AggregationError,
    AnalysisError,
    ConfigurationError,
    DataQualityError,
    InsufficientDataError,
    MalformedDataError,
    MissingDataError,
    SystemFailureError,
)
from trade_advisor.logging import configure_logging, get_analysis_logger, log_classification
from trade_advisor.models.plan import NeutralRecommendation


class TestErrorClassification:
    """Test error classification system."""

    def test_data_quality_error_hierarchy(self):
        """Test that data quality errors have proper hierarchy."""
        base_error = DataQualityError("base error")
        assert base_error.recoverable is True
        assert base_error.context == {}

        missing_error = MissingDataError("missing data", data_type="1d")
        assert isinstance(missing_error, DataQualityError)
        assert missing_error.data_type == "1d"

        malformed_error = MalformedDataError("bad candle", raw_data={"open": "x"}, expected_format="{open}")
        assert isinstance(malformed_error, DataQualityError)
        assert malformed_error.raw_data == {"open": "x"}
        assert malformed_error.expected_format == "{open}"

        insufficient_error = InsufficientDataError("short history", required_count=200, available_count=20)
        assert insufficient_error.required_count == 200
        assert insufficient_error.available_count == 20

    def test_system_failure_error_hierarchy(self):
        """Test that system failure errors have proper hierarchy."""
        analysis_error = AnalysisError("calculation failed", analyzer="technical")
        assert isinstance(analysis_error, SystemFailureError)
        assert analysis_error.recoverable is False
        assert analysis_error.analyzer == "technical"

        aggregation_error = AggregationError("invalid plan", stage="validation", context={"symbol": "BTCUSDT"})
        assert aggregation_error.stage == "validation"
        assert aggregation_error.context == {"symbol": "BTCUSDT"}

        config_error = ConfigurationError("bad config", errors=["plan.stop_level_buffer"])
        assert config_error.errors == ["plan.stop_level_buffer"]
        assert ConfigurationError("bad config").errors == []

    def test_system_failures_are_not_data_quality(self):
        assert not isinstance(AnalysisError("x"), DataQualityError)
        assert not isinstance(MissingDataError("x"), SystemFailureError)


class TestAnalyzerFailures:
    """Test how analyzers surface failures."""

    def test_technical_missing_daily(self, uptrend_venue):
        venue = VenueData(venue="binance", symbol="BTCUSDT", klines={HOURLY: uptrend_venue.candles(HOURLY)})
        with pytest.raises(MissingDataError) as exc_info:
            TechnicalAnalyzer().analyze(venue)
        assert exc_info.value.data_type == "1d"

    def test_volume_missing_daily(self):
        with pytest.raises(MissingDataError):
            VolumeAnalyzer().analyze(VenueData(venue="binance", symbol="BTCUSDT"))

    def test_technical_unexpected_error_wrapped(self, uptrend_venue):
        with patch("trade_advisor.analysis.technical.analyze_market_structure",
                   side_effect=ZeroDivisionError("division by zero")):
            with pytest.raises(AnalysisError) as exc_info:
                TechnicalAnalyzer().analyze(uptrend_venue)

        assert exc_info.value.analyzer == "technical"
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)
        assert exc_info.value.context["symbol"] == "BTCUSDT"

    def test_volume_unexpected_error_wrapped(self, uptrend_venue):
        with patch("trade_advisor.analysis.volume.analyze_volume_trends", side_effect=KeyError("1h")):
            with pytest.raises(AnalysisError) as exc_info:
                VolumeAnalyzer().analyze(uptrend_venue)
        assert exc_info.value.analyzer == "volume"

    def test_data_quality_errors_not_wrapped(self, uptrend_venue):
        with patch("trade_advisor.analysis.technical.analyze_market_structure",
                   side_effect=InsufficientDataError("too short")):
            with pytest.raises(InsufficientDataError):
                TechnicalAnalyzer().analyze(uptrend_venue)


class TestGracefulFallback:
    """Test that the engine degrades to a neutral recommendation."""

    def test_analysis_error_becomes_fallback(self, uptrend_venue, bullish_sentiment):
        with patch("trade_advisor.analysis.technical.analyze_market_structure",
                   side_effect=ZeroDivisionError("division by zero")):
            result = TradeAdvisorEngine().analyze("BTCUSDT", uptrend_venue, sentiment=bullish_sentiment)

        assert isinstance(result, NeutralRecommendation)
        assert result.error == "AnalysisError"
        assert "Technical analysis failed" in result.reason
        assert result.to_dict()["recommendation"] == "neutral"

    def test_fallback_is_logged(self, uptrend_venue, bullish_sentiment):
        venue = VenueData(venue="binance", symbol="BTCUSDT", klines={HOURLY: uptrend_venue.candles(HOURLY)})
        engine = TradeAdvisorEngine()
        with patch.object(engine, "logger") as mock_logger:
            engine.analyze("BTCUSDT", venue, sentiment=bullish_sentiment)

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["error_type"] == "MissingDataError"


class TestLogging:
    """Test structured logging helpers."""

    def test_log_classification(self):
        with capture_logs() as logs:
            logger = get_analysis_logger("trade_advisor.tests")
            log_classification(logger, analyzer="volume", label="increasing",
                               symbol="BTCUSDT", context={"pressure": "buying"})

        assert len(logs) == 1
        entry = logs[0]
        assert entry["event"] == "Classification"
        assert entry["log_level"] == "debug"
        assert entry["analyzer"] == "volume"
        assert entry["label"] == "increasing"
        assert entry["symbol"] == "BTCUSDT"
        assert entry["context"] == {"pressure": "buying"}
        assert entry["subsystem"] == "analysis"

    def test_log_classification_without_symbol(self):
        with capture_logs() as logs:
            log_classification(get_analysis_logger("trade_advisor.tests"), analyzer="technical", label="bullish")
        assert "symbol" not in logs[0]
        assert "context" not in logs[0]

    def test_configure_logging(self):
        try:
            configure_logging(level="DEBUG", format_json=True, include_caller=True)
            assert structlog.is_configured()
        finally:
            structlog.reset_defaults()
