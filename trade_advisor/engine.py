"""
Main trade advisor engine.

Coordinates the analysis pipeline:
Venue Data → Technical / Volume Analysis (+ Sentiment) → Aggregation → Trade Plan

`analyze()` is the synchronous reducer over already-fetched series. `run()`
fans the venue fetchers and the sentiment provider out concurrently, then
hands their results to `analyze()`.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from .analysis.sentiment import SentimentProvider, neutral_sentiment, parse_sentiment
from .analysis.technical import TechnicalAnalyzer
from .analysis.volume import VolumeAnalyzer
from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader, config_from_dict
from .config.validation import ConfigValidator
from .data.models import DAILY, HOURLY, VenueData
from .data.parsers import parse_venue_payload
from .errors import ConfigurationError, DataQualityError, MissingDataError
from .models.analysis import SentimentResult
from .signals.synthesizer import PlanSynthesizer, Recommendation, fallback_recommendation
from .utils.time import get_market_time

logger = structlog.get_logger(__name__)

VenueFetcher = Callable[[str], Awaitable[Union[VenueData, Mapping[str, Any]]]]


class _Pipeline:
    """Analyzers and synthesizer sharing one configuration."""

    def __init__(self, config: DefaultConfig):
        self.config = config
        self.technical = TechnicalAnalyzer(config)
        self.volume = VolumeAnalyzer(config)
        self.synthesizer = PlanSynthesizer(config)


def market_timestamp(venue: VenueData) -> Optional[datetime]:
    """Open time of the most recent candle across the hourly and daily series"""
    times = [t for t in (venue.latest_open_time(HOURLY), venue.latest_open_time(DAILY)) if t is not None]
    return max(times) if times else None


class TradeAdvisorEngine:
    """
    Main coordinator for the trade advisor.

    Manages the analysis pipeline:
    Venue Data → Technical / Volume / Sentiment → Signal Aggregation → Trade Plan
    """

    def __init__(self, config: Optional[DefaultConfig] = None,
                 config_dir: Optional[Union[str, Path]] = None) -> None:
        """
        Initialize the engine.

        Args:
            config: Explicit configuration; replaces the defaults tier of the loader
            config_dir: Directory holding symbols.yaml

        Raises:
            ConfigurationError: If the base configuration is invalid
        """
        self.logger = logger
        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
        if config is not None:
            self.config_loader = ConfigLoader(config_dir=self.config_loader.config_dir, defaults=config)

        self._validate(self.config_loader.merge_config("", None), scope="defaults")
        self._pipelines: dict[str, _Pipeline] = {}

        self.logger.info("Trade advisor engine initialized", config_dir=str(self.config_loader.config_dir))

    def _validate(self, merged: dict[str, Any], scope: str) -> None:
        validation_errors = ConfigValidator.validate_config(merged)
        if validation_errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in validation_errors]
            self.logger.error("Configuration validation failed", scope=scope, errors=error_msgs)
            raise ConfigurationError(
                f"Invalid configuration for {scope}",
                errors=error_msgs,
                context={"scope": scope}
            )

    def config_for(self, symbol: str, overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
        """
        Resolve the configuration for a symbol.

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        merged = self.config_loader.merge_config(symbol, overrides)
        self._validate(merged, scope=symbol)
        return config_from_dict(merged)

    def _pipeline(self, symbol: str, overrides: Optional[dict[str, Any]] = None) -> _Pipeline:
        if overrides:
            return _Pipeline(self.config_for(symbol, overrides))

        if symbol not in self._pipelines:
            self._pipelines[symbol] = _Pipeline(self.config_for(symbol))
        return self._pipelines[symbol]

    def analyze(self, symbol: str, primary: VenueData, venues: Sequence[VenueData] = (),
                sentiment: Optional[SentimentResult] = None,
                overrides: Optional[dict[str, Any]] = None) -> Recommendation:
        """
        Produce a recommendation from already-fetched venue data.

        Never raises: failures become the neutral fallback.

        Args:
            symbol: Trading pair symbol
            primary: Venue whose series drive the analysis
            venues: Secondary venues used for normalization and volume distribution
            sentiment: Sentiment result; neutral when absent
            overrides: Per-request configuration overrides

        Returns:
            TradePlan or NeutralRecommendation
        """
        timestamp = market_timestamp(primary)

        try:
            pipeline = self._pipeline(symbol, overrides)
            all_venues = (primary, *venues)

            technical = pipeline.technical.analyze(primary, all_venues)
            volume = pipeline.volume.analyze(primary, all_venues)
            if sentiment is None:
                sentiment = neutral_sentiment(symbol)

            return pipeline.synthesizer.synthesize(symbol, technical, sentiment, volume, timestamp)

        except DataQualityError as e:
            self.logger.warning(
                "Data quality issue during analysis - returning neutral fallback",
                symbol=symbol,
                error=str(e),
                error_type=type(e).__name__,
                context=getattr(e, 'context', {})
            )
            return fallback_recommendation(symbol, e, timestamp)

        except Exception as e:
            self.logger.error(
                "Unexpected error during analysis - returning neutral fallback",
                symbol=symbol,
                error=str(e),
                error_type=type(e).__name__
            )
            return fallback_recommendation(symbol, e, timestamp)

    def analyze_payload(self, symbol: str, payloads: Sequence[Mapping[str, Any]],
                        sentiment: Optional[Union[SentimentResult, Mapping[str, Any]]] = None,
                        overrides: Optional[dict[str, Any]] = None) -> Recommendation:
        """
        Produce a recommendation from raw venue payloads (primary first).

        A malformed primary payload yields the neutral fallback; malformed
        secondary payloads and sentiment are dropped with a warning.
        """
        if not payloads:
            return fallback_recommendation(
                symbol, MissingDataError("No venue payloads supplied", data_type="venue")
            )

        try:
            primary = parse_venue_payload(payloads[0], symbol=symbol)
        except DataQualityError as e:
            self.logger.warning(
                "Primary venue payload rejected",
                symbol=symbol,
                error=str(e),
                error_type=type(e).__name__
            )
            return fallback_recommendation(symbol, e)

        venues = []
        for payload in payloads[1:]:
            try:
                venues.append(parse_venue_payload(payload, symbol=symbol))
            except DataQualityError as e:
                self.logger.warning(
                    "Secondary venue payload dropped",
                    symbol=symbol,
                    venue=payload.get("venue") or payload.get("exchange") if isinstance(payload, Mapping) else None,
                    error=str(e),
                    error_type=type(e).__name__
                )

        if isinstance(sentiment, Mapping):
            try:
                sentiment = parse_sentiment(sentiment, symbol=symbol)
            except DataQualityError as e:
                self.logger.warning(
                    "Sentiment payload rejected - using neutral sentiment",
                    symbol=symbol,
                    error=str(e),
                    error_type=type(e).__name__
                )
                sentiment = neutral_sentiment(symbol, error=str(e))

        return self.analyze(symbol, primary, venues, sentiment, overrides)

    async def run(self, symbol: str, fetchers: Sequence[VenueFetcher],
                  sentiment_provider: Optional[SentimentProvider] = None,
                  overrides: Optional[dict[str, Any]] = None) -> Recommendation:
        """
        Fetch every venue and the sentiment concurrently, then analyze.

        The first fetcher supplies the primary venue. Failed secondary venues
        are dropped. A dict returned by the sentiment provider is parsed; a
        failed provider or an unreadable dict is replaced by neutral
        sentiment. A failed primary venue yields the neutral fallback.

        Args:
            symbol: Trading pair symbol
            fetchers: Coroutine functions returning VenueData or a raw venue payload
            sentiment_provider: Optional sentiment collaborator
            overrides: Per-request configuration overrides

        Returns:
            TradePlan or NeutralRecommendation
        """
        if not fetchers:
            return fallback_recommendation(
                symbol, MissingDataError("No venue fetchers supplied", data_type="venue")
            )

        tasks = [fetch(symbol) for fetch in fetchers]
        if sentiment_provider is not None:
            tasks.append(sentiment_provider.get_sentiment(symbol))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        venue_results = results[:len(fetchers)]

        sentiment: Optional[SentimentResult] = None
        if sentiment_provider is not None:
            outcome = results[-1]
            if isinstance(outcome, BaseException):
                self.logger.warning(
                    "Sentiment provider failed - using neutral sentiment",
                    symbol=symbol,
                    error=str(outcome),
                    error_type=type(outcome).__name__
                )
                sentiment = neutral_sentiment(symbol, error=str(outcome))
            elif isinstance(outcome, Mapping):
                try:
                    sentiment = parse_sentiment(outcome, symbol=symbol)
                except DataQualityError as e:
                    self.logger.warning(
                        "Sentiment payload rejected - using neutral sentiment",
                        symbol=symbol,
                        error=str(e),
                        error_type=type(e).__name__
                    )
                    sentiment = neutral_sentiment(symbol, error=str(e))
            else:
                sentiment = outcome

        venues = []
        for i, outcome in enumerate(venue_results):
            try:
                if isinstance(outcome, BaseException):
                    raise outcome
                venue = outcome if isinstance(outcome, VenueData) else parse_venue_payload(outcome, symbol=symbol)
            except Exception as e:
                if i == 0:
                    self.logger.error(
                        "Primary venue fetch failed - returning neutral fallback",
                        symbol=symbol,
                        error=str(e),
                        error_type=type(e).__name__
                    )
                    return fallback_recommendation(symbol, e, get_market_time())
                self.logger.warning(
                    "Venue fetch failed - venue dropped",
                    symbol=symbol,
                    fetcher_index=i,
                    error=str(e),
                    error_type=type(e).__name__
                )
                continue
            venues.append(venue)

        return self.analyze(symbol, venues[0], venues[1:], sentiment, overrides)
