"""
Sentiment collaborator interface.

The core never produces sentiment itself. Providers return a
SentimentResult; this module offers the provider base class, a deterministic
static provider, the neutral default used when a provider fails, a parser for
the plain-dict collaborator shape, and the classification helpers real
providers use to label their raw scores.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Optional, Union

import structlog

from ..config.defaults import SentimentParams
from ..errors import MalformedDataError
from ..models.analysis import (
    FearGreedIndex,
    FundingRates,
    NewsSentiment,
    OverallSentiment,
    SentimentResult,
    SocialSentiment,
)
from ..models.signals import ActivityLevel, FearGreed, Signal

logger = structlog.get_logger(__name__)

QUOTE_CURRENCIES = ("USDT", "USD", "BUSD", "USDC", "BTC", "ETH")


class SentimentProvider(ABC):
    """Source of pre-classified sentiment for a symbol."""

    @abstractmethod
    async def get_sentiment(self, symbol: str) -> Union[SentimentResult, Mapping[str, Any]]:
        """
        Fetch sentiment for a symbol.

        Args:
            symbol: Trading pair symbol (e.g. BTCUSDT)

        Returns:
            SentimentResult, or the plain-dict shape read by parse_sentiment
        """
        pass


class StaticSentimentProvider(SentimentProvider):
    """Returns fixed results; symbols without an entry get the neutral default."""

    def __init__(self, results: Optional[Mapping[str, SentimentResult]] = None,
                 default: Optional[SentimentResult] = None):
        self.results = dict(results or {})
        self.default = default

    async def get_sentiment(self, symbol: str) -> SentimentResult:
        if symbol in self.results:
            return self.results[symbol]
        if self.default is not None:
            return self.default
        return neutral_sentiment(symbol)


def extract_base_currency(symbol: str) -> str:
    """Strip a known quote currency (BTCUSDT -> BTC); falls back to the first three characters"""
    for quote in QUOTE_CURRENCIES:
        if symbol.endswith(quote) and len(symbol) > len(quote):
            return symbol[:-len(quote)]
    return symbol[:3]


def neutral_sentiment(symbol: str, error: Optional[str] = None) -> SentimentResult:
    """Default result substituted when no usable sentiment is available"""
    return SentimentResult(
        symbol=symbol,
        social=SocialSentiment(score=0.0, sentiment=Signal.NEUTRAL, volume=ActivityLevel.MEDIUM),
        news=NewsSentiment(score=0.0, sentiment=Signal.NEUTRAL, volume=ActivityLevel.MEDIUM),
        fear_greed=FearGreedIndex(value=50, classification=FearGreed.NEUTRAL),
        funding=FundingRates(average=0.0, sentiment=Signal.NEUTRAL),
        overall=OverallSentiment(score=0.0, classification=Signal.NEUTRAL),
        error=error,
    )


def _classify_signed(value: float, threshold: float, strong_threshold: float) -> Signal:
    if value > strong_threshold:
        return Signal.VERY_BULLISH
    if value > threshold:
        return Signal.BULLISH
    if value < -strong_threshold:
        return Signal.VERY_BEARISH
    if value < -threshold:
        return Signal.BEARISH
    return Signal.NEUTRAL


def classify_score(score: float, params: Optional[SentimentParams] = None) -> Signal:
    """Social or news score in [-1, 1]"""
    params = params or SentimentParams()
    return _classify_signed(score, params.score_threshold, params.score_strong_threshold)


def classify_overall(score: float, params: Optional[SentimentParams] = None) -> Signal:
    params = params or SentimentParams()
    return _classify_signed(score, params.overall_threshold, params.overall_strong_threshold)


def classify_funding(average: float, params: Optional[SentimentParams] = None) -> Signal:
    params = params or SentimentParams()
    return _classify_signed(average, params.funding_threshold, params.funding_strong_threshold)


def classify_fear_greed(value: int, params: Optional[SentimentParams] = None) -> FearGreed:
    """Fear & greed index in [0, 100]"""
    params = params or SentimentParams()
    if value <= params.extreme_fear_max:
        return FearGreed.EXTREME_FEAR
    if value <= params.fear_max:
        return FearGreed.FEAR
    if value <= params.neutral_max:
        return FearGreed.NEUTRAL
    if value <= params.greed_max:
        return FearGreed.GREED
    return FearGreed.EXTREME_GREED


def calculate_overall_sentiment(social_score: float, news_score: float, fear_greed_value: int,
                                funding_average: float,
                                params: Optional[SentimentParams] = None) -> OverallSentiment:
    """
    Weighted blend of the four sources

    The fear & greed index is rescaled from [0, 100] to [-1, 1] and the
    funding rate is scaled by 100 before weighting. The score is rounded to
    two decimals before it is classified.
    """
    params = params or SentimentParams()
    fear_greed_score = (fear_greed_value - 50) / 50.0

    score = (social_score * params.social_weight
             + news_score * params.news_weight
             + fear_greed_score * params.fear_greed_weight
             + funding_average * 100.0 * params.funding_weight)
    score = round(score, 2)

    return OverallSentiment(score=score, classification=classify_overall(score, params))


def build_sentiment(symbol: str, social_score: float, news_score: float, fear_greed_value: int,
                    funding_average: float, headlines: tuple[str, ...] = (),
                    social_volume: ActivityLevel = ActivityLevel.MEDIUM,
                    news_volume: ActivityLevel = ActivityLevel.MEDIUM,
                    params: Optional[SentimentParams] = None) -> SentimentResult:
    """Classify raw provider readings into a SentimentResult"""
    params = params or SentimentParams()
    return SentimentResult(
        symbol=symbol,
        social=SocialSentiment(
            score=social_score,
            sentiment=classify_score(social_score, params),
            volume=social_volume,
        ),
        news=NewsSentiment(
            score=news_score,
            sentiment=classify_score(news_score, params),
            headlines=tuple(headlines),
            volume=news_volume,
        ),
        fear_greed=FearGreedIndex(
            value=fear_greed_value,
            classification=classify_fear_greed(fear_greed_value, params),
        ),
        funding=FundingRates(
            average=funding_average,
            sentiment=classify_funding(funding_average, params),
        ),
        overall=calculate_overall_sentiment(
            social_score, news_score, fear_greed_value, funding_average, params
        ),
    )


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key)
    if not isinstance(section, Mapping):
        raise MalformedDataError(
            f"Sentiment section '{key}' missing or not an object",
            raw_data=section,
            expected_format=f"{key}: object"
        )
    return section


def _enum_value(enum_type, value: Any, field_name: str):
    try:
        return enum_type(value)
    except ValueError as e:
        raise MalformedDataError(
            f"Unknown {field_name} classification: {value!r}",
            raw_data=value,
            expected_format=", ".join(member.value for member in enum_type)
        ) from e


def parse_sentiment(data: Mapping[str, Any], symbol: Optional[str] = None,
                    params: Optional[SentimentParams] = None) -> SentimentResult:
    """
    Parse the collaborator's plain-dict sentiment shape

    Expected keys: social {score, sentiment, volume}, news {score, sentiment,
    headlines}, fearGreedIndex {value, classification}, fundingRates
    {average, sentiment} and, optionally, overallSentiment {score,
    classification}. A missing overallSentiment is computed from the other
    sections.

    Raises:
        MalformedDataError: If a section is missing or a classification is unknown
    """
    try:
        social = _section(data, "social")
        news = _section(data, "news")
        fear_greed = _section(data, "fearGreedIndex")
        funding = _section(data, "fundingRates")

        social_result = SocialSentiment(
            score=float(social.get("score", 0.0)),
            sentiment=_enum_value(Signal, social.get("sentiment", "neutral"), "social sentiment"),
            volume=_enum_value(ActivityLevel, social.get("volume", "medium"), "social volume"),
        )
        news_result = NewsSentiment(
            score=float(news.get("score", 0.0)),
            sentiment=_enum_value(Signal, news.get("sentiment", "neutral"), "news sentiment"),
            headlines=tuple(str(h) for h in news.get("headlines", ())),
            volume=_enum_value(ActivityLevel, news.get("volume", "medium"), "news volume"),
        )
        fear_greed_result = FearGreedIndex(
            value=int(fear_greed.get("value", 50)),
            classification=_enum_value(
                FearGreed, fear_greed.get("classification", "neutral"), "fear & greed"
            ),
        )
        funding_result = FundingRates(
            average=float(funding.get("average", 0.0)),
            sentiment=_enum_value(Signal, funding.get("sentiment", "neutral"), "funding"),
        )

        overall = data.get("overallSentiment")
        if isinstance(overall, Mapping):
            overall_result = OverallSentiment(
                score=float(overall.get("score", 0.0)),
                classification=_enum_value(
                    Signal, overall.get("classification", "neutral"), "overall sentiment"
                ),
            )
        else:
            overall_result = calculate_overall_sentiment(
                social_result.score, news_result.score,
                fear_greed_result.value, funding_result.average, params
            )

    except (TypeError, ValueError) as e:
        raise MalformedDataError(
            f"Invalid sentiment payload: {str(e)}",
            raw_data=dict(data) if isinstance(data, Mapping) else data,
            expected_format="sentiment object"
        ) from e

    return SentimentResult(
        symbol=symbol or str(data.get("symbol", "")),
        social=social_result,
        news=news_result,
        fear_greed=fear_greed_result,
        funding=funding_result,
        overall=overall_result,
        error=data.get("error"),
    )
