"""
Trade plan construction: entries, take-profit ladder, stop-loss, leverage,
reasoning bullets and per-category summaries.
"""

import math
from collections.abc import Sequence
from typing import Any, Optional

from ..config.defaults import PlanParams
from ..models.analysis import (
    SentimentResult,
    SupportResistance,
    TechnicalAnalysisResult,
    VolumeAnalysisResult,
)
from ..models.plan import Entry, Leverage, StopLoss, TakeProfit
from ..models.signals import (
    Confidence,
    Direction,
    EntryType,
    FearGreed,
    MarketStructure,
    Pressure,
    RiskLevel,
    VolatilityLevel,
    VolumeTrend,
    VolumeWall,
)

ENTRY_LABELS = ("nearest", "secondary")


def _pct(fraction: float) -> str:
    return f"{fraction * 100:g}%"


def _level_side(direction: Direction) -> tuple[str, str]:
    """(entry level name, target level name) for a direction"""
    if direction is Direction.LONG:
        return "support", "resistance"
    return "resistance", "support"


def determine_entries(levels: SupportResistance, direction: Direction,
                      params: Optional[PlanParams] = None) -> tuple[Entry, ...]:
    """
    Market entry at the current price plus limit entries at the nearest
    support (long) or resistance (short) levels

    Allocation of limit entries with no level to sit on moves to the market
    entry, so allocations always sum to 1.
    """
    params = params or PlanParams()
    level_name, _ = _level_side(direction)
    side = levels.support_prices if direction is Direction.LONG else levels.resistance_prices

    limits = []
    for i, allocation in enumerate(params.limit_allocations):
        if i >= len(side):
            break
        label = ENTRY_LABELS[i] if i < len(ENTRY_LABELS) else "further"
        limits.append(Entry(
            price=side[i],
            type=EntryType.LIMIT,
            allocation=allocation,
            reason=f"Entry at {label} {level_name} level",
        ))

    unused = sum(params.limit_allocations[len(limits):])
    market = Entry(
        price=levels.current_price,
        type=EntryType.MARKET,
        allocation=params.market_allocation + unused,
        reason="Immediate market entry",
    )

    return (market, *limits)


def _gain(price: float, current_price: float, direction: Direction) -> float:
    if direction is Direction.LONG:
        return (price - current_price) / current_price * 100.0
    return (current_price - price) / current_price * 100.0


def _rung_name(index: int, count: int) -> str:
    if index == 0:
        return "First"
    if index == count - 1:
        return "Final"
    return "Second" if index == 1 else f"Take profit {index + 1}"


def determine_take_profits(levels: SupportResistance, direction: Direction,
                           params: Optional[PlanParams] = None) -> tuple[TakeProfit, ...]:
    """
    Take-profit ladder, one rung per configured allocation

    Rungs sit on resistance levels (long) or support levels (short), nearest
    first. Without any level the fixed percentage ladder is used. With too few
    levels the final rung is projected at the last fallback percentage from
    the current price, or take_profit_extension beyond the last level when
    that level is already further; rungs between the last level and the
    projection are spaced evenly.
    """
    params = params or PlanParams()
    current_price = levels.current_price
    sign = 1.0 if direction is Direction.LONG else -1.0
    _, target_name = _level_side(direction)
    further = "higher" if direction is Direction.LONG else "lower"
    count = len(params.take_profit_allocations)
    side = levels.resistance_prices if direction is Direction.LONG else levels.support_prices

    if not side:
        return tuple(
            TakeProfit(
                price=current_price * (1.0 + sign * pct),
                allocation=allocation,
                percentage_gain=pct * 100.0,
                reason=f"{_rung_name(i, count)} take profit at {_pct(pct)} gain",
            )
            for i, (pct, allocation) in enumerate(zip(params.take_profit_fallback_pcts,
                                                      params.take_profit_allocations))
        )

    rungs: list[tuple[float, str]] = []
    for i, price in enumerate(side[:count]):
        if i == 0:
            reason = f"First take profit at nearest {target_name}"
        elif i == count - 1:
            reason = f"Final take profit at major {target_name}"
        else:
            reason = f"{_rung_name(i, count)} take profit at {further} {target_name}"
        rungs.append((price, reason))

    missing = count - len(rungs)
    if missing > 0:
        last = rungs[-1][0]
        projected = current_price * (1.0 + sign * params.take_profit_fallback_pcts[-1])
        if sign * (last - projected) >= 0:
            projected = last * (1.0 + sign * params.take_profit_extension)

        for j in range(1, missing):
            index = len(rungs)
            rungs.append((
                last + (projected - last) * j / missing,
                f"{_rung_name(index, count)} take profit between {target_name} and projected target",
            ))
        rungs.append((projected, "Final take profit at projected target"))

    return tuple(
        TakeProfit(
            price=price,
            allocation=allocation,
            percentage_gain=_gain(price, current_price, direction),
            reason=reason,
        )
        for (price, reason), allocation in zip(rungs, params.take_profit_allocations)
    )


def determine_stop_loss(levels: SupportResistance, direction: Direction, entries: Sequence[Entry],
                        params: Optional[PlanParams] = None) -> StopLoss:
    """
    Stop beyond the nearest opposing level, or beyond the extreme entry
    when there is no such level

    percentage_loss is measured from the current price.
    """
    params = params or PlanParams()
    current_price = levels.current_price

    if direction is Direction.LONG:
        if levels.nearest_support is not None:
            price = levels.nearest_support * (1.0 - params.stop_level_buffer)
            reason = "Stop loss placed below nearest support level"
        else:
            price = min(entry.price for entry in entries) * (1.0 - params.stop_entry_buffer)
            reason = f"Stop loss placed {_pct(params.stop_entry_buffer)} below lowest entry point"
        loss = (current_price - price) / current_price * 100.0
    else:
        if levels.nearest_resistance is not None:
            price = levels.nearest_resistance * (1.0 + params.stop_level_buffer)
            reason = "Stop loss placed above nearest resistance level"
        else:
            price = max(entry.price for entry in entries) * (1.0 + params.stop_entry_buffer)
            reason = f"Stop loss placed {_pct(params.stop_entry_buffer)} above highest entry point"
        loss = (price - current_price) / current_price * 100.0

    return StopLoss(price=price, percentage_loss=loss, reason=reason)


def calculate_leverage(confidence: Confidence, volatility: VolatilityLevel,
                       params: Optional[PlanParams] = None) -> Leverage:
    """
    Base leverage for the confidence band scaled by the volatility multiplier,
    rounded half-up and never below 1
    """
    params = params or PlanParams()
    base = params.base_leverage.get(confidence.value, 1)
    multiplier = params.volatility_multipliers.get(volatility.value, 1.0)
    recommended = max(1, int(math.floor(base * multiplier + 0.5)))

    risk_level = RiskLevel.MODERATE
    if recommended >= params.high_risk_leverage:
        risk_level = RiskLevel.HIGH
    elif recommended <= params.low_risk_leverage:
        risk_level = RiskLevel.LOW

    return Leverage(
        recommended=recommended,
        risk_level=risk_level,
        reason=f"Leverage based on {confidence.value} confidence and {volatility.value} volatility",
    )


def _technical_reasons(technical: TechnicalAnalysisResult, direction: Direction) -> list[str]:
    reasons = []
    long = direction is Direction.LONG
    favoured = direction.favoured_signal

    if technical.trend.direction is favoured:
        reasons.append(f"Market is in a {technical.trend.strength.value} {favoured.value} trend")

    ma = technical.moving_averages
    if direction.agrees_with(ma.trend):
        side = "above" if long else "below"
        crossed = ", ".join(f"{side} SMA{period}" for period, flag in ma.above.items() if flag is long)
        reasons.append(f"Price is trading {side} key moving averages ({crossed})")

    if direction.agrees_with(technical.momentum.overall):
        reasons.append(f"Momentum indicators are showing {technical.momentum.overall.value} signals")

    if technical.oscillators.consensus is favoured:
        reasons.append(f"Oscillators are in {favoured.value} territory")

    patterns = technical.patterns
    if long:
        if patterns.double_bottom.detected:
            reasons.append("Double bottom pattern detected, indicating potential reversal")
        if patterns.inverse_head_and_shoulders.detected:
            reasons.append("Inverse head and shoulders pattern detected, indicating potential reversal")
        if technical.market_structure.structure is MarketStructure.UPTREND:
            reasons.append("Market structure shows higher highs and higher lows, confirming uptrend")
    else:
        if patterns.double_top.detected:
            reasons.append("Double top pattern detected, indicating potential reversal")
        if patterns.head_and_shoulders.detected:
            reasons.append("Head and shoulders pattern detected, indicating potential reversal")
        if technical.market_structure.structure is MarketStructure.DOWNTREND:
            reasons.append("Market structure shows lower highs and lower lows, confirming downtrend")

    return reasons


def generate_reasoning(technical: TechnicalAnalysisResult, sentiment: SentimentResult,
                       volume: VolumeAnalysisResult, direction: Direction,
                       params: Optional[PlanParams] = None) -> tuple[str, ...]:
    """Human-readable bullets for every classification that supports the direction"""
    params = params or PlanParams()
    long = direction is Direction.LONG
    reasons = _technical_reasons(technical, direction)

    if direction.agrees_with(sentiment.overall.classification):
        reasons.append(f"Overall market sentiment is {sentiment.overall.classification.value}")
    if direction.agrees_with(sentiment.social.sentiment):
        reasons.append(
            f"Social media sentiment is {sentiment.social.sentiment.value} "
            f"with {sentiment.social.volume.value} volume"
        )
    if direction.agrees_with(sentiment.news.sentiment):
        reasons.append(f"News sentiment is {sentiment.news.sentiment.value}")

    fear_greed = sentiment.fear_greed.classification
    if long and fear_greed is FearGreed.EXTREME_FEAR:
        reasons.append("Market is in extreme fear, potential contrarian buy signal")
    elif not long and fear_greed is FearGreed.EXTREME_GREED:
        reasons.append("Market is in extreme greed, potential contrarian sell signal")

    trend = volume.trends.classification
    if trend is (VolumeTrend.INCREASING if long else VolumeTrend.DECREASING):
        reasons.append(f"Volume is {trend.value}, supporting the {direction.value} position")

    pressure = volume.pressure
    if pressure.pressure is (Pressure.BUYING if long else Pressure.SELLING):
        label = "Buying" if long else "Selling"
        reasons.append(f"{label} pressure is dominant with a {pressure.ratio:.2f} buy/sell ratio")

    walls = volume.volume_at_price.classification if volume.volume_at_price else None
    if long and walls is VolumeWall.STRONG_SUPPORT:
        reasons.append("Strong volume support detected below current price")
    elif not long and walls is VolumeWall.STRONG_RESISTANCE:
        reasons.append("Strong volume resistance detected above current price")

    levels = technical.support_resistance
    if long:
        anchor = "support level" if levels.nearest_support is not None else \
            f"{_pct(params.stop_entry_buffer)} below entry"
    else:
        anchor = "resistance level" if levels.nearest_resistance is not None else \
            f"{_pct(params.stop_entry_buffer)} above entry"
    reasons.append(f"Key risk: Stop loss placed at {anchor}")

    return tuple(reasons)


def summarize_technical(technical: TechnicalAnalysisResult) -> dict[str, Any]:
    momentum = technical.momentum
    return {
        "trend": {
            "direction": technical.trend.direction.value,
            "strength": technical.trend.strength.value,
        },
        "moving_averages": {
            "trend": technical.moving_averages.trend.value,
            **{f"sma{period}": value for period, value in technical.moving_averages.sma.items()},
        },
        "momentum": {
            "overall": momentum.overall.value,
            "rsi": momentum.rsi,
            "macd": {
                "line": momentum.macd_line,
                "signal": momentum.signal_line,
                "histogram": momentum.histogram,
            },
        },
        "support_resistance": {
            "nearest_support": technical.support_resistance.nearest_support,
            "nearest_resistance": technical.support_resistance.nearest_resistance,
        },
        "volatility": {
            "level": technical.volatility.level.value,
            "daily": technical.volatility.daily,
        },
    }


def summarize_sentiment(sentiment: SentimentResult) -> dict[str, Any]:
    return {
        "overall": {
            "classification": sentiment.overall.classification.value,
            "score": sentiment.overall.score,
        },
        "social": {
            "sentiment": sentiment.social.sentiment.value,
            "volume": sentiment.social.volume.value,
        },
        "news": {
            "sentiment": sentiment.news.sentiment.value,
            "headlines": list(sentiment.news.headlines),
        },
        "fear_greed_index": {
            "value": sentiment.fear_greed.value,
            "classification": sentiment.fear_greed.classification.value,
        },
    }


def summarize_volume(volume: VolumeAnalysisResult) -> dict[str, Any]:
    walls = volume.volume_at_price
    return {
        "trends": {
            "classification": volume.trends.classification.value,
            "last_24h": volume.trends.last_24h,
        },
        "buy_sell_ratio": {
            "ratio": volume.pressure.ratio,
            "pressure": volume.pressure.pressure.value,
            "source": volume.pressure.source.value,
            "approximated": volume.pressure.approximated,
        },
        "volume_at_price": {
            "classification": walls.classification.value,
            "bid_ask_ratio": walls.bid_ask_ratio,
        } if walls else None,
    }
