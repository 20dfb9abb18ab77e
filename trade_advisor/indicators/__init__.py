"""Indicator library: stateless numeric functions over ordered price series"""

from .momentum import MACDResult, macd, rsi
from .moving_average import ema, latest, sma
from .oscillators import StochasticResult, cci, stochastic
from .regression import LinearRegression, calculate_correlation, linear_regression, simplified_adx
from .volatility import (
    BollingerBands,
    atr,
    bollinger_bands,
    historical_volatility,
    standard_deviation,
    true_range,
    true_ranges,
)

__all__ = [
    "sma",
    "ema",
    "latest",
    "rsi",
    "macd",
    "MACDResult",
    "standard_deviation",
    "bollinger_bands",
    "BollingerBands",
    "true_range",
    "true_ranges",
    "atr",
    "historical_volatility",
    "stochastic",
    "StochasticResult",
    "cci",
    "linear_regression",
    "LinearRegression",
    "simplified_adx",
    "calculate_correlation",
]
