"""Linear regression, simplified ADX and correlation"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LinearRegression:
    """Least-squares fit of values against their index"""
    slope: float
    intercept: float
    r_squared: float


def linear_regression(values: Sequence[float]) -> Optional[LinearRegression]:
    """
    Fit y = intercept + slope * x with x = 0, 1, 2, ...

    Args:
        values: Ordered numeric sequence

    Returns:
        LinearRegression, or None with fewer than two points
    """
    n = len(values)
    if n < 2:
        return None

    mean_x = (n - 1) / 2.0
    mean_y = sum(values) / n

    numerator = 0.0
    denominator = 0.0
    for x, y in enumerate(values):
        numerator += (x - mean_x) * (y - mean_y)
        denominator += (x - mean_x) ** 2

    slope = numerator / denominator
    intercept = mean_y - slope * mean_x

    total_ss = sum((y - mean_y) ** 2 for y in values)
    residual_ss = sum((y - (intercept + slope * x)) ** 2 for x, y in enumerate(values))

    # A constant series is fitted exactly
    r_squared = 1.0 if total_ss == 0 else 1.0 - residual_ss / total_ss

    return LinearRegression(slope=slope, intercept=intercept, r_squared=r_squared)


def simplified_adx(closes: Sequence[float], multiplier: float = 10.0) -> Optional[float]:
    """
    Trend-strength proxy: mean absolute close-to-close move in percent times multiplier

    This is not Wilder's ADX (no directional movement or smoothing); it is a
    cheap magnitude measure classified with ADX-style thresholds.

    Args:
        closes: Ordered close prices
        multiplier: Scale applied to the mean percentage move (default 10)

    Returns:
        Proxy value, or None with fewer than two closes
    """
    if len(closes) < 2:
        return None

    movements = []
    for i in range(1, len(closes)):
        if closes[i - 1] == 0:
            return None
        movements.append(abs(closes[i] - closes[i - 1]) / closes[i - 1] * 100.0)

    return sum(movements) / len(movements) * multiplier


def calculate_correlation(series_a: Sequence[float], series_b: Sequence[float]) -> Optional[float]:
    """
    Pearson correlation coefficient of two equally long series

    Raises:
        ValueError: If the series differ in length

    Returns:
        Coefficient in [-1, 1], or None when a series is empty or has no variance
    """
    if len(series_a) != len(series_b):
        raise ValueError("Data series must have the same length")

    n = len(series_a)
    if n == 0:
        return None

    mean_a = sum(series_a) / n
    mean_b = sum(series_b) / n

    covariance = 0.0
    variance_a = 0.0
    variance_b = 0.0
    for a, b in zip(series_a, series_b):
        diff_a = a - mean_a
        diff_b = b - mean_b
        covariance += diff_a * diff_b
        variance_a += diff_a * diff_a
        variance_b += diff_b * diff_b

    if variance_a == 0 or variance_b == 0:
        return None

    return covariance / (math.sqrt(variance_a) * math.sqrt(variance_b))
