"""Tests for linear regression, simplified ADX and correlation."""

import pytest

from trade_advisor.indicators import calculate_correlation, linear_regression, simplified_adx


class TestLinearRegression:
    """Test least-squares fit."""

    def test_perfect_line(self):
        fit = linear_regression([1.0, 3.0, 5.0, 7.0])
        assert fit.slope == pytest.approx(2.0)
        assert fit.intercept == pytest.approx(1.0)
        assert fit.r_squared == pytest.approx(1.0)

    def test_constant_series(self):
        """A flat series has zero slope and a perfect fit."""
        fit = linear_regression([4.0] * 10)
        assert fit.slope == 0.0
        assert fit.r_squared == 1.0

    def test_noisy_series_r_squared_below_one(self):
        fit = linear_regression([1.0, 3.0, 2.0, 5.0, 4.0])
        assert 0.0 < fit.r_squared < 1.0
        assert fit.slope > 0

    def test_too_short(self):
        assert linear_regression([1.0]) is None


class TestSimplifiedADX:
    """Test trend-strength proxy."""

    def test_mean_move_times_multiplier(self):
        # moves: 1%, 1% -> mean 1% * 10 = 10
        closes = [100.0, 101.0, 102.01]
        assert simplified_adx(closes) == pytest.approx(10.0)

    def test_direction_insensitive(self):
        up = simplified_adx([100.0, 102.0])
        down = simplified_adx([100.0, 98.0])
        assert up == pytest.approx(down)

    def test_too_short(self):
        assert simplified_adx([100.0]) is None


class TestCorrelation:
    """Test Pearson correlation."""

    def test_perfect_positive(self):
        assert calculate_correlation([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        assert calculate_correlation([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)

    def test_no_variance(self):
        assert calculate_correlation([1, 1, 1], [1, 2, 3]) is None

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            calculate_correlation([1, 2], [1, 2, 3])
