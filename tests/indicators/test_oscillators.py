"""Tests for the Stochastic oscillator and CCI."""

import pytest

from trade_advisor.indicators import cci, stochastic


class TestStochastic:
    """Test Stochastic oscillator."""

    def test_close_at_high(self):
        """Closing at the window high gives %K of 100."""
        highs = [float(10 + i) for i in range(20)]
        lows = [float(i) for i in range(20)]
        closes = highs[:]
        result = stochastic(highs, lows, closes, 14, 3)
        assert result.k[-1] == pytest.approx(100.0)
        assert result.d[-1] == pytest.approx(100.0)

    def test_close_at_low(self):
        highs = [20.0] * 20
        lows = [10.0] * 20
        closes = [10.0] * 20
        result = stochastic(highs, lows, closes, 14, 3)
        assert result.k[-1] == pytest.approx(0.0)

    def test_flat_window_is_absent(self):
        flat = [5.0] * 20
        result = stochastic(flat, flat, flat, 14, 3)
        assert all(v is None for v in result.k)
        assert all(v is None for v in result.d)

    def test_alignment(self):
        highs = [float(10 + i % 3) for i in range(20)]
        lows = [float(i % 3) for i in range(20)]
        closes = [float(5 + i % 4) for i in range(20)]
        result = stochastic(highs, lows, closes, 14, 3)
        assert len(result.k) == len(result.d) == 20
        assert result.k[12] is None
        assert result.k[13] is not None
        # %D needs three %K values
        assert result.d[14] is None
        assert result.d[15] is not None


class TestCCI:
    """Test Commodity Channel Index."""

    def test_flat_window_is_absent(self):
        flat = [5.0] * 25
        assert all(v is None for v in cci(flat, flat, flat, 20))

    def test_rising_prices_positive(self):
        values = [float(i) for i in range(25)]
        result = cci(values, values, values, 20)
        assert result[18] is None
        assert result[-1] > 100

    def test_falling_prices_negative(self):
        values = [float(50 - i) for i in range(25)]
        result = cci(values, values, values, 20)
        assert result[-1] < -100


class TestOscillatorShortHistory:
    """Periods longer than the series give absent values only."""

    def test_stochastic_short_series(self):
        highs = [11.0, 12.0, 13.0]
        lows = [9.0, 10.0, 11.0]
        closes = [10.0, 11.0, 12.0]
        result = stochastic(highs, lows, closes, k_period=14, d_period=3)
        assert result.k == [None] * 3
        assert result.d == [None] * 3

    def test_cci_short_series(self):
        highs = [11.0, 12.0, 13.0]
        lows = [9.0, 10.0, 11.0]
        closes = [10.0, 11.0, 12.0]
        assert cci(highs, lows, closes, period=20) == [None] * 3
