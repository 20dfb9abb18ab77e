"""Tests for simple and exponential moving averages."""

import pytest

from trade_advisor.indicators import ema, latest, sma


class TestSMA:
    """Test simple moving average."""

    def test_constant_series(self):
        """SMA of a constant series is the constant once the window fills."""
        result = sma([10, 10, 10, 10, 10], 3)
        assert result == [None, None, 10, 10, 10]

    def test_rolling_mean(self):
        """Each defined value is the mean of the trailing window."""
        result = sma([1, 2, 3, 4, 5], 2)
        assert result == [None, 1.5, 2.5, 3.5, 4.5]

    def test_output_aligned_with_input(self):
        """Output length always equals input length."""
        values = [float(i) for i in range(30)]
        assert len(sma(values, 7)) == len(values)

    def test_period_longer_than_series(self):
        """Not enough history yields all-absent output."""
        assert sma([1, 2, 3], 5) == [None, None, None]

    def test_empty_series(self):
        assert sma([], 3) == []

    def test_window_with_absent_value(self):
        """A window touching an absent value stays absent."""
        result = sma([None, 2, 4, 6], 2)
        assert result == [None, None, 3.0, 5.0]


class TestEMA:
    """Test exponential moving average."""

    def test_constant_series(self):
        """EMA of a constant series is the constant."""
        result = ema([5.0] * 10, 4)
        assert result[:3] == [None, None, None]
        assert all(v == pytest.approx(5.0) for v in result[3:])

    def test_seeded_with_sma(self):
        """First EMA value is the SMA of the first period values."""
        result = ema([2, 4, 6, 8], 3)
        assert result[2] == pytest.approx(4.0)
        # multiplier = 2 / 4 = 0.5: (8 - 4) * 0.5 + 4 = 6
        assert result[3] == pytest.approx(6.0)

    def test_period_longer_than_series(self):
        assert ema([1, 2], 3) == [None, None]


class TestLatest:
    """Test latest helper."""

    def test_last_value(self):
        assert latest([None, 1.0, 2.0]) == 2.0

    def test_empty(self):
        assert latest([]) is None

    def test_absent_last_value(self):
        assert latest([1.0, None]) is None
