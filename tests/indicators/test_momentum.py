"""Tests for RSI and MACD."""

import pytest

from trade_advisor.indicators import macd, rsi


class TestRSI:
    """Test Relative Strength Index."""

    def test_all_gains_is_100(self):
        """No losses in the window gives RSI 100."""
        values = [float(i) for i in range(1, 21)]
        result = rsi(values, 14)
        assert result[14] == 100.0
        assert result[-1] == 100.0

    def test_all_losses_is_zero(self):
        values = [float(i) for i in range(20, 0, -1)]
        result = rsi(values, 14)
        assert result[-1] == pytest.approx(0.0)

    def test_first_value_at_index_period(self):
        """RSI is absent until period deltas exist."""
        values = [float(i % 5) for i in range(20)]
        result = rsi(values, 14)
        assert len(result) == len(values)
        assert all(v is None for v in result[:14])
        assert result[14] is not None

    def test_bounded(self):
        """Every defined value lies in [0, 100]."""
        values = [100 + ((-1) ** i) * (i % 7) for i in range(60)]
        for value in rsi(values, 14):
            if value is not None:
                assert 0.0 <= value <= 100.0

    def test_equal_gains_and_losses(self):
        """Alternating moves of the same size sit at 50."""
        values = [10, 11] * 8
        result = rsi(values, 2)
        # deltas: +1, -1 -> avg gain = avg loss = 0.5
        assert result[2] == pytest.approx(50.0)

    def test_insufficient_history(self):
        assert rsi([1, 2, 3], 14) == [None, None, None]


class TestMACD:
    """Test MACD."""

    def test_constant_series_is_flat(self):
        """Constant prices give a zero MACD, signal and histogram."""
        result = macd([50.0] * 60)
        assert result.macd_line[-1] == pytest.approx(0.0)
        assert result.signal_line[-1] == pytest.approx(0.0)
        assert result.histogram[-1] == pytest.approx(0.0)

    def test_alignment(self):
        """All three series align with the input."""
        values = [float(i) for i in range(60)]
        result = macd(values)
        assert len(result.macd_line) == len(result.signal_line) == len(result.histogram) == 60
        # MACD line starts with the slow EMA, signal needs signal_period more values
        assert result.macd_line[24] is None
        assert result.macd_line[25] is not None
        assert result.signal_line[32] is None
        assert result.signal_line[33] is not None

    def test_uptrend_is_positive(self):
        values = [100 * 1.01 ** i for i in range(60)]
        result = macd(values)
        assert result.macd_line[-1] > 0

    def test_short_series(self):
        result = macd([1.0, 2.0, 3.0])
        assert result.macd_line == [None, None, None]
        assert result.histogram == [None, None, None]


class TestShortHistory:
    """Periods longer than the series give absent values only."""

    def test_macd_short_series(self):
        values = [float(i) for i in range(1, 11)]
        result = macd(values, 12, 26, 9)
        assert result.macd_line == [None] * 10
        assert result.signal_line == [None] * 10
        assert result.histogram == [None] * 10

    def test_rsi_short_series(self):
        assert rsi([1.0, 2.0, 3.0], 14) == [None] * 3
