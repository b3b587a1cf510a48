"""Tests for technical and risk indicators."""

import math

import numpy as np
import pandas as pd

from stock_consensus.utils.indicators import (
    annualized_volatility,
    beta,
    ema,
    latest,
    macd_histogram,
    max_drawdown,
    period_return,
    rsi,
    sma,
)


class TestLatest:
    """Tests for latest helper."""

    def test_latest_value(self, sample_price_series: pd.Series) -> None:
        """Test last value is returned as float."""
        assert latest(sample_price_series) == 120.0

    def test_latest_empty_or_nan(self) -> None:
        """Test empty and trailing NaN give None."""
        assert latest(pd.Series([], dtype=float)) is None
        assert latest(pd.Series([1.0, np.nan])) is None


class TestMovingAverages:
    """Tests for SMA and EMA."""

    def test_sma_basic(self, sample_price_series: pd.Series) -> None:
        """Test basic SMA calculation."""
        result = sma(sample_price_series, 5)

        assert result.iloc[:4].isna().all()
        # (100 + 101 + 102 + 101.5 + 103) / 5
        assert abs(result.iloc[4] - 101.5) < 0.01

    def test_sma_insufficient_data(self) -> None:
        """Test SMA with insufficient data is all NaN."""
        assert sma(pd.Series([100, 101, 102]), 5).isna().all()

    def test_ema_starts_at_period(self, sample_price_series: pd.Series) -> None:
        """Test EMA has values from the period onwards."""
        result = ema(sample_price_series, 5)

        assert result.iloc[:4].isna().all()
        assert not pd.isna(result.iloc[4])


class TestRSI:
    """Tests for RSI calculation."""

    def test_rsi_range(self, sample_price_series: pd.Series) -> None:
        """Test RSI stays in 0-100 range."""
        valid = rsi(sample_price_series, 14).dropna()
        assert ((valid >= 0) & (valid <= 100)).all()

    def test_rsi_only_gains(self) -> None:
        """Test a series with no losses reads 100."""
        prices = pd.Series([100.0 + i for i in range(30)])
        assert rsi(prices, 14).iloc[-1] == 100

    def test_rsi_downtrend(self) -> None:
        """Test RSI in strong downtrend."""
        prices = pd.Series([100.0 - i for i in range(30)])
        assert rsi(prices, 14).iloc[-1] < 30


class TestMACD:
    """Tests for MACD histogram."""

    def test_uptrend_positive(self) -> None:
        """Test accelerating uptrend has a positive histogram."""
        prices = pd.Series([100 * 1.01**i for i in range(80)])
        assert macd_histogram(prices).iloc[-1] > 0

    def test_short_series_nan(self, sample_price_series: pd.Series) -> None:
        """Test too few bars leave the histogram undefined."""
        assert pd.isna(macd_histogram(sample_price_series).iloc[-1])


class TestReturns:
    """Tests for period returns."""

    def test_returns_basic(self, sample_price_series: pd.Series) -> None:
        """Test 5-bar return."""
        ret = period_return(sample_price_series, 5)

        expected = (120.0 - sample_price_series.iloc[-6]) / sample_price_series.iloc[-6]
        assert abs(ret - expected) < 0.0001

    def test_returns_insufficient_data(self) -> None:
        """Test returns with insufficient data."""
        assert period_return(pd.Series([100, 101, 102]), 5) is None


class TestVolatility:
    """Tests for annualized volatility."""

    def test_annualization_factor(self, sample_returns_series: pd.Series) -> None:
        """Test that annualization uses sqrt(252)."""
        expected = sample_returns_series.std() * math.sqrt(252)
        assert abs(annualized_volatility(sample_returns_series) - expected) < 1e-9

    def test_needs_twenty_points(self) -> None:
        """Test short samples give None."""
        assert annualized_volatility(pd.Series([0.01] * 19)) is None


class TestDrawdown:
    """Tests for max drawdown."""

    def test_max_drawdown_basic(self) -> None:
        """Test peak-to-trough from 120 to 90."""
        dd = max_drawdown(pd.Series([100, 110, 120, 100, 90, 95]))
        assert abs(dd - (-0.25)) < 1e-9

    def test_monotonic_rise_zero(self) -> None:
        """Test no decline gives zero drawdown."""
        assert max_drawdown(pd.Series([1.0, 2.0, 3.0])) == 0.0

    def test_single_point(self) -> None:
        """Test a single price has no drawdown."""
        assert max_drawdown(pd.Series([1.0])) is None


class TestBeta:
    """Tests for beta against a benchmark."""

    def _series(self, values: np.ndarray) -> pd.Series:
        return pd.Series(values, index=pd.bdate_range("2024-01-01", periods=len(values)))

    def test_twice_the_benchmark(self) -> None:
        """Test returns scaled by two give beta two."""
        bench = np.random.default_rng(7).normal(0, 0.01, 150)
        assert beta(self._series(bench * 2), self._series(bench)) == 2.0

    def test_insufficient_overlap(self) -> None:
        """Test fewer overlapping days than required gives None."""
        bench = np.random.default_rng(7).normal(0, 0.01, 50)
        assert beta(self._series(bench), self._series(bench)) is None

    def test_flat_benchmark(self) -> None:
        """Test zero benchmark variance gives None."""
        flat = np.zeros(150)
        moving = np.random.default_rng(7).normal(0, 0.01, 150)
        assert beta(self._series(moving), self._series(flat)) is None
