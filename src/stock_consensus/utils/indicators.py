"""Technical and risk indicator calculations used by the bundled analyzers."""

import math

import numpy as np
import pandas as pd

TRADING_DAYS = 252


def latest(series: pd.Series) -> float | None:
    """Last value of a series as a float, or None if empty or NaN."""
    if series.empty:
        return None
    value = series.iloc[-1]
    if pd.isna(value):
        return None
    return float(value)


def sma(prices: pd.Series, period: int) -> pd.Series:
    """Simple moving average; NaN until ``period`` observations exist."""
    return prices.rolling(window=period, min_periods=period).mean()


def ema(prices: pd.Series, period: int) -> pd.Series:
    """Exponential moving average with span ``period``."""
    return prices.ewm(span=period, adjust=False, min_periods=period).mean()


def rsi(prices: pd.Series, period: int = 14) -> pd.Series:
    """
    Relative Strength Index (0-100) with Wilder's smoothing.

    A window with no losses reads as 100.
    """
    delta = prices.diff()
    gain = delta.where(delta > 0, 0.0)
    loss = (-delta).where(delta < 0, 0.0)

    avg_gain = gain.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()
    avg_loss = loss.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()

    result = 100 - (100 / (1 + avg_gain / avg_loss))
    return result.replace([np.inf, -np.inf], 100)


def macd_histogram(
    prices: pd.Series,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> pd.Series:
    """MACD line minus its signal line."""
    macd_line = ema(prices, fast) - ema(prices, slow)
    return macd_line - ema(macd_line, signal)


def period_return(prices: pd.Series, periods: int) -> float | None:
    """Simple return over the last ``periods`` bars."""
    if len(prices) <= periods:
        return None
    current = prices.iloc[-1]
    past = prices.iloc[-periods - 1]
    if pd.isna(current) or pd.isna(past) or past == 0:
        return None
    return float((current - past) / past)


def annualized_volatility(returns: pd.Series) -> float | None:
    """Standard deviation of daily returns scaled to a year; needs 20 points."""
    if len(returns) < 20:
        return None
    std = returns.std()
    if pd.isna(std):
        return None
    return float(std * math.sqrt(TRADING_DAYS))


def max_drawdown(prices: pd.Series) -> float | None:
    """Deepest peak-to-trough decline as a negative decimal (-0.2 = 20%)."""
    if len(prices) < 2:
        return None
    running_peak = prices.cummax()
    deepest = ((prices - running_peak) / running_peak).min()
    if pd.isna(deepest):
        return None
    return float(deepest)


def beta(
    symbol_returns: pd.Series,
    benchmark_returns: pd.Series,
    min_overlap: int = 120,
) -> float | None:
    """
    Beta against a benchmark over date-aligned returns.

    Returns None when fewer than ``min_overlap`` days overlap or the
    benchmark has no variance.
    """
    aligned = pd.concat([symbol_returns, benchmark_returns], axis=1, join="inner").dropna()
    if len(aligned) < min_overlap:
        return None
    aligned.columns = ["symbol", "benchmark"]
    variance = aligned["benchmark"].var()
    if pd.isna(variance) or variance == 0:
        return None
    return round(float(aligned["symbol"].cov(aligned["benchmark"]) / variance), 3)
