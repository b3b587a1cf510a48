"""Pytest configuration and fixtures."""

from typing import Any

import numpy as np
import pandas as pd
import pytest

from stock_consensus.engine import (
    AnalysisSubject,
    AnalyzerRegistry,
    Failure,
    ProjectionPolicy,
    ResultStore,
    Success,
)


def payload_at(path: tuple[str, ...], value: Any) -> dict[str, Any]:
    """Build a nested payload with ``value`` at ``path``."""
    document: Any = value
    for key in reversed(path):
        document = {key: document}
    return document


def constant_analyzer(payload: Any):
    """Coroutine analyzer that always returns ``payload``."""

    async def analyze(subject: AnalysisSubject) -> Any:
        return payload

    return analyze


def failing_analyzer(message: str = "provider unavailable", exc_type: type = RuntimeError):
    """Coroutine analyzer that always raises."""

    async def analyze(subject: AnalysisSubject) -> Any:
        raise exc_type(message)

    return analyze


@pytest.fixture
def subject() -> AnalysisSubject:
    """Subject with a known price."""
    return AnalysisSubject(symbol="acme", company_name="Acme Corp", current_price=100.0)


@pytest.fixture
def policy() -> ProjectionPolicy:
    """Default projection policy, independent of the environment."""
    return ProjectionPolicy()


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random source for reproducible projections."""
    return np.random.default_rng(42)


@pytest.fixture
def scenario_a_store() -> ResultStore:
    """Four buy opinions plus one failed analyzer."""
    return ResultStore(
        {
            "technical": Success(payload_at(("analysis", "signals", "overall_signal"), "Buy")),
            "fundamental": Success(
                payload_at(("analysis", "summary", "recommendation"), "Undervalued")
            ),
            "sentiment": Success(payload_at(("analysis", "overall_sentiment"), "Bullish")),
            "analyst": Success(payload_at(("analysis", "consensus"), "Strong Buy")),
            "risk": Failure("risk analysis failed: timeout", "TimeoutError"),
        }
    )


@pytest.fixture
def scenario_b_store() -> ResultStore:
    """Two buys, two sells and a half-weight high-risk sell."""
    return ResultStore(
        {
            "technical": Success(payload_at(("analysis", "signals", "overall_signal"), "Buy")),
            "fundamental": Success(
                payload_at(("analysis", "summary", "recommendation"), "Overvalued")
            ),
            "sentiment": Success(payload_at(("analysis", "overall_sentiment"), "Bearish")),
            "analyst": Success(payload_at(("analysis", "consensus"), "Buy")),
            "risk": Success(payload_at(("analysis", "risk_level"), "high")),
        }
    )


@pytest.fixture
def scenario_a_registry() -> AnalyzerRegistry:
    """Registry producing the scenario A outcomes."""
    registry = AnalyzerRegistry()
    registry.register(
        "quote", constant_analyzer({"type": "quote", "current_price": 150.0, "analysis": {}})
    )
    registry.register(
        "technical",
        constant_analyzer(payload_at(("analysis", "signals", "overall_signal"), "Buy")),
    )
    registry.register(
        "fundamental",
        constant_analyzer(payload_at(("analysis", "summary", "recommendation"), "Undervalued")),
    )
    registry.register(
        "sentiment", constant_analyzer(payload_at(("analysis", "overall_sentiment"), "Bullish"))
    )
    registry.register(
        "analyst", constant_analyzer(payload_at(("analysis", "consensus"), "Strong Buy"))
    )
    registry.register("risk", failing_analyzer("connection reset"))
    return registry


@pytest.fixture
def sample_ohlcv_df() -> pd.DataFrame:
    """Sample yfinance-style OHLCV DataFrame."""
    return pd.DataFrame(
        {
            "Date": pd.date_range("2024-01-01", periods=10, freq="D"),
            "Open": [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5],
            "High": [101.0, 102.5, 103.0, 102.5, 104.5, 105.5, 105.0, 106.5, 107.0, 106.5],
            "Low": [99.5, 100.5, 101.0, 100.5, 102.0, 103.0, 102.5, 104.0, 105.0, 104.5],
            "Close": [100.5, 102.0, 101.5, 102.0, 104.0, 103.5, 104.5, 106.0, 105.5, 106.0],
            "Adj Close": [100.0, 101.5, 101.0, 101.5, 103.5, 103.0, 104.0, 105.5, 105.0, 105.5],
            "Volume": [1000000] * 10,
        }
    ).set_index("Date")


@pytest.fixture
def sample_price_series() -> pd.Series:
    """Sample price series for indicator testing."""
    return pd.Series(
        [100.0, 101.0, 102.0, 101.5, 103.0, 104.0, 103.5, 105.0, 106.0, 105.5,
         107.0, 108.0, 107.5, 109.0, 110.0, 109.5, 111.0, 112.0, 111.5, 113.0,
         114.0, 113.5, 115.0, 116.0, 115.5, 117.0, 118.0, 117.5, 119.0, 120.0]
    )


@pytest.fixture
def sample_returns_series(sample_price_series: pd.Series) -> pd.Series:
    """Sample returns series for indicator testing."""
    return sample_price_series.pct_change().dropna()


def history_frame(closes: list[float], start: str = "2024-01-01") -> pd.DataFrame:
    """Standardized OHLCV frame (as returned by fetch_history) from closes."""
    dates = pd.bdate_range(start, periods=len(closes))
    return pd.DataFrame(
        {
            "date": dates,
            "open": closes,
            "high": [c * 1.01 for c in closes],
            "low": [c * 0.99 for c in closes],
            "close": closes,
            "volume": [1_000_000] * len(closes),
        }
    )
