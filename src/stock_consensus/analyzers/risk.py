"""Risk analyzer: volatility, drawdown and beta."""

import logging
import operator
from time import perf_counter
from typing import Any

import pandas as pd

from stock_consensus.analyzers.base import safe_round
from stock_consensus.data.yfinance_client import fetch_history
from stock_consensus.engine.models import AnalysisSubject
from stock_consensus.utils.indicators import annualized_volatility, beta, max_drawdown
from stock_consensus.utils.provenance import build_meta, build_provenance
from stock_consensus.utils.validators import FetchParams, check_rule

logger = logging.getLogger(__name__)

BENCHMARK = "SPY"
MIN_BARS = 50

HIGH_VOLATILITY = 0.40
LOW_VOLATILITY = 0.20
EXTREME_VOLATILITY = 0.60
DEEP_DRAWDOWN = -0.35
SHALLOW_DRAWDOWN = -0.15


def _daily_returns(df: pd.DataFrame) -> pd.Series:
    close = pd.Series(
        pd.to_numeric(df["close"], errors="coerce").to_numpy(),
        index=pd.DatetimeIndex(pd.to_datetime(df["date"])),
    )
    return close.pct_change().dropna()


def classify_risk(volatility: float | None, drawdown: float | None) -> tuple[str, str]:
    """
    Risk level and regime from volatility and drawdown.

    Extreme volatility is reported as level "high" with regime "extreme", so
    consumers only ever see low/medium/high as the level.
    """
    if check_rule(volatility, EXTREME_VOLATILITY, operator.gt):
        return "high", "extreme"
    if check_rule(volatility, HIGH_VOLATILITY, operator.gt) or check_rule(
        drawdown, DEEP_DRAWDOWN, operator.lt
    ):
        return "high", "elevated"
    if check_rule(volatility, LOW_VOLATILITY, operator.lt) and check_rule(
        drawdown, SHALLOW_DRAWDOWN, operator.gt
    ):
        return "low", "calm"
    return "medium", "normal"


async def analyze_risk(subject: AnalysisSubject) -> dict[str, Any]:
    """
    One-year risk profile.

    A failed benchmark fetch only drops beta; it does not fail the analyzer.

    Raises:
        ValueError: If fewer than 50 bars are available
    """
    start_time = perf_counter()
    df = await fetch_history(FetchParams(symbol=subject.symbol, period="1y", interval="1d"))
    if len(df) < MIN_BARS:
        raise ValueError(f"Need at least {MIN_BARS} data points, got {len(df)}")

    returns = _daily_returns(df)
    close = pd.to_numeric(df["close"], errors="coerce").dropna()
    volatility = annualized_volatility(returns)
    drawdown = max_drawdown(close)

    warnings: list[str] = []
    beta_value = None
    try:
        benchmark_df = await fetch_history(
            FetchParams(symbol=BENCHMARK, period="1y", interval="1d")
        )
    except Exception as e:
        logger.debug(f"Benchmark {BENCHMARK} unavailable for {subject.symbol}: {e}")
        warnings.append("benchmark_fetch_failed")
    else:
        beta_value = beta(returns, _daily_returns(benchmark_df))
        if beta_value is None:
            warnings.append("insufficient_overlap_for_beta")

    risk_level, regime = classify_risk(volatility, drawdown)
    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "type": "risk",
        "meta": build_meta("risk", duration_ms),
        "data_provenance": build_provenance(
            "yfinance", benchmark=BENCHMARK, bars=len(df), warnings=warnings
        ),
        "analysis": {
            "volatility_annualized": safe_round(volatility, 4),
            "max_drawdown": safe_round(drawdown, 4),
            "beta": beta_value,
            "risk_level": risk_level,
            "regime": regime,
        },
    }
