"""Analyst analyzer: street recommendation consensus."""

from time import perf_counter
from typing import Any

import pandas as pd

from stock_consensus.analyzers.base import safe_float
from stock_consensus.data.yfinance_client import fetch_attribute
from stock_consensus.engine.models import AnalysisSubject
from stock_consensus.utils.provenance import build_meta, build_provenance

# Column -> score, 1 being the most bullish
RATING_SCORES = {
    "strongBuy": 1,
    "buy": 2,
    "hold": 3,
    "sell": 4,
    "strongSell": 5,
}

# Upper bound of mean score -> consensus label
CONSENSUS_BANDS = (
    (1.5, "Strong Buy"),
    (2.5, "Buy"),
    (3.5, "Hold"),
    (4.5, "Sell"),
)


def consensus_label(mean_score: float) -> str:
    for upper, label in CONSENSUS_BANDS:
        if mean_score < upper:
            return label
    return "Strong Sell"


def _current_row(recommendations: pd.DataFrame) -> pd.Series:
    if "period" in recommendations.columns:
        current = recommendations[recommendations["period"] == "0m"]
        if not current.empty:
            return current.iloc[0]
    return recommendations.iloc[0]


async def analyze_analyst(subject: AnalysisSubject) -> dict[str, Any]:
    """
    Consensus of the current month's analyst ratings.

    Raises:
        ValueError: If no analyst ratings exist
    """
    start_time = perf_counter()
    recommendations = await fetch_attribute(subject.symbol, "recommendations")
    if recommendations is None or len(recommendations) == 0:
        raise ValueError(f"No analyst recommendations for {subject.symbol}")

    row = _current_row(recommendations)
    counts = {column: int(safe_float(row.get(column)) or 0) for column in RATING_SCORES}
    total = sum(counts.values())
    if total == 0:
        raise ValueError(f"No analyst ratings in the current period for {subject.symbol}")

    mean_score = sum(RATING_SCORES[column] * n for column, n in counts.items()) / total
    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "type": "analyst",
        "meta": build_meta("analyst", duration_ms),
        "data_provenance": build_provenance("yfinance", period=str(row.get("period", "0m"))),
        "analysis": {
            "ratings": counts,
            "analyst_count": total,
            "mean_score": round(mean_score, 2),
            "consensus": consensus_label(mean_score),
        },
    }
