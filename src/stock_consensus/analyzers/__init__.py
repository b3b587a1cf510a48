"""Bundled yfinance-backed analyzers."""

from stock_consensus.analyzers.analyst import analyze_analyst
from stock_consensus.analyzers.fundamental import analyze_fundamental
from stock_consensus.analyzers.quote import analyze_quote
from stock_consensus.analyzers.risk import analyze_risk
from stock_consensus.analyzers.sentiment import analyze_sentiment
from stock_consensus.analyzers.technical import analyze_technical
from stock_consensus.engine.registry import AnalyzerRegistry

BUNDLED_ANALYZERS = {
    "quote": analyze_quote,
    "technical": analyze_technical,
    "fundamental": analyze_fundamental,
    "risk": analyze_risk,
    "analyst": analyze_analyst,
    "sentiment": analyze_sentiment,
}


def default_registry() -> AnalyzerRegistry:
    """A fresh registry holding every bundled analyzer."""
    registry = AnalyzerRegistry()
    for identity, analyzer in BUNDLED_ANALYZERS.items():
        registry.register(identity, analyzer)
    return registry


__all__ = [
    "BUNDLED_ANALYZERS",
    "analyze_analyst",
    "analyze_fundamental",
    "analyze_quote",
    "analyze_risk",
    "analyze_sentiment",
    "analyze_technical",
    "default_registry",
]
