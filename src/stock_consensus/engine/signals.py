"""Weighted voting over the signal-bearing analyzers."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from stock_consensus.config import confidence_floor
from stock_consensus.engine.models import (
    AnalysisOutcome,
    ConsolidatedSignal,
    SignalSummary,
    Success,
    VoteContribution,
)
from stock_consensus.utils.documents import dig


class Vote(str, Enum):
    BUY = "buy"
    SELL = "sell"
    NONE = "none"


# Thresholds are strict: exactly 60% buy is not a strong buy
STRONG_THRESHOLD_PCT = 60.0
MODERATE_THRESHOLD_PCT = 40.0


def classify_text(
    value: Any,
    buy_keywords: Iterable[str],
    sell_keywords: Iterable[str],
) -> Vote:
    """
    Classify a free-text recommendation by case-insensitive substring match.

    Non-strings, text matching neither side, and text matching both sides
    (e.g. "buy or sell") all count as no vote.
    """
    if not isinstance(value, str):
        return Vote.NONE
    text = value.lower()
    is_buy = any(keyword in text for keyword in buy_keywords)
    is_sell = any(keyword in text for keyword in sell_keywords)
    if is_buy and not is_sell:
        return Vote.BUY
    if is_sell and not is_buy:
        return Vote.SELL
    return Vote.NONE


def classify_risk_level(value: Any) -> Vote:
    """Low risk leans buy, high risk leans sell; anything else abstains."""
    if not isinstance(value, str):
        return Vote.NONE
    level = value.strip().lower()
    if level == "low":
        return Vote.BUY
    if level == "high":
        return Vote.SELL
    return Vote.NONE


def keyword_classifier(buy: tuple[str, ...], sell: tuple[str, ...]) -> Callable[[Any], Vote]:
    def classify(value: Any) -> Vote:
        return classify_text(value, buy, sell)

    return classify


@dataclass(frozen=True)
class SignalRule:
    """Where to find one analyzer's opinion and how to read it."""

    identity: str
    path: tuple[str, ...]
    classify: Callable[[Any], Vote]
    weight: float = 1.0
    label: str = ""

    def extract(self, payload: Any) -> Any:
        return dig(payload, *self.path)


SIGNAL_RULES: tuple[SignalRule, ...] = (
    SignalRule(
        "technical",
        ("analysis", "signals", "overall_signal"),
        keyword_classifier(("buy",), ("sell",)),
        label="Technical Position",
    ),
    SignalRule(
        "fundamental",
        ("analysis", "summary", "recommendation"),
        keyword_classifier(("buy", "undervalued"), ("sell", "overvalued")),
        label="Fundamental Outlook",
    ),
    SignalRule(
        "sentiment",
        ("analysis", "overall_sentiment"),
        keyword_classifier(("bullish", "positive"), ("bearish", "negative")),
        label="News Sentiment",
    ),
    # Risk only leans the vote: half weight either way
    SignalRule(
        "risk",
        ("analysis", "risk_level"),
        classify_risk_level,
        weight=0.5,
        label="Risk Rating",
    ),
    SignalRule(
        "analyst",
        ("analysis", "consensus"),
        keyword_classifier(("buy",), ("sell",)),
        label="Analyst Consensus",
    ),
    SignalRule(
        "market_sentiment",
        ("analysis", "overall_sentiment"),
        keyword_classifier(("bullish",), ("bearish",)),
        label="Market Sentiment",
    ),
)


def select_signal(buy_pct: float, sell_pct: float) -> ConsolidatedSignal:
    """Map vote percentages to a signal; first matching rule wins."""
    if buy_pct > STRONG_THRESHOLD_PCT:
        return ConsolidatedSignal.STRONG_BUY
    if buy_pct > MODERATE_THRESHOLD_PCT:
        return ConsolidatedSignal.MODERATE_BUY
    if sell_pct > STRONG_THRESHOLD_PCT:
        return ConsolidatedSignal.STRONG_SELL
    if sell_pct > MODERATE_THRESHOLD_PCT:
        return ConsolidatedSignal.MODERATE_SELL
    return ConsolidatedSignal.HOLD


def confidence_score(
    buy_votes: float,
    sell_votes: float,
    total_signals: int,
    rule_count: int,
    floor: float,
) -> float:
    """
    Score in [0, 100] from how strongly and how broadly the voters agree.

    ``floor + (100 - floor) * agreement * coverage`` where agreement is the
    winning side's share of voters and coverage the share of rules that voted.
    """
    floor = min(100.0, max(0.0, floor))
    if total_signals <= 0 or rule_count <= 0:
        return round(floor, 1)
    agreement = max(buy_votes, sell_votes) / total_signals
    coverage = min(1.0, total_signals / rule_count)
    score = floor + (100.0 - floor) * agreement * coverage
    return round(min(100.0, max(0.0, score)), 1)


def consolidate(
    outcomes: Mapping[str, AnalysisOutcome],
    rules: Iterable[SignalRule] = SIGNAL_RULES,
    floor: float | None = None,
) -> SignalSummary:
    """
    Reduce a result store to one consolidated signal.

    Only successful outcomes of analyzers named in ``rules`` can vote. Any
    missing, failed or malformed entry is simply no vote; this function
    does not raise on payload content.

    Args:
        outcomes: Identity -> outcome mapping (usually a ResultStore)
        rules: Signal table to apply
        floor: Confidence when nobody votes (default: CONFIDENCE_FLOOR env)

    Returns:
        SignalSummary with votes, percentages, signal and confidence
    """
    rules = tuple(rules)
    if floor is None:
        floor = confidence_floor()

    buy_votes = 0.0
    sell_votes = 0.0
    total_signals = 0
    contributions: list[VoteContribution] = []

    for rule in rules:
        outcome = outcomes.get(rule.identity)
        value = rule.extract(outcome.payload) if isinstance(outcome, Success) else None
        vote = rule.classify(value) if value is not None else Vote.NONE

        if vote is Vote.BUY:
            buy_votes += rule.weight
            total_signals += 1
        elif vote is Vote.SELL:
            sell_votes += rule.weight
            total_signals += 1

        contributions.append(
            VoteContribution(
                identity=rule.identity,
                value=value,
                vote=vote.value,
                weight=rule.weight if vote is not Vote.NONE else 0.0,
            )
        )

    if total_signals:
        # Multiply first: 3 / 5 * 100 is 60.00000000000001 in floating point
        buy_pct = buy_votes * 100 / total_signals
        sell_pct = sell_votes * 100 / total_signals
    else:
        buy_pct = sell_pct = 0.0

    return SignalSummary(
        signal=select_signal(buy_pct, sell_pct),
        confidence=confidence_score(buy_votes, sell_votes, total_signals, len(rules), floor),
        buy_votes=buy_votes,
        sell_votes=sell_votes,
        total_signals=total_signals,
        buy_pct=round(buy_pct, 2),
        sell_pct=round(sell_pct, 2),
        contributions=tuple(contributions),
    )
