"""Fundamental analyzer: valuation and quality checks."""

import operator
from time import perf_counter
from typing import Any

from stock_consensus.analyzers.base import safe_float, safe_round, tally
from stock_consensus.data.yfinance_client import fetch_info
from stock_consensus.engine.models import AnalysisSubject
from stock_consensus.utils.provenance import build_meta, build_provenance
from stock_consensus.utils.validators import check_rule


async def analyze_fundamental(subject: AnalysisSubject) -> dict[str, Any]:
    """
    Valuation snapshot with a rule-based recommendation.

    Args:
        subject: What to analyze

    Returns:
        Payload whose ``analysis.summary.recommendation`` is one of
        "Undervalued", "Overvalued" or "Fairly Valued"
    """
    start_time = perf_counter()
    info = await fetch_info(subject.symbol)

    pe_forward = safe_float(info.get("forwardPE"))
    pe_trailing = safe_float(info.get("trailingPE"))
    peg = safe_float(info.get("pegRatio")) or safe_float(info.get("trailingPegRatio"))
    net_margin = safe_float(info.get("profitMargins"))
    revenue_growth = safe_float(info.get("revenueGrowth"))
    debt_to_equity = safe_float(info.get("debtToEquity"))
    if debt_to_equity is not None:
        # yfinance reports this as a percentage
        debt_to_equity /= 100

    price = safe_float(info.get("currentPrice")) or safe_float(info.get("regularMarketPrice"))
    target = safe_float(info.get("targetMeanPrice"))
    target_upside = (target - price) / price if price and target is not None else None

    # rule name -> (triggered, +1 when cheap/healthy or -1 when rich/weak)
    rules = {
        "low_forward_pe": (check_rule(pe_forward, 15, operator.lt), 1),
        "high_forward_pe": (check_rule(pe_forward, 35, operator.gt), -1),
        "peg_below_one": (check_rule(peg, 1.0, operator.lt), 1),
        "peg_above_two": (check_rule(peg, 2.0, operator.gt), -1),
        "target_upside_over_15pct": (check_rule(target_upside, 0.15, operator.gt), 1),
        "target_below_price": (check_rule(target_upside, 0, operator.lt), -1),
        "unprofitable": (check_rule(net_margin, 0, operator.lt), -1),
    }
    score = sum(direction for triggered, direction in rules.values() if triggered)
    key_factors = [name for name, (triggered, _) in rules.items() if triggered]

    warnings = []
    if pe_forward is None:
        warnings.append("forward_pe_unavailable")

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "type": "fundamental",
        "meta": build_meta("fundamental", duration_ms),
        "data_provenance": build_provenance("yfinance", warnings=warnings),
        "analysis": {
            "overview": {
                "sector": info.get("sector"),
                "market_cap": safe_float(info.get("marketCap")),
            },
            "valuation": {
                "pe_trailing": safe_round(pe_trailing, 2),
                "pe_forward": safe_round(pe_forward, 2),
                "peg_ratio": safe_round(peg, 2),
                "target_mean_price": target,
                "target_upside": safe_round(target_upside, 4),
            },
            "quality": {
                "net_margin": safe_round(net_margin, 4),
                "revenue_growth": safe_round(revenue_growth, 4),
                "debt_to_equity": safe_round(debt_to_equity, 2),
            },
            "key_factors": key_factors,
            "summary": {
                "score": score,
                "recommendation": tally(
                    score,
                    positive="Undervalued",
                    negative="Overvalued",
                    neutral="Fairly Valued",
                ),
            },
        },
    }
