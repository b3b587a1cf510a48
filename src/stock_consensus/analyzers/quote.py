"""Quote analyzer: identity, price and market state."""

from time import perf_counter
from typing import Any

from stock_consensus.analyzers.base import safe_float
from stock_consensus.data.yfinance_client import fetch_info, get_market_state
from stock_consensus.engine.models import AnalysisSubject
from stock_consensus.utils.provenance import build_meta, build_provenance
from stock_consensus.utils.sanitize import sanitize_text

# yfinance populates different price fields depending on the session
PRICE_FIELDS = ("currentPrice", "regularMarketPrice", "previousClose")


async def analyze_quote(subject: AnalysisSubject) -> dict[str, Any]:
    """
    Latest quote for the subject.

    Raises:
        ValueError: If the symbol is unknown or has no price
    """
    start_time = perf_counter()
    info = await fetch_info(subject.symbol)

    current_price = None
    price_field = None
    for field_name in PRICE_FIELDS:
        current_price = safe_float(info.get(field_name))
        if current_price is not None and current_price > 0:
            price_field = field_name
            break
    if price_field is None:
        raise ValueError(f"No price available for {subject.symbol}")

    warnings = []
    if price_field == "previousClose":
        warnings.append("price_from_previous_close")

    duration_ms = (perf_counter() - start_time) * 1000
    return {
        "type": "quote",
        "meta": build_meta("quote", duration_ms),
        "data_provenance": build_provenance(
            "yfinance", price_field=price_field, warnings=warnings
        ),
        "current_price": current_price,
        "analysis": {
            "name": sanitize_text(info.get("longName") or info.get("shortName"), max_length=200),
            "sector": info.get("sector"),
            "industry": info.get("industry"),
            "exchange": info.get("exchange"),
            "currency": info.get("currency"),
            "previous_close": safe_float(info.get("previousClose")),
            "market_cap": safe_float(info.get("marketCap")),
            "market_state": get_market_state()["state"],
        },
    }
