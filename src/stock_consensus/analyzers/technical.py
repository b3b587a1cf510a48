"""Technical analyzer: trend, momentum and an overall signal."""

from time import perf_counter
from typing import Any

from stock_consensus.analyzers.base import safe_round, tally
from stock_consensus.data.yfinance_client import fetch_history
from stock_consensus.engine.models import AnalysisSubject
from stock_consensus.utils.indicators import latest, macd_histogram, period_return, rsi, sma
from stock_consensus.utils.provenance import build_meta, build_provenance
from stock_consensus.utils.validators import FetchParams

MIN_BARS = 50
RSI_OVERSOLD = 30
RSI_OVERBOUGHT = 70


async def analyze_technical(subject: AnalysisSubject) -> dict[str, Any]:
    """
    Moving-average, RSI and MACD readings over one year of daily bars.

    Each rule adds or removes one point; the net score decides the overall
    signal (Buy at +2, Sell at -2, Neutral otherwise).

    Raises:
        ValueError: If fewer than 50 bars are available
    """
    start_time = perf_counter()
    df = await fetch_history(FetchParams(symbol=subject.symbol, period="1y", interval="1d"))

    close = df["close"].astype(float).dropna()
    if len(close) < MIN_BARS:
        raise ValueError(
            f"Insufficient history for {subject.symbol}: {len(close)} bars, need {MIN_BARS}"
        )

    current_price = latest(close)
    sma_50 = latest(sma(close, 50))
    sma_200 = latest(sma(close, 200))
    rsi_14 = latest(rsi(close, 14))
    macd_hist = latest(macd_histogram(close))

    bullish: list[str] = []
    bearish: list[str] = []

    if current_price is not None and sma_50 is not None:
        if current_price > sma_50:
            bullish.append("price_above_sma50")
        else:
            bearish.append("price_below_sma50")
    if sma_50 is not None and sma_200 is not None:
        if sma_50 > sma_200:
            bullish.append("golden_cross")
        else:
            bearish.append("death_cross")
    if rsi_14 is not None:
        if rsi_14 < RSI_OVERSOLD:
            bullish.append("rsi_oversold")
        elif rsi_14 > RSI_OVERBOUGHT:
            bearish.append("rsi_overbought")
    if macd_hist is not None:
        if macd_hist > 0:
            bullish.append("macd_positive")
        elif macd_hist < 0:
            bearish.append("macd_negative")

    score = len(bullish) - len(bearish)
    warnings = [] if sma_200 is not None else ["sma200_unavailable"]
    duration_ms = (perf_counter() - start_time) * 1000

    return {
        "type": "technical",
        "meta": build_meta("technical", duration_ms),
        "data_provenance": build_provenance(
            "yfinance", period="1y", interval="1d", bars=len(close), warnings=warnings
        ),
        "current_price": safe_round(current_price, 2),
        "analysis": {
            "indicators": {
                "sma_50": safe_round(sma_50, 2),
                "sma_200": safe_round(sma_200, 2),
                "rsi_14": safe_round(rsi_14, 1),
                "macd_histogram": safe_round(macd_hist, 4),
            },
            "returns": {
                "1m": safe_round(period_return(close, 21), 4),
                "3m": safe_round(period_return(close, 63), 4),
            },
            "signals": {
                "score": score,
                "bullish": bullish,
                "bearish": bearish,
                "overall_signal": tally(score, positive="Buy", negative="Sell", neutral="Neutral"),
            },
        },
    }
