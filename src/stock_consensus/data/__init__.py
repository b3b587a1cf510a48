"""Data layer for the bundled analyzers."""

from stock_consensus.data.yfinance_client import (
    ServerShuttingDownError,
    YFinanceRetryError,
    fetch_attribute,
    fetch_history,
    fetch_info,
    get_market_state,
    shutdown_executor,
    standardize_ohlcv,
)

__all__ = [
    "ServerShuttingDownError",
    "YFinanceRetryError",
    "fetch_attribute",
    "fetch_history",
    "fetch_info",
    "get_market_state",
    "shutdown_executor",
    "standardize_ohlcv",
]
