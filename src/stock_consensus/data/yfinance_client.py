"""Async yfinance client with bounded concurrency and retry logic."""

import asyncio
import logging
import random
import weakref
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, TypeVar

import pandas as pd
import pytz
import yfinance as yf
from requests.exceptions import HTTPError

from stock_consensus.config import env_float, env_int
from stock_consensus.utils.validators import FetchParams

logger = logging.getLogger(__name__)

# Worker threads shared by every blocking yfinance call
_max_workers = max(1, env_int("YF_MAX_WORKERS", 4))
_executor = ThreadPoolExecutor(max_workers=_max_workers, thread_name_prefix="yfinance")
# One semaphore per event loop; asyncio primitives cannot be shared across loops
_loop_semaphores: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Semaphore]" = (
    weakref.WeakKeyDictionary()
)

# Retries and backoff, delays in seconds
_max_retries = env_int("YF_MAX_RETRIES", 3)
_base_delay = env_float("YF_BASE_DELAY", 1.0)
_max_delay = env_float("YF_MAX_DELAY", 30.0)

shutdown_event = asyncio.Event()

T = TypeVar("T")

OHLCV_COLUMNS = ["date", "open", "high", "low", "close", "volume"]


def _fetch_semaphore() -> asyncio.Semaphore:
    loop = asyncio.get_running_loop()
    semaphore = _loop_semaphores.get(loop)
    if semaphore is None:
        semaphore = _loop_semaphores[loop] = asyncio.Semaphore(_max_workers)
    return semaphore


class ServerShuttingDownError(Exception):
    """Raised when the process is shutting down."""


class YFinanceRetryError(Exception):
    """Raised when yfinance fails after all retries."""

    def __init__(self, message: str, last_error: Exception | None = None):
        super().__init__(message)
        self.last_error = last_error


def _retry_limit(error: Exception) -> int:
    """
    How many retries an error deserves; 0 means not retryable.

    401 "Invalid Crumb" rarely recovers, so it gets a single retry.
    """
    if isinstance(error, HTTPError) and getattr(error, "response", None) is not None:
        status_code = error.response.status_code
        if status_code == 401:
            return 1
        if status_code == 429 or 500 <= status_code < 600:
            return _max_retries

    error_str = str(error).lower()
    if "401" in error_str or "invalid crumb" in error_str:
        return 1
    transient = ("rate limit", "too many requests", "connection", "timeout", "temporary")
    if any(pattern in error_str for pattern in transient):
        return _max_retries
    return 0


def _backoff_delay(attempt: int) -> float:
    """Exponential backoff with +/-25% jitter, capped at the max delay."""
    delay = _base_delay * (2**attempt)
    delay += delay * 0.25 * (2 * random.random() - 1)
    return min(delay, _max_delay)


async def _call_with_retry(operation_name: str, sync_func: Callable[[], T]) -> T:
    """
    Run a blocking call on the worker pool, retrying transient errors.

    Raises:
        YFinanceRetryError: If all retries are exhausted
        ServerShuttingDownError: If shutdown has started
        Exception: Non-retryable errors propagate unchanged
    """
    attempt = 0
    while True:
        if shutdown_event.is_set():
            raise ServerShuttingDownError("Server is shutting down")
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(_executor, sync_func)
        except Exception as e:
            limit = min(_max_retries, _retry_limit(e))
            if limit == 0:
                raise
            if attempt >= limit:
                logger.warning(
                    f"{operation_name}: Failed after {attempt + 1} attempts. Last error: {e}"
                )
                raise YFinanceRetryError(
                    f"Failed after {attempt + 1} attempts: {e}", last_error=e
                ) from e

            delay = _backoff_delay(attempt)
            logger.info(
                f"{operation_name}: Attempt {attempt + 1} failed ({e}). "
                f"Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)
            attempt += 1


def standardize_ohlcv(df: pd.DataFrame) -> pd.DataFrame:
    """
    Flatten a yfinance frame to lowercase date/open/high/low/close/volume.

    The date column keeps its datetime dtype so returns can be aligned on it.
    """
    df = df.copy()
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = df.columns.get_level_values(0)
    df = df.drop(columns=["Adj Close"], errors="ignore")
    df.columns = [str(c).lower() for c in df.columns]
    df = df.reset_index()
    df = df.rename(columns={df.columns[0]: "date"})
    for col in OHLCV_COLUMNS:
        if col not in df.columns:
            df[col] = pd.NA
    return df[OHLCV_COLUMNS]


async def fetch_history(params: FetchParams) -> pd.DataFrame:
    """
    Fetch price history.

    Raises:
        ValueError: If no data is returned for the symbol
        YFinanceRetryError: If all retries are exhausted
    """

    def _fetch() -> pd.DataFrame:
        df = yf.download(**params.to_yf_kwargs())
        if df is None or df.empty:
            raise ValueError(f"No data returned for {params.symbol}")
        return standardize_ohlcv(df)

    async with _fetch_semaphore():
        return await _call_with_retry(f"fetch_history({params.symbol})", _fetch)


async def fetch_info(symbol: str) -> dict[str, Any]:
    """
    Fetch the quote/fundamentals info dict.

    Raises:
        ValueError: If the symbol is unknown
        YFinanceRetryError: If all retries are exhausted
    """
    normalized_symbol = symbol.upper().strip()

    def _fetch() -> dict[str, Any]:
        info = yf.Ticker(normalized_symbol).info
        if not info:
            raise ValueError(f"Invalid symbol: {symbol}")
        return info

    async with _fetch_semaphore():
        return await _call_with_retry(f"fetch_info({normalized_symbol})", _fetch)


async def fetch_attribute(symbol: str, attribute: str) -> Any:
    """
    Read a lazily-loaded Ticker attribute (``news``, ``recommendations`` ...).

    Attribute access performs the HTTP request, so it runs on the worker pool.
    """
    normalized_symbol = symbol.upper().strip()

    def _fetch() -> Any:
        return getattr(yf.Ticker(normalized_symbol), attribute)

    async with _fetch_semaphore():
        return await _call_with_retry(f"fetch_{attribute}({normalized_symbol})", _fetch)


def get_market_state(tz: str = "America/New_York") -> dict[str, str]:
    """
    US session for the current wall-clock time in ``tz``.

    Weekends and hours outside 04:00-20:00 are closed; exchange holidays
    are not known, so a holiday reads as a normal session.
    """
    now = datetime.now(pytz.timezone(tz))

    minutes = now.hour * 60 + now.minute
    if now.weekday() >= 5 or minutes < 4 * 60 or minutes >= 20 * 60:
        state = "closed"
    elif minutes < 9 * 60 + 30:
        state = "pre_market"
    elif minutes < 16 * 60:
        state = "regular"
    else:
        state = "after_hours"

    return {
        "state": state,
        "method": "clock_only_no_holidays",
        "checked_at": now.isoformat(),
    }


async def shutdown_executor() -> None:
    """Refuse new fetches and stop the worker pool."""
    shutdown_event.set()
    _executor.shutdown(wait=False, cancel_futures=True)
