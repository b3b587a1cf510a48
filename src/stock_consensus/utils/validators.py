"""Validation utilities and parameter classes."""

import operator
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

VALID_PERIODS = {"1mo", "3mo", "6mo", "1y", "2y", "5y"}
VALID_INTERVALS = {"1d", "1wk", "1mo"}


@dataclass(frozen=True)
class FetchParams:
    """Immutable price-history request."""

    symbol: str
    period: str = "1y"
    interval: str = "1d"
    adjusted: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", self.symbol.upper().strip())

        period = self.period.lower().strip()
        interval = self.interval.lower().strip()

        if period not in VALID_PERIODS:
            raise ValueError(f"Invalid period '{self.period}'. Must be one of: {sorted(VALID_PERIODS)}")
        if interval not in VALID_INTERVALS:
            raise ValueError(
                f"Invalid interval '{self.interval}'. Must be one of: {sorted(VALID_INTERVALS)}"
            )

        object.__setattr__(self, "period", period)
        object.__setattr__(self, "interval", interval)

    def to_yf_kwargs(self) -> dict[str, Any]:
        """Kwargs for yf.download()."""
        return {
            "tickers": self.symbol,
            "period": self.period,
            "interval": self.interval,
            "auto_adjust": self.adjusted,
            "progress": False,
        }


def check_rule(
    value: float | None,
    threshold: float,
    comparator: Callable[[float, float], bool] = operator.gt,
) -> bool | None:
    """
    Check a rule with nullable boolean semantics.

    If value is None, returns None (not False).
    """
    if value is None:
        return None
    return comparator(value, threshold)
