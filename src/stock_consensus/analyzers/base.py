"""Shared helpers for the bundled analyzers."""

from typing import Any

import pandas as pd


def safe_float(value: Any) -> float | None:
    """Convert to float; None for missing, NaN or unparseable values."""
    if value is None:
        return None
    try:
        result = float(value)
    except (ValueError, TypeError):
        return None
    if pd.isna(result):
        return None
    return result


def safe_round(value: Any, decimals: int) -> float | None:
    """Round to decimals or return None."""
    number = safe_float(value)
    if number is None:
        return None
    return round(number, decimals)


def tally(score: int, *, positive: str, negative: str, neutral: str, margin: int = 2) -> str:
    """Turn a net rule score into a label once it clears ``margin``."""
    if score >= margin:
        return positive
    if score <= -margin:
        return negative
    return neutral
