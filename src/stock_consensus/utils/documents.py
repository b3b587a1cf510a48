"""JSON document model for loosely-typed analyzer payloads.

Analyzer payloads have no fixed schema. They are normalized once into plain
JSON values (None, bool, int/float, str, list, dict with str keys) so the
aggregator and formatter can walk them by kind without knowing their shape.
"""

import dataclasses
import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd


class DocumentKind(str, Enum):
    """Tag for each JSON value variant."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    MAP = "map"


def kind_of(value: Any) -> DocumentKind:
    """
    Classify a normalized document value.

    Anything that is not a recognized container or number is reported as a
    string, since ``to_document`` stringifies unknown objects.
    """
    if value is None:
        return DocumentKind.NULL
    # bool before number: bool is an int subclass
    if isinstance(value, bool):
        return DocumentKind.BOOL
    if isinstance(value, (int, float)):
        return DocumentKind.NUMBER
    if isinstance(value, list):
        return DocumentKind.ARRAY
    if isinstance(value, dict):
        return DocumentKind.MAP
    return DocumentKind.STRING


def to_document(value: Any) -> Any:
    """
    Normalize an arbitrary Python value into a JSON-compatible document.

    Handles numpy scalars/arrays, pandas objects, NaN/inf (-> None),
    dataclasses, enums, datetimes and any Mapping, Sequence or set. Bytes
    and unknown objects fall back to ``str(value)`` so normalization never
    raises.

    Args:
        value: Any analyzer output

    Returns:
        Equivalent value built only from JSON types
    """
    if isinstance(value, Enum):
        return to_document(value.value)
    if value is None or isinstance(value, (bool, str)):
        return value
    if value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        number = float(value)
        if math.isnan(number) or math.isinf(number):
            return None
        return number
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, np.ndarray):
        return [to_document(v) for v in value.tolist()]
    if isinstance(value, pd.DataFrame):
        return [to_document(row) for row in value.to_dict("records")]
    if isinstance(value, (Mapping, pd.Series)):
        return {str(k): to_document(v) for k, v in value.items()}
    if isinstance(value, (bytes, bytearray)):
        return str(value)
    if isinstance(value, (Sequence, set, frozenset)):
        return [to_document(v) for v in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_document(dataclasses.asdict(value))
    return str(value)


def dig(document: Any, *path: str) -> Any:
    """
    Safe nested lookup.

    Returns None as soon as any step is missing or is not a map, so callers
    never need to guard intermediate levels.

    >>> dig({"analysis": {"risk_level": "low"}}, "analysis", "risk_level")
    'low'
    >>> dig({"analysis": ["x"]}, "analysis", "risk_level") is None
    True
    """
    current = document
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current
