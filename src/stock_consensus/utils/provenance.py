"""Metadata and provenance blocks attached to payloads and reports."""

from datetime import datetime, timezone
from typing import Any

from stock_consensus import SCHEMA_VERSION, SERVER_VERSION


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with a ``Z`` suffix."""
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


def build_meta(component: str, duration_ms: float | None = None) -> dict[str, Any]:
    """
    Build standard metadata block.

    Args:
        component: Name of the analyzer or report producing this block
        duration_ms: Execution time in milliseconds (optional)

    Returns:
        Metadata dict with version info
    """
    meta: dict[str, Any] = {
        "server_version": SERVER_VERSION,
        "schema_version": SCHEMA_VERSION,
        "component": component,
    }
    if duration_ms is not None:
        meta["duration_ms"] = round(duration_ms, 1)
    return meta


def build_provenance(source: str, **kwargs: Any) -> dict[str, Any]:
    """
    Build data provenance block for a single data source.

    Args:
        source: Data source name (e.g., "yfinance")
        **kwargs: Additional provenance fields

    Returns:
        Provenance dict stamped with the fetch time
    """
    prov: dict[str, Any] = {"source": source, "as_of": utc_now_iso()}
    prov.update(kwargs)
    prov.setdefault("warnings", [])
    return prov
