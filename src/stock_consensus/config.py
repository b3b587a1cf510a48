"""Environment-backed configuration helpers.

Every knob is read at call time so tests can override it with
``monkeypatch.setenv`` without reloading modules.
"""

import logging
import os

logger = logging.getLogger(__name__)

# Score reported when no signal-bearing analyzer voted
DEFAULT_CONFIDENCE_FLOOR = 30.0


def env_float(name: str, default: float) -> float:
    """Read a float from the environment, falling back on missing or bad values."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number, using {default}")
        return default


def env_int(name: str, default: int) -> int:
    """Read an int from the environment, falling back on missing or bad values."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default


def env_optional_float(name: str) -> float | None:
    """Read an optional positive float. Unset, blank, zero or negative means None."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number")
        return None
    return value if value > 0 else None


def env_int_tuple(name: str, default: tuple[int, ...]) -> tuple[int, ...]:
    """Read a comma-separated list of positive ints (e.g. ``3,6,12``)."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        values = tuple(int(part) for part in raw.split(",") if part.strip())
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: expected comma-separated integers")
        return default
    if not values or any(v <= 0 for v in values):
        logger.warning(f"Ignoring {name}={raw!r}: values must be positive")
        return default
    return values


def confidence_floor() -> float:
    """Confidence score reported when no analyzer cast a vote."""
    return env_float("CONFIDENCE_FLOOR", DEFAULT_CONFIDENCE_FLOOR)
