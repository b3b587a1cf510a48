"""Placeholder price projections per horizon.

This is a deliberately naive estimator: a bounded random perturbation that
widens with the horizon, times a fixed annual drift. Its constants live in
``ProjectionPolicy`` so it can be tuned or replaced without touching the
report code. It makes no accuracy claim.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from stock_consensus.config import env_float, env_int_tuple
from stock_consensus.engine.models import PriceProjection

logger = logging.getLogger(__name__)

DEFAULT_HORIZONS_MONTHS: tuple[int, ...] = (3, 6, 12, 24)


@dataclass(frozen=True)
class ProjectionPolicy:
    """
    Numeric policy for the projection estimator.

    Attributes:
        annual_volatility: Scales the random spread (0.20 = 20%/year)
        annual_drift: Assumed yearly trend (0.08 = +8%/year)
        horizons_months: Horizons to project, in months
        confidence_decay_per_month: Confidence points lost per month ahead
        min_confidence: Lower bound for any horizon's confidence
    """

    annual_volatility: float = 0.20
    annual_drift: float = 0.08
    horizons_months: tuple[int, ...] = DEFAULT_HORIZONS_MONTHS
    confidence_decay_per_month: float = 2.0
    min_confidence: float = 0.0

    def __post_init__(self) -> None:
        if self.annual_volatility < 0:
            raise ValueError(f"annual_volatility must be >= 0, got {self.annual_volatility}")
        if not self.horizons_months or any(m <= 0 for m in self.horizons_months):
            raise ValueError(f"horizons_months must be positive, got {self.horizons_months}")
        if self.confidence_decay_per_month < 0:
            raise ValueError("confidence_decay_per_month must be >= 0")
        # The random factor spans 1 +/- spread/2; keep it strictly positive
        if self.max_spread(max(self.horizons_months)) >= 2:
            raise ValueError(
                f"annual_volatility={self.annual_volatility} is too wide for a "
                f"{max(self.horizons_months)}-month horizon"
            )
        if 1 + (max(self.horizons_months) / 12) * self.annual_drift <= 0:
            raise ValueError(f"annual_drift={self.annual_drift} drives prices below zero")

    @classmethod
    def from_env(cls) -> "ProjectionPolicy":
        """
        Policy built from ``PROJECTION_*`` environment variables.

        A combination that fails validation is logged and replaced by the
        default policy.
        """
        try:
            return cls(
                annual_volatility=env_float("PROJECTION_ANNUAL_VOLATILITY", 0.20),
                annual_drift=env_float("PROJECTION_ANNUAL_DRIFT", 0.08),
                horizons_months=env_int_tuple("PROJECTION_HORIZONS", DEFAULT_HORIZONS_MONTHS),
                confidence_decay_per_month=env_float("PROJECTION_CONFIDENCE_DECAY", 2.0),
            )
        except ValueError as e:
            logger.warning(f"Ignoring PROJECTION_* settings: {e}, using defaults")
            return cls()

    def max_spread(self, months: int) -> float:
        """Full width of the random factor's range for a horizon."""
        return self.annual_volatility / math.sqrt(12) * months


def horizon_key(months: int) -> str:
    return f"{months}m"


def project_prices(
    current_price: float | None,
    base_confidence: float,
    policy: ProjectionPolicy | None = None,
    rng: np.random.Generator | None = None,
) -> dict[str, PriceProjection]:
    """
    Project prices for every horizon in the policy.

    predicted = current * (1 + (u - 0.5) * spread(m)) * (1 + m / 12 * drift)
    with u ~ U[0, 1), and confidence = max(min, base - m * decay).

    Args:
        current_price: Latest price; None or non-positive yields no projections
        base_confidence: Starting confidence (usually the report score)
        policy: Numeric policy (default: ProjectionPolicy())
        rng: Random source; pass a seeded generator for reproducible output

    Returns:
        Dict keyed by horizon label ("3m", "6m", ...) in horizon order
    """
    if current_price is None or not current_price > 0:
        return {}
    policy = policy or ProjectionPolicy()
    rng = rng or np.random.default_rng()

    projections: dict[str, PriceProjection] = {}
    for months in sorted(set(policy.horizons_months)):
        random_factor = 1 + (rng.random() - 0.5) * policy.max_spread(months)
        trend_factor = 1 + (months / 12) * policy.annual_drift
        confidence = max(
            policy.min_confidence,
            base_confidence - months * policy.confidence_decay_per_month,
        )
        projections[horizon_key(months)] = PriceProjection(
            horizon_months=months,
            predicted_price=round(current_price * random_factor * trend_factor, 2),
            confidence=round(confidence, 2),
        )
    return projections
