"""Run one analysis: fan out, consolidate, project, report."""

import asyncio
import logging
from collections.abc import Iterable
from time import perf_counter
from typing import Any

import numpy as np

from stock_consensus.engine.executor import TaskExecutor
from stock_consensus.engine.models import AnalysisSubject, InvalidSubjectError, ResultStore
from stock_consensus.engine.projections import ProjectionPolicy, project_prices
from stock_consensus.engine.registry import AnalyzerRegistry
from stock_consensus.engine.report import Report
from stock_consensus.engine.signals import SIGNAL_RULES, SignalRule, consolidate
from stock_consensus.utils.documents import dig

logger = logging.getLogger(__name__)

# Where to look for a current price when the subject does not carry one
PRICE_SOURCES: tuple[tuple[str, ...], ...] = (
    ("quote", "current_price"),
    ("technical", "current_price"),
)


def resolve_current_price(subject: AnalysisSubject, store: ResultStore) -> float | None:
    """Subject's own price first, then the first positive price found in payloads."""
    if subject.current_price is not None:
        return subject.current_price
    for identity, *path in PRICE_SOURCES:
        value = dig(store.payload(identity), *path)
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            return float(value)
    return None


def build_report(
    subject: AnalysisSubject,
    store: ResultStore,
    *,
    policy: ProjectionPolicy | None = None,
    rng: np.random.Generator | None = None,
    rules: Iterable[SignalRule] = SIGNAL_RULES,
    floor: float | None = None,
    duration_ms: float | None = None,
) -> Report:
    """
    Consolidate a finished result store into a Report.

    Pure apart from the projection random source; calling it twice on the
    same store yields the same signal and confidence.
    """
    rules = tuple(rules)
    summary = consolidate(store, rules, floor=floor)
    projections = project_prices(
        resolve_current_price(subject, store),
        summary.confidence,
        policy=policy,
        rng=rng,
    )
    return Report(
        subject=subject,
        summary=summary,
        price_projections=projections,
        raw=store,
        duration_ms=round(duration_ms, 1) if duration_ms is not None else None,
        rules=rules,
    )


async def run_analysis(
    subject: AnalysisSubject,
    registry: AnalyzerRegistry,
    *,
    executor: TaskExecutor | None = None,
    policy: ProjectionPolicy | None = None,
    rng: np.random.Generator | None = None,
    rules: Iterable[SignalRule] = SIGNAL_RULES,
) -> Report:
    """
    Analyze one subject with every registered analyzer.

    Analyzer failures never escape: they are recorded in the report. The only
    error raised is InvalidSubjectError when the run cannot start.

    Args:
        subject: What to analyze
        registry: Analyzers to run
        executor: Fan-out engine (default: configured from environment)
        policy: Projection policy (default: configured from environment)
        rng: Random source for projections
        rules: Signal table

    Returns:
        Report with signal, confidence, projections and raw results
    """
    if not isinstance(subject, AnalysisSubject):
        raise InvalidSubjectError(f"Expected AnalysisSubject, got {type(subject).__name__}")

    start_time = perf_counter()
    executor = executor or TaskExecutor.from_env()
    policy = policy or ProjectionPolicy.from_env()

    logger.info(f"Starting analysis of {subject.symbol} with {len(registry)} analyzers")
    store = await executor.run(registry.bind(subject))

    duration_ms = (perf_counter() - start_time) * 1000
    report = build_report(
        subject, store, policy=policy, rng=rng, rules=rules, duration_ms=duration_ms
    )
    logger.info(
        f"{subject.symbol}: {report.signal.label} "
        f"(confidence {report.confidence_score:.1f}, "
        f"{store.failure_count}/{len(store)} analyzers failed)"
    )
    return report


def analyze_symbol(
    symbol: str,
    company_name: str | None = None,
    registry: AnalyzerRegistry | None = None,
    **kwargs: Any,
) -> Report:
    """
    Synchronous convenience wrapper around ``run_analysis``.

    Uses the bundled analyzers when no registry is given. Must not be called
    from inside a running event loop.
    """
    subject = AnalysisSubject(symbol=symbol, company_name=company_name)
    if registry is None:
        from stock_consensus.analyzers import default_registry

        registry = default_registry()
    return asyncio.run(run_analysis(subject, registry, **kwargs))
