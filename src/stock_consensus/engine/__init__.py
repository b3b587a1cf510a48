"""Orchestration and aggregation engine."""

from stock_consensus.engine.executor import TaskExecutor
from stock_consensus.engine.models import (
    AnalysisError,
    AnalysisOutcome,
    AnalysisSubject,
    Analyzer,
    AnalyzerInvocation,
    ConsolidatedSignal,
    Failure,
    InvalidSubjectError,
    PriceProjection,
    ResultStore,
    SignalSummary,
    Success,
    VoteContribution,
)
from stock_consensus.engine.orchestrator import (
    analyze_symbol,
    build_report,
    resolve_current_price,
    run_analysis,
)
from stock_consensus.engine.projections import ProjectionPolicy, project_prices
from stock_consensus.engine.registry import AnalyzerRegistry
from stock_consensus.engine.report import Report, render_outcome, render_text, render_value
from stock_consensus.engine.signals import (
    SIGNAL_RULES,
    SignalRule,
    Vote,
    classify_risk_level,
    classify_text,
    consolidate,
    select_signal,
)

__all__ = [
    # Model
    "AnalysisError",
    "AnalysisOutcome",
    "AnalysisSubject",
    "Analyzer",
    "AnalyzerInvocation",
    "ConsolidatedSignal",
    "Failure",
    "InvalidSubjectError",
    "PriceProjection",
    "ResultStore",
    "SignalSummary",
    "Success",
    "VoteContribution",
    # Execution
    "AnalyzerRegistry",
    "TaskExecutor",
    "analyze_symbol",
    "build_report",
    "resolve_current_price",
    "run_analysis",
    # Aggregation
    "SIGNAL_RULES",
    "SignalRule",
    "Vote",
    "classify_risk_level",
    "classify_text",
    "consolidate",
    "select_signal",
    # Reporting
    "ProjectionPolicy",
    "Report",
    "project_prices",
    "render_outcome",
    "render_text",
    "render_value",
]
