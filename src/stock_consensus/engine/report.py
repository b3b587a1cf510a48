"""Structured report and its schema-agnostic text rendering."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from stock_consensus.engine.models import (
    AnalysisOutcome,
    AnalysisSubject,
    ConsolidatedSignal,
    Failure,
    PriceProjection,
    ResultStore,
    SignalSummary,
)
from stock_consensus.engine.signals import SIGNAL_RULES, SignalRule
from stock_consensus.utils.documents import DocumentKind, kind_of, to_document
from stock_consensus.utils.provenance import build_meta, utc_now_iso
from stock_consensus.utils.sanitize import sanitize_text

INDENT = "  "
SECTION_RULE = "=" * 28
SUBSECTION_RULE = "-" * 24
NO_DATA = "No data available"


@dataclass(frozen=True)
class Report:
    """Everything one run produced."""

    subject: AnalysisSubject
    summary: SignalSummary
    price_projections: dict[str, PriceProjection]
    raw: ResultStore
    generated_at: str = field(default_factory=utc_now_iso)
    duration_ms: float | None = None
    rules: tuple[SignalRule, ...] = field(default=SIGNAL_RULES, repr=False)

    @property
    def signal(self) -> ConsolidatedSignal:
        return self.summary.signal

    @property
    def confidence_score(self) -> float:
        return self.summary.confidence

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable document of the whole report."""
        failures = self.raw.failures()
        return {
            "meta": {**build_meta("report", self.duration_ms), "generated_at": self.generated_at},
            "symbol": self.subject.symbol,
            "company_name": self.subject.company_name,
            "consolidated_signal": self.signal.value,
            "consolidated_signal_label": self.signal.label,
            "confidence_score": self.confidence_score,
            "votes": {
                "buy": self.summary.buy_votes,
                "sell": self.summary.sell_votes,
                "total_signals": self.summary.total_signals,
                "buy_pct": self.summary.buy_pct,
                "sell_pct": self.summary.sell_pct,
                "contributions": to_document(list(self.summary.contributions)),
            },
            "price_projections": {
                key: {
                    "horizon_months": p.horizon_months,
                    "predicted_price": p.predicted_price,
                    "confidence": p.confidence,
                }
                for key, p in self.price_projections.items()
            },
            "run_health": {
                "total": len(self.raw),
                "succeeded": len(self.raw) - len(failures),
                "failed": len(failures),
                "failed_analyzers": sorted(failures),
            },
            "results": self.raw.to_dict(),
        }

    def to_text(self) -> str:
        return render_text(self)


def render_value(value: Any, depth: int = 0) -> list[str]:
    """
    Render a document value as indented lines.

    Maps become ``key:`` headers over an indented block, arrays become
    bulleted items, scalars render inline, nulls are skipped. A nested
    container with nothing to show renders as "No data available".
    """
    pad = INDENT * depth
    kind = kind_of(value)

    if kind is DocumentKind.MAP:
        lines: list[str] = []
        for key, item in value.items():
            item_kind = kind_of(item)
            if item_kind is DocumentKind.NULL:
                continue
            label = sanitize_text(str(key), max_length=80)
            if item_kind in (DocumentKind.MAP, DocumentKind.ARRAY):
                lines.append(f"{pad}• {label}:")
                lines.extend(render_value(item, depth + 1) or [f"{pad}{INDENT}{NO_DATA}"])
            else:
                lines.append(f"{pad}• {label}: {_scalar(item)}")
        return lines

    if kind is DocumentKind.ARRAY:
        if not value:
            return [f"{pad}{NO_DATA}"]
        lines = []
        for item in value:
            item_kind = kind_of(item)
            if item_kind is DocumentKind.NULL:
                continue
            if item_kind is DocumentKind.MAP:
                nested = render_value(item, depth + 1)
                if not nested:
                    lines.append(f"{pad}- {NO_DATA}")
                    continue
                # First key shares the bullet line
                lines.append(f"{pad}- {nested[0].lstrip().removeprefix('• ')}")
                lines.extend(nested[1:])
            elif item_kind is DocumentKind.ARRAY:
                lines.append(f"{pad}-")
                lines.extend(render_value(item, depth + 1) or [f"{pad}{INDENT}{NO_DATA}"])
            else:
                lines.append(f"{pad}- {_scalar(item)}")
        return lines

    if kind is DocumentKind.NULL:
        return []
    return [f"{pad}{_scalar(value)}"]


def render_outcome(identity: str, outcome: AnalysisOutcome) -> str:
    """Render one result store entry; failures use the no-data pattern."""
    if isinstance(outcome, Failure):
        return f"No data available for {identity}: {sanitize_text(outcome.message)}"
    lines = render_value(outcome.payload)
    if not lines:
        return f"No detailed data available for {identity}"
    return "\n".join(lines)


def render_text(report: Report) -> str:
    """Plain-text report walking every result store entry generically."""
    subject = report.subject
    summary = report.summary
    out: list[str] = [
        f"Analysis Report for {subject.company_name} ({subject.symbol})",
        f"Generated {report.generated_at}",
        "",
        "CONSOLIDATED RECOMMENDATION",
        SECTION_RULE,
        f"*** {summary.signal.label} ***",
        f"Confidence: {summary.confidence:.1f}/100",
        (
            f"Votes: {summary.buy_votes:g} buy / {summary.sell_votes:g} sell "
            f"across {summary.total_signals} signals "
            f"({summary.buy_pct:.1f}% buy, {summary.sell_pct:.1f}% sell)"
        ),
        "",
        "KEY INDICATORS",
        SECTION_RULE,
    ]
    out.extend(_key_indicator_lines(report.rules, summary))

    out.extend(["", "PRICE PROJECTIONS", SECTION_RULE])
    if report.price_projections:
        for key, projection in report.price_projections.items():
            out.append(
                f"• {key}: {projection.predicted_price:.2f} "
                f"(confidence {projection.confidence:.1f})"
            )
    else:
        out.append("No data available for price projections")

    failed = report.raw.failure_count
    out.extend(
        [
            "",
            "ANALYZER RESULTS",
            SECTION_RULE,
            f"{len(report.raw) - failed} of {len(report.raw)} analyzers returned data",
        ]
    )
    for identity, outcome in report.raw.items():
        out.extend(["", identity, SUBSECTION_RULE, render_outcome(identity, outcome)])

    return "\n".join(out) + "\n"


def _key_indicator_lines(rules: Iterable[SignalRule], summary: SignalSummary) -> list[str]:
    by_identity = {c.identity: c for c in summary.contributions}
    lines = []
    for rule in rules:
        contribution = by_identity.get(rule.identity)
        value = contribution.value if contribution is not None else None
        if kind_of(value) in (DocumentKind.NULL, DocumentKind.MAP, DocumentKind.ARRAY):
            shown = "N/A"
        else:
            shown = _scalar(value)
        lines.append(f"• {rule.label or rule.identity}: {shown}")
    return lines


def _scalar(value: Any) -> str:
    kind = kind_of(value)
    if kind is DocumentKind.BOOL:
        return "yes" if value else "no"
    if kind is DocumentKind.NUMBER and isinstance(value, float):
        if value.is_integer() and abs(value) < 1e15:
            return f"{int(value):,}"
        if abs(value) >= 1:
            return f"{value:,.2f}"
        return f"{value:.4g}"
    if kind is DocumentKind.NUMBER:
        return f"{value:,}"
    return sanitize_text(str(value)) or ""
