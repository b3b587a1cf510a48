"""Core data model: subjects, invocations, outcomes and the per-run result store."""

import math
from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Protocol, Union, runtime_checkable


class AnalysisError(ValueError):
    """Base class for failures that abort a whole run."""


class InvalidSubjectError(AnalysisError):
    """Raised when a run cannot start because its subject is malformed."""


@dataclass(frozen=True)
class AnalysisSubject:
    """
    Immutable input for one run.

    ``symbol`` is normalized (stripped, upper case). ``company_name`` falls
    back to the symbol. ``current_price`` is optional; when omitted the
    orchestrator reads it from the quote analyzer's payload.
    """

    symbol: str
    company_name: str | None = None
    current_price: float | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.symbol, str) or not self.symbol.strip():
            raise InvalidSubjectError(f"Invalid symbol: {self.symbol!r}")
        symbol = self.symbol.upper().strip()
        object.__setattr__(self, "symbol", symbol)

        name = self.company_name.strip() if isinstance(self.company_name, str) else ""
        object.__setattr__(self, "company_name", name or symbol)

        if self.current_price is not None:
            try:
                price = float(self.current_price)
            except (TypeError, ValueError):
                raise InvalidSubjectError(
                    f"Invalid current price for {symbol}: {self.current_price!r}"
                ) from None
            if math.isnan(price) or price <= 0:
                raise InvalidSubjectError(f"Invalid current price for {symbol}: {price}")
            object.__setattr__(self, "current_price", price)


@runtime_checkable
class Analyzer(Protocol):
    """Capability every analysis provider implements."""

    async def analyze(self, subject: AnalysisSubject) -> Any:
        """Return a structured payload or raise to signal failure."""
        ...


# An analyzer may also be a plain coroutine function taking the subject
AnalyzerFn = Callable[[AnalysisSubject], Awaitable[Any]]


@dataclass(frozen=True)
class AnalyzerInvocation:
    """One unit of work: an identity plus a zero-argument coroutine factory."""

    identity: str
    run: Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class Success:
    """Analyzer completed; ``payload`` is a normalized JSON document."""

    payload: Any
    duration_ms: float | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Analyzer raised or timed out."""

    message: str
    error_type: str = "Exception"
    duration_ms: float | None = None

    @property
    def ok(self) -> bool:
        return False


AnalysisOutcome = Union[Success, Failure]


class ResultStore(Mapping[str, AnalysisOutcome]):
    """
    Read-only identity -> outcome mapping produced by one run.

    Built once by the executor and never mutated afterwards, so the
    aggregator and formatter can read it without coordination.
    """

    def __init__(self, outcomes: Mapping[str, AnalysisOutcome] | None = None):
        self._outcomes: Mapping[str, AnalysisOutcome] = MappingProxyType(dict(outcomes or {}))

    def __getitem__(self, identity: str) -> AnalysisOutcome:
        return self._outcomes[identity]

    def __iter__(self) -> Iterator[str]:
        return iter(self._outcomes)

    def __len__(self) -> int:
        return len(self._outcomes)

    def __repr__(self) -> str:
        return f"ResultStore(size={len(self)}, failures={self.failure_count})"

    def successes(self) -> dict[str, Success]:
        return {k: v for k, v in self._outcomes.items() if isinstance(v, Success)}

    def failures(self) -> dict[str, Failure]:
        return {k: v for k, v in self._outcomes.items() if isinstance(v, Failure)}

    @property
    def failure_count(self) -> int:
        return sum(1 for v in self._outcomes.values() if isinstance(v, Failure))

    def payload(self, identity: str) -> Any:
        """Payload of a successful analyzer, or None if absent or failed."""
        outcome = self._outcomes.get(identity)
        if isinstance(outcome, Success):
            return outcome.payload
        return None

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible view of every outcome."""
        raw: dict[str, Any] = {}
        for identity, outcome in self._outcomes.items():
            if isinstance(outcome, Success):
                raw[identity] = {
                    "ok": True,
                    "data": outcome.payload,
                    "duration_ms": outcome.duration_ms,
                }
            else:
                raw[identity] = {
                    "ok": False,
                    "error": outcome.error_type,
                    "message": outcome.message,
                    "duration_ms": outcome.duration_ms,
                }
        return raw


class ConsolidatedSignal(str, Enum):
    """Final buy/hold/sell classification."""

    STRONG_BUY = "strong_buy"
    MODERATE_BUY = "moderate_buy"
    HOLD = "hold"
    MODERATE_SELL = "moderate_sell"
    STRONG_SELL = "strong_sell"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").upper()


@dataclass(frozen=True)
class PriceProjection:
    """Predicted price for one horizon with its paired confidence."""

    horizon_months: int
    predicted_price: float
    confidence: float


@dataclass(frozen=True)
class VoteContribution:
    """How one signal-bearing analyzer voted."""

    identity: str
    value: Any
    vote: str
    weight: float


@dataclass(frozen=True)
class SignalSummary:
    """Outcome of the weighted vote."""

    signal: ConsolidatedSignal
    confidence: float
    buy_votes: float
    sell_votes: float
    total_signals: int
    buy_pct: float
    sell_pct: float
    contributions: tuple[VoteContribution, ...] = field(default_factory=tuple)
