"""Analyzer registry: identity -> analyzer, bound to a subject per run."""

import logging
from collections.abc import Iterator
from typing import Any, Union

from stock_consensus.engine.models import (
    AnalysisSubject,
    Analyzer,
    AnalyzerFn,
    AnalyzerInvocation,
)

logger = logging.getLogger(__name__)

AnalyzerLike = Union[Analyzer, AnalyzerFn]


class AnalyzerRegistry:
    """
    Ordered map of analyzers keyed by identity.

    Registering an identity twice replaces the earlier analyzer but keeps its
    original position, so one run produces exactly one outcome per identity.
    """

    def __init__(self, analyzers: dict[str, AnalyzerLike] | None = None):
        self._analyzers: dict[str, AnalyzerLike] = {}
        for identity, analyzer in (analyzers or {}).items():
            self.register(identity, analyzer)

    def register(self, identity: str, analyzer: AnalyzerLike) -> None:
        if not isinstance(identity, str) or not identity:
            raise ValueError(f"Analyzer identity must be a non-empty string, got {identity!r}")
        if not (isinstance(analyzer, Analyzer) or callable(analyzer)):
            raise TypeError(f"Analyzer {identity!r} is neither callable nor has analyze()")
        if identity in self._analyzers:
            logger.debug(f"Replacing analyzer '{identity}'")
        self._analyzers[identity] = analyzer

    def unregister(self, identity: str) -> None:
        self._analyzers.pop(identity, None)

    def identities(self) -> list[str]:
        return list(self._analyzers)

    def __contains__(self, identity: object) -> bool:
        return identity in self._analyzers

    def __len__(self) -> int:
        return len(self._analyzers)

    def __iter__(self) -> Iterator[str]:
        return iter(self._analyzers)

    def copy(self) -> "AnalyzerRegistry":
        return AnalyzerRegistry(dict(self._analyzers))

    def bind(self, subject: AnalysisSubject) -> list[AnalyzerInvocation]:
        """Create one zero-argument invocation per registered analyzer."""
        return [
            AnalyzerInvocation(identity=identity, run=_bind(analyzer, subject))
            for identity, analyzer in self._analyzers.items()
        ]


def _bind(analyzer: AnalyzerLike, subject: AnalysisSubject) -> Any:
    if isinstance(analyzer, Analyzer):
        return lambda: analyzer.analyze(subject)
    return lambda: analyzer(subject)
