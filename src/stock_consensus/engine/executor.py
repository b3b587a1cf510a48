"""Fan-out/fan-in execution of analyzer invocations."""

import asyncio
import inspect
import logging
from collections.abc import Iterable
from time import perf_counter

from stock_consensus.config import env_optional_float
from stock_consensus.engine.models import (
    AnalysisOutcome,
    AnalyzerInvocation,
    Failure,
    ResultStore,
    Success,
)
from stock_consensus.utils.documents import to_document

logger = logging.getLogger(__name__)


class TaskExecutor:
    """
    Run every invocation concurrently and wait until all have settled.

    Each invocation is wrapped in its own error boundary: an exception becomes
    a ``Failure`` entry and never cancels or affects its siblings. The join is
    all-settled, there are no retries, and the executor itself never raises
    for an analyzer error.

    Args:
        timeout: Optional per-invocation limit in seconds. None (the default)
            lets every invocation run to completion.
    """

    def __init__(self, timeout: float | None = None):
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        self.timeout = timeout

    @classmethod
    def from_env(cls) -> "TaskExecutor":
        """Executor configured from ``ANALYZER_TIMEOUT_SECONDS``."""
        return cls(timeout=env_optional_float("ANALYZER_TIMEOUT_SECONDS"))

    async def run(self, invocations: Iterable[AnalyzerInvocation]) -> ResultStore:
        """
        Dispatch all invocations and collect exactly one outcome per identity.

        Args:
            invocations: Units of work; a repeated identity keeps the last one

        Returns:
            Freshly built, read-only ResultStore
        """
        start_time = perf_counter()
        invocations = list(invocations)

        settled = await asyncio.gather(*[self._settle(inv) for inv in invocations])

        # Single write point after the join; dict order follows registration
        outcomes: dict[str, AnalysisOutcome] = {}
        for identity, outcome in settled:
            outcomes[identity] = outcome
        store = ResultStore(outcomes)

        total_ms = (perf_counter() - start_time) * 1000
        logger.info(
            f"Settled {len(store)} analyzers in {total_ms:.0f}ms "
            f"({len(store) - store.failure_count} ok, {store.failure_count} failed)"
        )
        return store

    async def _settle(self, invocation: AnalyzerInvocation) -> tuple[str, AnalysisOutcome]:
        name = invocation.identity
        task_start = perf_counter()
        logger.debug(f"Executing {name} analyzer")

        # A None delay never expires
        deadline = asyncio.timeout(self.timeout)
        try:
            result = invocation.run()
            if inspect.isawaitable(result):
                async with deadline:
                    result = await result
            payload = to_document(result)
        except TimeoutError as e:
            duration = (perf_counter() - task_start) * 1000
            reason = f"exceeded {self.timeout}s" if deadline.expired() else str(e) or "timed out"
            message = f"{name} analysis failed: {reason}"
            logger.warning(message)
            return name, Failure(message, "TimeoutError", round(duration, 1))
        except asyncio.CancelledError:
            # Cancellation of the run itself must still propagate
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            duration = (perf_counter() - task_start) * 1000
            message = f"{name} analysis failed: cancelled"
            logger.warning(message)
            return name, Failure(message, "CancelledError", round(duration, 1))
        except Exception as e:
            duration = (perf_counter() - task_start) * 1000
            message = f"{name} analysis failed: {e}"
            logger.warning(message, exc_info=logger.isEnabledFor(logging.DEBUG))
            return name, Failure(message, type(e).__name__, round(duration, 1))

        duration = (perf_counter() - task_start) * 1000
        return name, Success(payload, round(duration, 1))
