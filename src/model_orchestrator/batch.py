"""
Concurrent batch execution.

All requests in a batch run concurrently on the current event loop.  One
request's failure (even an unexpected exception) never cancels the others
or shortens the result list; results come back in input order.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from .errors import UnexpectedExecutionError
from .models import TaskRequest, TaskResult, elapsed_ms_since

if TYPE_CHECKING:
    from .executor import ModelOrchestrator

logger = logging.getLogger(__name__)


def unexpected_failure(error: BaseException, elapsed_ms: int = 0) -> TaskResult:
    """
    Convert an exception that escaped ``execute`` into a failure result.

    No provider can be attributed, so ``provider`` is the ``None``
    placeholder.
    """
    wrapped = UnexpectedExecutionError(error)
    return TaskResult(
        success=False,
        provider=None,
        elapsed_ms=elapsed_ms,
        error=str(wrapped),
        error_category=wrapped.category,
        attempts=0,
    )


async def execute_batch(
    orchestrator: ModelOrchestrator,
    requests: list[TaskRequest],
    max_concurrency: int | None = None,
) -> list[TaskResult]:
    """
    Execute many requests concurrently, isolating individual failures.

    Args:
        orchestrator: Orchestrator whose ``execute`` runs each request.
        requests: Requests to run.
        max_concurrency: Optional cap on in-flight requests.  ``None`` means
            unbounded; callers are responsible for reasonable batch sizes.

    Returns:
        One :class:`TaskResult` per request, in input order.

    Raises:
        ValueError: ``max_concurrency`` is less than 1.
    """
    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")

    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def guarded(index: int, request: TaskRequest) -> TaskResult:
        start = time.monotonic()
        try:
            return await orchestrator.execute(request)
        except Exception as exc:
            logger.error(
                "Batch request %d raised %s: %s",
                index, type(exc).__name__, exc,
            )
            return unexpected_failure(exc, elapsed_ms_since(start))

    async def run_one(index: int, request: TaskRequest) -> TaskResult:
        if semaphore is None:
            return await guarded(index, request)
        async with semaphore:
            return await guarded(index, request)

    batch_start = time.monotonic()
    outcomes = await asyncio.gather(
        *(run_one(index, request) for index, request in enumerate(requests)),
        return_exceptions=True,
    )

    results: list[TaskResult] = []
    for index, outcome in enumerate(outcomes):
        if isinstance(outcome, (Exception, asyncio.CancelledError)):
            logger.error(
                "Batch request %d raised %s: %s",
                index, type(outcome).__name__, outcome,
            )
            results.append(unexpected_failure(outcome, elapsed_ms_since(batch_start)))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            results.append(outcome)

    succeeded = sum(1 for r in results if r.success)
    logger.info("Batch complete: %d/%d succeeded", succeeded, len(results))
    return results
