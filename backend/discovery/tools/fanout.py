"""Bounded per-candidate fan-out with a request deadline and cancellation.

Each item runs a synchronous, pure function in a worker thread:
- At most `fanout_cap` items in flight (asyncio.Semaphore)
- One deadline for the whole batch; unfinished items are excluded, not retried
- A failing item is recorded and dropped; the rest of the batch continues
- Cancellation discards everything (no partial results)
- Metrics and structured logging per item
"""

import asyncio
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")
R = TypeVar("R")


# Exception types
class DiscoveryError(Exception):
    """Discovery request cannot be served (e.g., malformed context)."""

    pass


class DiscoveryCancelledError(DiscoveryError):
    """Caller abandoned the request."""

    pass


class CandidateTimeoutError(Exception):
    """Candidate did not finish before the request deadline."""

    pass


class CandidateExecutionError(Exception):
    """Candidate scoring raised."""

    pass


@dataclass(frozen=True)
class FanoutContext:
    """Context for fan-out with tracing."""

    request_id: str
    stage: str = "candidate_scoring"


@dataclass
class CancelToken:
    """Token for cancellation signaling."""

    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True

    def throw_if_cancelled(self) -> None:
        """Raise DiscoveryCancelledError if cancelled."""
        if self.cancelled:
            raise DiscoveryCancelledError("discovery cancelled")


@dataclass
class FanoutConfig:
    """Configuration for fan-out."""

    fanout_cap: int
    timeout_ms: int


@dataclass
class FanoutFailure:
    """An item excluded from the batch."""

    key: str
    reason: str  # "timeout" | "execution_error"
    error: Exception


@dataclass
class FanoutOutcome(Generic[R]):
    """Successful results in input order plus the items that were dropped."""

    results: list[R] = field(default_factory=list)
    failures: list[FanoutFailure] = field(default_factory=list)


# Metrics interface (to be implemented by actual metrics system)
class FanoutMetrics:
    """Interface for fan-out metrics."""

    def record_latency(self, stage: str, outcome: str, latency_ms: float) -> None:
        """Record per-item latency."""
        pass

    def inc_failure(self, stage: str, reason: str) -> None:
        """Increment failure counter."""
        pass


# Logging interface
class FanoutLogger:
    """Interface for structured logging."""

    def log_item(
        self,
        ctx: FanoutContext,
        item_key: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one item's outcome."""
        pass


async def run_fanout(
    ctx: FanoutContext,
    items: Sequence[T],
    fn: Callable[[T], R],
    key_fn: Callable[[T], str],
    config: FanoutConfig,
    cancel_token: CancelToken | None = None,
    metrics: FanoutMetrics | None = None,
    logger: FanoutLogger | None = None,
) -> FanoutOutcome[R]:
    """Run fn over items concurrently.

    Args:
        ctx: Fan-out context with request_id
        items: Inputs, processed independently
        fn: Synchronous function applied to each item in a worker thread
        key_fn: Stable identifier for an item (used in failures and logs)
        config: Concurrency cap and batch deadline
        cancel_token: Cancellation token (optional, defaults to not cancelled)
        metrics: Metrics recorder (optional, defaults to no-op)
        logger: Structured logger (optional, defaults to no-op)

    Returns:
        FanoutOutcome with results in input order

    Raises:
        DiscoveryCancelledError: The token was cancelled before or during the batch
    """
    cancel_token = cancel_token or CancelToken()
    metrics = metrics or FanoutMetrics()
    logger = logger or FanoutLogger()

    cancel_token.throw_if_cancelled()
    if not items:
        return FanoutOutcome()

    semaphore = asyncio.Semaphore(config.fanout_cap)
    batch_start = time.monotonic()

    async def run_one(item: T) -> R:
        async with semaphore:
            cancel_token.throw_if_cancelled()
            key = key_fn(item)
            start = time.monotonic()
            try:
                value = await asyncio.to_thread(fn, item)
            except Exception as e:
                elapsed_ms = (time.monotonic() - start) * 1000
                metrics.record_latency(ctx.stage, "error", elapsed_ms)
                metrics.inc_failure(ctx.stage, "execution_error")
                logger.log_item(ctx, key, "error", elapsed_ms, error_reason=type(e).__name__)
                raise CandidateExecutionError(f"{key}: {e}") from e

            elapsed_ms = (time.monotonic() - start) * 1000
            metrics.record_latency(ctx.stage, "success", elapsed_ms)
            logger.log_item(ctx, key, "success", elapsed_ms)
            return value

    tasks = [asyncio.create_task(run_one(item)) for item in items]
    _, pending = await asyncio.wait(tasks, timeout=config.timeout_ms / 1000)

    # Abandon stragglers; worker threads finish on their own but results are discarded
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

    cancel_token.throw_if_cancelled()

    outcome: FanoutOutcome[R] = FanoutOutcome()
    for item, task in zip(items, tasks, strict=True):
        key = key_fn(item)
        if task in pending:
            elapsed_ms = (time.monotonic() - batch_start) * 1000
            metrics.record_latency(ctx.stage, "timeout", elapsed_ms)
            metrics.inc_failure(ctx.stage, "timeout")
            logger.log_item(ctx, key, "timeout", elapsed_ms, error_reason="timeout")
            outcome.failures.append(
                FanoutFailure(
                    key=key,
                    reason="timeout",
                    error=CandidateTimeoutError(f"{key} not finished within {config.timeout_ms}ms"),
                )
            )
            continue

        error = task.exception()
        if isinstance(error, DiscoveryCancelledError):
            raise error
        if error is not None:
            outcome.failures.append(FanoutFailure(key=key, reason="execution_error", error=error))
            continue
        outcome.results.append(task.result())

    return outcome
