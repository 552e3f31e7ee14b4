"""Throttled execution queue with exponential-backoff retries.

Jobs submitted to a ThrottledRetryQueue run one at a time in submission
order. Consecutive job starts are spaced by at least a minimum interval, and
a job that fails with a retryable error (by default, an error whose text
contains "429") is re-invoked with exponential backoff before its caller
sees the failure.

Example:
    >>> queue = ThrottledRetryQueue(min_interval_ms=2000)
    >>> result = await queue.execute(lambda: store.add_employee_async(record))
"""

import asyncio
import logging
import time
from collections import deque
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]
RetryPolicy = Callable[[BaseException], bool]

DEFAULT_MAX_RETRIES = 3
BACKOFF_BASE_SECONDS = 2
RATE_LIMIT_MARKER = "429"


def is_rate_limit_error(error: BaseException) -> bool:
    """Check whether an error signals a provider rate limit.

    Args:
        error: Exception raised by a job

    Returns:
        True if the error description contains the HTTP 429 marker
    """
    return RATE_LIMIT_MARKER in str(error)


class ThrottledRetryQueue:
    """Single-worker FIFO queue for async jobs.

    Guarantees:
    - Jobs start in submission order, one in flight at a time.
    - A job never starts sooner than ``min_interval_ms`` after the previous
      job started (start-to-start, not end-to-start).
    - A job failing with a retryable error is retried up to ``max_retries``
      times, waiting 2, 4, 8, ... seconds before each retry. The retry
      count belongs to that job alone.
    - Each caller receives its job's result or the job's final exception,
      unmodified. A failing job never stops later jobs from running.

    State is owned by the instance, so independent queues never share
    throttling state.

    Attributes:
        min_interval_ms: Minimum spacing between job starts in milliseconds
        max_retries: Retry budget per job
    """

    def __init__(
        self,
        min_interval_ms: int,
        max_retries: int = DEFAULT_MAX_RETRIES,
        is_retryable: RetryPolicy = is_rate_limit_error,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the queue.

        Args:
            min_interval_ms: Minimum spacing between job starts (>= 0)
            max_retries: Retries allowed per job after the first attempt (>= 0)
            is_retryable: Predicate deciding whether a job error is retried
            sleep: Awaitable delay primitive taking seconds
            clock: Monotonic clock returning seconds

        Raises:
            ValueError: If min_interval_ms or max_retries is negative
        """
        if min_interval_ms < 0:
            raise ValueError(f"min_interval_ms must be >= 0, got {min_interval_ms}")

        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")

        self.min_interval_ms = min_interval_ms
        self.max_retries = max_retries
        self._is_retryable = is_retryable
        self._sleep = sleep
        self._clock = clock

        self._queue: deque[tuple[Job, asyncio.Future]] = deque()
        self._processing = False
        self._last_start: float | None = None
        self._drain_task: asyncio.Task | None = None

        logger.info(
            f"ThrottledRetryQueue initialized: min_interval={min_interval_ms}ms, "
            f"max_retries={max_retries}"
        )

    @property
    def pending(self) -> int:
        """Number of jobs waiting to start."""
        return len(self._queue)

    @property
    def is_processing(self) -> bool:
        """Whether a drain is currently running."""
        return self._processing

    def submit(self, job: Job) -> asyncio.Future:
        """Enqueue a job and start draining if the queue is idle.

        Must be called from a running event loop. The job must be safe to
        invoke more than once, since rate-limited attempts are repeated.

        Args:
            job: Zero-argument async callable

        Returns:
            Future settled with the job's result or its final exception
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._queue.append((job, future))

        logger.debug(f"Job enqueued ({len(self._queue)} pending)")

        if not self._processing:
            self._processing = True
            self._drain_task = loop.create_task(self._drain())

        return future

    async def execute(self, job: Job) -> Any:
        """Submit a job and wait for its outcome.

        Args:
            job: Zero-argument async callable

        Returns:
            The job's result

        Raises:
            Exception: The job's final error, as raised by the job
        """
        return await self.submit(job)

    async def join(self) -> None:
        """Wait until all submitted jobs have been processed."""
        task = self._drain_task
        while task is not None and not task.done():
            await task
            task = self._drain_task

    async def _drain(self) -> None:
        try:
            while self._queue:
                job, future = self._queue.popleft()
                await self._run(job, future)
        except asyncio.CancelledError:
            while self._queue:
                _, future = self._queue.popleft()
                future.cancel()
            raise
        finally:
            self._processing = False

    async def _run(self, job: Job, future: asyncio.Future) -> None:
        """Run one job and settle its caller's future.

        Args:
            job: Job to run
            future: Future returned to the submitting caller
        """
        try:
            await self._wait_for_interval()
            self._last_start = self._clock()
            result = await self._call_with_backoff(job)
        except asyncio.CancelledError:
            future.cancel()
            if asyncio.current_task().cancelling():
                raise
            # Raised by the job itself, the drain keeps going
            logger.error("Job was cancelled")
        except Exception as e:
            logger.error(f"Job failed: {e}")
            if not future.done():
                future.set_exception(e)
        else:
            if not future.done():
                future.set_result(result)

    async def _wait_for_interval(self) -> None:
        """Sleep out the remainder of the minimum interval, if any."""
        if self._last_start is None:
            return

        elapsed_ms = (self._clock() - self._last_start) * 1000
        if elapsed_ms < self.min_interval_ms:
            wait_seconds = (self.min_interval_ms - elapsed_ms) / 1000
            logger.debug(f"Throttling next job for {wait_seconds:.3f}s")
            await self._sleep(wait_seconds)

    async def _call_with_backoff(self, job: Job) -> Any:
        """Invoke a job, retrying retryable failures with exponential backoff.

        Args:
            job: Job to invoke

        Returns:
            The job's result

        Raises:
            Exception: Non-retryable error, or the last error once the retry
                budget is exhausted
        """
        retry_count = 0
        while True:
            try:
                return await job()
            except Exception as e:
                if not self._is_retryable(e) or retry_count >= self.max_retries:
                    raise

                retry_count += 1
                backoff_seconds = BACKOFF_BASE_SECONDS ** retry_count
                logger.warning(
                    f"Rate limited. Retrying in {backoff_seconds} seconds "
                    f"(retry {retry_count}/{self.max_retries})"
                )
                await self._sleep(backoff_seconds)
