"""Tests for the throttled retry queue.

Time is driven by a fake clock whose sleep advances the clock instantly,
so interval and backoff delays can be asserted exactly without waiting.
"""

import asyncio
import time

import pytest

from throttled_queue import ThrottledRetryQueue, is_rate_limit_error


def make_queue(clock, min_interval_ms: int = 2000, **kwargs) -> ThrottledRetryQueue:
    return ThrottledRetryQueue(
        min_interval_ms=min_interval_ms,
        sleep=clock.sleep,
        clock=clock,
        **kwargs,
    )


class TestRateLimitPolicy:
    """Tests for the default retry predicate."""

    def test_detects_429_marker(self):
        assert is_rate_limit_error(Exception("Error code: 429 - Too Many Requests"))

    def test_ignores_other_errors(self):
        assert not is_rate_limit_error(ValueError("invalid request"))
        assert not is_rate_limit_error(Exception("401 Unauthorized"))


class TestConstruction:
    """Tests for constructor validation."""

    def test_rejects_negative_interval(self):
        with pytest.raises(ValueError, match="min_interval_ms"):
            ThrottledRetryQueue(min_interval_ms=-1)

    def test_rejects_negative_retries(self):
        with pytest.raises(ValueError, match="max_retries"):
            ThrottledRetryQueue(min_interval_ms=0, max_retries=-1)

    def test_defaults(self):
        queue = ThrottledRetryQueue(min_interval_ms=100)
        assert queue.max_retries == 3
        assert queue.pending == 0
        assert queue.is_processing is False


class TestThrottling:
    """Tests for minimum-interval spacing between job starts."""

    @pytest.mark.asyncio
    async def test_back_to_back_jobs_are_spaced(self, clock):
        """Second job starts exactly one interval after the first."""
        queue = make_queue(clock, min_interval_ms=2000)
        starts = []

        async def job():
            starts.append(clock.now)
            return len(starts)

        results = await asyncio.gather(queue.execute(job), queue.execute(job))

        assert results == [1, 2]
        assert starts == [0.0, pytest.approx(2.0)]

    @pytest.mark.asyncio
    async def test_idle_queue_starts_without_delay(self, clock):
        """The first job never waits."""
        queue = make_queue(clock, min_interval_ms=5000)

        async def job():
            return "done"

        assert await queue.execute(job) == "done"
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_old_last_start_needs_no_wait(self, clock):
        """A job submitted long after the previous start runs immediately."""
        queue = make_queue(clock, min_interval_ms=2000)

        async def job():
            return clock.now

        await queue.execute(job)
        clock.now += 10.0
        assert await queue.execute(job) == pytest.approx(10.0)
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_interval_measured_from_start_not_completion(self, clock):
        """A long job does not add delay beyond the interval."""
        queue = make_queue(clock, min_interval_ms=2000)
        starts = []

        async def slow_job():
            starts.append(clock.now)
            clock.now += 5.0

        async def fast_job():
            starts.append(clock.now)

        await asyncio.gather(queue.execute(slow_job), queue.execute(fast_job))

        assert starts == [0.0, pytest.approx(5.0)]
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_partial_interval_waits_remainder(self, clock):
        """Only the remaining part of the interval is slept."""
        queue = make_queue(clock, min_interval_ms=2000)

        async def job_taking_half_a_second():
            clock.now += 0.5

        await asyncio.gather(
            queue.execute(job_taking_half_a_second),
            queue.execute(job_taking_half_a_second),
        )

        assert clock.sleeps == [pytest.approx(1.5)]

    @pytest.mark.asyncio
    async def test_every_start_respects_interval(self, clock):
        """For N jobs, each start is at least one interval after the previous."""
        queue = make_queue(clock, min_interval_ms=300)
        starts = []

        async def job():
            starts.append(clock.now)

        await asyncio.gather(*(queue.execute(job) for _ in range(6)))

        assert len(starts) == 6
        for previous, current in zip(starts, starts[1:]):
            assert current - previous >= 0.3 - 1e-9

    @pytest.mark.asyncio
    async def test_instances_are_isolated(self, clock):
        """Queues do not share last-start state."""
        first = make_queue(clock, min_interval_ms=2000)
        second = make_queue(clock, min_interval_ms=2000)

        async def job():
            return clock.now

        await first.execute(job)
        assert await second.execute(job) == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_real_clock_spacing(self):
        """With the default sleep and clock, starts are spaced in real time."""
        queue = ThrottledRetryQueue(min_interval_ms=50)
        starts = []

        async def job():
            starts.append(time.monotonic())

        await asyncio.gather(queue.execute(job), queue.execute(job))

        assert starts[1] - starts[0] >= 0.045


class TestRetries:
    """Tests for exponential-backoff retries."""

    @pytest.mark.asyncio
    async def test_rate_limited_job_exhausts_retries(self, clock):
        """Four attempts with 2s, 4s, 8s backoff, then the last error."""
        queue = make_queue(clock, min_interval_ms=100, max_retries=3)
        attempts = []
        errors = []

        async def always_rate_limited():
            attempts.append(clock.now)
            error = RuntimeError("429 Too Many Requests")
            errors.append(error)
            raise error

        with pytest.raises(RuntimeError) as exc_info:
            await queue.execute(always_rate_limited)

        assert len(attempts) == 4
        assert clock.sleeps == [2, 4, 8]
        assert attempts == [0.0, 2.0, 6.0, 14.0]
        assert exc_info.value is errors[-1]

    @pytest.mark.asyncio
    async def test_rate_limited_job_recovers(self, clock):
        """A job succeeding on its second attempt resolves with its result."""
        queue = make_queue(clock, min_interval_ms=100)
        calls = []

        async def flaky():
            calls.append(clock.now)
            if len(calls) == 1:
                raise RuntimeError("Error code: 429")
            return "ok"

        assert await queue.execute(flaky) == "ok"
        assert len(calls) == 2
        assert clock.sleeps == [2]

    @pytest.mark.asyncio
    async def test_non_rate_limit_error_is_not_retried(self, clock):
        """Other errors reject immediately with the exact error object."""
        queue = make_queue(clock, min_interval_ms=100)
        calls = []
        error = ValueError("invalid request")

        async def bad_request():
            calls.append(1)
            raise error

        with pytest.raises(ValueError) as exc_info:
            await queue.execute(bad_request)

        assert exc_info.value is error
        assert len(calls) == 1
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_retry_count_is_per_job(self, clock):
        """A second job gets its own full retry budget."""
        queue = make_queue(clock, min_interval_ms=0, max_retries=2)
        attempts = {"a": 0, "b": 0}

        def failing(name):
            async def job():
                attempts[name] += 1
                raise RuntimeError("429")
            return job

        results = await asyncio.gather(
            queue.execute(failing("a")),
            queue.execute(failing("b")),
            return_exceptions=True,
        )

        assert all(isinstance(result, RuntimeError) for result in results)
        assert attempts == {"a": 3, "b": 3}
        assert clock.sleeps == [2, 4, 2, 4]

    @pytest.mark.asyncio
    async def test_zero_retry_budget(self, clock):
        """With max_retries=0 a rate-limited job fails after one attempt."""
        queue = make_queue(clock, min_interval_ms=0, max_retries=0)
        calls = []

        async def rate_limited():
            calls.append(1)
            raise RuntimeError("429")

        with pytest.raises(RuntimeError):
            await queue.execute(rate_limited)

        assert len(calls) == 1
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_interval_and_backoff_are_both_awaited(self, clock):
        """Interval wait happens before the first attempt, backoff between attempts."""
        queue = make_queue(clock, min_interval_ms=1000)
        calls = []

        async def first():
            return "first"

        async def flaky():
            calls.append(clock.now)
            if len(calls) == 1:
                raise RuntimeError("429")
            return "second"

        results = await asyncio.gather(queue.execute(first), queue.execute(flaky))

        assert results == ["first", "second"]
        assert clock.sleeps == [pytest.approx(1.0), 2]
        assert calls == [pytest.approx(1.0), pytest.approx(3.0)]

    @pytest.mark.asyncio
    async def test_custom_retry_policy(self, clock):
        """A pluggable predicate decides which errors are retried."""
        queue = make_queue(
            clock,
            min_interval_ms=0,
            max_retries=1,
            is_retryable=lambda error: isinstance(error, TimeoutError),
        )
        calls = []

        async def times_out_once():
            calls.append(1)
            if len(calls) == 1:
                raise TimeoutError("upstream timeout")
            return "recovered"

        assert await queue.execute(times_out_once) == "recovered"

        async def rate_limited():
            raise RuntimeError("429")

        with pytest.raises(RuntimeError):
            await queue.execute(rate_limited)

        assert clock.sleeps == [2]


class TestDraining:
    """Tests for FIFO ordering and the single-drain guarantee."""

    @pytest.mark.asyncio
    async def test_jobs_run_in_submission_order_exactly_once(self, clock):
        queue = make_queue(clock, min_interval_ms=10)
        executed = []

        def job_for(index):
            async def job():
                executed.append(index)
                return index
            return job

        results = await asyncio.gather(*(queue.execute(job_for(i)) for i in range(10)))

        assert results == list(range(10))
        assert executed == list(range(10))

    @pytest.mark.asyncio
    async def test_submit_during_drain_does_not_start_second_drain(self, clock):
        """Jobs added while draining are picked up by the running drain."""
        queue = make_queue(clock, min_interval_ms=10)
        executed = []
        in_flight = 0
        max_in_flight = 0
        late_futures = []

        def job_for(name):
            async def job():
                nonlocal in_flight, max_in_flight
                in_flight += 1
                max_in_flight = max(max_in_flight, in_flight)
                executed.append(name)
                if name == "first":
                    assert queue.is_processing
                    late_futures.append(queue.submit(job_for("late")))
                await asyncio.sleep(0)
                in_flight -= 1
            return job

        first = queue.submit(job_for("first"))
        second = queue.submit(job_for("second"))
        await asyncio.gather(first, second)
        await queue.join()
        await asyncio.gather(*late_futures)

        assert executed == ["first", "second", "late"]
        assert max_in_flight == 1
        assert queue.is_processing is False
        assert queue.pending == 0

    @pytest.mark.asyncio
    async def test_failure_does_not_halt_queue(self, clock):
        queue = make_queue(clock, min_interval_ms=10)

        async def broken():
            raise KeyError("missing")

        async def healthy():
            return "still running"

        results = await asyncio.gather(
            queue.execute(broken),
            queue.execute(healthy),
            return_exceptions=True,
        )

        assert isinstance(results[0], KeyError)
        assert results[1] == "still running"

    @pytest.mark.asyncio
    async def test_queue_restarts_after_going_idle(self, clock):
        queue = make_queue(clock, min_interval_ms=10)

        async def job():
            return "ok"

        assert await queue.execute(job) == "ok"
        await queue.join()
        assert queue.is_processing is False

        assert await queue.execute(job) == "ok"

    @pytest.mark.asyncio
    async def test_join_without_jobs_returns(self, clock):
        queue = make_queue(clock)
        await queue.join()
        assert queue.pending == 0


class TestCancellation:
    """Tests for caller, job and drain cancellation."""

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_remove_job(self, clock):
        queue = make_queue(clock, min_interval_ms=10)
        executed = []

        def job_for(name):
            async def job():
                executed.append(name)
                return name
            return job

        first = queue.submit(job_for("first"))
        second = queue.submit(job_for("second"))
        third = queue.submit(job_for("third"))
        second.cancel()

        assert await asyncio.gather(first, third) == ["first", "third"]
        await queue.join()

        assert executed == ["first", "second", "third"]
        assert second.cancelled()

    @pytest.mark.asyncio
    async def test_job_raising_cancelled_error_does_not_halt_queue(self, clock):
        queue = make_queue(clock, min_interval_ms=10)
        loop = asyncio.get_running_loop()

        async def awaits_cancelled_future():
            inner = loop.create_future()
            inner.cancel()
            await inner

        async def healthy():
            return "ok"

        results = await asyncio.gather(
            queue.submit(awaits_cancelled_future),
            queue.submit(healthy),
            return_exceptions=True,
        )
        await queue.join()

        assert isinstance(results[0], asyncio.CancelledError)
        assert results[1] == "ok"
        assert queue.is_processing is False

    @pytest.mark.asyncio
    async def test_cancelling_drain_cancels_queued_jobs(self, clock):
        queue = make_queue(clock, min_interval_ms=10)
        started = asyncio.Event()
        release = asyncio.Event()

        async def blocking():
            started.set()
            await release.wait()

        async def never_started():
            return "unreachable"

        running = queue.submit(blocking)
        queued = [queue.submit(never_started), queue.submit(never_started)]
        await started.wait()

        drain = queue._drain_task
        drain.cancel()
        with pytest.raises(asyncio.CancelledError):
            await drain

        assert running.cancelled()
        assert all(future.cancelled() for future in queued)
        assert queue.is_processing is False
        assert queue.pending == 0
