"""Retry policy: attempt bound, backoff schedule, cancellation."""

import asyncio

import pytest

from chez_router.errors import DispatchError
from chez_router.retry import RetryPolicy, attempt


def test_backoff_schedule():
    policy = RetryPolicy()
    assert [policy.backoff(i) for i in range(3)] == [1.0, 2.0, 4.0]


class Flaky:
    def __init__(self, error: DispatchError | None, fail_times: int):
        self.error = error
        self.fail_times = fail_times
        self.calls = 0

    async def __call__(self, attempt_no: int) -> str:
        self.calls += 1
        assert attempt_no == self.calls
        if self.calls <= self.fail_times:
            raise self.error
        return "ok"


@pytest.mark.asyncio
async def test_success_first_try(fake_sleep):
    fn = Flaky(None, 0)
    assert await attempt(fn, sleep=fake_sleep) == "ok"
    assert fn.calls == 1
    assert fake_sleep.delays == []


@pytest.mark.asyncio
async def test_recovers_after_transient(fake_sleep):
    fn = Flaky(DispatchError("busy", status_code=503, retryable=True), 2)
    assert await attempt(fn, sleep=fake_sleep) == "ok"
    assert fn.calls == 3
    assert fake_sleep.delays == [1.0, 2.0]


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(fake_sleep):
    fn = Flaky(DispatchError("busy", status_code=503, retryable=True), 99)
    with pytest.raises(DispatchError) as exc_info:
        await attempt(fn, RetryPolicy(max_attempts=3), sleep=fake_sleep)
    assert fn.calls == 3
    assert exc_info.value.attempts == 3
    assert "after 3 attempts" in str(exc_info.value)
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_terminal_error_not_retried(fake_sleep):
    fn = Flaky(DispatchError("bad key", status_code=401, retryable=False), 99)
    with pytest.raises(DispatchError) as exc_info:
        await attempt(fn, sleep=fake_sleep)
    assert fn.calls == 1
    assert fake_sleep.delays == []
    assert exc_info.value.attempts == 1
    assert exc_info.value.retryable is False


@pytest.mark.asyncio
async def test_other_exceptions_propagate(fake_sleep):
    async def boom(attempt_no):
        raise ValueError("programmer error")

    with pytest.raises(ValueError):
        await attempt(boom, sleep=fake_sleep)
    assert fake_sleep.delays == []


@pytest.mark.asyncio
async def test_cancel_before_start(fake_sleep):
    event = asyncio.Event()
    event.set()
    fn = Flaky(None, 0)
    with pytest.raises(DispatchError) as exc_info:
        await attempt(fn, sleep=fake_sleep, cancel_event=event)
    assert exc_info.value.code == "CANCELLED"
    assert fn.calls == 0


@pytest.mark.asyncio
async def test_cancel_interrupts_backoff():
    event = asyncio.Event()
    fn = Flaky(DispatchError("busy", status_code=503, retryable=True), 99)

    async def slow_sleep(delay):
        event.set()
        await asyncio.sleep(60)

    with pytest.raises(DispatchError) as exc_info:
        await asyncio.wait_for(attempt(fn, sleep=slow_sleep, cancel_event=event), timeout=5)
    assert exc_info.value.code == "CANCELLED"
    assert fn.calls == 1


@pytest.mark.asyncio
async def test_failing_sleep_propagates_with_cancel_event():
    event = asyncio.Event()
    fn = Flaky(DispatchError("busy", status_code=503, retryable=True), 99)

    async def broken_sleep(delay):
        raise RuntimeError("clock unavailable")

    with pytest.raises(RuntimeError, match="clock unavailable"):
        await attempt(fn, sleep=broken_sleep, cancel_event=event)
    assert fn.calls == 1
