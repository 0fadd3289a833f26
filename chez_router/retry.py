"""Bounded retry with exponential backoff."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from loguru import logger

from chez_router.errors import DispatchError

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """1 initial attempt + (max_attempts - 1) retries, delays base * 2**n."""

    max_attempts: int = 3
    base_delay_s: float = 1.0

    def backoff(self, retry_index: int) -> float:
        """Delay before retry number ``retry_index`` (0-based): 1s, 2s, 4s…"""
        return self.base_delay_s * (2 ** retry_index)


def is_retryable(error: BaseException) -> bool:
    return isinstance(error, DispatchError) and error.retryable


async def _sleep_or_cancel(delay: float, sleep: SleepFn, cancel_event: asyncio.Event | None) -> bool:
    """Sleep for ``delay``. Returns True if cancel_event fired first."""
    if cancel_event is None:
        await sleep(delay)
        return False
    if cancel_event.is_set():
        return True

    sleeper = asyncio.ensure_future(sleep(delay))
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (sleeper, waiter):
            if not task.done():
                task.cancel()
    if sleeper.done() and not sleeper.cancelled():
        sleeper.result()  # re-raise a failing sleep
    return cancel_event.is_set()


async def attempt(
    fn: Callable[[int], Awaitable[T]],
    policy: RetryPolicy = RetryPolicy(),
    retryable: Callable[[BaseException], bool] = is_retryable,
    *,
    sleep: SleepFn = asyncio.sleep,
    cancel_event: asyncio.Event | None = None,
) -> T:
    """Call ``fn(attempt_number)`` until it succeeds or the budget runs out.

    Non-retryable DispatchErrors end the loop immediately. Either way the
    terminal DispatchError names the attempt count in its message and carries
    it in ``attempts``. Other exceptions propagate untouched.
    """
    attempt_no = 0
    while True:
        if cancel_event is not None and cancel_event.is_set():
            raise DispatchError.cancelled(attempt_no)

        attempt_no += 1
        try:
            return await fn(attempt_no)
        except DispatchError as e:
            if not retryable(e) or attempt_no >= policy.max_attempts:
                if retryable(e):
                    logger.error(f"Giving up after {attempt_no} attempts: {e.message}")
                raise DispatchError(
                    f"Gateway failed after {attempt_no} attempts: {e.message}",
                    code=e.code,
                    status_code=e.status_code,
                    retryable=e.retryable,
                    attempts=attempt_no,
                ) from e

            delay = policy.backoff(attempt_no - 1)
            logger.warning(
                f"Attempt {attempt_no}/{policy.max_attempts} failed "
                f"({e.code or e.status_code}): {e.message}, retrying in {delay:g}s"
            )
            if await _sleep_or_cancel(delay, sleep, cancel_event):
                raise DispatchError.cancelled(attempt_no) from e
