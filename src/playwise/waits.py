"""
Wait Helpers

Async polling and condition-waiting utilities built on tenacity.
Every poll interval is an ``await`` so other tests keep running.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import AsyncRetrying, RetryError, retry_if_result, stop_after_delay, wait_fixed

T = TypeVar("T")


class ConditionTimeout(Exception):
    """Raised when a polled condition is not met within the timeout.

    Attributes:
        last_result: Value returned by the final poll.
    """

    def __init__(self, message: str, last_result: object) -> None:
        self.last_result = last_result
        super().__init__(f"{message}. Last result: {last_result!r}")


async def wait_for_condition(
    action: Callable[[], Awaitable[T]],
    condition: Callable[[T], bool],
    timeout_seconds: float = 10.0,
    poll_interval_seconds: float = 0.5,
    error_message: str = "Condition not met within timeout",
) -> T:
    """
    Poll an async action until condition is met.

    Args:
        action: Coroutine function to call repeatedly
        condition: Function that returns True when condition is met
        timeout_seconds: Maximum time to wait
        poll_interval_seconds: Time between polls
        error_message: Message for timeout error

    Returns:
        The result of action() when condition is met

    Raises:
        ConditionTimeout: If condition not met within timeout

    Example:
        text = await wait_for_condition(
            action=lambda: locator.inner_text(),
            condition=lambda t: "Saved" in t,
            timeout_seconds=5.0,
        )
    """
    retrying = AsyncRetrying(
        stop=stop_after_delay(timeout_seconds),
        wait=wait_fixed(poll_interval_seconds),
        retry=retry_if_result(lambda result: not condition(result)),
    )
    try:
        return await retrying(action)
    except RetryError as e:
        raise ConditionTimeout(error_message, e.last_attempt.result()) from None
