"""
Retry combinator shared by every network call site.

Example:
    >>> from miru_installer.core.retry import retry_call
    >>> retry_call(lambda: fetch(url), max_attempts=3, delay=2.0)
"""

import logging
import time
from typing import Callable, Optional, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

RetryCallback = Callable[[int, int, BaseException, float], None]


class RetryError(Exception):
    """Raised when all attempts of an operation failed."""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Operation failed after {attempts} attempts: {last_error}")


def retry_call(
    operation: Callable[[], T],
    max_attempts: int,
    delay: float,
    backoff: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    on_retry: Optional[RetryCallback] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call an operation until it succeeds or the attempt budget is spent.

    Args:
        operation: Zero-argument callable to run
        max_attempts: Total number of attempts (>= 1)
        delay: Seconds to wait after the first failed attempt
        backoff: Multiplier applied to the delay after each failure
            (1.0 gives a fixed delay, 2.0 exponential backoff)
        retry_on: Exception types that trigger another attempt; anything
            else propagates immediately
        on_retry: Called as on_retry(attempt, max_attempts, error, wait)
            before each wait
        sleep: Sleep function (injectable for tests)

    Returns:
        The operation's return value

    Raises:
        RetryError: If every attempt failed; last_error holds the final failure
        ValueError: If max_attempts < 1
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    wait = delay
    for attempt in range(1, max_attempts + 1):
        try:
            return operation()
        except retry_on as e:
            if attempt == max_attempts:
                raise RetryError(attempt, e) from e

            logger.debug(
                f"Attempt {attempt}/{max_attempts} failed: {e}. Retrying in {wait}s"
            )
            if on_retry:
                on_retry(attempt, max_attempts, e, wait)
            if wait > 0:
                sleep(wait)
            wait *= backoff

    # Unreachable: the loop either returns or raises
    raise AssertionError("retry loop exited without result")


__all__ = ["RetryError", "retry_call"]
