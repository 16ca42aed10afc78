"""Retry utilities for best-effort side effects.

Provides exponential backoff retry logic for transient failures such as a
file that is briefly locked while being deleted.
"""

import time
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")

# Default retry configuration
DEFAULT_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.05  # seconds


def _calculate_delay(attempt: int, base_delay: float = DEFAULT_BASE_DELAY) -> float:
    """Calculate exponential backoff delay for a given attempt.

    Args:
        attempt: Zero-indexed attempt number
        base_delay: Base delay in seconds

    Returns:
        Delay in seconds (base_delay * 2^attempt)
    """
    return base_delay * (2**attempt)


def with_retry(
    fn: Callable[[], T],
    attempts: int = DEFAULT_ATTEMPTS,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    base_delay: float = DEFAULT_BASE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` with exponential backoff retry.

    Args:
        fn: Zero-argument callable (typically a lambda or partial)
        attempts: Maximum number of attempts
        exceptions: Tuple of exception types to catch and retry
        base_delay: Base delay in seconds for exponential backoff
        sleep: Sleep function, injectable for tests

    Returns:
        Result from the first successful call

    Raises:
        The last exception if all attempts fail

    Example:
        with_retry(
            lambda: path.unlink(),
            attempts=3,
            exceptions=(PermissionError,),
        )
    """
    last_error: Exception | None = None

    for attempt in range(attempts):
        try:
            return fn()
        except exceptions as e:
            last_error = e
            if attempt < attempts - 1:
                sleep(_calculate_delay(attempt, base_delay))

    raise last_error  # type: ignore[misc]
