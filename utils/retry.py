"""
Retry with exponential backoff for transient remote errors.

Drive requests fail intermittently with rate limiting (HTTP 429), server
errors (HTTP 5xx) and dropped connections. Those go away if we wait, so
every request is retried with a delay that doubles on each attempt, capped
at ``max_delay`` and multiplied by a random jitter factor in [0.5, 1.5) so
that many clients don't retry in lockstep.

Usage:
    from utils.retry import retry_on_transient_error, call_with_retry

    @retry_on_transient_error(is_retryable=is_retryable, max_retries=3)
    def fetch():
        return request.execute()

    result = call_with_retry(request.execute, is_retryable=is_retryable)
"""

import random
import time
from functools import wraps
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

RetryCallback = Callable[[Exception, int, float], None]

# HTTP status codes worth retrying
TRANSIENT_HTTP_STATUS_CODES = {
    429,  # Too Many Requests
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
}

TRANSIENT_NETWORK_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    OSError,
)


def is_transient_network_error(exc: Exception) -> bool:
    """True if ``exc`` looks like a dropped connection or timeout."""
    return isinstance(exc, TRANSIENT_NETWORK_EXCEPTIONS)


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt`` (0-indexed), jitter included."""
    delay = min(base_delay * (2 ** attempt), max_delay)
    return delay * (0.5 + random.random())


def retry_on_transient_error(
    is_retryable: Callable[[Exception], bool],
    max_retries: int = 5,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    on_retry: Optional[RetryCallback] = None,
):
    """Decorator that retries the wrapped function on transient errors.

    Args:
        is_retryable: Returns True if an exception should be retried.
            Anything else is re-raised immediately.
        max_retries: Retries after the first attempt (total attempts is
            ``max_retries + 1``).
        base_delay: Delay in seconds before the first retry.
        max_delay: Upper bound for a single delay, before jitter.
        on_retry: Called with ``(exc, attempt, delay)`` before sleeping.
            ``attempt`` is 1-indexed.

    Raises:
        The last exception once retries are exhausted.
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as exc:
                    if not is_retryable(exc) or attempt == max_retries:
                        raise
                    delay = backoff_delay(attempt, base_delay, max_delay)
                    if on_retry:
                        on_retry(exc, attempt + 1, delay)
                    time.sleep(delay)
            raise AssertionError("unreachable")
        return wrapper
    return decorator


def call_with_retry(
    func: Callable[[], T],
    is_retryable: Callable[[Exception], bool],
    max_retries: int = 5,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    on_retry: Optional[RetryCallback] = None,
) -> T:
    """Call ``func()`` once with the same policy as ``retry_on_transient_error``."""
    wrapped = retry_on_transient_error(
        is_retryable=is_retryable,
        max_retries=max_retries,
        base_delay=base_delay,
        max_delay=max_delay,
        on_retry=on_retry,
    )(func)
    return wrapped()
