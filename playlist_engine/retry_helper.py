"""
Retry Helper - exponential backoff for Spotify Web API calls.

Only RetryableError subclasses are retried by default; everything else
(bad request, 401, 404) goes straight back to the caller.
"""

import logging
import time
from functools import wraps
from typing import Callable, Tuple, Type

log = logging.getLogger(__name__)


class RetryableError(Exception):
    """Base exception for errors that should trigger a retry"""


class RateLimitError(RetryableError):
    """Raised when rate limit is exceeded (429 status code)"""

    def __init__(self, message='Rate limited', retry_after=None):
        super().__init__(message)
        self.retry_after = retry_after


class ServerError(RetryableError):
    """Raised when server returns 5xx error"""


class NetworkError(RetryableError):
    """Raised when network connection fails"""


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    backoff_multiplier: float = 2.0,
    max_delay: float = 30.0,
    exceptions: Tuple[Type[Exception], ...] = (RetryableError,)
):
    """
    Decorator that retries a function with exponential backoff

    Args:
        max_retries: Maximum number of retry attempts (0 = call once)
        initial_delay: Initial delay in seconds before first retry
        backoff_multiplier: Multiplier for delay after each retry
        max_delay: Maximum delay between retries in seconds
        exceptions: Tuple of exception types to catch and retry

    A RateLimitError carrying retry_after waits at least that long, still
    capped at max_delay.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            delay = initial_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        log.error(
                            f'{func.__name__} failed after {max_retries} retries: {e}')
                        raise

                    wait = delay
                    retry_after = getattr(e, 'retry_after', None)
                    if retry_after:
                        wait = max(wait, float(retry_after))
                    wait = min(wait, max_delay)

                    log.warning(
                        f'{func.__name__} failed (attempt {attempt + 1}/{max_retries + 1}), '
                        f'retrying in {wait:.1f}s: {e}')
                    time.sleep(wait)
                    delay = min(delay * backoff_multiplier, max_delay)

        return wrapper
    return decorator
