"""Retry helpers for calls to third-party APIs.

Provider adapters raise NetworkError / TemporaryServiceError for failures
worth another attempt; anything else propagates on the first try.
"""

import asyncio
import functools
import inspect
import logging
import time

logger = logging.getLogger(__name__)


class NetworkError(Exception):
    """Connection-level failure talking to a remote service."""


class TemporaryServiceError(Exception):
    """Remote service answered but asked us to come back later (5xx, overload)."""


class APIRateLimitError(TemporaryServiceError):
    """Remote service rejected the call with a rate limit (HTTP 429)."""


RETRYABLE_ERRORS = (NetworkError, TemporaryServiceError)


def _backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    return min(base_delay * (2 ** attempt), max_delay)


def retry_api_call(max_retries: int = 3, base_delay: float = 1.0, max_delay: float = 30.0):
    """Retry a sync or async callable on transient API errors.

    Args:
        max_retries: Extra attempts after the first failure
        base_delay: Delay before the first retry, doubled on each further retry
        max_delay: Upper bound for a single delay

    Returns:
        Decorator preserving the wrapped function's sync/async nature
    """

    def decorator(func):
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                attempt = 0
                while True:
                    try:
                        return await func(*args, **kwargs)
                    except RETRYABLE_ERRORS as e:
                        if attempt >= max_retries:
                            logger.warning(f"{func.__qualname__} failed after {attempt + 1} attempts: {e}")
                            raise
                        delay = _backoff(attempt, base_delay, max_delay)
                        logger.info(f"{func.__qualname__} failed ({e}), retrying in {delay:.1f}s")
                        await asyncio.sleep(delay)
                        attempt += 1

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except RETRYABLE_ERRORS as e:
                    if attempt >= max_retries:
                        logger.warning(f"{func.__qualname__} failed after {attempt + 1} attempts: {e}")
                        raise
                    delay = _backoff(attempt, base_delay, max_delay)
                    logger.info(f"{func.__qualname__} failed ({e}), retrying in {delay:.1f}s")
                    time.sleep(delay)
                    attempt += 1

        return sync_wrapper

    return decorator
