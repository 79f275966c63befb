"""Retry logic with exponential backoff for Confluence API calls.

Two policies live here and are applied at different layers:

- ``retry_on_transient_error`` wraps individual fetch operations inside the
  API wrapper and retries connection/timeout failures (1s, 2s, 4s).
- ``retry_on_rate_limit`` is applied by the orchestration layer (reconciler
  and publisher) around whole units of work and retries 429 responses with
  jittered exponential backoff.

Both fail fast for every other error.
"""

import logging
import random
import time
from typing import Callable, TypeVar

from .errors import APIAccessError, APIUnreachableError, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3
BASE_DELAY = 1.0


def retry_on_rate_limit(
    func: Callable[..., T],
    *args,
    max_retries: int = MAX_RETRIES,
    base_delay: float = BASE_DELAY,
    jitter: bool = True,
    **kwargs
) -> T:
    """Retry function on 429 rate limit with jittered exponential backoff.

    Executes the given function with the provided arguments, retrying up to
    ``max_retries`` times when a rate limit error is encountered. The wait
    before retry ``n`` is ``base_delay * 2**n``, scaled by a random factor in
    [0.5, 1.5) when ``jitter`` is enabled so that concurrent workers that hit
    the limit together do not retry in lockstep.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        max_retries: Number of retries after the first attempt
        base_delay: Delay in seconds before the first retry
        jitter: Randomize each delay
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        APIAccessError: If rate limit persists after max_retries retries
        Other exceptions: Passed through immediately without retry

    Example:
        >>> result = retry_on_rate_limit(api.get_content_by_id, "123")
    """
    for retry_num in range(max_retries + 1):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not _is_rate_limit_error(e):
                raise

            if retry_num >= max_retries:
                logger.error(
                    f"Rate limit persisted after {max_retries} retries, giving up"
                )
                raise APIAccessError(
                    f"Confluence API failure (after {max_retries} retries)"
                ) from e

            wait_time = base_delay * (2 ** retry_num)
            if jitter:
                wait_time *= random.uniform(0.5, 1.5)
            logger.info(
                f"Rate limit hit, retrying in {wait_time:.2f}s "
                f"(retry {retry_num + 1}/{max_retries})"
            )
            time.sleep(wait_time)

    raise APIAccessError(f"Confluence API failure (after {max_retries} retries)")


def retry_on_transient_error(
    func: Callable[..., T],
    *args,
    max_retries: int = MAX_RETRIES,
    base_delay: float = BASE_DELAY,
    **kwargs
) -> T:
    """Retry function on connection/timeout failures with exponential backoff.

    Args:
        func: The function to execute with retry logic
        *args: Positional arguments to pass to the function
        max_retries: Number of retries after the first attempt
        base_delay: Delay in seconds before the first retry
        **kwargs: Keyword arguments to pass to the function

    Returns:
        The return value of the function

    Raises:
        APIUnreachableError: If the API is still unreachable after all retries
        Other exceptions: Passed through immediately without retry
    """
    for retry_num in range(max_retries + 1):
        try:
            return func(*args, **kwargs)
        except APIUnreachableError:
            if retry_num >= max_retries:
                logger.error(
                    f"API unreachable after {max_retries} retries, giving up"
                )
                raise

            wait_time = base_delay * (2 ** retry_num)
            logger.info(
                f"API unreachable, retrying in {wait_time}s "
                f"(retry {retry_num + 1}/{max_retries})"
            )
            time.sleep(wait_time)

    raise APIAccessError(f"Confluence API failure (after {max_retries} retries)")


def _is_rate_limit_error(exception: Exception) -> bool:
    """Check if an exception represents a rate limit (429) error.

    Args:
        exception: The exception to check

    Returns:
        True if this appears to be a rate limit error, False otherwise
    """
    if isinstance(exception, RateLimitError):
        return True

    # Check for specific rate limit phrases, not just "rate limit"
    # which could appear in other error messages (e.g., "Not a rate limit error")
    error_msg = str(exception).lower()
    rate_limit_patterns = [
        '429',
        'too many requests',
        'rate limit exceeded',
        'rate limit hit',
        'rate limited',
    ]
    if any(pattern in error_msg for pattern in rate_limit_patterns):
        return True

    if hasattr(exception, 'status_code') and exception.status_code == 429:
        return True

    if hasattr(exception, 'response') and hasattr(exception.response, 'status_code'):
        if exception.response.status_code == 429:
            return True

    return False
