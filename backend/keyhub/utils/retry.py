"""
Retry utility with exponential backoff for outbound HTTP calls
"""
import logging
import random
import time
from functools import wraps
from typing import Callable, Tuple, Type

import requests

logger = logging.getLogger(__name__)


def _is_rate_limited(error: Exception) -> bool:
    response = getattr(error, 'response', None)
    return response is not None and response.status_code == 429


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: Tuple[Type[Exception], ...] = (
        requests.exceptions.Timeout,
        requests.exceptions.ConnectionError,
        requests.exceptions.HTTPError,
    ),
):
    """
    Decorator to retry a function with exponential backoff.

    HTTP errors are only retried when the response is a 429; any other
    status is raised straight away. A Retry-After header overrides the
    computed delay.

    Args:
        max_retries: Maximum number of retry attempts
        initial_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        exponential_base: Base for exponential backoff
        jitter: Add random jitter to prevent thundering herd
        retryable_exceptions: Exceptions that should trigger retry
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    if isinstance(e, requests.exceptions.HTTPError) and not _is_rate_limited(e):
                        logger.error("HTTP error", extra={'func': func.__name__, 'error': str(e)})
                        raise

                    if attempt >= max_retries:
                        logger.error("Max retries exceeded", extra={'func': func.__name__})
                        raise

                    delay = min(initial_delay * (exponential_base ** attempt), max_delay)
                    retry_after = e.response.headers.get('Retry-After') if _is_rate_limited(e) else None
                    if retry_after and retry_after.isdigit():
                        delay = min(float(retry_after), max_delay)
                    elif jitter:
                        delay += delay * 0.1 * random.random()

                    logger.warning(
                        "Retrying after error",
                        extra={'func': func.__name__, 'attempt': attempt + 1,
                               'max_attempts': max_retries + 1, 'delay': round(delay, 2),
                               'error': str(e)},
                    )
                    time.sleep(delay)
        return wrapper
    return decorator
