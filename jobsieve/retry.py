"""Retry decorator with exponential backoff — stdlib only.

Works on plain functions and on coroutine functions; the async variant
suspends with ``asyncio.sleep`` between attempts instead of blocking.
"""
from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import random
import time
from typing import Any, Callable, Tuple, Type

logger = logging.getLogger(__name__)

# Module-level so tests can swap them out.
_sleep = time.sleep
_async_sleep = asyncio.sleep


def backoff_delay(
    attempt: int,
    *,
    base_delay: float,
    max_delay: float,
    backoff_factor: float,
    jitter: bool,
) -> float:
    """Delay before retrying after the given 1-based failed attempt."""
    delay = min(base_delay * (backoff_factor ** (attempt - 1)), max_delay)
    if jitter:
        delay *= 0.5 + random.random()
    return delay


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
) -> Callable:
    """Decorator: retries the wrapped function with exponential backoff."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    def _delay(attempt: int) -> float:
        return backoff_delay(
            attempt,
            base_delay=base_delay,
            max_delay=max_delay,
            backoff_factor=backoff_factor,
            jitter=jitter,
        )

    def _log_failure(fn: Callable, attempt: int, exc: BaseException, delay: float) -> None:
        logger.warning(
            "%s attempt %d/%d failed (%s), retrying in %.1fs",
            fn.__qualname__,
            attempt,
            max_attempts,
            exc,
            delay,
        )

    def _log_exhausted(fn: Callable, exc: BaseException) -> None:
        logger.error(
            "%s failed after %d attempts: %s",
            fn.__qualname__,
            max_attempts,
            exc,
        )

    def decorator(fn: Callable) -> Callable:
        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                for attempt in range(1, max_attempts + 1):
                    try:
                        return await fn(*args, **kwargs)
                    except retryable as exc:
                        if attempt == max_attempts:
                            _log_exhausted(fn, exc)
                            raise
                        delay = _delay(attempt)
                        _log_failure(fn, attempt, exc, delay)
                        await _async_sleep(delay)

            return async_wrapper

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, max_attempts + 1):
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if attempt == max_attempts:
                        _log_exhausted(fn, exc)
                        raise
                    delay = _delay(attempt)
                    _log_failure(fn, attempt, exc, delay)
                    _sleep(delay)

        return wrapper

    return decorator
