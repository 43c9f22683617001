"""Retry decorator with exponential backoff — stdlib only."""
from __future__ import annotations

import functools
import random
import time
from typing import Any, Callable, Tuple, Type

from jobconnect.log import get_logger

log = get_logger(__name__)


def backoff_delay(
    attempt: int,
    base_delay: float,
    backoff_factor: float = 2.0,
    max_delay: float | None = None,
) -> float:
    """Seconds to wait after failed attempt *attempt* (0-based)."""
    delay = base_delay * (backoff_factor ** attempt)
    return delay if max_delay is None else min(delay, max_delay)


def retry(
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float | None = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable: Tuple[Type[BaseException], ...] = (Exception,),
    should_retry: Callable[[BaseException], bool] | None = None,
) -> Callable:
    """Decorator: retries the wrapped function with exponential backoff.

    Only exceptions in *retryable* are caught. When *should_retry* is given
    it is asked about each caught exception; False re-raises at once.
    The last attempt's exception always propagates unchanged.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(max_attempts):
                try:
                    return fn(*args, **kwargs)
                except retryable as exc:
                    if should_retry is not None and not should_retry(exc):
                        raise
                    if attempt == max_attempts - 1:
                        log.error("%s gave up after %d attempts: %s", fn.__qualname__, max_attempts, exc)
                        raise
                    delay = backoff_delay(attempt, base_delay, backoff_factor, max_delay)
                    if jitter:
                        delay *= 0.5 + random.random()
                    log.warning(
                        "Retry attempt %d/%d for %s after %.0fms (%s)",
                        attempt + 1, max_attempts, fn.__qualname__, delay * 1000, exc,
                    )
                    time.sleep(delay)
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

        return wrapper

    return decorator
