"""HTTP GET with classified retries for the upstream listings feed."""
from __future__ import annotations

from typing import Any

import requests

from jobconnect.errors import NetworkError, is_retryable_status
from jobconnect.log import get_logger
from jobconnect.retry import retry

log = get_logger(__name__)

DEFAULT_TIMEOUT_S = 20.0


def _get(url: str, session: Any, timeout: float) -> requests.Response:
    try:
        r = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        # No response at all: never retried, no status to report.
        raise NetworkError(f"Failed to fetch: {exc}") from exc

    if not 200 <= r.status_code < 300:
        raise NetworkError(
            f"HTTP {r.status_code}: {r.reason}" if r.reason else f"HTTP {r.status_code}",
            status_code=r.status_code,
            retryable=is_retryable_status(r.status_code),
        )
    return r


def fetch_with_retry(
    url: str,
    retries: int = 3,
    base_delay_ms: int = 1000,
    *,
    session: Any = None,
    timeout: float = DEFAULT_TIMEOUT_S,
) -> requests.Response:
    """GET *url*, retrying 5xx and 429 responses with exponential backoff.

    Makes at most *retries* attempts, waiting ``base_delay_ms * 2**i`` after
    failed attempt ``i``. Other error statuses and transport failures raise
    :class:`NetworkError` straight away.
    """
    if retries < 1:
        raise NetworkError("Maximum retries exceeded")

    fetch = retry(
        max_attempts=retries,
        base_delay=base_delay_ms / 1000.0,
        max_delay=None,
        jitter=False,
        retryable=(NetworkError,),
        should_retry=lambda exc: exc.retryable,
    )(_get)

    r = fetch(url, session or requests, timeout)
    log.debug("GET %s → %d", url, r.status_code)
    return r
