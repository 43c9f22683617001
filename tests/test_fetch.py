"""Tests for the retrying fetch client and the backoff decorator."""

import pytest
import requests
from conftest import FakeSession, make_response

from jobconnect.errors import NetworkError
from jobconnect.fetch import fetch_with_retry
from jobconnect.retry import retry

URL = "https://feed.example.com/listings.json"


def test_success_on_first_attempt(no_sleep):
    ok = make_response(200, [{"title": "x"}])
    session = FakeSession(ok)

    assert fetch_with_retry(URL, session=session) is ok
    assert len(session.calls) == 1
    assert no_sleep == []


def test_not_found_is_not_retried(no_sleep):
    session = FakeSession(make_response(404, reason="Not Found"))

    with pytest.raises(NetworkError) as exc_info:
        fetch_with_retry(URL, 3, session=session)

    err = exc_info.value
    assert err.status_code == 404
    assert err.retryable is False
    assert "HTTP 404" in str(err)
    assert len(session.calls) == 1
    assert no_sleep == []


def test_redirect_status_is_not_success(no_sleep):
    session = FakeSession(make_response(302, reason="Found"))

    with pytest.raises(NetworkError) as exc_info:
        fetch_with_retry(URL, 3, session=session)

    assert exc_info.value.status_code == 302
    assert exc_info.value.retryable is False
    assert len(session.calls) == 1


def test_server_error_then_success(no_sleep):
    ok = make_response(200, [])
    session = FakeSession(make_response(500, reason="Server Error"), ok)

    assert fetch_with_retry(URL, 3, 10, session=session) is ok
    assert len(session.calls) == 2
    assert no_sleep == [pytest.approx(0.01)]


def test_server_error_exhausts_attempts(no_sleep):
    session = FakeSession(make_response(500, reason="Server Error"))

    with pytest.raises(NetworkError) as exc_info:
        fetch_with_retry(URL, 3, 1000, session=session)

    assert exc_info.value.status_code == 500
    assert exc_info.value.retryable is True
    assert len(session.calls) == 3
    assert no_sleep == [1.0, 2.0]


def test_rate_limit_is_retryable(no_sleep):
    session = FakeSession(make_response(429), make_response(429), make_response(200, []))
    fetch_with_retry(URL, 3, 100, session=session)
    assert len(session.calls) == 3
    assert no_sleep == [pytest.approx(0.1), pytest.approx(0.2)]


def test_transport_failure_has_no_status(no_sleep):
    session = FakeSession(requests.ConnectionError("connection refused"))

    with pytest.raises(NetworkError) as exc_info:
        fetch_with_retry(URL, session=session)

    assert exc_info.value.status_code is None
    assert exc_info.value.retryable is False
    assert "Failed to fetch" in str(exc_info.value)
    assert len(session.calls) == 1


def test_zero_retries_raises_max_retries_exceeded(no_sleep):
    session = FakeSession(make_response(200, []))
    with pytest.raises(NetworkError, match="Maximum retries exceeded"):
        fetch_with_retry(URL, 0, session=session)
    assert session.calls == []


def test_retry_decorator_caps_delay(no_sleep):
    calls = []

    @retry(max_attempts=4, base_delay=10.0, max_delay=15.0, jitter=False, retryable=(ValueError,))
    def flaky():
        calls.append(1)
        raise ValueError("boom")

    with pytest.raises(ValueError):
        flaky()
    assert len(calls) == 4
    assert no_sleep == [10.0, 15.0, 15.0]


def test_retry_decorator_does_not_catch_other_errors(no_sleep):
    @retry(max_attempts=3, retryable=(ValueError,))
    def broken():
        raise KeyError("nope")

    with pytest.raises(KeyError):
        broken()
    assert no_sleep == []
