"""
Tests for bounded retry and HTTP error mapping.
"""

import httpx
import pytest

from cloudstore_mcp.store import (
    AlreadyExistsError,
    BackendError,
    FolderNotEmptyError,
    InvalidArgumentError,
    NotFoundError,
    RetryPolicy,
    call_with_retry,
)
from cloudstore_mcp.store.client import error_for_response, parse_retry_after
from cloudstore_mcp.store.retry import is_retryable


class _Flaky:
    """Coroutine factory failing with ``errors`` in turn, then returning ``value``."""

    def __init__(self, errors, value="ok"):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


@pytest.fixture
def delays() -> list[float]:
    return []


@pytest.fixture
def sleep(delays):
    async def record(seconds: float) -> None:
        delays.append(seconds)

    return record


# ============================================================================
# CALL WITH RETRY
# ============================================================================


class TestCallWithRetry:
    async def test_success_after_transient_failures(self, sleep, delays) -> None:
        func = _Flaky([BackendError("503", status=503), ConnectionError("reset")])
        result = await call_with_retry(func, RetryPolicy(max_attempts=3), sleep=sleep)
        assert result == "ok"
        assert func.calls == 3
        assert len(delays) == 2

    async def test_exhaustion_raises_backend_error(self, sleep, delays) -> None:
        func = _Flaky([BackendError("429 slow down", status=429)] * 5)
        with pytest.raises(BackendError) as exc_info:
            await call_with_retry(func, RetryPolicy(max_attempts=3), sleep=sleep)
        assert str(exc_info.value).startswith("Remote API unavailable after 3 attempt(s)")
        assert exc_info.value.status == 429
        assert func.calls == 3
        assert len(delays) == 2

    async def test_network_failure_wrapped_on_exhaustion(self, sleep) -> None:
        func = _Flaky([httpx.ConnectError("down")] * 2)
        with pytest.raises(BackendError, match="after 2 attempt"):
            await call_with_retry(func, RetryPolicy(max_attempts=2), sleep=sleep)

    async def test_non_retryable_propagates_immediately(self, sleep, delays) -> None:
        func = _Flaky([NotFoundError("gone")])
        with pytest.raises(NotFoundError):
            await call_with_retry(func, RetryPolicy(), sleep=sleep)
        assert func.calls == 1
        assert delays == []

    async def test_retry_after_is_honoured_and_capped(self, sleep, delays) -> None:
        func = _Flaky(
            [
                BackendError("429", status=429, retry_after=2.0),
                BackendError("429", status=429, retry_after=120.0),
            ]
        )
        policy = RetryPolicy(max_attempts=3, max_delay=8.0)
        assert await call_with_retry(func, policy, sleep=sleep) == "ok"
        assert delays == [2.0, 8.0]


class TestBackoff:
    def test_jitter_stays_under_ceiling(self) -> None:
        policy = RetryPolicy(base_delay=0.5, max_delay=8.0)
        for attempt in range(8):
            assert 0 <= policy.backoff(attempt) <= min(8.0, 0.5 * 2**attempt)

    def test_zero_base_delay(self) -> None:
        assert RetryPolicy(base_delay=0).backoff(3) == 0

    def test_retryable_classification(self) -> None:
        assert is_retryable(BackendError("x", status=502))
        assert is_retryable(BackendError("x", retryable=True))
        assert is_retryable(TimeoutError())
        assert not is_retryable(BackendError("x", status=403))
        assert not is_retryable(ValueError())


# ============================================================================
# RESPONSE MAPPING
# ============================================================================


def _response(status: int, body=None, headers=None) -> httpx.Response:
    return httpx.Response(status, json=body, headers=headers)


class TestErrorMapping:
    def test_parse_retry_after_seconds(self) -> None:
        assert parse_retry_after("3") == 3.0
        assert parse_retry_after("-1") == 0.0
        assert parse_retry_after(None) is None
        assert parse_retry_after("soon") is None

    def test_parse_retry_after_past_http_date(self) -> None:
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") == 0.0

    @pytest.mark.parametrize(
        "status,body,expected",
        [
            (404, {"message": "Not Found"}, NotFoundError),
            (409, {"code": "item_name_in_use"}, AlreadyExistsError),
            (400, {"code": "bad_request"}, InvalidArgumentError),
            (403, {"code": "folder_not_empty"}, FolderNotEmptyError),
            (403, {"code": "access_denied"}, BackendError),
        ],
    )
    def test_status_mapping(self, status, body, expected) -> None:
        assert type(error_for_response(_response(status, body))) is expected

    def test_rate_limit_is_retryable_with_delay(self) -> None:
        error = error_for_response(_response(429, {}, {"Retry-After": "4"}))
        assert isinstance(error, BackendError)
        assert error.retryable is True
        assert error.retry_after == 4.0

    def test_non_json_body(self) -> None:
        error = error_for_response(httpx.Response(500, text="<html>oops</html>"))
        assert isinstance(error, BackendError)
        assert error.status == 500
