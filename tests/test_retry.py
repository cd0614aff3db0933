"""Tests for retry classification and backoff."""

import asyncio

import httpx
import pytest

from rssfeed_editor import retry
from rssfeed_editor.models import ErrorType, RssError
from rssfeed_editor.retry import (
    RetryOptions,
    calculate_retry_delay,
    is_retryable_error,
    retry_with_backoff,
)


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff sleeps instead of waiting."""
    recorded = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    monkeypatch.setattr(retry.asyncio, "sleep", fake_sleep)
    return recorded


def fetch_error(status_code=None):
    return RssError("Failed to fetch RSS feed", ErrorType.FETCH_ERROR, status_code=status_code)


class Flaky:
    """Async operation that fails with the given errors, then succeeds."""

    def __init__(self, *errors, result="ok"):
        self.errors = list(errors)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.result


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (fetch_error(500), True),
        (fetch_error(503), True),
        (fetch_error(408), True),
        (fetch_error(429), True),
        (fetch_error(404), False),
        (fetch_error(400), False),
        (fetch_error(None), True),
        (RssError("bad", ErrorType.VALIDATION_ERROR), False),
        (RssError("bad", ErrorType.PARSE_ERROR), False),
        (RssError("bad", ErrorType.INVALID_URL), False),
        (httpx.ConnectError("refused"), True),
        (httpx.ReadTimeout("slow"), True),
        (asyncio.TimeoutError(), True),
        (ValueError("nope"), False),
    ],
)
def test_is_retryable_error(error, expected):
    assert is_retryable_error(error) is expected


def test_status_is_read_from_the_error_not_the_message():
    error = RssError("Failed to fetch RSS feed: 503", ErrorType.FETCH_ERROR, status_code=404)

    assert is_retryable_error(error) is False


def test_calculate_retry_delay():
    assert [calculate_retry_delay(n, 1000) for n in range(4)] == [1000, 2000, 4000, 8000]
    assert calculate_retry_delay(2, 0) == 0


def test_success_first_try(sleeps):
    operation = Flaky()

    assert asyncio.run(retry_with_backoff(operation)) == "ok"
    assert operation.calls == 1
    assert sleeps == []


def test_retries_then_succeeds_with_exponential_backoff(sleeps):
    operation = Flaky(fetch_error(503), fetch_error(502))

    result = asyncio.run(retry_with_backoff(operation, RetryOptions(max_attempts=3)))

    assert result == "ok"
    assert operation.calls == 3
    assert sleeps == [1.0, 2.0]


def test_fixed_delay_without_exponential_backoff(sleeps):
    operation = Flaky(fetch_error(503), fetch_error(503))
    options = RetryOptions(max_attempts=3, base_delay_ms=250, exponential_backoff=False)

    asyncio.run(retry_with_backoff(operation, options))

    assert sleeps == [0.25, 0.25]


def test_gives_up_with_attempt_count(sleeps):
    operation = Flaky(fetch_error(503), fetch_error(503), fetch_error(503))

    with pytest.raises(RssError) as exc_info:
        asyncio.run(retry_with_backoff(operation, RetryOptions(max_attempts=3)))

    assert operation.calls == 3
    assert exc_info.value.message == "Failed to fetch RSS feed (failed after 3 attempts)"
    assert exc_info.value.type is ErrorType.FETCH_ERROR
    assert exc_info.value.status_code == 503
    assert len(sleeps) == 2


def test_non_retryable_error_raises_immediately(sleeps):
    error = fetch_error(404)
    operation = Flaky(error)

    with pytest.raises(RssError) as exc_info:
        asyncio.run(retry_with_backoff(operation))

    assert exc_info.value is error
    assert operation.calls == 1
    assert sleeps == []


def test_non_rss_errors_are_reraised_unchanged(sleeps):
    error = httpx.ConnectError("refused")
    operation = Flaky(error, error)

    with pytest.raises(httpx.ConnectError) as exc_info:
        asyncio.run(retry_with_backoff(operation, RetryOptions(max_attempts=2)))

    assert exc_info.value is error
    assert operation.calls == 2


def test_custom_should_retry(sleeps):
    seen = []

    def should_retry(error, attempt):
        seen.append(attempt)
        return isinstance(error, KeyError)

    operation = Flaky(KeyError("a"), KeyError("b"))

    result = asyncio.run(
        retry_with_backoff(operation, RetryOptions(max_attempts=3, should_retry=should_retry))
    )

    assert result == "ok"
    assert seen == [0, 1]


def test_max_attempts_below_one_still_runs_once(sleeps):
    operation = Flaky(fetch_error(503))

    with pytest.raises(RssError):
        asyncio.run(retry_with_backoff(operation, RetryOptions(max_attempts=0)))

    assert operation.calls == 1
