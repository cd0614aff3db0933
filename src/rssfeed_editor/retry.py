"""Retry with exponential backoff for transient feed fetch failures."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx

from rssfeed_editor.models import ErrorType, RssError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_CLIENT_STATUSES = (408, 429)


def is_retryable_error(error: BaseException) -> bool:
    """Decide whether a failed fetch is worth another attempt.

    Transport failures and timeouts are retryable. Classified errors are
    retryable only when they are FETCH_ERRORs, and then only for 5xx, 408
    or 429 responses; a FETCH_ERROR without a status is assumed transient.
    """
    if isinstance(error, (httpx.TransportError, asyncio.TimeoutError)):
        return True

    if isinstance(error, RssError):
        if error.type is not ErrorType.FETCH_ERROR:
            return False
        status = error.status_code
        if status is None:
            return True
        return status >= 500 or status in RETRYABLE_CLIENT_STATUSES

    return False


def calculate_retry_delay(attempt: int, base_delay_ms: float) -> float:
    """Backoff delay in milliseconds for a 0-indexed attempt."""
    return base_delay_ms * (2 ** attempt)


def _retry_retryable_errors(error: BaseException, attempt: int) -> bool:
    return is_retryable_error(error)


@dataclass
class RetryOptions:
    max_attempts: int = 3
    base_delay_ms: float = 1000
    exponential_backoff: bool = True
    should_retry: Callable[[BaseException, int], bool] = _retry_retryable_errors


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    options: RetryOptions | None = None,
) -> T:
    """Run an async operation, retrying retryable failures with backoff.

    Only one attempt is in flight at a time. Non-retryable errors are
    raised immediately. When all attempts fail, an RssError is re-raised
    with the attempt count appended to its message; other exceptions are
    re-raised as they are.

    Args:
        operation: Zero-argument coroutine function to run.
        options: Retry configuration; defaults to 3 attempts from 1s.

    Returns:
        The operation's result.
    """
    config = options or RetryOptions()
    attempts = max(1, config.max_attempts)

    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as e:
            if not config.should_retry(e, attempt):
                raise

            if attempt == attempts - 1:
                logger.warning("Giving up after %d attempts: %s", attempts, e)
                if isinstance(e, RssError):
                    raise RssError(
                        f"{e.message} (failed after {attempts} attempts)",
                        e.type,
                        status_code=e.status_code,
                    ) from e
                raise

            delay_ms = (
                calculate_retry_delay(attempt, config.base_delay_ms)
                if config.exponential_backoff
                else config.base_delay_ms
            )
            logger.warning(
                "Attempt %d/%d failed (%s), retrying in %dms",
                attempt + 1, attempts, e, delay_ms,
            )
            await asyncio.sleep(delay_ms / 1000)
