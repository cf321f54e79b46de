"""Retry loop driven by the upstream's advised rate-limit delay."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from chatguard.classifier import should_retry
from chatguard.exceptions import HeaderUnrecognizedError, RetryCancelledError
from chatguard.models import APIErrorDetails
from chatguard.parser import parse_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_attempts: int = 3
    grace: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.grace < 0:
            raise ValueError(f"grace must not be negative, got {self.grace}")

    def delay_for(self, details: APIErrorDetails) -> float:
        """Seconds to sleep before retrying after details."""
        if details.rate_info is None:
            return self.grace
        return details.rate_info.retry_after.total_seconds() + self.grace


def _interpret(raw: str) -> APIErrorDetails | None:
    try:
        return parse_error(raw)
    except HeaderUnrecognizedError:
        return None


def retry_on_rate_limit(
    fn: Callable[[], T],
    config: RetryConfig | None = None,
    on_retry: Callable[[Exception, APIErrorDetails, int], None] | None = None,
    cancel: threading.Event | None = None,
    describe: Callable[[Exception], str] = str,
) -> T:
    """
    Execute fn, sleeping through rate limits the API tells us how to wait out.

    Args:
        fn: Function to execute
        config: Retry configuration
        on_retry: Optional callback(exception, details, attempt) before each sleep
        cancel: Optional event; setting it stops the loop at the next check or sleep
        describe: Turns a raised exception into the upstream error string

    Returns:
        Result of fn()

    Raises:
        RetryCancelledError: When cancel is set, carrying the latest parsed error
        Original exception: When it is not a rate limit with an advised delay,
            or after max_attempts attempts
    """
    config = config or RetryConfig()
    details: APIErrorDetails | None = None

    attempt = 0
    while True:
        attempt += 1
        if cancel is not None and cancel.is_set():
            raise RetryCancelledError(details)

        try:
            return fn()
        except Exception as e:
            error = e

        details = _interpret(describe(error))
        if details is None:
            raise error

        if not should_retry(details) or attempt == config.max_attempts:
            logger.debug("Giving up after attempt %d: %s", attempt, details)
            raise error

        delay = config.delay_for(details)
        logger.warning(
            "Rate limited on attempt %d/%d, retrying in %.3fs: %s",
            attempt,
            config.max_attempts,
            delay,
            details.message,
        )
        if on_retry:
            on_retry(error, details, attempt)

        if cancel is None:
            time.sleep(delay)
        elif cancel.wait(delay):
            raise RetryCancelledError(details) from error
