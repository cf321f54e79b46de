"""Tests for retry logic."""

import logging
import threading
from unittest.mock import MagicMock, patch

import pytest

from chatguard.exceptions import RetryCancelledError
from chatguard.llm.retry import RetryConfig, retry_on_rate_limit
from chatguard.parser import parse_error

RATE_LIMIT_RAW = """POST "https://api.openai.com/v1/chat/completions": 429 Too Many Requests {
        "message": "Rate limit reached for gpt-4.1 in organization org-YvWUPqaYaDO3IEven3giqHwj on tokens per min (TPM): Limit 30000, Used 30000, Requested 1741. Please try again in 3.482s. Visit https://platform.openai.com/account/rate-limits to learn more.",
        "type": "tokens",
        "param": null,
        "code": "rate_limit_exceeded"
    }"""

AUTH_RAW = (
    'POST "https://api.openai.com/v1/chat/completions": 401 Unauthorized '
    '{"error": {"message": "Incorrect API key provided", "code": "invalid_api_key"}}'
)

SERVER_RAW = 'POST "https://api.openai.com/v1/chat/completions": 502 Bad Gateway {"message": "Upstream error"}'

BARE_RATE_LIMIT_RAW = (
    'POST "https://api.openai.com/v1/chat/completions": 429 Too Many Requests '
    '{"message": "Rate limit exceeded", "code": "rate_limit_exceeded"}'
)


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_default_values(self) -> None:
        """Default config has sensible values."""
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.grace == 0.1

    def test_rejects_zero_attempts(self) -> None:
        """At least one attempt is required."""
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=0)

    def test_delay_for_adds_grace_to_advised_delay(self) -> None:
        """The advised delay is extended by the grace period."""
        details = parse_error(RATE_LIMIT_RAW)
        assert RetryConfig(grace=0.5).delay_for(details) == pytest.approx(3.982)

    def test_delay_for_without_rate_info_is_grace(self) -> None:
        """Without an advised delay only the grace period is used."""
        details = parse_error(BARE_RATE_LIMIT_RAW)
        assert RetryConfig(grace=0.5).delay_for(details) == 0.5

    def test_rejects_negative_grace(self) -> None:
        """Grace cannot be negative."""
        with pytest.raises(ValueError):
            RetryConfig(grace=-1.0)


@patch("chatguard.llm.retry.time.sleep")
class TestRetryOnRateLimit:
    """Tests for retry_on_rate_limit function."""

    def test_success_no_retry(self, mock_sleep: MagicMock) -> None:
        """Successful call doesn't retry."""
        fn = MagicMock(return_value="success")
        assert retry_on_rate_limit(fn) == "success"
        assert fn.call_count == 1
        mock_sleep.assert_not_called()

    def test_rate_limit_retries_after_advised_delay(self, mock_sleep: MagicMock) -> None:
        """A rate limit with quota details sleeps retry_after + grace once."""
        fn = MagicMock(side_effect=[Exception(RATE_LIMIT_RAW), "success"])
        assert retry_on_rate_limit(fn) == "success"
        assert fn.call_count == 2
        mock_sleep.assert_called_once()
        delay = mock_sleep.call_args.args[0]
        assert delay == pytest.approx(3.582)
        assert delay >= 3.582 - 1e-9

    def test_custom_grace(self, mock_sleep: MagicMock) -> None:
        """The grace period is configurable."""
        fn = MagicMock(side_effect=[Exception(RATE_LIMIT_RAW), "success"])
        retry_on_rate_limit(fn, RetryConfig(grace=1.0))
        assert mock_sleep.call_args.args[0] == pytest.approx(4.482)

    def test_auth_error_no_retry(self, mock_sleep: MagicMock) -> None:
        """Auth failures are raised unchanged."""
        error = Exception(AUTH_RAW)
        fn = MagicMock(side_effect=error)
        with pytest.raises(Exception) as exc_info:
            retry_on_rate_limit(fn)
        assert exc_info.value is error
        assert fn.call_count == 1
        mock_sleep.assert_not_called()

    def test_server_error_no_retry(self, mock_sleep: MagicMock) -> None:
        """Server errors are raised unchanged."""
        error = Exception(SERVER_RAW)
        fn = MagicMock(side_effect=error)
        with pytest.raises(Exception) as exc_info:
            retry_on_rate_limit(fn)
        assert exc_info.value is error
        assert fn.call_count == 1

    def test_rate_limit_without_details_no_retry(self, mock_sleep: MagicMock) -> None:
        """Rate limits without an advised delay are raised unchanged."""
        error = Exception(BARE_RATE_LIMIT_RAW)
        fn = MagicMock(side_effect=error)
        with pytest.raises(Exception) as exc_info:
            retry_on_rate_limit(fn)
        assert exc_info.value is error
        assert fn.call_count == 1
        mock_sleep.assert_not_called()

    def test_unrecognized_error_no_retry(self, mock_sleep: MagicMock) -> None:
        """Errors in neither dialect are raised unchanged."""
        error = ConnectionError("connection reset by peer")
        fn = MagicMock(side_effect=error)
        with pytest.raises(ConnectionError) as exc_info:
            retry_on_rate_limit(fn)
        assert exc_info.value is error
        assert exc_info.value.__cause__ is None
        assert fn.call_count == 1

    def test_max_attempts_exhausted(self, mock_sleep: MagicMock) -> None:
        """Raises the last error after max_attempts attempts."""
        errors = [Exception(RATE_LIMIT_RAW) for _ in range(3)]
        fn = MagicMock(side_effect=errors)
        with pytest.raises(Exception) as exc_info:
            retry_on_rate_limit(fn, RetryConfig(max_attempts=3))
        assert exc_info.value is errors[-1]
        assert fn.call_count == 3
        assert mock_sleep.call_count == 2

    def test_single_attempt_never_sleeps(self, mock_sleep: MagicMock) -> None:
        """With one attempt the rate limit is raised immediately."""
        fn = MagicMock(side_effect=Exception(RATE_LIMIT_RAW))
        with pytest.raises(Exception):
            retry_on_rate_limit(fn, RetryConfig(max_attempts=1))
        mock_sleep.assert_not_called()

    def test_on_retry_callback(self, mock_sleep: MagicMock) -> None:
        """on_retry receives the error, its parsed details and the attempt."""
        error = Exception(RATE_LIMIT_RAW)
        fn = MagicMock(side_effect=[error, "success"])
        on_retry = MagicMock()
        retry_on_rate_limit(fn, on_retry=on_retry)
        on_retry.assert_called_once()
        exc, details, attempt = on_retry.call_args.args
        assert exc is error
        assert details.status == 429
        assert attempt == 1

    def test_describe_hook(self, mock_sleep: MagicMock) -> None:
        """describe turns exceptions into the error string."""
        fn = MagicMock(side_effect=[RuntimeError("opaque"), "success"])
        result = retry_on_rate_limit(fn, describe=lambda e: RATE_LIMIT_RAW)
        assert result == "success"
        assert fn.call_count == 2

    def test_logs_retry(self, mock_sleep: MagicMock, caplog: pytest.LogCaptureFixture) -> None:
        """Each scheduled sleep is logged."""
        fn = MagicMock(side_effect=[Exception(RATE_LIMIT_RAW), "success"])
        with caplog.at_level(logging.WARNING, logger="chatguard.llm.retry"):
            retry_on_rate_limit(fn)
        assert "Rate limited on attempt 1/3" in caplog.text


class TestCancellation:
    """Tests for cancelling the retry loop."""

    def test_cancel_before_first_attempt(self) -> None:
        """A set event stops the loop before calling fn."""
        cancel = threading.Event()
        cancel.set()
        fn = MagicMock(return_value="success")
        with pytest.raises(RetryCancelledError) as exc_info:
            retry_on_rate_limit(fn, cancel=cancel)
        assert exc_info.value.details is None
        fn.assert_not_called()

    def test_cancel_during_sleep(self) -> None:
        """Cancelling while asleep surfaces the latest parsed error."""
        cancel = MagicMock(spec=threading.Event)
        cancel.is_set.return_value = False
        cancel.wait.return_value = True
        error = Exception(RATE_LIMIT_RAW)
        fn = MagicMock(side_effect=[error, "success"])
        with pytest.raises(RetryCancelledError) as exc_info:
            retry_on_rate_limit(fn, cancel=cancel)
        assert exc_info.value.details is not None
        assert exc_info.value.details.status == 429
        assert exc_info.value.__cause__ is error
        assert fn.call_count == 1
        assert cancel.wait.call_args.args[0] == pytest.approx(3.582)

    def test_uncancelled_wait_retries(self) -> None:
        """An event that is never set sleeps through wait() and retries."""
        cancel = MagicMock(spec=threading.Event)
        cancel.is_set.return_value = False
        cancel.wait.return_value = False
        fn = MagicMock(side_effect=[Exception(RATE_LIMIT_RAW), "success"])
        with patch("chatguard.llm.retry.time.sleep") as mock_sleep:
            assert retry_on_rate_limit(fn, cancel=cancel) == "success"
        mock_sleep.assert_not_called()
        cancel.wait.assert_called_once()
