"""LLM-specific exceptions."""

from chatguard.exceptions import ChatGuardError
from chatguard.models import APIErrorDetails


class LLMError(ChatGuardError):
    """Base class for LLM errors."""

    def __init__(self, message: str, details: APIErrorDetails | None = None) -> None:
        super().__init__(message)
        self.details = details


class RateLimitError(LLMError):
    """Rate limited by the API (429)."""

    def __init__(
        self,
        message: str,
        details: APIErrorDetails | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, details)
        self.retry_after = retry_after


class AuthenticationError(LLMError):
    """Rejected credentials (401/403 or an invalid-key code)."""

    pass


class TransientError(LLMError):
    """Temporary failure (5xx)."""

    pass


class PermanentError(LLMError):
    """Non-retryable failure (4xx except 429)."""

    pass


def to_llm_error(details: APIErrorDetails) -> LLMError:
    """Map parsed error details onto the LLMError hierarchy."""
    message = str(details)
    if details.is_auth():
        return AuthenticationError(message, details)
    if details.is_rate_limit():
        retry_after = details.rate_info.retry_after.total_seconds() if details.rate_info else None
        return RateLimitError(message, details, retry_after=retry_after)
    if details.is_server_error():
        return TransientError(message, details)
    return PermanentError(message, details)
