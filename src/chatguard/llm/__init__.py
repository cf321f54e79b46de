"""LLM client, retry loop and exception hierarchy."""

from chatguard.llm.client import LLMClient, LLMResponse, describe_exception
from chatguard.llm.exceptions import (
    AuthenticationError,
    LLMError,
    PermanentError,
    RateLimitError,
    TransientError,
    to_llm_error,
)
from chatguard.llm.retry import RetryConfig, retry_on_rate_limit

__all__ = [
    "LLMClient",
    "LLMResponse",
    "describe_exception",
    "RetryConfig",
    "retry_on_rate_limit",
    "LLMError",
    "RateLimitError",
    "AuthenticationError",
    "TransientError",
    "PermanentError",
    "to_llm_error",
]
