"""chatguard: interpret chat-completion API errors and retry through rate limits."""

from chatguard.classifier import is_auth, is_rate_limit, is_server_error, render, should_retry
from chatguard.config import ChatGuardConfig
from chatguard.exceptions import (
    ChatGuardError,
    ConfigError,
    HeaderUnrecognizedError,
    RetryCancelledError,
)
from chatguard.llm import LLMClient, LLMResponse, RetryConfig, retry_on_rate_limit
from chatguard.models import APIErrorDetails, RateLimitInfo
from chatguard.parser import parse_error, parse_json_format, parse_plain_format

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Interpreter
    "APIErrorDetails",
    "RateLimitInfo",
    "parse_error",
    "parse_json_format",
    "parse_plain_format",
    # Classifier
    "is_rate_limit",
    "is_auth",
    "is_server_error",
    "should_retry",
    "render",
    # Retry and client
    "RetryConfig",
    "retry_on_rate_limit",
    "LLMClient",
    "LLMResponse",
    "ChatGuardConfig",
    # Exceptions
    "ChatGuardError",
    "ConfigError",
    "HeaderUnrecognizedError",
    "RetryCancelledError",
]
