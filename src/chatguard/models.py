"""Core data models for chatguard."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Literal

RATE_LIMIT_CODE = "rate_limit_exceeded"

AUTH_CODES = frozenset(
    {
        "invalid_api_key",
        "invalid_api_key_header",
        "account_deactivated",
        "organization_deactivated",
    }
)


@dataclass(frozen=True)
class RateLimitInfo:
    """Quota details recovered from a rate-limit message."""

    model: str
    scope_type: Literal["organization", "project"]
    scope_id: str
    metric: str
    limit: int
    used: int
    requested: int
    retry_after: timedelta
    docs_url: str

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping (retry_after in seconds)."""
        return {
            "model": self.model,
            "scope_type": self.scope_type,
            "scope_id": self.scope_id,
            "metric": self.metric,
            "limit": self.limit,
            "used": self.used,
            "requested": self.requested,
            "retry_after": self.retry_after.total_seconds(),
            "docs_url": self.docs_url,
        }


@dataclass(frozen=True)
class APIErrorDetails:
    """Parsed fields of one failed chat-completion request."""

    method: str
    url: str
    status: int
    reason: str
    message: str = ""
    type: str = ""
    param: str | None = None
    code: str = ""
    rate_info: RateLimitInfo | None = None

    def is_rate_limit(self) -> bool:
        """True for 429s, the rate-limit code, or a message mentioning one."""
        if self.status == 429:
            return True
        if self.code == RATE_LIMIT_CODE:
            return True
        return "rate limit" in self.message.lower()

    def is_auth(self) -> bool:
        """True for authentication and authorization failures."""
        if self.status in (401, 403):
            return True
        return self.code in AUTH_CODES

    def is_server_error(self) -> bool:
        """True for 5xx responses."""
        return 500 <= self.status <= 599

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly mapping of all fields."""
        return {
            "method": self.method,
            "url": self.url,
            "status": self.status,
            "reason": self.reason,
            "message": self.message,
            "type": self.type,
            "param": self.param,
            "code": self.code,
            "rate_info": self.rate_info.to_dict() if self.rate_info else None,
        }

    def __str__(self) -> str:
        return f"{self.method} {self.url}: {self.status} {self.reason} - {self.message}"
