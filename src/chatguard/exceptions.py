"""chatguard domain exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatguard.models import APIErrorDetails


class ChatGuardError(Exception):
    """Base exception for all chatguard errors."""


class HeaderUnrecognizedError(ChatGuardError):
    """Raised when a raw error string does not start with a known header."""

    def __init__(self, raw: str, dialect: str | None = None) -> None:
        self.raw = raw
        self.dialect = dialect
        preview = raw if len(raw) <= 80 else raw[:77] + "..."
        if dialect:
            super().__init__(f"Unrecognized {dialect} error header: {preview!r}")
        else:
            super().__init__(f"Unrecognized error header: {preview!r}")


class RetryCancelledError(ChatGuardError):
    """Raised when a caller cancels a retry loop."""

    def __init__(self, details: APIErrorDetails | None = None) -> None:
        self.details = details
        if details is None:
            super().__init__("Retry cancelled before the first attempt")
        else:
            super().__init__(f"Retry cancelled: {details}")


class ConfigError(ChatGuardError):
    """Raised when configuration cannot be loaded."""
