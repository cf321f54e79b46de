"""Error parser protocol."""

from typing import Protocol

from chatguard.models import APIErrorDetails

METHODS = r"(GET|POST|PUT|PATCH|DELETE)"


class ErrorParser(Protocol):
    """Protocol for upstream error dialect parsers."""

    dialect: str

    def parse(self, raw: str) -> APIErrorDetails:
        """Parse a raw error string, raising HeaderUnrecognizedError on mismatch."""
        ...
