"""Registry of error dialect parsers."""

from chatguard.exceptions import HeaderUnrecognizedError
from chatguard.models import APIErrorDetails
from chatguard.parser.base import ErrorParser


class ParserRegistry:
    """Tries dialect parsers in registration order."""

    def __init__(self) -> None:
        self._parsers: list[ErrorParser] = []

    def register(self, parser: ErrorParser) -> None:
        """Register a dialect parser."""
        self._parsers.append(parser)

    @property
    def dialects(self) -> list[str]:
        """Names of the registered dialects, in the order they are tried."""
        return [parser.dialect for parser in self._parsers]

    def parse(self, raw: str) -> APIErrorDetails:
        """Parse raw with the first dialect whose header matches."""
        for parser in self._parsers:
            try:
                return parser.parse(raw)
            except HeaderUnrecognizedError:
                continue
        raise HeaderUnrecognizedError(raw.strip())
