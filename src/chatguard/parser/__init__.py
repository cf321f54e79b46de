"""Parsers for upstream chat-completion error strings."""

from chatguard.models import APIErrorDetails
from chatguard.parser.base import ErrorParser
from chatguard.parser.json_format import JsonFormatParser, parse_json_format
from chatguard.parser.plain_format import PlainFormatParser, parse_plain_format
from chatguard.parser.rate_limit import extract_rate_limit, metric_type
from chatguard.parser.registry import ParserRegistry


def create_default_registry() -> ParserRegistry:
    """Create a registry trying the JSON dialect before the plain one."""
    registry = ParserRegistry()
    registry.register(JsonFormatParser())
    registry.register(PlainFormatParser())
    return registry


_default_registry = create_default_registry()


def parse_error(raw: str) -> APIErrorDetails:
    """Parse raw in whichever dialect it is written in."""
    return _default_registry.parse(raw)


__all__ = [
    "ErrorParser",
    "JsonFormatParser",
    "ParserRegistry",
    "PlainFormatParser",
    "create_default_registry",
    "extract_rate_limit",
    "metric_type",
    "parse_error",
    "parse_json_format",
    "parse_plain_format",
]
