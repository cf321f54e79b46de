"""Parser for errors flattened into a single human-readable line."""

import re

from chatguard.exceptions import HeaderUnrecognizedError
from chatguard.models import APIErrorDetails
from chatguard.parser.base import METHODS
from chatguard.parser.rate_limit import extract_rate_limit, infer_code, metric_type

PLAIN_PATTERN = re.compile(
    METHODS + r"\s+(\S+):\s+(\d{3})\s+([A-Za-z ]+)\s+-(?:\s(.*))?",
    re.ASCII | re.DOTALL,
)


class PlainFormatParser:
    """Parser for ``METHOD URL: STATUS REASON - MESSAGE`` errors."""

    dialect = "plain"

    def parse(self, raw: str) -> APIErrorDetails:
        """Parse a plain-dialect error string.

        The advised retry delay is rounded to whole seconds in this dialect.
        """
        # Trailing spaces may belong to the message
        raw = raw.lstrip().rstrip("\r\n")
        match = PLAIN_PATTERN.fullmatch(raw)
        if match is None:
            raise HeaderUnrecognizedError(raw, self.dialect)

        method, url, status_text, reason, message = match.groups()
        status = int(status_text)
        message = message or ""

        rate_info = extract_rate_limit(message, round_seconds=True) if status == 429 else None
        error_type = metric_type(rate_info.metric) if rate_info else ""

        return APIErrorDetails(
            method=method,
            url=url,
            status=status,
            reason=reason.strip(),
            message=message,
            type=error_type,
            code=infer_code(status, message),
            rate_info=rate_info,
        )


def parse_plain_format(raw: str) -> APIErrorDetails:
    """Parse an error in the plain dialect."""
    return PlainFormatParser().parse(raw)
