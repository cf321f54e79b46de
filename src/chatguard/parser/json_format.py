"""Parser for errors whose body is a JSON document."""

import json
import logging
import re
from typing import Any

from chatguard.exceptions import HeaderUnrecognizedError
from chatguard.models import APIErrorDetails
from chatguard.parser.base import METHODS
from chatguard.parser.rate_limit import extract_rate_limit, infer_code

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(
    METHODS + r'\s+"([^"]+)"\s*:\s*(\d{3})\s+([A-Za-z ]+)(?:\s+|\Z)',
    re.ASCII,
)

_BODY_FIELDS = ("message", "type", "param", "code")


def _unescape(body: str) -> str:
    # Bodies that went through one round of escaping carry literal \n and \t
    return body.replace("\\n", "\n").replace("\\t", "\t")


def _decode_envelope(body: str) -> dict[str, Any] | None:
    """
    Decode either {"error": {...}} or the same fields at top level.

    Returns None when the text is not JSON or the fields have the wrong shape.
    """
    try:
        data = json.loads(body, strict=False)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    nested = data.get("error")
    if isinstance(nested, dict):
        source = nested
    elif nested is None:
        source = data
    else:
        return None

    fields: dict[str, Any] = {}
    for name in _BODY_FIELDS:
        value = source.get(name)
        if value is not None and not isinstance(value, str):
            return None
        fields[name] = value
    return fields


def _decode_tolerant(body: str) -> dict[str, Any] | None:
    fields = _decode_envelope(body)
    if fields is not None:
        return fields
    # Truncated or trailing garbage: retry up to the last closing brace
    last = body.rfind("}")
    if last <= 0:
        return None
    return _decode_envelope(body[: last + 1])


class JsonFormatParser:
    """Parser for ``METHOD "URL": STATUS REASON {json}`` errors."""

    dialect = "json"

    def parse(self, raw: str) -> APIErrorDetails:
        """Parse a JSON-dialect error string."""
        raw = raw.strip()
        header = HEADER_PATTERN.match(raw)
        if header is None:
            raise HeaderUnrecognizedError(raw, self.dialect)

        method, url, status_text, reason = header.groups()
        status = int(status_text)
        reason = reason.strip()

        brace = raw.find("{", header.end())
        if brace == -1:
            return APIErrorDetails(method=method, url=url, status=status, reason=reason)

        body = _unescape(raw[brace:].strip())
        fields = _decode_tolerant(body)
        if fields is None:
            logger.debug("Undecodable error body from %s %s, keeping it as text", method, url)
            return APIErrorDetails(
                method=method,
                url=url,
                status=status,
                reason=reason,
                message=body.strip(),
                code=infer_code(status, body),
            )

        message = fields["message"] or ""
        return APIErrorDetails(
            method=method,
            url=url,
            status=status,
            reason=reason,
            message=message,
            type=fields["type"] or "",
            param=fields["param"],
            code=infer_code(status, message, fields["code"] or ""),
            rate_info=extract_rate_limit(message) if status == 429 else None,
        )


def parse_json_format(raw: str) -> APIErrorDetails:
    """Parse an error in the JSON-body dialect."""
    return JsonFormatParser().parse(raw)
