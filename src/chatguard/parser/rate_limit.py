"""Rate-limit message parsing."""

import math
import re
from datetime import timedelta

from chatguard.models import RATE_LIMIT_CODE, RateLimitInfo

RATE_LIMIT_PATTERN = re.compile(
    r"Rate limit reached for ([\w\-.]+) in (organization|project) ([\w-]+) "
    r"on ([^:]+): Limit (\d+), Used (\d+), Requested (\d+)\. "
    r"Please try again in (\d+(?:\.\d+)?)s\. Visit (\S+)",
    re.ASCII,
)


def extract_rate_limit(message: str, round_seconds: bool = False) -> RateLimitInfo | None:
    """
    Pull quota details out of a rate-limit message.

    Args:
        message: Human-readable error message
        round_seconds: Round the advised delay to the nearest whole second

    Returns:
        RateLimitInfo, or None when the message is not a rate-limit notice
    """
    match = RATE_LIMIT_PATTERN.search(message)
    if match is None:
        return None

    seconds = float(match.group(8))
    if round_seconds and seconds > 0:
        # Halves round away from zero
        seconds = math.floor(seconds + 0.5)

    return RateLimitInfo(
        model=match.group(1),
        scope_type=match.group(2),  # type: ignore[arg-type]
        scope_id=match.group(3),
        metric=match.group(4).strip(),
        limit=int(match.group(5)),
        used=int(match.group(6)),
        requested=int(match.group(7)),
        retry_after=timedelta(seconds=seconds),
        docs_url=match.group(9),
    )


def metric_type(metric: str) -> str:
    """Guess the error type ("tokens" or "requests") from a quota metric."""
    lowered = metric.lower()
    if "token" in lowered:
        return "tokens"
    if "requests" in lowered:
        return "requests"
    return ""


def infer_code(status: int, message: str, code: str = "") -> str:
    """Fill in the rate-limit code for 429s that mention a rate limit."""
    if code:
        return code
    if status == 429 and "rate limit" in message.lower():
        return RATE_LIMIT_CODE
    return code
