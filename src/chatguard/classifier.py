"""Classifier predicates that also accept a missing error."""

from chatguard.models import RATE_LIMIT_CODE, APIErrorDetails

NIL = "<nil>"


def is_rate_limit(err: APIErrorDetails | None) -> bool:
    """Check whether err describes a rate-limit failure."""
    return err is not None and err.is_rate_limit()


def is_auth(err: APIErrorDetails | None) -> bool:
    """Check whether err describes an authentication failure."""
    return err is not None and err.is_auth()


def is_server_error(err: APIErrorDetails | None) -> bool:
    """Check whether err describes a server-side failure."""
    return err is not None and err.is_server_error()


def should_retry(err: APIErrorDetails | None) -> bool:
    """
    Check whether err carries a rate limit with an advised delay.

    Only these failures are worth sleeping on: the upstream told us how long
    to wait. Rate limits without quota details, auth failures and server
    errors are all surfaced to the caller.
    """
    return (
        err is not None
        and err.status == 429
        and err.code == RATE_LIMIT_CODE
        and err.rate_info is not None
    )


def render(err: APIErrorDetails | None) -> str:
    """Render err as ``METHOD URL: STATUS REASON - MESSAGE``."""
    if err is None:
        return NIL
    return str(err)
