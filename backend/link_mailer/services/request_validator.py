"""
Request validation for the send-email endpoint.

Turns the raw JSON payload (and, in query link mode, the isSignIn query
parameter) into validated values, raising InvalidRequest for anything a
client got wrong. No external call is made before these checks pass.
"""

from typing import Any, Optional

from link_mailer.config import is_valid_mailbox
from link_mailer.errors import InvalidRequest
from link_mailer.models.email import EmailRequest

# Literals accepted for the isSignIn query parameter
_TRUE_LITERALS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_LITERALS = {"0", "f", "F", "FALSE", "false", "False"}

_FORBIDDEN_SEGMENTS = {".", ".."}


def _validate_sub_domain(raw: Any) -> Optional[str]:
    """
    Return the sub-domain path segment, or None when it is absent.

    Empty or whitespace-only values count as absent. Anything that would
    escape a single path segment (slashes, dot segments) is rejected.
    """
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise InvalidRequest("subDomain must be a string")

    sub_domain = raw.strip()
    if not sub_domain:
        return None

    if "/" in sub_domain or "\\" in sub_domain or sub_domain in _FORBIDDEN_SEGMENTS:
        raise InvalidRequest("subDomain must be a single path segment")

    return sub_domain


def parse_email_request(payload: Any) -> EmailRequest:
    """
    Validate a decoded JSON body and return an EmailRequest.

    An absent (or null) email is reported separately from one that is
    present but malformed, so callers can tell the two apart.

    Raises:
        InvalidRequest: body is not an object, email is missing or invalid,
                        or subDomain is not a single path segment.
    """
    if not isinstance(payload, dict):
        raise InvalidRequest("request body must be a JSON object")

    email = payload.get("email")
    if email is None:
        raise InvalidRequest("missing required email field")

    if not isinstance(email, str):
        raise InvalidRequest("invalid email address")

    if not is_valid_mailbox(email):
        raise InvalidRequest("invalid email address")

    sub_domain = _validate_sub_domain(payload.get("subDomain"))

    return EmailRequest(email=email, sub_domain=sub_domain)


def parse_is_sign_in_flag(raw: Optional[str]) -> bool:
    """
    Parse the isSignIn query parameter.

    Absent means False. An unparsable value is an error rather than a
    silent False.
    """
    if raw is None:
        return False
    if raw in _TRUE_LITERALS:
        return True
    if raw in _FALSE_LITERALS:
        return False
    raise InvalidRequest(f"isSignIn must be a boolean, got {raw!r}")
