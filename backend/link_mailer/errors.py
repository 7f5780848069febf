"""
Error hierarchy for the link mailer.

Every error carries the HTTP status and user-level status text it maps to,
so the exception handler below never has to guess. Routes and services raise
these; FastAPI turns them into the standard error body:

    {"status": "<status text>", "error": "<message>"}
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LinkMailerError(Exception):
    """Base class for all errors raised while handling a send-email request."""

    http_status_code = 500
    status_text = "Internal server error."

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidRequest(LinkMailerError):
    """Malformed or missing client input."""

    http_status_code = 400
    status_text = "Invalid request."


class ConfigurationError(LinkMailerError):
    """Server-side configuration is missing or malformed."""

    http_status_code = 500
    status_text = "Server misconfigured."


class UpstreamError(LinkMailerError):
    """An external provider failed."""

    http_status_code = 502
    status_text = "Upstream provider failed."


class IdentityProviderError(UpstreamError):
    """
    The identity provider refused to mint an action link.

    Kept as a 400: the provider rejects a specific address (unknown user,
    malformed address, per-address quota), so the caller is told the request
    was invalid.
    """

    http_status_code = 400
    status_text = "Invalid request."


class DeliveryError(UpstreamError):
    """The email provider did not accept the message."""

    http_status_code = 502
    status_text = "Email delivery failed."


class TemplateError(LinkMailerError):
    """The HTML template could not be loaded or rendered."""

    http_status_code = 500
    status_text = "Email template unavailable."


class SerializationError(LinkMailerError):
    """The success acknowledgement could not be encoded."""

    http_status_code = 500
    status_text = "Internal server error."


CORS_ALLOW_ORIGIN = {"Access-Control-Allow-Origin": "*"}


async def link_mailer_error_handler(_request: Request, exc: LinkMailerError) -> JSONResponse:
    """Render a LinkMailerError as the standard error body."""
    if exc.http_status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    else:
        logger.warning(f"{type(exc).__name__}: {exc.message}")

    return JSONResponse(
        status_code=exc.http_status_code,
        content={"status": exc.status_text, "error": exc.message},
        headers=CORS_ALLOW_ORIGIN,
    )
