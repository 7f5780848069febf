"""
Send-email router.

Endpoints:
  POST    /  — mint an action link and email it to the given address
  OPTIONS /  — CORS preflight

Request body:
  {"email": "user@example.com", "subDomain": "acme"}   (subDomain optional)

In query link mode (LINK_MODE=query) the link type comes from the isSignIn
query parameter instead, and subDomain is ignored.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic_core import PydanticSerializationError
from starlette.concurrency import run_in_threadpool

from link_mailer.config import Settings
from link_mailer.dependencies import get_settings
from link_mailer.errors import CORS_ALLOW_ORIGIN, InvalidRequest, SerializationError
from link_mailer.models.email import ErrorResponse, SendEmailResponse
from link_mailer.services.callback_url import resolve_callback, resolve_flag_callback
from link_mailer.services.dispatcher import dispatch_link_email
from link_mailer.services.request_validator import parse_email_request, parse_is_sign_in_flag

logger = logging.getLogger(__name__)

router = APIRouter()

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Max-Age": "3600",
}


@router.options("/", status_code=204)
async def preflight() -> Response:
    """Answer CORS preflight requests, whatever their payload."""
    return Response(status_code=204, headers=PREFLIGHT_HEADERS)


@router.post(
    "/",
    response_model=SendEmailResponse,
    responses={
        200: {
            "description": "Action link generated and email accepted by the provider",
            "content": {
                "application/json": {
                    "example": {"status": "sent", "isSignIn": True, "messageId": "abc123"}
                }
            },
        },
        400: {"model": ErrorResponse, "description": "Invalid input or identity provider rejection"},
        500: {"model": ErrorResponse, "description": "Server misconfiguration or template failure"},
        502: {"model": ErrorResponse, "description": "Email provider did not accept the message"},
    },
)
async def send_email(request: Request, settings: Settings = Depends(get_settings)):
    """
    Generate a sign-in or verification link and email it.

    All validation happens before either provider is contacted.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise InvalidRequest("request body must be valid JSON")

    email_request = parse_email_request(payload)

    if settings.link_mode == "query":
        is_sign_in = parse_is_sign_in_flag(request.query_params.get("isSignIn"))
        resolution = resolve_flag_callback(settings.callback_url, is_sign_in, settings)
    else:
        resolution = resolve_callback(settings.callback_url, email_request.sub_domain, settings)

    logger.info(f"Send-email request for {email_request.email} (callback: {resolution.link_settings.url})")

    receipt = await run_in_threadpool(
        dispatch_link_email, email_request.email, resolution, settings
    )

    ack = SendEmailResponse(is_sign_in=resolution.is_sign_in, message_id=receipt.message_id)
    try:
        content = ack.model_dump(mode="json", by_alias=True)
    except PydanticSerializationError as e:
        raise SerializationError(f"Failed to encode response: {str(e)}")

    return JSONResponse(status_code=200, content=content, headers=CORS_ALLOW_ORIGIN)
