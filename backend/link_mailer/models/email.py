"""
Pydantic models for the send-email flow.

Models:
  EmailRequest        — validated request body
  ActionLinkSettings  — callback URL + optional platform hints for the identity provider
  CallbackResolution  — link settings plus the sign-in/verification choice
  RenderedMessage     — fully composed email, ready for the provider
  DeliveryReceipt     — the safe-to-surface part of the provider response
  SendEmailResponse   — success acknowledgement returned to the caller
  ErrorResponse       — error body returned for every LinkMailerError
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class EmailRequest(BaseModel):
    """
    Request body for POST /.

    Wire format uses ``subDomain``; Python code uses ``sub_domain``.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    email: str
    sub_domain: Optional[str] = Field(default=None, alias="subDomain")


class ActionLinkSettings(BaseModel):
    """Where the identity provider sends the user once the link is used."""
    model_config = ConfigDict(frozen=True)

    url: str
    handle_code_in_app: bool = False

    # Platform hints: passed through to the provider, never inspected here
    ios_bundle_id: Optional[str] = None
    android_package_name: Optional[str] = None
    android_install_app: bool = False
    dynamic_link_domain: Optional[str] = None


class CallbackResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    link_settings: ActionLinkSettings
    is_sign_in: bool


class RenderedMessage(BaseModel):
    """A single transactional email. Built once per request, never stored."""
    model_config = ConfigDict(frozen=True)

    sender_email: str
    sender_name: str
    recipient: str
    subject: str
    plain_text_body: str
    html_body: str


class DeliveryReceipt(BaseModel):
    status_code: int
    message_id: Optional[str] = None


class SendEmailResponse(BaseModel):
    """
    Acknowledgement for a successfully dispatched email.

    Deliberately excludes the provider's raw response body and headers.
    """
    model_config = ConfigDict(populate_by_name=True)

    status: str = "sent"
    is_sign_in: bool = Field(alias="isSignIn")
    message_id: Optional[str] = Field(default=None, alias="messageId")


class ErrorResponse(BaseModel):
    status: str
    error: str
