"""
SendGrid delivery service.

Submits one transactional email per request. The provider's response
(status code, headers, body) is logged but never returned to the HTTP caller;
only the message id is kept for the acknowledgement.
"""

import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Email, Mail, To

from link_mailer.config import is_valid_mailbox
from link_mailer.errors import ConfigurationError, DeliveryError
from link_mailer.models.email import DeliveryReceipt, RenderedMessage

logger = logging.getLogger(__name__)


def build_sendgrid_mail(message: RenderedMessage) -> Mail:
    """
    Convert a RenderedMessage into a SendGrid Mail object.

    The recipient's display name is the address itself.
    """
    return Mail(
        from_email=Email(message.sender_email, message.sender_name),
        to_emails=To(message.recipient, message.recipient),
        subject=message.subject,
        plain_text_content=message.plain_text_body,
        html_content=message.html_body,
    )


def send_message(message: RenderedMessage, api_key: str) -> DeliveryReceipt:
    """
    Send a composed email through SendGrid.

    Args:
        message: Fully rendered email
        api_key: SendGrid API key

    Returns:
        DeliveryReceipt with the provider status code and message id

    Raises:
        ConfigurationError: sender address is not a valid email address
        DeliveryError: SendGrid rejected the message or could not be reached
    """
    # Sender comes from server configuration, so a bad value is not the caller's fault
    if not is_valid_mailbox(message.sender_email):
        raise ConfigurationError(
            f"Sender address is not a valid email address: {message.sender_email!r}"
        )

    mail = build_sendgrid_mail(message)
    client = SendGridAPIClient(api_key)

    try:
        response = client.send(mail)
    except Exception as e:
        logger.error(f"SendGrid send to {message.recipient} failed: {e}")
        raise DeliveryError(f"Failed to send email: {str(e)}")

    headers = response.headers or {}
    logger.info(
        "SendGrid responded %s for %s (headers: %s)",
        response.status_code,
        message.recipient,
        dict(headers),
    )
    logger.debug("SendGrid response body: %s", response.body)

    if not 200 <= response.status_code < 300:
        raise DeliveryError(
            f"Failed to send email: SendGrid returned HTTP {response.status_code}"
        )

    return DeliveryReceipt(
        status_code=response.status_code,
        message_id=headers.get("X-Message-Id"),
    )
