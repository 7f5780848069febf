"""
Link-email dispatch pipeline.

Runs the two provider calls for one request, strictly in order:

  1. identity provider  → action link
  2. template           → rendered message
  3. email provider     → delivery receipt

A failure at any step raises and stops the pipeline, so no email is sent
unless a link was generated and rendered.
"""

import logging

from link_mailer.config import Settings
from link_mailer.models.email import CallbackResolution, DeliveryReceipt
from link_mailer.services.action_link import generate_action_link
from link_mailer.services.email_sender import send_message
from link_mailer.services.email_template import build_message

logger = logging.getLogger(__name__)


def dispatch_link_email(email: str, resolution: CallbackResolution, settings: Settings) -> DeliveryReceipt:
    """
    Generate the action link for email, render it, and send it.

    Blocking: call from a worker thread when running inside the event loop.
    """
    link = generate_action_link(email, resolution, settings)
    message = build_message(settings, email, link, resolution.is_sign_in)
    receipt = send_message(message, settings.sendgrid_api_key)

    logger.info(
        f"Sent {'sign-in' if resolution.is_sign_in else 'verification'} link to {email} "
        f"(status={receipt.status_code}, message_id={receipt.message_id})"
    )
    return receipt
