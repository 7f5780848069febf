"""
Email composition.

Renders the HTML template with Jinja2 and assembles the full message. The
template is read from disk on every call; a missing or broken template is a
TemplateError, never replaced by an inline default.

Template variables:
  email_verification_link  — the action link
  is_sign_in               — True for sign-in links, False for verification links

Public API:
  render_email_html(template_path, link, is_sign_in) -> str
  render_plain_text(link) -> str
  build_message(settings, recipient, link, is_sign_in) -> RenderedMessage
"""

from pathlib import Path

import jinja2

from link_mailer.config import Settings
from link_mailer.errors import TemplateError
from link_mailer.models.email import RenderedMessage

PLAIN_TEXT_BODY = "Welcome to Clubs! Follow the link to authenticate: {link}."


def render_email_html(template_path: str, link: str, is_sign_in: bool) -> str:
    """
    Render the HTML email body.

    Args:
        template_path: Template file; relative paths resolve against the
                       current working directory.
        link:          Action link to embed
        is_sign_in:    Sign-in flag exposed to the template

    Raises:
        TemplateError: template missing, unreadable, or failing to render
    """
    path = Path(template_path)

    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(path.parent)),
        autoescape=jinja2.select_autoescape(["html", "htm", "xml"]),
        undefined=jinja2.StrictUndefined,
    )

    try:
        template = env.get_template(path.name)
        return template.render(
            email_verification_link=link,
            is_sign_in=is_sign_in,
        )
    except jinja2.TemplateNotFound:
        raise TemplateError(f"Email template not found: {template_path}")
    except (jinja2.TemplateError, OSError) as e:
        raise TemplateError(f"Failed to render email template: {str(e)}")


def render_plain_text(link: str) -> str:
    return PLAIN_TEXT_BODY.format(link=link)


def build_message(settings: Settings, recipient: str, link: str, is_sign_in: bool) -> RenderedMessage:
    """Compose the email for one recipient from configuration and the action link."""
    return RenderedMessage(
        sender_email=settings.sender_email,
        sender_name=settings.sender_name,
        recipient=recipient,
        subject=settings.email_subject,
        plain_text_body=render_plain_text(link),
        html_body=render_email_html(settings.email_template_path, link, is_sign_in),
    )
