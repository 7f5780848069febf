"""
Process-wide configuration.

Settings are read from the environment (and a .env file, via python-dotenv)
exactly once at startup by ``load_settings``. The resulting ``Settings`` object
is frozen and stored on ``app.state.settings``; request handlers receive it
through the ``get_settings`` dependency instead of reading os.environ.

Missing or malformed values raise ConfigurationError before any request is
served. The error lists every offending variable at once.
"""

import os
from typing import Mapping, Optional
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict

from link_mailer.errors import ConfigurationError

IDENTITY_PROVIDERS = ("firebase", "supabase")

# "subdomain": a subDomain field in the body selects a verification link.
# "query":     an isSignIn query parameter selects the link type.
LINK_MODES = ("subdomain", "query")

DEFAULT_TEMPLATE_PATH = "email_template.html"

_TRUE_STRINGS = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Immutable configuration shared by every request."""

    model_config = ConfigDict(frozen=True)

    identity_provider: str = "firebase"
    firebase_project_id: Optional[str] = None
    firebase_credentials_path: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None

    callback_url: str
    link_mode: str = "subdomain"

    sendgrid_api_key: str
    sender_email: str
    sender_name: str
    email_subject: str
    email_template_path: str = DEFAULT_TEMPLATE_PATH

    # Optional platform hints forwarded to the identity provider as-is
    ios_bundle_id: Optional[str] = None
    android_package_name: Optional[str] = None
    android_install_app: bool = False
    dynamic_link_domain: Optional[str] = None


def is_absolute_url(value: str) -> bool:
    """Return True if value parses as an absolute URI (scheme + host)."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def is_valid_mailbox(value: str) -> bool:
    """
    Return True if value is a syntactically valid email address.

    Only syntax is checked and no DNS lookup is made. Quoted local parts,
    dotless domains and .test domains are accepted; reserved names such as
    localhost, .local and .invalid are still rejected.
    """
    try:
        validate_email(
            value,
            check_deliverability=False,
            allow_quoted_local=True,
            globally_deliverable=False,
            test_environment=True,
        )
    except EmailNotValidError:
        return False
    return True


def _get(environ: Mapping[str, str], *names: str) -> str:
    """
    Return the first non-blank value among names, stripped.

    Later names are legacy aliases, e.g. FIREBASE_CALLBACK_URL for CALLBACK_URL.
    """
    for name in names:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return ""


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ). Tests pass a
                 plain dict so they never touch the real environment.

    Raises:
        ConfigurationError: if any required variable is missing or invalid.
    """
    if environ is None:
        environ = os.environ

    identity_provider = _get(environ, "IDENTITY_PROVIDER").lower() or "firebase"
    link_mode = _get(environ, "LINK_MODE").lower() or "subdomain"

    values = {
        "identity_provider": identity_provider,
        "firebase_project_id": _get(environ, "FIREBASE_PROJECT_ID") or None,
        "firebase_credentials_path": _get(environ, "FIREBASE_CREDENTIALS_PATH") or None,
        "supabase_url": _get(environ, "SUPABASE_URL") or None,
        "supabase_service_key": _get(environ, "SUPABASE_SERVICE_KEY") or None,
        "callback_url": _get(environ, "CALLBACK_URL", "FIREBASE_CALLBACK_URL"),
        "link_mode": link_mode,
        "sendgrid_api_key": _get(environ, "SENDGRID_API_KEY"),
        "sender_email": _get(environ, "SENDGRID_FROM_EMAIL"),
        "sender_name": _get(environ, "SENDGRID_FROM_NAME"),
        "email_subject": _get(environ, "SENDGRID_EMAIL_SUBJECT"),
        "email_template_path": _get(environ, "EMAIL_TEMPLATE_PATH") or DEFAULT_TEMPLATE_PATH,
        "ios_bundle_id": _get(environ, "IOS_BUNDLE_ID") or None,
        "android_package_name": _get(environ, "ANDROID_PACKAGE_NAME") or None,
        "android_install_app": _get(environ, "ANDROID_INSTALL_APP").lower() in _TRUE_STRINGS,
        "dynamic_link_domain": _get(environ, "DYNAMIC_LINK_DOMAIN") or None,
    }

    problems = []

    required = {
        "CALLBACK_URL": values["callback_url"],
        "SENDGRID_API_KEY": values["sendgrid_api_key"],
        "SENDGRID_FROM_EMAIL": values["sender_email"],
        "SENDGRID_FROM_NAME": values["sender_name"],
        "SENDGRID_EMAIL_SUBJECT": values["email_subject"],
    }
    if identity_provider == "firebase":
        required["FIREBASE_PROJECT_ID"] = values["firebase_project_id"]
    elif identity_provider == "supabase":
        required["SUPABASE_URL"] = values["supabase_url"]
        required["SUPABASE_SERVICE_KEY"] = values["supabase_service_key"]
    else:
        problems.append(
            f"IDENTITY_PROVIDER must be one of {list(IDENTITY_PROVIDERS)}, got {identity_provider!r}"
        )

    missing = [name for name, value in required.items() if not value]
    if missing:
        problems.append(f"missing required variables: {', '.join(missing)}")

    if values["callback_url"] and not is_absolute_url(values["callback_url"]):
        problems.append(f"CALLBACK_URL is not an absolute URL: {values['callback_url']!r}")

    if values["sender_email"] and not is_valid_mailbox(values["sender_email"]):
        problems.append(f"SENDGRID_FROM_EMAIL is not a valid email address: {values['sender_email']!r}")

    if link_mode not in LINK_MODES:
        problems.append(f"LINK_MODE must be one of {list(LINK_MODES)}, got {link_mode!r}")

    if problems:
        raise ConfigurationError("Invalid configuration: " + "; ".join(problems))

    return Settings(**values)
