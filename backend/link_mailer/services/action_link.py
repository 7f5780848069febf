"""
Action link generation (identity provider adapters).

Asks the configured identity provider to mint either an email sign-in link
or an email verification link for one address.

Supported providers:
  - firebase  (default; firebase-admin)
  - supabase  (supabase admin client)

Adding a new provider:
  1. Write a generate_<provider>_link(email, resolution, settings) -> str function.
  2. Register it in _GENERATORS.
  3. Set IDENTITY_PROVIDER=<provider> in the environment.

Each call is a single blocking request with no retry. Provider failures are
raised as IdentityProviderError; nothing falls back to another provider.
"""

import logging
import threading
from typing import Callable, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError
from google.auth.exceptions import GoogleAuthError
from supabase import Client, create_client

from link_mailer.config import Settings
from link_mailer.errors import ConfigurationError, IdentityProviderError
from link_mailer.models.email import CallbackResolution

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "link-mailer"

_firebase_lock = threading.Lock()


# ---------------------------------------------------------------------------
# Firebase
# ---------------------------------------------------------------------------

def get_firebase_app(settings: Settings) -> firebase_admin.App:
    """
    Return the process-wide Firebase app, initializing it on first use.

    Uses the service-account file from FIREBASE_CREDENTIALS_PATH when set,
    otherwise Google application default credentials.
    """
    with _firebase_lock:
        try:
            return firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            pass

        credential = None
        if settings.firebase_credentials_path:
            try:
                credential = credentials.Certificate(settings.firebase_credentials_path)
            except (OSError, ValueError) as e:
                raise ConfigurationError(f"Failed to load Firebase credentials: {str(e)}")

        logger.info(f"Initializing Firebase app for project {settings.firebase_project_id}")
        return firebase_admin.initialize_app(
            credential,
            options={"projectId": settings.firebase_project_id},
            name=FIREBASE_APP_NAME,
        )


def _firebase_action_code_settings(resolution: CallbackResolution) -> firebase_auth.ActionCodeSettings:
    link_settings = resolution.link_settings
    return firebase_auth.ActionCodeSettings(
        url=link_settings.url,
        handle_code_in_app=link_settings.handle_code_in_app,
        dynamic_link_domain=link_settings.dynamic_link_domain,
        ios_bundle_id=link_settings.ios_bundle_id,
        android_package_name=link_settings.android_package_name,
        android_install_app=link_settings.android_install_app if link_settings.android_package_name else None,
    )


def generate_firebase_link(email: str, resolution: CallbackResolution, settings: Settings) -> str:
    """Mint a Firebase email sign-in link or email verification link."""
    app = get_firebase_app(settings)
    action_code_settings = _firebase_action_code_settings(resolution)

    try:
        if resolution.is_sign_in:
            return firebase_auth.generate_sign_in_with_email_link(
                email, action_code_settings, app=app
            )
        return firebase_auth.generate_email_verification_link(
            email, action_code_settings, app=app
        )
    except GoogleAuthError as e:
        # Missing or expired service credentials are a server problem, not the caller's
        logger.error(f"Firebase credentials unusable: {e}")
        raise ConfigurationError(f"Identity provider credentials unavailable: {str(e)}")
    except (FirebaseError, ValueError) as e:
        raise IdentityProviderError(f"Failed to generate action link: {str(e)}")


# ---------------------------------------------------------------------------
# Supabase
# ---------------------------------------------------------------------------

_supabase_lock = threading.Lock()
_supabase_clients: dict[tuple[str, str], Client] = {}


def get_supabase_client(settings: Settings) -> Client:
    """
    Admin client for service-level auth operations (bypasses RLS).

    Built once per process for each (URL, service key) pair and reused.
    """
    key = (settings.supabase_url, settings.supabase_service_key)
    with _supabase_lock:
        client = _supabase_clients.get(key)
        if client is not None:
            return client

        try:
            client = create_client(settings.supabase_url, settings.supabase_service_key)
        except Exception as e:
            raise ConfigurationError(f"Failed to create Supabase client: {str(e)}")

        _supabase_clients[key] = client
        return client


def generate_supabase_link(email: str, resolution: CallbackResolution, settings: Settings) -> str:
    """
    Mint a Supabase magic link (sign-in) or invite link (verification).

    Supabase confirms the address when an invite link is followed, which is
    the closest match to a verification link.
    """
    client = get_supabase_client(settings)
    link_type = "magiclink" if resolution.is_sign_in else "invite"

    try:
        response = client.auth.admin.generate_link({
            "type": link_type,
            "email": email,
            "options": {"redirect_to": resolution.link_settings.url},
        })
    except Exception as e:
        raise IdentityProviderError(f"Failed to generate action link: {str(e)}")

    action_link = getattr(getattr(response, "properties", None), "action_link", None)
    if not action_link:
        raise IdentityProviderError("Failed to generate action link: no link returned by Supabase")

    return action_link


# ---------------------------------------------------------------------------
# Registry and dispatcher
# ---------------------------------------------------------------------------

_GENERATORS: dict[str, Callable[[str, CallbackResolution, Settings], str]] = {
    "firebase": generate_firebase_link,
    "supabase": generate_supabase_link,
}


def generate_action_link(
    email: str,
    resolution: CallbackResolution,
    settings: Settings,
    provider: Optional[str] = None,
) -> str:
    """
    Route to the generator for the provider argument or settings.identity_provider.

    Raises:
        ConfigurationError: unknown provider name, or unusable provider credentials
        IdentityProviderError: the provider refused or failed
    """
    resolved = (provider or settings.identity_provider).lower().strip()

    generator = _GENERATORS.get(resolved)
    if generator is None:
        raise ConfigurationError(
            f"Unknown identity provider {resolved!r}. "
            f"Supported providers: {sorted(_GENERATORS)}"
        )

    link_kind = "sign-in" if resolution.is_sign_in else "verification"
    logger.info(f"Requesting {link_kind} link from {resolved}")

    return generator(email, resolution, settings)
