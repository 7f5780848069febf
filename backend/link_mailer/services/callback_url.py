"""
Callback URL resolution.

Decides where the identity provider redirects after the action link is used,
and whether the link is a sign-in link or a verification link:

  subdomain mode  — no subDomain: base URL, sign-in link
                    subDomain:    base URL + "/<subDomain>", verification link
  query mode      — base URL, link type taken from the isSignIn flag
"""

from typing import Optional
from urllib.parse import quote, urlparse, urlunparse

from link_mailer.config import Settings, is_absolute_url
from link_mailer.errors import ConfigurationError
from link_mailer.models.email import ActionLinkSettings, CallbackResolution


def _append_path_segment(base_url: str, segment: str) -> str:
    """
    Append one percent-encoded path segment to base_url.

    Exactly one slash separates the existing path and the segment; query
    string and fragment are kept as-is.
    """
    parsed = urlparse(base_url)
    path = parsed.path.rstrip("/") + "/" + quote(segment, safe="")
    return urlunparse((
        parsed.scheme,
        parsed.netloc,
        path,
        parsed.params,
        parsed.query,
        parsed.fragment,
    ))


def _link_settings(url: str, is_sign_in: bool, settings: Optional[Settings]) -> ActionLinkSettings:
    # Email sign-in links must be completed by the app, verification links need not be
    hints = {}
    if settings is not None:
        hints = {
            "ios_bundle_id": settings.ios_bundle_id,
            "android_package_name": settings.android_package_name,
            "android_install_app": settings.android_install_app,
            "dynamic_link_domain": settings.dynamic_link_domain,
        }
    return ActionLinkSettings(url=url, handle_code_in_app=is_sign_in, **hints)


def _require_absolute(base_url: str) -> None:
    if not is_absolute_url(base_url):
        raise ConfigurationError(f"Callback URL is not an absolute URL: {base_url!r}")


def resolve_callback(
    base_url: str,
    sub_domain: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> CallbackResolution:
    """
    Resolve the callback for subdomain link mode.

    Args:
        base_url:   Configured callback base URL
        sub_domain: Already-validated path segment, or None
        settings:   Optional Settings supplying platform hints

    Raises:
        ConfigurationError: if base_url is not an absolute URL
    """
    _require_absolute(base_url)

    if sub_domain is None:
        return CallbackResolution(
            link_settings=_link_settings(base_url, True, settings),
            is_sign_in=True,
        )

    target = _append_path_segment(base_url, sub_domain)
    return CallbackResolution(
        link_settings=_link_settings(target, False, settings),
        is_sign_in=False,
    )


def resolve_flag_callback(
    base_url: str,
    is_sign_in: bool,
    settings: Optional[Settings] = None,
) -> CallbackResolution:
    """Resolve the callback for query link mode: the caller picks the link type."""
    _require_absolute(base_url)
    return CallbackResolution(
        link_settings=_link_settings(base_url, is_sign_in, settings),
        is_sign_in=is_sign_in,
    )
