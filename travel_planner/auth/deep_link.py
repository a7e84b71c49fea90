"""
Parsing of OAuth callback deep links.

After a browser sign-in the desktop shell is re-opened through a custom URL
scheme, e.g.::

    travel-planner://auth-callback#access_token=...&refresh_token=...&expires_in=3600

The tokens travel in the fragment. Some providers put them in the query
string instead, so both are read (fragment wins).
"""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from travel_planner.config import settings


class DeepLinkError(Exception):
    """Deep link is malformed, uses another scheme or reports a sign-in error."""
    pass


@dataclass(frozen=True)
class AuthCallback:
    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    token_type: str = "Bearer"


def _params(raw: str) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(raw, keep_blank_values=False).items()}


def parse_auth_callback(url: str, scheme: Optional[str] = None) -> AuthCallback:
    """
    Extract the session tokens from an OAuth callback URL.

    Raises:
        DeepLinkError: wrong scheme, provider error, or missing tokens
    """
    expected_scheme = (scheme or settings.deep_link_scheme).lower()
    parts = urlsplit(url.strip())

    if parts.scheme.lower() != expected_scheme:
        raise DeepLinkError(f"Unexpected URL scheme '{parts.scheme}'")

    params = _params(parts.query)
    params.update(_params(parts.fragment))

    if "error" in params or "error_description" in params:
        raise DeepLinkError(params.get("error_description") or params["error"])

    access_token = params.get("access_token")
    refresh_token = params.get("refresh_token")
    if not access_token or not refresh_token:
        raise DeepLinkError("Callback URL does not contain session tokens")

    expires_in = params.get("expires_in")
    try:
        expires = int(expires_in) if expires_in is not None else None
    except ValueError:
        raise DeepLinkError(f"Invalid expires_in value '{expires_in}'")

    return AuthCallback(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=expires,
        token_type=params.get("token_type", "Bearer"),
    )
