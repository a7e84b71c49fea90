"""
Google Sign-In: verification of the ID token the desktop app obtains
from Google's browser flow.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

import httpx
import jwt

from travel_planner.auth.config import auth_settings

logger = logging.getLogger(__name__)

GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ["accounts.google.com", "https://accounts.google.com"]
JWKS_CACHE_TTL = timedelta(hours=1)


class ProviderError(Exception):
    """Base exception for provider-related errors."""
    pass


class TokenVerificationError(ProviderError):
    """Token verification failed."""
    pass


def find_signing_key(jwks: Dict[str, Any], kid: Optional[str]):
    """RSA public key for the key ID, from a JWKS document."""
    if not kid:
        raise TokenVerificationError("Token missing key ID")
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return jwt.algorithms.RSAAlgorithm.from_jwk(key)
    raise TokenVerificationError("Public key not found")


class GoogleProvider:
    """
    Validates Google ID tokens against Google's published signing keys.

    The key set is cached for an hour; an unknown key ID does not force a
    refetch before the cache expires.
    """

    def __init__(self, certs_url: str = GOOGLE_CERTS_URL):
        self.certs_url = certs_url
        self._jwks: Optional[Dict[str, Any]] = None
        self._jwks_fetched_at: Optional[datetime] = None

    async def signing_keys(self) -> Dict[str, Any]:
        now = datetime.utcnow()
        if self._jwks and self._jwks_fetched_at and now - self._jwks_fetched_at < JWKS_CACHE_TTL:
            return self._jwks

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.certs_url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Could not fetch Google signing keys: %s", e)
            raise ProviderError("Could not fetch Google signing keys")

        self._jwks = response.json()
        self._jwks_fetched_at = now
        return self._jwks

    def audiences(self) -> list[str]:
        """Client IDs a token may be issued for (desktop and web)."""
        audiences = [a for a in (auth_settings.google_client_id, auth_settings.google_client_id_web) if a]
        if not audiences:
            raise TokenVerificationError("Google Sign-In is not configured")
        return audiences

    async def verify_token(self, id_token: str) -> Dict[str, Any]:
        """
        Verify a Google ID token.

        Returns:
            'sub' (Google user ID), 'email', 'email_verified', 'name', 'picture'

        Raises:
            TokenVerificationError: token rejected, or Google Sign-In not configured
            ProviderError: signing keys could not be fetched
        """
        audiences = self.audiences()
        jwks = await self.signing_keys()

        try:
            public_key = find_signing_key(jwks, jwt.get_unverified_header(id_token).get("kid"))
            claims = jwt.decode(
                id_token,
                public_key,
                algorithms=["RS256"],
                audience=audiences,
                issuer=GOOGLE_ISSUERS,
            )
        except jwt.ExpiredSignatureError:
            raise TokenVerificationError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise TokenVerificationError(f"Invalid token: {str(e)}")

        if not claims.get("email"):
            raise TokenVerificationError("Google account has no e-mail address")

        return {
            "sub": claims["sub"],
            "email": claims["email"],
            "email_verified": claims.get("email_verified", False),
            "name": claims.get("name"),
            "picture": claims.get("picture"),
        }


google_provider = GoogleProvider()
