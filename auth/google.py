"""Google ID token verification."""

import logging
from typing import Optional

import httpx

from .errors import InvalidCredentialError
from .models import FederatedIdentity

logger = logging.getLogger(__name__)

TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
GOOGLE_ISSUERS = {"accounts.google.com", "https://accounts.google.com"}


class GoogleIdentityVerifier:
    """Checks Google ID tokens against the tokeninfo endpoint."""

    def __init__(
        self,
        client_id: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self._client_id = client_id
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this verifier created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def verify(self, id_token: str) -> FederatedIdentity:
        """
        Verify a Google ID token.
        Returns the subject id and profile claims.
        Raises InvalidCredentialError if Google rejects the token or claims are missing.
        """
        if not id_token:
            raise InvalidCredentialError("Google token is required")

        try:
            response = await self._get_client().get(
                TOKENINFO_URL, params={"id_token": id_token}
            )
        except httpx.RequestError as e:
            logger.error(f"Google token verification request failed: {e}")
            raise InvalidCredentialError("Could not verify Google token") from e

        if response.status_code != 200:
            logger.info(f"Google rejected ID token (status {response.status_code})")
            raise InvalidCredentialError("Invalid Google token")

        try:
            claims = response.json()
        except ValueError as e:
            raise InvalidCredentialError("Invalid Google token") from e

        if claims.get("aud") != self._client_id:
            raise InvalidCredentialError("Google token was issued for another client")

        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise InvalidCredentialError("Google token has an unexpected issuer")

        # tokeninfo returns booleans as strings
        if str(claims.get("email_verified", "true")).lower() != "true":
            raise InvalidCredentialError("Google account email is not verified")

        subject = claims.get("sub")
        email = claims.get("email")
        name = claims.get("name")
        if not subject or not email or not name:
            raise InvalidCredentialError("Incomplete Google profile")

        return FederatedIdentity(
            subject=subject,
            email=email.strip().lower(),
            name=name,
            picture=claims.get("picture"),
        )
