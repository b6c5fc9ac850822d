"""Authentication dependencies for FastAPI routes."""

import logging
from typing import Optional

from fastapi import Request

from .errors import UnauthorizedError
from .models import TokenClaims

logger = logging.getLogger(__name__)


def extract_token(auth_header: str) -> Optional[str]:
    """Support both "Bearer <token>" and raw "<token>" formats."""
    auth_header = auth_header.strip()
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return auth_header or None


async def get_current_user(request: Request) -> Optional[TokenClaims]:
    """
    Extract and validate the session from the Authorization header.
    Returns the claims if valid, None if no auth provided.
    Raises UnauthorizedError if a token is present but invalid.
    """
    token = extract_token(request.headers.get("Authorization", ""))
    if not token:
        return None

    tokens = getattr(request.app.state, "tokens", None)
    if not tokens:
        logger.warning("Session token issuer not initialized")
        return None

    return tokens.verify(token)


async def require_auth(request: Request) -> TokenClaims:
    """
    Dependency that requires a valid session token.
    Raises UnauthorizedError (401) if not authenticated.
    """
    claims = await get_current_user(request)

    if not claims:
        raise UnauthorizedError("Invalid or missing authentication token")

    return claims
