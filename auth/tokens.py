"""Session token (JWT) issuing and verification."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from .errors import UnauthorizedError
from .models import TokenClaims


class SessionTokenIssuer:
    """Mints and checks signed, time-bound session tokens."""

    DEFAULT_EXPIRE_MINUTES = 60 * 24 * 7

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = DEFAULT_EXPIRE_MINUTES,
    ):
        if not secret_key:
            raise ValueError("Session token secret key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expires_delta = timedelta(minutes=expire_minutes)

    def issue(
        self,
        user_id: str,
        email: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a token binding ``user_id`` and ``email``."""
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self._expires_delta)
        to_encode = {
            "sub": user_id,
            "user_id": user_id,
            "email": email,
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode a token. Raises UnauthorizedError if it is not acceptable."""
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
        except ExpiredSignatureError:
            raise UnauthorizedError("Session token has expired")
        except JWTError:
            raise UnauthorizedError("Invalid session token")

        user_id = payload.get("user_id") or payload.get("sub")
        email = payload.get("email")
        if not user_id or not email:
            raise UnauthorizedError("Invalid session token")
        return TokenClaims(user_id=user_id, email=email)
