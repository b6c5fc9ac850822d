"""One-time passcode generation."""

import secrets
from datetime import datetime, timedelta


class PasscodeIssuer:
    """Generates 6-digit passcodes and their expiry."""

    DEFAULT_TTL_MINUTES = 10
    LOWEST = 100000
    SPAN = 900000  # 100000..999999 inclusive

    def __init__(self, ttl_minutes: int = DEFAULT_TTL_MINUTES):
        self._ttl = timedelta(minutes=ttl_minutes)

    @property
    def ttl_minutes(self) -> int:
        return int(self._ttl.total_seconds() // 60)

    def generate(self) -> str:
        """Generate a 6-digit code with no leading zero."""
        return str(self.LOWEST + secrets.randbelow(self.SPAN))

    def expiry_from(self, now: datetime) -> datetime:
        """Return the moment a code issued at ``now`` stops being valid."""
        return now + self._ttl
