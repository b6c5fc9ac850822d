"""Authentication flows: signup, passcode verification, signin and Google login."""

import logging
import re
from datetime import date, datetime, timezone
from typing import Callable, Optional

from email_validator import EmailNotValidError, validate_email
from starlette.concurrency import run_in_threadpool

from .database import UserDatabase
from .email_service import EmailService
from .errors import (
    ConflictError,
    DeliveryError,
    ExpiredError,
    InvalidCredentialError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from .google import GoogleIdentityVerifier
from .models import AuthResult, PublicUser, User, utcnow
from .passcodes import PasscodeIssuer
from .tokens import SessionTokenIssuer

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: Optional[str]) -> str:
    """Trim, lower-case and validate an email address."""
    email = (email or "").strip().lower()
    if not email:
        raise ValidationError("Email is required")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    # Same checks EmailStr applies when the user record is built
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        raise ValidationError("Invalid email format")
    return email


class AuthService:
    """
    Coordinates the user store, passcodes, email delivery, Google verification
    and session tokens.

    User states: unregistered -> pending verification -> verified.
    Every collaborator is passed in so tests can substitute fakes.
    """

    def __init__(
        self,
        user_db: UserDatabase,
        passcodes: PasscodeIssuer,
        notifier: EmailService,
        tokens: SessionTokenIssuer,
        google_verifier: Optional[GoogleIdentityVerifier] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._user_db = user_db
        self._passcodes = passcodes
        self._notifier = notifier
        self._tokens = tokens
        self._google_verifier = google_verifier
        self._clock = clock

    @property
    def google_enabled(self) -> bool:
        return self._google_verifier is not None

    # ==================== Helpers ====================

    async def _deliver_passcode(self, user: User, passcode: str) -> None:
        """Send the passcode; on transport failure log it for the operator instead."""
        try:
            # SMTP is blocking, keep it off the event loop
            await run_in_threadpool(
                self._notifier.send_passcode, user.email, passcode, user.name
            )
        except DeliveryError as e:
            logger.warning(
                f"Passcode delivery to {user.email} failed ({e.message}); "
                f"passcode for user {user.id}: {passcode}"
            )

    async def _send_welcome(self, user: User) -> None:
        """Best-effort welcome email. Failures never cost the user a session."""
        try:
            await run_in_threadpool(self._notifier.send_welcome, user.email, user.name)
        except Exception as e:
            logger.warning(f"Welcome email to {user.email} failed: {e}")

    def _session_for(self, user: User) -> AuthResult:
        token = self._tokens.issue(user.id, user.email)
        return AuthResult(token=token, user=PublicUser.from_user(user))

    def _check_passcode(self, user: User, otp: str) -> None:
        """Shared passcode checks, in the order clients rely on."""
        if not user.has_pending_passcode:
            raise ValidationError("No passcode pending for this user")

        if self._clock() > user.otp_expires:
            raise ExpiredError("Passcode has expired, request a new one")

        if otp != user.otp:
            raise InvalidCredentialError("Invalid passcode")

    async def _get_user(self, user_id: str) -> User:
        user = await self._user_db.get_user_by_id(user_id) if user_id else None
        if not user:
            raise NotFoundError("User not found")
        return user

    # ==================== Signup ====================

    async def signup(
        self, name: str, email: str, date_of_birth: Optional[date] = None
    ) -> str:
        """Register an unverified user and send a passcode. Returns the user id."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required")
        email = normalize_email(email)

        dob = None
        if date_of_birth is not None:
            if date_of_birth > self._clock().date():
                raise ValidationError("Date of birth cannot be in the future")
            dob = datetime(
                date_of_birth.year, date_of_birth.month, date_of_birth.day,
                tzinfo=timezone.utc,
            )

        if await self._user_db.get_user_by_email(email):
            raise ConflictError("User already exists with this email")

        passcode = self._passcodes.generate()
        user = await self._user_db.create_user(
            name=name,
            email=email,
            date_of_birth=dob,
            verified=False,
            otp=passcode,
            otp_expires=self._passcodes.expiry_from(self._clock()),
        )
        logger.info(f"New user signed up: {email} ({user.id})")

        await self._deliver_passcode(user, passcode)
        return user.id

    async def verify_otp(self, user_id: str, otp: str) -> AuthResult:
        """Complete signup with the emailed passcode."""
        user = await self._get_user(user_id)
        if user.verified:
            raise ConflictError("User is already verified")

        self._check_passcode(user, otp)

        if not await self._user_db.consume_passcode(user.id, otp, mark_verified=True):
            # Replaced by a newer passcode between read and write
            raise InvalidCredentialError("Invalid passcode")

        user.verified = True
        user.otp = None
        user.otp_expires = None
        logger.info(f"User verified: {user.email}")

        await self._send_welcome(user)
        return self._session_for(user)

    # ==================== Signin ====================

    async def signin(self, email: str) -> str:
        """Start a passcode signin for a verified user. Returns the user id."""
        email = normalize_email(email)

        user = await self._user_db.get_user_by_email(email)
        if not user:
            raise NotFoundError("No account found with this email, please sign up first")
        if not user.verified:
            raise UnauthorizedError("Please verify your email before signing in")

        passcode = self._passcodes.generate()
        await self._user_db.set_passcode(
            user.id, passcode, self._passcodes.expiry_from(self._clock())
        )
        logger.info(f"Signin passcode issued for {email}")

        await self._deliver_passcode(user, passcode)
        return user.id

    async def verify_signin_otp(self, user_id: str, otp: str) -> AuthResult:
        """Finish a passcode signin and issue a session."""
        user = await self._get_user(user_id)
        if not user.verified:
            raise UnauthorizedError("Please verify your email before signing in")

        self._check_passcode(user, otp)

        if not await self._user_db.consume_passcode(user.id, otp):
            raise InvalidCredentialError("Invalid passcode")

        logger.info(f"User signed in: {user.email}")
        return self._session_for(user)

    # ==================== Google ====================

    async def google_auth(self, external_token: str) -> AuthResult:
        """Sign in (or sign up) with a Google ID token."""
        if self._google_verifier is None:
            raise InvalidCredentialError("Google sign-in is not configured")

        identity = await self._google_verifier.verify(external_token)

        user = await self._user_db.find_by_email_or_google_id(
            identity.email, identity.subject
        )

        if user is None:
            user = await self._user_db.create_user(
                name=identity.name,
                email=identity.email,
                verified=True,
                google_id=identity.subject,
            )
            logger.info(f"New user created from Google login: {user.email}")
        elif not user.google_id:
            await self._user_db.link_google_id(user.id, identity.subject)
            user.google_id = identity.subject
            user.verified = True
            logger.info(f"Linked Google account to existing user {user.email}")

        return self._session_for(user)
