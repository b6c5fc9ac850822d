"""Authentication module for notekeep."""

from .models import User, PublicUser, TokenClaims, FederatedIdentity, AuthResult
from .database import UserDatabase
from .email_service import EmailService
from .errors import (
    AppError,
    ErrorKind,
    ValidationError,
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ExpiredError,
    InvalidCredentialError,
    DeliveryError,
)
from .google import GoogleIdentityVerifier
from .passcodes import PasscodeIssuer
from .service import AuthService
from .tokens import SessionTokenIssuer
from .middleware import require_auth, get_current_user

__all__ = [
    "User",
    "PublicUser",
    "TokenClaims",
    "FederatedIdentity",
    "AuthResult",
    "UserDatabase",
    "EmailService",
    "AppError",
    "ErrorKind",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
    "UnauthorizedError",
    "ExpiredError",
    "InvalidCredentialError",
    "DeliveryError",
    "GoogleIdentityVerifier",
    "PasscodeIssuer",
    "AuthService",
    "SessionTokenIssuer",
    "require_auth",
    "get_current_user",
]
