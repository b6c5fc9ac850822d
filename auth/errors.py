"""Error taxonomy shared by the auth and notes services.

Every error carries an ``ErrorKind``. The HTTP layer maps kinds to status
codes from a single table instead of inspecting exception classes.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    CONFLICT = "conflict_error"
    NOT_FOUND = "not_found_error"
    UNAUTHORIZED = "authentication_error"
    EXPIRED = "expired_error"
    INVALID_CREDENTIAL = "invalid_credential_error"
    DELIVERY = "delivery_error"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.EXPIRED: 400,
    ErrorKind.INVALID_CREDENTIAL: 401,
    ErrorKind.DELIVERY: 502,
}


class AppError(Exception):
    """Base class for domain errors."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_response(self) -> dict:
        """Error envelope returned to clients."""
        return {
            "type": "error",
            "error": {
                "type": self.kind.value,
                "message": self.message,
            },
        }


class ValidationError(AppError):
    """Malformed or missing input."""

    kind = ErrorKind.VALIDATION


class ConflictError(AppError):
    """Duplicate account or already-verified user."""

    kind = ErrorKind.CONFLICT


class NotFoundError(AppError):
    """Unknown user or record."""

    kind = ErrorKind.NOT_FOUND


class UnauthorizedError(AppError):
    """Unverified account or bad session token."""

    kind = ErrorKind.UNAUTHORIZED


class ExpiredError(AppError):
    """Passcode past its validity window."""

    kind = ErrorKind.EXPIRED


class InvalidCredentialError(AppError):
    """Wrong passcode or rejected federated assertion."""

    kind = ErrorKind.INVALID_CREDENTIAL


class DeliveryError(AppError):
    """Email transport failure."""

    kind = ErrorKind.DELIVERY
