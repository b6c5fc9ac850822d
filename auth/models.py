"""Pydantic models for authentication."""

from datetime import date, datetime, timezone
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    """User model stored in MongoDB."""

    id: str
    email: EmailStr
    name: str
    date_of_birth: Optional[datetime] = None
    verified: bool = False
    google_id: Optional[str] = None
    password_hash: Optional[str] = None  # Legacy records only
    otp: Optional[str] = None
    otp_expires: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def has_pending_passcode(self) -> bool:
        return bool(self.otp and self.otp_expires)


class PublicUser(BaseModel):
    """Profile returned to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    date_of_birth: Optional[date] = Field(default=None, alias="dateOfBirth")

    @classmethod
    def from_user(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            date_of_birth=user.date_of_birth.date() if user.date_of_birth else None,
        )


class TokenClaims(BaseModel):
    """Identity embedded in a session token."""

    user_id: str
    email: str


class FederatedIdentity(BaseModel):
    """Claims extracted from a verified Google ID token."""

    subject: str
    email: str
    name: str
    picture: Optional[str] = None


class AuthResult(BaseModel):
    """Session token plus profile returned after successful authentication."""

    token: str
    user: PublicUser
