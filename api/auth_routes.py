"""Authentication routes for notekeep."""

import logging
from datetime import date
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from fastapi import APIRouter, Depends, Request, HTTPException, status

from auth.errors import NotFoundError
from auth.middleware import require_auth
from auth.models import AuthResult, PublicUser, TokenClaims
from auth.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class SignupRequest(BaseModel):
    """Request to create an account."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    date_of_birth: Optional[date] = Field(default=None, alias="dateOfBirth")


class SigninRequest(BaseModel):
    """Request to start a passcode signin."""

    email: str


class VerifyRequest(BaseModel):
    """Request to verify a passcode."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    otp: str


class GoogleRequest(BaseModel):
    """Request carrying a Google ID token."""

    token: str


def get_auth_service(request: Request) -> AuthService:
    auth_service = getattr(request.app.state, "auth_service", None)
    if not auth_service:
        raise HTTPException(status_code=503, detail="Authentication not configured")
    return auth_service


def _session_response(result: AuthResult, message: str) -> dict:
    return {
        "message": message,
        "token": result.token,
        "user": result.user.model_dump(by_alias=True, mode="json"),
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    request_data: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Create an unverified account and email a passcode."""
    user_id = await auth_service.signup(
        request_data.name, request_data.email, request_data.date_of_birth
    )
    return {
        "message": "User created, check your email for the verification code",
        "userId": user_id,
    }


@router.post("/verify-otp")
async def verify_otp(
    request_data: VerifyRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Verify the signup passcode and return a session token."""
    result = await auth_service.verify_otp(request_data.user_id, request_data.otp.strip())
    return _session_response(result, "Email verified successfully")


@router.post("/signin")
async def signin(
    request_data: SigninRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Email a signin passcode to a verified user."""
    user_id = await auth_service.signin(request_data.email)
    return {"message": "Passcode sent to your email", "userId": user_id}


@router.post("/verify-signin-otp")
async def verify_signin_otp(
    request_data: VerifyRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Verify the signin passcode and return a session token."""
    result = await auth_service.verify_signin_otp(
        request_data.user_id, request_data.otp.strip()
    )
    return _session_response(result, "Sign in successful")


@router.post("/google")
async def google_auth(
    request_data: GoogleRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Sign in or sign up with a Google ID token."""
    if not auth_service.google_enabled:
        raise HTTPException(status_code=503, detail="Google sign-in not configured")

    result = await auth_service.google_auth(request_data.token)
    return _session_response(result, "Google authentication successful")


@router.get("/me")
async def get_me(request: Request, claims: TokenClaims = Depends(require_auth)):
    """Return the profile of the authenticated user."""
    user_db = getattr(request.app.state, "user_db", None)
    if not user_db:
        raise HTTPException(status_code=503, detail="Authentication not configured")

    user = await user_db.get_user_by_id(claims.user_id)
    if not user:
        raise NotFoundError("User not found")

    return PublicUser.from_user(user).model_dump(by_alias=True, mode="json")
