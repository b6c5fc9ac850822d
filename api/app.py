"""FastAPI application factory and configuration.

The lifespan wires MongoDB, email, Google verification and session tokens
into ``app.state``. Routes read their collaborators from there.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .auth_routes import router as auth_router
from .note_routes import router as note_router
from auth.database import UserDatabase
from auth.email_service import EmailService
from auth.errors import AppError, ErrorKind, STATUS_BY_KIND
from auth.google import GoogleIdentityVerifier
from auth.passcodes import PasscodeIssuer
from auth.service import AuthService
from auth.tokens import SessionTokenIssuer
from config.settings import DEV_JWT_SECRET, Settings, get_settings
from notes.database import NoteDatabase

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for log correlation."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Collaborators injected before startup (tests) are left alone
    if getattr(app.state, "auth_service", None) is not None:
        yield
        return

    settings: Settings = app.state.settings
    logger.info("Starting notekeep server...")

    if settings.jwt_secret_key == DEV_JWT_SECRET:
        logger.warning("JWT_SECRET_KEY is not set, using the development key")

    user_db = UserDatabase(settings.mongodb_uri, settings.mongodb_database)
    google_verifier = None
    try:
        await user_db.connect()
        logger.info("MongoDB connected")

        note_db = NoteDatabase(user_db.database)
        await note_db.ensure_indexes()

        email_service = EmailService(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            smtp_user=settings.smtp_user,
            smtp_password=settings.smtp_password,
            smtp_from_email=settings.smtp_from_email,
            smtp_timeout=settings.smtp_timeout,
            frontend_url=settings.frontend_url,
            otp_ttl_minutes=settings.otp_ttl_minutes,
        )
        if email_service.is_configured:
            logger.info("Email service configured with SMTP")
        else:
            logger.info("Email service using console fallback")

        if settings.google_client_id:
            google_verifier = GoogleIdentityVerifier(settings.google_client_id)
            logger.info("Google sign-in enabled")
        else:
            logger.info("Google sign-in disabled (GOOGLE_CLIENT_ID not set)")

        tokens = SessionTokenIssuer(
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            expire_minutes=settings.jwt_expire_minutes,
        )

    except Exception as e:
        logger.error(f"Failed to initialize: {e}")
        await user_db.close()
        raise

    # Store in app state
    app.state.user_db = user_db
    app.state.note_db = note_db
    app.state.tokens = tokens
    app.state.auth_service = AuthService(
        user_db=user_db,
        passcodes=PasscodeIssuer(settings.otp_ttl_minutes),
        notifier=email_service,
        tokens=tokens,
        google_verifier=google_verifier,
    )

    yield

    # Cleanup
    if google_verifier:
        await google_verifier.close()
    await user_db.close()
    app.state.auth_service = None
    logger.info("notekeep server shutting down...")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="notekeep",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(note_router)

    # Exception handlers
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        """Translate domain errors to their status code."""
        logger.info(f"{request.method} {request.url.path} -> {exc.kind.value}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Report malformed request bodies with the validation envelope."""
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg', 'invalid value')}" if field else "Invalid request"
        return JSONResponse(
            status_code=STATUS_BY_KIND[ErrorKind.VALIDATION],
            content={
                "type": "error",
                "error": {"type": ErrorKind.VALIDATION.value, "message": message},
            },
        )

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        """Hide unexpected failures behind a generic error."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "type": "error",
                "error": {
                    "type": "api_error",
                    "message": "An unexpected error occurred.",
                },
            },
        )

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/")
    async def root():
        return {"service": "notekeep", "status": "ok"}

    return app
