"""Pytest fixtures - in-memory collaborators for fast, isolated tests."""

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from auth.passcodes import PasscodeIssuer
from auth.service import AuthService
from auth.tokens import SessionTokenIssuer
from config.settings import Settings

from tests.fakes import (
    FakeClock,
    FakeGoogleVerifier,
    FakeNoteDatabase,
    FakeUserDatabase,
    RecordingNotifier,
)

TEST_SECRET = "test-secret-key"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def user_db():
    return FakeUserDatabase()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def google():
    return FakeGoogleVerifier()


@pytest.fixture
def tokens():
    return SessionTokenIssuer(TEST_SECRET)


@pytest.fixture
def auth_service(user_db, notifier, tokens, google, clock):
    return AuthService(
        user_db=user_db,
        passcodes=PasscodeIssuer(),
        notifier=notifier,
        tokens=tokens,
        google_verifier=google,
        clock=clock,
    )


@pytest.fixture
def note_db(clock):
    return FakeNoteDatabase(clock)


@pytest.fixture
def app(auth_service, user_db, note_db, tokens):
    """App with collaborators injected ahead of the lifespan."""
    application = create_app(Settings(_env_file=None, jwt_secret_key=TEST_SECRET))
    application.state.auth_service = auth_service
    application.state.user_db = user_db
    application.state.note_db = note_db
    application.state.tokens = tokens
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# Helper: sign up and verify through the API, returns the session response
# ---------------------------------------------------------------------------
def signup_and_verify(client: TestClient, notifier: RecordingNotifier,
                      name: str = "Ana", email: str = "ana@x.com") -> dict:
    resp = client.post("/auth/signup", json={"name": name, "email": email})
    assert resp.status_code == 201, resp.text
    user_id = resp.json()["userId"]

    resp = client.post("/auth/verify-otp", json={
        "userId": user_id,
        "otp": notifier.last_passcode(email),
    })
    assert resp.status_code == 200, resp.text
    return resp.json()


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
