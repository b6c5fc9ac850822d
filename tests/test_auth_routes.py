"""Tests for the /auth endpoints."""

from fastapi.testclient import TestClient

from api.app import create_app
from config.settings import Settings
from tests.conftest import auth_header, signup_and_verify


class TestSignupFlow:

    def test_signup_returns_user_id_only(self, client, notifier):
        resp = client.post("/auth/signup", json={
            "name": "Ana",
            "email": "ana@x.com",
            "dateOfBirth": "1990-04-02",
        })
        assert resp.status_code == 201
        data = resp.json()
        assert "userId" in data
        assert "token" not in data
        assert len(notifier.passcodes) == 1

    def test_verify_returns_token_and_profile(self, client, notifier):
        resp = client.post("/auth/signup", json={
            "name": "Ana", "email": "ana@x.com", "dateOfBirth": "1990-04-02",
        })
        user_id = resp.json()["userId"]

        resp = client.post("/auth/verify-otp", json={
            "userId": user_id, "otp": notifier.last_passcode("ana@x.com"),
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["token"]
        assert data["user"] == {
            "id": user_id,
            "name": "Ana",
            "email": "ana@x.com",
            "dateOfBirth": "1990-04-02",
        }

    def test_duplicate_signup_is_409(self, client, notifier):
        signup_and_verify(client, notifier)
        resp = client.post("/auth/signup", json={"name": "Ana", "email": "ANA@x.com"})
        assert resp.status_code == 409
        assert resp.json()["error"]["type"] == "conflict_error"

    def test_invalid_email_is_400(self, client):
        resp = client.post("/auth/signup", json={"name": "Ana", "email": "nope"})
        assert resp.status_code == 400
        assert resp.json()["error"]["type"] == "validation_error"

    def test_missing_field_is_400(self, client):
        resp = client.post("/auth/signup", json={"email": "ana@x.com"})
        assert resp.status_code == 400
        assert resp.json()["error"]["type"] == "validation_error"

    def test_verify_twice_is_409(self, client, notifier):
        user_id = signup_and_verify(client, notifier)["user"]["id"]
        resp = client.post("/auth/verify-otp", json={
            "userId": user_id, "otp": notifier.last_passcode("ana@x.com"),
        })
        assert resp.status_code == 409

    def test_expired_code_is_400(self, client, notifier, clock):
        user_id = client.post(
            "/auth/signup", json={"name": "Ana", "email": "ana@x.com"}
        ).json()["userId"]
        clock.advance(minutes=11)

        resp = client.post("/auth/verify-otp", json={
            "userId": user_id, "otp": notifier.last_passcode("ana@x.com"),
        })
        assert resp.status_code == 400
        assert resp.json()["error"]["type"] == "expired_error"

    def test_wrong_code_is_401(self, client, notifier):
        user_id = client.post(
            "/auth/signup", json={"name": "Ana", "email": "ana@x.com"}
        ).json()["userId"]
        code = notifier.last_passcode("ana@x.com")
        wrong = "999999" if code != "999999" else "999998"

        resp = client.post("/auth/verify-otp", json={"userId": user_id, "otp": wrong})
        assert resp.status_code == 401
        assert resp.json()["error"]["type"] == "invalid_credential_error"


class TestSigninFlow:

    def test_signin_then_verify(self, client, notifier):
        first = signup_and_verify(client, notifier)

        resp = client.post("/auth/signin", json={"email": "ana@x.com"})
        assert resp.status_code == 200
        user_id = resp.json()["userId"]
        assert user_id == first["user"]["id"]
        assert "token" not in resp.json()

        resp = client.post("/auth/verify-signin-otp", json={
            "userId": user_id, "otp": notifier.last_passcode("ana@x.com"),
        })
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "ana@x.com"

    def test_unknown_email_is_404(self, client):
        resp = client.post("/auth/signin", json={"email": "missing@x.com"})
        assert resp.status_code == 404

    def test_unverified_user_is_401(self, client):
        client.post("/auth/signup", json={"name": "Ana", "email": "ana@x.com"})
        resp = client.post("/auth/signin", json={"email": "ana@x.com"})
        assert resp.status_code == 401
        assert resp.json()["error"]["type"] == "authentication_error"

    def test_replay_is_no_passcode_pending(self, client, notifier):
        signup_and_verify(client, notifier)
        user_id = client.post("/auth/signin", json={"email": "ana@x.com"}).json()["userId"]
        body = {"userId": user_id, "otp": notifier.last_passcode("ana@x.com")}

        assert client.post("/auth/verify-signin-otp", json=body).status_code == 200
        resp = client.post("/auth/verify-signin-otp", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"]["type"] == "validation_error"


class TestGoogleAndMe:

    def test_google_login(self, client, google):
        google.register("g-token", "sub-1", "ana@x.com", "Ana")
        resp = client.post("/auth/google", json={"token": "g-token"})
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "ana@x.com"

    def test_google_bad_token_is_401(self, client):
        resp = client.post("/auth/google", json={"token": "forged"})
        assert resp.status_code == 401

    def test_google_not_configured_is_503(self, app):
        app.state.auth_service._google_verifier = None
        with TestClient(app) as c:
            resp = c.post("/auth/google", json={"token": "anything"})
        assert resp.status_code == 503

    def test_me(self, client, notifier):
        session = signup_and_verify(client, notifier)
        resp = client.get("/auth/me", headers=auth_header(session["token"]))
        assert resp.status_code == 200
        assert resp.json() == session["user"]

    def test_me_without_token_is_401(self, client):
        resp = client.get("/auth/me")
        assert resp.status_code == 401

    def test_me_with_bad_token_is_401(self, client):
        resp = client.get("/auth/me", headers=auth_header("garbage"))
        assert resp.status_code == 401


class TestApp:

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_request_id_header(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"

    def test_unexpected_error_is_generic_500(self, app):
        async def boom(*args, **kwargs):
            raise RuntimeError("database exploded")

        app.state.auth_service.signin = boom
        with TestClient(app, raise_server_exceptions=False) as c:
            resp = c.post("/auth/signin", json={"email": "ana@x.com"})
        assert resp.status_code == 500
        assert "exploded" not in resp.text
        assert resp.json()["error"]["type"] == "api_error"

    def test_auth_unavailable_without_services(self):
        app = create_app(Settings(_env_file=None))
        # Not entered as a context manager, so the MongoDB lifespan never runs
        client = TestClient(app)
        resp = client.post("/auth/signin", json={"email": "ana@x.com"})
        assert resp.status_code == 503
