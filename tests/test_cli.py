"""Tests for the notekeep CLI against a mocked HTTP transport."""

import json

import httpx
import pytest
from click.testing import CliRunner

from notes_cli.config import LocalConfig
from notes_cli.main import cli

SESSION = {
    "message": "Email verified successfully",
    "token": "session-token",
    "user": {"id": "u1", "name": "Ana", "email": "ana@x.com", "dateOfBirth": None},
}


class FakeServer:
    """Routes requests to canned responses and records what it saw."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], httpx.Response] = {}

    def on(self, method: str, path: str, status_code: int = 200, **body) -> None:
        self.routes[(method, path)] = httpx.Response(status_code, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"error": {"type": "not_found_error", "message": "nope"}})
        return response

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def server():
    return FakeServer()


@pytest.fixture
def run(server, tmp_path):
    runner = CliRunner()

    def invoke(*args, input=None):
        return runner.invoke(
            cli,
            list(args),
            input=input,
            obj={"transport": httpx.MockTransport(server.handler)},
            env={"NOTEKEEP_HOME": str(tmp_path)},
        )

    return invoke


@pytest.fixture
def logged_in(tmp_path):
    LocalConfig(config_dir=tmp_path).save_session("ana@x.com", "session-token")


class TestAuthCommands:

    def test_signup_then_verify(self, run, server, tmp_path):
        server.on("POST", "/auth/signup", 201, message="sent", userId="u1")
        server.on("POST", "/auth/verify-otp", **SESSION)

        result = run("signup", "--name", "Ana", "--email", "ana@x.com", input="123456\n")

        assert result.exit_code == 0, result.output
        assert "Logged in as ana@x.com" in result.output
        assert server.body(0) == {"name": "Ana", "email": "ana@x.com"}
        assert server.body(1) == {"userId": "u1", "otp": "123456"}

        config = LocalConfig.load(tmp_path)
        assert config.token == "session-token"
        assert config.pending_user_id is None

    def test_signup_sends_date_of_birth(self, run, server):
        server.on("POST", "/auth/signup", 201, message="sent", userId="u1")
        server.on("POST", "/auth/verify-otp", **SESSION)

        result = run("signup", "--name", "Ana", "--email", "ana@x.com",
                     "--dob", "1990-04-02", input="123456\n")

        assert result.exit_code == 0, result.output
        assert server.body(0)["dateOfBirth"] == "1990-04-02"

    def test_login_uses_signin_flow(self, run, server):
        server.on("POST", "/auth/signin", message="sent", userId="u1")
        server.on("POST", "/auth/verify-signin-otp", **SESSION)

        result = run("login", "--email", "ana@x.com", input="123456\n")

        assert result.exit_code == 0, result.output
        assert [r.url.path for r in server.requests] == ["/auth/signin", "/auth/verify-signin-otp"]

    def test_wrong_code_shows_server_message(self, run, server, tmp_path):
        server.on("POST", "/auth/signin", message="sent", userId="u1")
        server.on("POST", "/auth/verify-signin-otp", 401,
                  type="error",
                  error={"type": "invalid_credential_error", "message": "Invalid OTP"})

        result = run("login", "--email", "ana@x.com", input="123456\n")

        assert result.exit_code == 1
        assert "Invalid OTP" in result.output
        # The pending flow survives so `verify` can retry
        config = LocalConfig.load(tmp_path)
        assert config.pending_user_id == "u1"
        assert config.token is None

    def test_verify_retries_pending_flow(self, run, server, tmp_path):
        LocalConfig(config_dir=tmp_path).set_pending("u1", "signin", "ana@x.com")
        server.on("POST", "/auth/verify-signin-otp", **SESSION)

        result = run("verify", "654321")

        assert result.exit_code == 0, result.output
        assert server.body() == {"userId": "u1", "otp": "654321"}

    def test_verify_without_pending_flow(self, run, server):
        result = run("verify", "654321")
        assert result.exit_code == 1
        assert server.requests == []

    def test_google(self, run, server, tmp_path):
        server.on("POST", "/auth/google", **SESSION)

        result = run("google", "id-token")

        assert result.exit_code == 0, result.output
        assert server.body() == {"token": "id-token"}
        assert LocalConfig.load(tmp_path).is_logged_in()

    def test_logout(self, run, logged_in, tmp_path):
        result = run("logout")
        assert result.exit_code == 0
        assert "Logged out from ana@x.com" in result.output
        assert not LocalConfig.load(tmp_path).is_logged_in()

    def test_connection_failure(self, run, server):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        server.handler = refuse
        result = run("login", "--email", "ana@x.com")
        assert result.exit_code == 1
        assert "Failed to connect" in result.output


class TestNoteCommands:

    def test_requires_login(self, run, server):
        result = run("notes", "list")
        assert result.exit_code == 1
        assert "Not logged in" in result.output
        assert server.requests == []

    def test_list(self, run, server, logged_in):
        server.on("GET", "/notes", notes=[{
            "id": "n1",
            "title": "Groceries",
            "content": "milk\neggs",
            "createdAt": "2024-05-01T12:00:00Z",
            "updatedAt": "2024-05-01T12:00:00Z",
        }])

        result = run("notes", "list")

        assert result.exit_code == 0, result.output
        assert "[n1] Groceries" in result.output
        assert "    eggs" in result.output
        assert server.requests[0].headers["Authorization"] == "Bearer session-token"

    def test_add(self, run, server, logged_in):
        server.on("POST", "/notes", 201, message="Note created successfully",
                  note={"id": "n2", "title": "t", "content": "c"})

        result = run("notes", "add", "t", "c")

        assert result.exit_code == 0, result.output
        assert "Created note n2" in result.output
        assert server.body() == {"title": "t", "content": "c"}

    def test_rm_unknown_note(self, run, server, logged_in):
        result = run("notes", "rm", "missing")
        assert result.exit_code == 1
        assert "nope" in result.output

    def test_expired_session_hint(self, run, server, logged_in):
        server.on("GET", "/notes", 401, type="error",
                  error={"type": "authentication_error", "message": "Session token has expired"})

        result = run("notes", "list")

        assert result.exit_code == 1
        assert "notekeep login" in result.output
