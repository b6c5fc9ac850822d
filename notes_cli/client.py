"""HTTP client for the notekeep server."""

from datetime import date
from typing import Optional

import httpx


class ApiError(Exception):
    """Error response (or connection failure) from the server."""

    def __init__(self, status_code: int, message: str, error_type: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error_type = error_type


def _error_from_response(response: httpx.Response) -> ApiError:
    try:
        data = response.json()
    except ValueError:
        return ApiError(response.status_code, response.text or "Request failed")

    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return ApiError(response.status_code, error.get("message", "Request failed"), error.get("type"))
    detail = data.get("detail") if isinstance(data, dict) else None
    return ApiError(response.status_code, str(detail or "Request failed"))


class NotekeepClient:
    """Async wrapper around the notekeep HTTP API."""

    def __init__(
        self,
        server_url: str,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self._server_url = server_url.rstrip("/")
        self._token = token
        self._transport = transport
        self._timeout = timeout

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> dict:
        headers = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        async with httpx.AsyncClient(
            base_url=self._server_url, transport=self._transport, timeout=self._timeout
        ) as client:
            try:
                response = await client.request(method, path, json=json, headers=headers)
            except httpx.RequestError as e:
                raise ApiError(0, f"Failed to connect to server: {e}") from e

        if response.status_code >= 400:
            raise _error_from_response(response)
        return response.json()

    # ==================== Auth ====================

    async def signup(self, name: str, email: str, date_of_birth: Optional[date] = None) -> str:
        payload = {"name": name, "email": email}
        if date_of_birth:
            payload["dateOfBirth"] = date_of_birth.isoformat()
        data = await self._request("POST", "/auth/signup", json=payload)
        return data["userId"]

    async def verify_otp(self, user_id: str, otp: str) -> dict:
        return await self._request("POST", "/auth/verify-otp", json={"userId": user_id, "otp": otp})

    async def signin(self, email: str) -> str:
        data = await self._request("POST", "/auth/signin", json={"email": email})
        return data["userId"]

    async def verify_signin_otp(self, user_id: str, otp: str) -> dict:
        return await self._request(
            "POST", "/auth/verify-signin-otp", json={"userId": user_id, "otp": otp}
        )

    async def google_auth(self, id_token: str) -> dict:
        return await self._request("POST", "/auth/google", json={"token": id_token})

    async def me(self) -> dict:
        return await self._request("GET", "/auth/me")

    # ==================== Notes ====================

    async def list_notes(self) -> list[dict]:
        data = await self._request("GET", "/notes")
        return data["notes"]

    async def create_note(self, title: str, content: str) -> dict:
        data = await self._request("POST", "/notes", json={"title": title, "content": content})
        return data["note"]

    async def update_note(self, note_id: str, title: str, content: str) -> dict:
        data = await self._request(
            "PUT", f"/notes/{note_id}", json={"title": title, "content": content}
        )
        return data["note"]

    async def delete_note(self, note_id: str) -> None:
        await self._request("DELETE", f"/notes/{note_id}")
