"""HTTP client for the Lovii API."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import httpx

from lovii import __version__
from lovii.client.errors import ApiError, NotFoundError, TransientNetworkError
from lovii.models import (
    ConnectResult,
    Note,
    NoteCreate,
    NoteUpdate,
    Profile,
    Task,
    WidgetSendResult,
    WidgetStatus,
)

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_TIMEOUT = 10.0


def _prepare_headers() -> Dict[str, str]:
    return {
        "User-Agent": f"LoviiSync/{__version__}",
        "Content-Type": "application/json",
    }


def _error_from_response(response: httpx.Response) -> ApiError:
    try:
        payload = response.json()
    except json.JSONDecodeError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}

    message = payload.get("error") or response.reason_phrase
    status = response.status_code

    if status == 404:
        return NotFoundError(status, message, payload)
    if status == 429 or status >= 500:
        return TransientNetworkError(status, message, payload)
    return ApiError(status, message, payload)


class LoviiApiClient:
    """Async client for the Lovii endpoints. Raises on any non-2xx answer."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=_prepare_headers(),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "LoviiApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:  # type: ignore[override]
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params, json=json_body)
        except httpx.TransportError as exc:
            raise TransientNetworkError(None, f"{method} {path} failed: {exc}") from exc
        if 200 <= response.status_code < 300:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()
        raise _error_from_response(response)

    # ── Profile ──

    async def create_profile(self, name: Optional[str] = None) -> Profile:
        data = await self.request("POST", "/profile", json_body={"name": name})
        return Profile.model_validate(data)

    async def get_profile(self, profile_id: str) -> Profile:
        data = await self.request("GET", "/profile", params={"id": profile_id})
        return Profile.model_validate(data)

    async def upsert_profile(self, body: Dict[str, Any]) -> Profile:
        data = await self.request("PUT", "/profile", json_body=body)
        return Profile.model_validate(data)

    async def connect(self, my_id: str, partner_code: str) -> ConnectResult:
        data = await self.request(
            "POST", "/connect", json_body={"myId": my_id, "partnerCode": partner_code}
        )
        return ConnectResult.model_validate(data)

    # ── Notes ──

    async def list_notes(self, profile_id: str) -> List[Note]:
        data = await self.request("GET", "/notes", params={"profileId": profile_id})
        return [Note.model_validate(item) for item in data or []]

    async def create_note(self, note: NoteCreate) -> Note:
        data = await self.request("POST", "/notes", json_body=note.to_wire())
        return Note.model_validate(data)

    async def update_note(self, patch: NoteUpdate) -> Note:
        data = await self.request(
            "PATCH", "/notes", json_body=patch.to_wire(exclude_unset=True)
        )
        return Note.model_validate(data)

    async def delete_note(self, note_id: str) -> None:
        await self.request("DELETE", "/notes", params={"id": note_id})

    # ── Tasks ──

    async def list_tasks(self, profile_id: str) -> List[Task]:
        data = await self.request("GET", "/tasks", params={"profileId": profile_id})
        return [Task.model_validate(item) for item in data or []]

    # ── Widget ──

    async def send_widget(self, my_id: str, note: Note) -> WidgetSendResult:
        body = {"myId": my_id, "note": note.to_wire(exclude={"profile_id"})}
        data = await self.request("POST", "/widget", json_body=body)
        return WidgetSendResult.model_validate(data)

    async def widget_status(self, my_id: str) -> WidgetStatus:
        data = await self.request("GET", "/widget", params={"myId": my_id})
        return WidgetStatus.model_validate(data)

    # ── Auth ──

    async def register(self, name: Optional[str], password: str) -> Profile:
        data = await self.request(
            "POST", "/auth/register", json_body={"name": name, "password": password}
        )
        return Profile.model_validate(data["user"])

    async def login(self, code: str, password: str) -> Profile:
        data = await self.request(
            "POST", "/auth/login", json_body={"code": code, "password": password}
        )
        return Profile.model_validate(data["user"])
