"""HTTP transport between the client and the chat API."""

from typing import Any

import httpx

from .session import ClientSession

DEFAULT_BASE_URL = "http://localhost:5000/api/chat"


class TransportError(Exception):
    """Request did not complete with a 2xx JSON answer."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ChatTransport:
    """Thin async wrapper over the four chat endpoints.

    Every failure (connection error, timeout, non-2xx status, unparsable
    body) surfaces as ``TransportError``.
    """

    def __init__(
        self,
        session: ClientSession,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._session = session
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    def _headers(self) -> dict[str, str]:
        if self._session.token:
            return {"Authorization": f"Bearer {self._session.token}"}
        return {}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, headers=self._headers(), **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"{method} {path} returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e
        return response

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        response = await self._request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"{method} {path} returned invalid JSON") from e

    async def send_message(self, prompt: str, provider: str | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"prompt": prompt}
        if provider:
            payload["provider"] = provider
        data = await self._request_json("POST", "/message", json=payload)
        if not isinstance(data, dict):
            raise TransportError("POST /message returned a non-object body")
        return data

    async def fetch_history(self) -> list[dict[str, Any]]:
        data = await self._request_json("GET", "/history")
        if not isinstance(data, list):
            raise TransportError("GET /history returned a non-array body")
        return data

    async def clear_history(self) -> None:
        await self._request("DELETE", "/clear")

    async def export_history(self) -> bytes:
        response = await self._request("GET", "/export")
        return response.content

    async def close(self) -> None:
        await self._client.aclose()
