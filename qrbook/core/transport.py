"""
HTTP transport for the remote contacts service.

The rest of the client only sees `Transport.perform_request(...)`, which
either returns an `ApiResponse` (any status) or raises `ConnectivityError`
when no response was received at all.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import httpx

from .errors import ConnectivityError

_MISSING = object()


class ApiResponse:
    """
    Status plus body with lazy, non-raising decoders.
    """

    def __init__(self, status: int, content: bytes = b"", headers: Mapping[str, str] | None = None) -> None:
        self.status = int(status)
        self.content = content or b""
        self.headers = dict(headers or {})
        self._json: Any = _MISSING

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        # Malformed or empty bodies decode to an empty object.
        if self._json is _MISSING:
            try:
                self._json = json.loads(self.text())
            except ValueError:
                self._json = {}
        return self._json

    def message(self) -> str:
        data = self.json()
        if isinstance(data, dict):
            message = data.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()
        return ""

    def __repr__(self) -> str:
        return f"ApiResponse(status={self.status})"


class Transport(ABC):
    @abstractmethod
    async def perform_request(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: bytes | str | None = None,
        *,
        files: Mapping[str, Any] | None = None,
    ) -> ApiResponse: ...

    async def aclose(self) -> None:
        return None


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise ValueError("API base URL is empty.")
    return base_url.rstrip("/")


class HttpxTransport(Transport):
    """
    httpx-backed transport.

    Pass `client` to reuse an existing `httpx.AsyncClient` (it is then not
    closed by `aclose`); otherwise one is created for `base_url`.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout_s: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if client is None:
            client = httpx.AsyncClient(base_url=_normalize_base_url(base_url or ""), timeout=timeout_s)
            self._owns_client = True
        else:
            self._owns_client = False
        self._client = client

    async def perform_request(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: bytes | str | None = None,
        *,
        files: Mapping[str, Any] | None = None,
    ) -> ApiResponse:
        try:
            resp = await self._client.request(
                method.upper(),
                url,
                headers=dict(headers),
                content=body,
                files=files,
            )
        except httpx.RequestError as exc:
            raise ConnectivityError() from exc

        return ApiResponse(resp.status_code, resp.content, resp.headers)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
