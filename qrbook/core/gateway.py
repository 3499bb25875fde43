"""
Request gateway: every outbound call to the contacts service goes through here.

- attaches `Authorization: Bearer <token>` when the session holds a token
- JSON-encodes bodies unless the call is an upload
- a 401/403 drops the session (logout + redirect) and raises `SessionExpired`

Any other status is returned untouched for the caller to interpret.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .errors import ConnectivityError, SessionExpired
from .transport import ApiResponse, Transport

if TYPE_CHECKING:
    from qrbook.auth.service import SessionManager

AUTH_DENIED_STATUSES = frozenset({401, 403})

logger = logging.getLogger(__name__)


class RequestGateway:
    def __init__(self, *, transport: Transport, session: "SessionManager") -> None:
        self.transport = transport
        self.session = session

    def _build_headers(self, *, is_upload: bool, authenticated: bool) -> dict[str, str]:
        headers: dict[str, str] = {}
        if authenticated:
            token = self.session.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        if not is_upload:
            headers["Content-Type"] = "application/json"
        return headers

    async def send(
        self,
        endpoint: str,
        method: str = "POST",
        body: Any = None,
        *,
        is_upload: bool = False,
        authenticated: bool = True,
    ) -> ApiResponse:
        """
        Send one request and return the response for any non-denied status.

        `authenticated=False` is for public endpoints: no token is attached
        and a 401/403 is returned like any other status.
        """
        headers = self._build_headers(is_upload=is_upload, authenticated=authenticated)

        content: bytes | str | None = None
        files: Mapping[str, Any] | None = None
        if is_upload:
            if isinstance(body, Mapping):
                files = body
            else:
                content = body
        elif body is not None:
            content = json.dumps(body)

        try:
            resp = await self.transport.perform_request(
                endpoint,
                method,
                headers,
                content,
                files=files,
            )
        except ConnectivityError:
            logger.warning("api_unreachable method=%s endpoint=%s", method, endpoint)
            raise

        logger.debug("api_response method=%s endpoint=%s status=%s", method, endpoint, resp.status)

        if authenticated and resp.status in AUTH_DENIED_STATUSES:
            logger.warning("api_auth_denied endpoint=%s status=%s", endpoint, resp.status)
            self.session.logout()
            raise SessionExpired()

        return resp

    async def get(self, endpoint: str) -> ApiResponse:
        return await self.send(endpoint, "GET")

    async def post(self, endpoint: str, data: Any = None) -> ApiResponse:
        return await self.send(endpoint, "POST", data)

    async def put(self, endpoint: str, data: Any = None) -> ApiResponse:
        return await self.send(endpoint, "PUT", data)

    async def delete(self, endpoint: str) -> ApiResponse:
        return await self.send(endpoint, "DELETE")

    async def upload(self, endpoint: str, payload: Mapping[str, Any] | bytes) -> ApiResponse:
        return await self.send(endpoint, "POST", payload, is_upload=True)
