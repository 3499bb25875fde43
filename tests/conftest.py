import json
import time
from typing import Any, Callable

import httpx
import jwt
import pytest

from qrbook.core.navigation import RecordingNavigator
from qrbook.core.store import MemoryCredentialStore
from qrbook.core.transport import HttpxTransport
from qrbook.main import ClientContext, build_client

BASE_URL = "https://contacts.test/api"


def make_token(*, exp_offset: int | None = None, **claims: Any) -> str:
    payload = dict(claims)
    if exp_offset is not None:
        payload["exp"] = int(time.time()) + exp_offset
    return jwt.encode(payload, "test-secret", algorithm="HS256")


class FakeService:
    """
    Scripted stand-in for the contacts service, driven through httpx.MockTransport.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.offline = False

    def reply(self, method: str, endpoint: str, status: int = 200, body: Any = None, raw: bytes | None = None) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if raw is not None:
                return httpx.Response(status, content=raw)
            if body is None:
                return httpx.Response(status)
            return httpx.Response(status, json=body)

        self.routes[(method.upper(), "/api" + endpoint)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "not found"})
        return handler(request)

    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


def make_transport(service: FakeService) -> HttpxTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(service), base_url=BASE_URL)
    return HttpxTransport(client=client)


@pytest.fixture
def service() -> FakeService:
    return FakeService()


@pytest.fixture
def client(service: FakeService) -> ClientContext:
    return build_client(
        transport=make_transport(service),
        store=MemoryCredentialStore(),
        navigator=RecordingNavigator(),
    )
