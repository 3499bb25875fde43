from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qrbook.auth import router as auth_router
from qrbook.auth.dependencies import RouteGuard
from qrbook.auth.service import SessionManager
from qrbook.core import config
from qrbook.core.gateway import RequestGateway
from qrbook.core.navigation import RecordingNavigator
from qrbook.core.store import CredentialStore, build_store
from qrbook.core.transport import HttpxTransport, Transport
from qrbook.entries import router as entries_router
from qrbook.entries.repository import EntryRepository


@dataclass
class ClientContext:
    store: CredentialStore
    navigator: RecordingNavigator
    transport: Transport
    session: SessionManager
    gateway: RequestGateway
    repository: EntryRepository
    guard: RouteGuard


def build_client(
    *,
    transport: Transport,
    store: CredentialStore | None = None,
    navigator: RecordingNavigator | None = None,
) -> ClientContext:
    # One session instance is shared by every collaborator that needs it.
    store = store if store is not None else build_store(config.credentials_file())
    navigator = navigator if navigator is not None else RecordingNavigator()
    session = SessionManager(store=store, transport=transport, navigator=navigator)
    gateway = RequestGateway(transport=transport, session=session)
    return ClientContext(
        store=store,
        navigator=navigator,
        transport=transport,
        session=session,
        gateway=gateway,
        repository=EntryRepository(gateway=gateway),
        guard=RouteGuard(session=session, navigator=navigator),
    )


def create_app(
    *,
    transport: Transport | None = None,
    store: CredentialStore | None = None,
) -> FastAPI:
    config.configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        active_transport = transport
        if active_transport is None:
            active_transport = HttpxTransport(
                base_url=config.api_base_url(),
                timeout_s=config.http_timeout_s(),
            )
        app.state.client = build_client(transport=active_transport, store=store)
        try:
            yield
        finally:
            await active_transport.aclose()

    app = FastAPI(lifespan=lifespan)

    origins = config.cors_origins()
    if origins:
        # The browser frontend sends no cookies; the session lives in this process.
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type"],
        )

    app.include_router(auth_router.router, tags=["auth"])
    app.include_router(entries_router.router, tags=["entries"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
