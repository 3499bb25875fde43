"""
Route guard for protected views.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from fastapi import Depends, HTTPException, Request, status

from qrbook.core import config
from qrbook.core.errors import (
    ClientError,
    ConnectivityError,
    InvalidCredentials,
    InvalidEntry,
    ServerError,
)
from qrbook.core.navigation import Navigator, RecordingNavigator

from .service import SessionManager

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RouteGuard:
    """
    Checks the session once per activation of a protected view.
    """

    def __init__(self, *, session: SessionManager, navigator: Navigator) -> None:
        self.session = session
        self.navigator = navigator

    def allows(self) -> bool:
        if self.session.is_authenticated():
            return True
        logger.info("guard_denied redirect=%s", config.LOGIN_PATH)
        self.navigator.redirect_to(config.LOGIN_PATH)
        return False

    def guard(self, protected_view: T) -> T | None:
        """
        Return `protected_view` when the session is valid, otherwise request
        the login view and return None.
        """
        if not self.allows():
            return None
        return protected_view


def redirect_to_login(path: str | None = None) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_303_SEE_OTHER,
        detail="Please login again.",
        headers={"Location": path or config.LOGIN_PATH},
    )


def get_route_guard(request: Request) -> RouteGuard:
    return request.app.state.client.guard


def get_session(request: Request) -> SessionManager:
    return request.app.state.client.session


def get_navigator(request: Request) -> RecordingNavigator:
    return request.app.state.client.navigator


# Sync so FastAPI runs it in the threadpool; store reads may touch disk.
def require_session(
    guard: RouteGuard = Depends(get_route_guard),
    navigator: RecordingNavigator = Depends(get_navigator),
) -> SessionManager:
    if not guard.allows():
        raise redirect_to_login(navigator.consume())
    return guard.session


def client_error_to_http(exc: ClientError, navigator: RecordingNavigator | None = None) -> HTTPException:
    """
    Map a client error to its HTTP response. Login-requiring errors redirect
    to the path the session requested, drained from `navigator`.
    """
    if exc.requires_login:
        return redirect_to_login(navigator.consume() if navigator is not None else None)
    if isinstance(exc, InvalidCredentials):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)
    if isinstance(exc, InvalidEntry):
        return HTTPException(status_code=422, detail=exc.message)
    if isinstance(exc, ConnectivityError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.message)
    if isinstance(exc, ServerError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message)
