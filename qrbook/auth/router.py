"""
FastAPI router for session endpoints.

Responses carry the navigation the session requested as `redirect`.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from qrbook.core import config
from qrbook.core.errors import ClientError
from qrbook.core.navigation import RecordingNavigator

from . import schemas
from .dependencies import client_error_to_http, get_navigator, get_session
from .service import SessionManager

router = APIRouter()


def _public_user(user: dict) -> dict:
    return {k: v for k, v in user.items() if k != "token"}


@router.post("/login")
async def login(
    request: schemas.LoginRequest,
    session: SessionManager = Depends(get_session),
    navigator: RecordingNavigator = Depends(get_navigator),
) -> dict:
    try:
        credential = await session.login(request.email, request.password)
    except ClientError as exc:
        raise client_error_to_http(exc, navigator) from exc

    navigator.redirect_to(config.DIRECTORY_PATH)
    return {"ok": True, "user": _public_user(credential.user), "redirect": navigator.consume()}


@router.post("/logout")
def logout(
    session: SessionManager = Depends(get_session),
    navigator: RecordingNavigator = Depends(get_navigator),
) -> dict:
    session.logout()
    return {"ok": True, "redirect": navigator.consume()}


@router.get("/session")
def session_state(
    session: SessionManager = Depends(get_session),
    navigator: RecordingNavigator = Depends(get_navigator),
) -> dict:
    state = session.current_state()
    return {
        "state": state.value,
        "authenticated": state is not schemas.SessionState.UNAUTHENTICATED,
        "user": _public_user(session.get_user()),
        "redirect": navigator.consume(),
    }
