"""
Session lifecycle: login, logout and token-derived session state.

State is never stored; it is recomputed from the credential store on every
call. `current_state()` is the only read path that may clear the store
(when the token's `exp` has passed).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from qrbook.core import config
from qrbook.core.errors import InvalidCredentials, MalformedToken
from qrbook.core.navigation import Navigator
from qrbook.core.store import TOKEN_KEY, USER_KEY, CredentialStore
from qrbook.core.transport import Transport

from . import schemas, security

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(
        self,
        *,
        store: CredentialStore,
        transport: Transport,
        navigator: Navigator,
        clock: Callable[[], float] = security.now_epoch_s,
    ) -> None:
        self.store = store
        self.transport = transport
        self.navigator = navigator
        self.clock = clock

    async def login(self, email: str, password: str) -> schemas.Credential:
        """
        Exchange email/password for a token and persist it.

        Raises `InvalidCredentials` (server message when given) on any
        non-2xx status and `ConnectivityError` when the service is unreachable.
        The store is left untouched on failure.
        """
        body = json.dumps({"email": (email or "").strip(), "password": password or ""})
        resp = await self.transport.perform_request(
            config.LOGIN_ENDPOINT,
            "POST",
            {"Content-Type": "application/json"},
            body,
        )

        data = resp.json()
        if not resp.ok:
            logger.info("login_failed status=%s", resp.status)
            raise InvalidCredentials(resp.message() or None)

        try:
            parsed = schemas.LoginResponse.model_validate(data if isinstance(data, dict) else {})
        except ValidationError as exc:
            raise InvalidCredentials("Unexpected login response.") from exc

        token = parsed.token.strip()
        if not token:
            logger.warning("login_missing_token status=%s", resp.status)
            raise InvalidCredentials("Login response did not include a token.")

        user = parsed.model_dump(exclude_none=True)
        self.store.set(TOKEN_KEY, token)
        self.store.set(USER_KEY, json.dumps(user))
        logger.info("login_succeeded")
        return schemas.Credential(token=token, user=user)

    def logout(self) -> None:
        """
        Clear all stored credentials and request the login view. Idempotent.
        """
        self.store.clear()
        logger.info("logout")
        self.navigator.redirect_to(config.LOGIN_PATH)

    def get_token(self) -> str:
        return (self.store.get(TOKEN_KEY) or "").strip()

    def get_user(self) -> dict[str, Any]:
        raw = self.store.get(USER_KEY) or "{}"
        try:
            user = json.loads(raw)
        except ValueError:
            return {}
        return user if isinstance(user, dict) else {}

    def peek_state(self) -> schemas.SessionState:
        """
        Classify the stored token without side effects.

        A token whose payload cannot be decoded counts as ACTIVE.
        """
        token = self.get_token()
        if not token:
            return schemas.SessionState.UNAUTHENTICATED
        try:
            expired = security.is_expired(token, now=self.clock())
        except MalformedToken:
            return schemas.SessionState.ACTIVE
        return schemas.SessionState.EXPIRED if expired else schemas.SessionState.ACTIVE

    def current_state(self) -> schemas.SessionState:
        """
        Like `peek_state`, but an expired token is logged out on the spot and
        reported as UNAUTHENTICATED.
        """
        state = self.peek_state()
        if state is schemas.SessionState.EXPIRED:
            logger.info("session_expired")
            self.logout()
            return schemas.SessionState.UNAUTHENTICATED
        return state

    def is_authenticated(self) -> bool:
        return self.current_state() is not schemas.SessionState.UNAUTHENTICATED
