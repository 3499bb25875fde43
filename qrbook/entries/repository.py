"""
Entry persistence through the contacts service.

Used endpoints:
- POST /protected/v1/forms/read      -> [{"name", "mobile", "qr"?}, ...]
- POST /unprotected/v1/forms/insert  <- {"name", "mobile", "qrid"}
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from qrbook.core import config
from qrbook.core.errors import InvalidEntry, ServerError, SessionExpired, Unauthenticated
from qrbook.core.gateway import RequestGateway

from . import schemas

logger = logging.getLogger(__name__)


def parse_entries(data: Any) -> list[schemas.Entry]:
    """
    Validate raw records; records that are not entry-shaped are dropped.
    """
    if not isinstance(data, list):
        raise ServerError("No data received from server")

    entries: list[schemas.Entry] = []
    for position, raw in enumerate(data):
        if not isinstance(raw, dict):
            logger.warning("entry_dropped position=%s reason=not_an_object", position)
            continue
        try:
            entries.append(schemas.Entry.model_validate(raw))
        except ValidationError as exc:
            logger.warning("entry_dropped position=%s errors=%s", position, exc.error_count())
    return entries


class EntryRepository:
    def __init__(self, *, gateway: RequestGateway) -> None:
        self.gateway = gateway

    @property
    def session(self):
        return self.gateway.session

    def _require_login(self, error: Unauthenticated) -> Unauthenticated:
        self.session.navigator.redirect_to(config.LOGIN_PATH)
        return error

    async def fetch_all(self) -> list[schemas.Entry]:
        """
        Fetch every registered entry.

        Raises `Unauthenticated` (after requesting the login view) when there
        is no token or the service denies it, `ServerError` on other non-2xx
        statuses and `ConnectivityError` when the service is unreachable.
        """
        if not self.session.get_token():
            raise self._require_login(Unauthenticated())

        try:
            resp = await self.gateway.send(config.ENTRIES_READ_ENDPOINT, "POST", {})
        except SessionExpired as exc:
            # The gateway already cleared the session and requested the redirect.
            raise Unauthenticated(exc.message) from exc

        if not resp.ok:
            logger.warning("entries_fetch_failed status=%s", resp.status)
            raise ServerError(resp.message() or None, status=resp.status)

        entries = parse_entries(resp.json())
        logger.info("entries_loaded count=%s", len(entries))
        return entries

    async def insert(self, name: str, mobile: str, qrid: int | None = None) -> None:
        """
        Register a new entry. The insert endpoint is public: no token is sent.
        """
        try:
            payload = schemas.InsertEntryRequest(name=name, mobile=mobile, qrid=qrid)
        except ValidationError as exc:
            raise InvalidEntry() from exc

        resp = await self.gateway.send(
            config.ENTRIES_INSERT_ENDPOINT,
            "POST",
            payload.model_dump(),
            authenticated=False,
        )
        if not resp.ok:
            logger.warning("entry_insert_failed status=%s", resp.status)
            raise ServerError(resp.message() or "Failed to submit. Please try again.", status=resp.status)
        logger.info("entry_inserted qrid=%s", payload.qrid)
