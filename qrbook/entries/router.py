"""
FastAPI router for directory and registration endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, status

from qrbook.auth.dependencies import client_error_to_http, get_navigator, require_session
from qrbook.auth.service import SessionManager
from qrbook.core.errors import ClientError
from qrbook.core.navigation import RecordingNavigator

from . import schemas, service
from .repository import EntryRepository

router = APIRouter()


def get_repository(request: Request) -> EntryRepository:
    return request.app.state.client.repository


@router.get("/entry-details")
async def entry_details(
    q: str = Query(default="", max_length=200),
    qr: str | None = Query(default=None, max_length=50),
    _: SessionManager = Depends(require_session),
    repository: EntryRepository = Depends(get_repository),
    navigator: RecordingNavigator = Depends(get_navigator),
) -> dict:
    """
    Searchable, QR-grouped directory of every registered entry.
    """
    try:
        entries = await repository.fetch_all()
    except ClientError as exc:
        raise client_error_to_http(exc, navigator) from exc

    groups = service.aggregate(entries, q, qr)
    return {
        "groups": [group.to_dict() for group in groups],
        "count": sum(len(group.entries) for group in groups),
        "total": len(entries),
    }


async def _insert(repository: EntryRepository, payload: schemas.InsertEntryRequest, qrid: int | None) -> dict:
    try:
        await repository.insert(payload.name, payload.mobile, qrid)
    except ClientError as exc:
        raise client_error_to_http(exc) from exc
    return {"ok": True, "qrid": qrid}


@router.post("/add", status_code=status.HTTP_201_CREATED)
async def add_entry(
    payload: schemas.InsertEntryRequest,
    repository: EntryRepository = Depends(get_repository),
) -> dict:
    return await _insert(repository, payload, payload.qrid)


@router.post("/add/{qrid}", status_code=status.HTTP_201_CREATED)
async def add_entry_for_qr(
    qrid: str,
    payload: schemas.InsertEntryRequest,
    repository: EntryRepository = Depends(get_repository),
) -> dict:
    # A non-numeric segment leaves the body's qrid in place.
    from_path = service.parse_qr_from_path(qrid)
    return await _insert(repository, payload, from_path if from_path is not None else payload.qrid)
