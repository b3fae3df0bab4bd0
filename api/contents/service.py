"""
Content business logic.

Runs record-model calls through `capture()` and turns the tagged result into
either the row(s) or an HTTPException for the router.
"""

from __future__ import annotations

from typing import Any, TypeVar

from fastapi import HTTPException, status

from core.db import DatabaseHandle
from core.errors import (
    ERR_EMPTY_RECORD,
    ERR_INVALID_FIELD,
    ERR_MULT_NEW_REC_DBFAIL,
    ERR_UPDATE_REC_DBFAIL,
    NotFoundError,
    Ok,
    Result,
    capture,
)

from . import schemas
from .repository import ContentModel

T = TypeVar("T")

ERROR_STATUS = {
    ERR_INVALID_FIELD: status.HTTP_400_BAD_REQUEST,
    ERR_EMPTY_RECORD: status.HTTP_400_BAD_REQUEST,
    ERR_MULT_NEW_REC_DBFAIL: status.HTTP_409_CONFLICT,
    ERR_UPDATE_REC_DBFAIL: status.HTTP_409_CONFLICT,
}


def unwrap(result: Result[T]) -> T:
    if isinstance(result, Ok):
        return result.value
    if isinstance(result, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(result))
    raise HTTPException(
        status_code=ERROR_STATUS.get(result.code, status.HTTP_400_BAD_REQUEST),
        detail=result.code,
    )


async def create_content(db: DatabaseHandle, payload: schemas.ContentCreate) -> dict[str, Any]:
    return unwrap(await capture(ContentModel(db).create(payload.to_record())))


async def list_contents(db: DatabaseHandle, filters: dict[str, Any] | None = None) -> list[dict[str, Any]]:
    # Query params arrive as None when absent; drop them so they do not become IS NULL filters.
    query = {key: value for key, value in (filters or {}).items() if value is not None}
    return unwrap(await capture(ContentModel(db).get_all(query)))


async def get_content(db: DatabaseHandle, content_id: int) -> dict[str, Any]:
    return unwrap(await capture(ContentModel(db).get_by_key(content_id)))


async def get_content_private(db: DatabaseHandle, content_id: int, *, current_user: dict) -> dict[str, Any]:
    """
    Privileged projection, for the content owner or an elevated account.
    """
    row = unwrap(await capture(ContentModel(db).get_by_key_private(content_id)))
    if not current_user.get("elevated") and row.get("owner") != current_user.get("username"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view private content fields.",
        )
    return row


async def update_content(db: DatabaseHandle, content_id: int, payload: schemas.ContentUpdate) -> dict[str, Any]:
    return unwrap(await capture(ContentModel(db).update(content_id, payload.to_record())))


async def remove_signatory(db: DatabaseHandle, content_id: int, username: str) -> dict[str, Any]:
    unwrap(await capture(ContentModel(db).delete(content_id, username)))
    return {"ok": True, "content_id": content_id, "username": username}
