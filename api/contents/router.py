"""
Content API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core import db
from core.db import DatabaseHandle

from . import schemas, service

router = APIRouter()


@router.post("/contents", status_code=201)
async def create_content(
    payload: schemas.ContentCreate,
    handle: DatabaseHandle = Depends(db.connection),
) -> dict:
    content = await service.create_content(handle, payload)
    return {"content": content}


@router.get("/contents")
async def list_contents(
    title: str | None = Query(default=None, min_length=1, max_length=300),
    link: str | None = Query(default=None, min_length=1, max_length=500),
    handle: DatabaseHandle = Depends(db.connection),
) -> dict:
    rows = await service.list_contents(handle, {"title": title, "link": link})
    return {"contents": rows, "count": len(rows)}


@router.get("/contents/{content_id}")
async def get_content(
    content_id: int,
    handle: DatabaseHandle = Depends(db.connection),
) -> dict:
    return {"content": await service.get_content(handle, content_id)}


@router.get("/contents/{content_id}/private")
async def get_content_private(
    content_id: int,
    handle: DatabaseHandle = Depends(db.connection),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> dict:
    content = await service.get_content_private(handle, content_id, current_user=current_user)
    return {"content": content}


@router.patch("/contents/{content_id}")
async def update_content(
    content_id: int,
    payload: schemas.ContentUpdate,
    handle: DatabaseHandle = Depends(db.connection),
) -> dict:
    return {"content": await service.update_content(handle, content_id, payload)}


@router.delete("/contents/{content_id}/users/{username}")
async def remove_signatory(
    content_id: int,
    username: str,
    handle: DatabaseHandle = Depends(db.connection),
) -> dict:
    return await service.remove_signatory(handle, content_id, username)
