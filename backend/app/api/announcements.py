"""Announcements API: public list plus admin management."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import AuthenticatedPrincipal
from app.auth.roles import require_role
from app.db.engine import get_db
from app.schemas.common import Envelope, ok
from app.schemas.content import AnnouncementIn, AnnouncementOut
from app.services import announcement_service

router = APIRouter(tags=["announcements"])


@router.get("", response_model=Envelope[list[AnnouncementOut]])
async def list_published(db: AsyncSession = Depends(get_db)):
    items = await announcement_service.list_published(db)
    return ok([AnnouncementOut.model_validate(a) for a in items])


@router.get("/admin/all", response_model=Envelope[list[AnnouncementOut]])
async def list_all(
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    items = await announcement_service.list_all(db)
    return ok([AnnouncementOut.model_validate(a) for a in items])


@router.post("/admin", response_model=Envelope[AnnouncementOut])
async def create(
    body: AnnouncementIn,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    item = await announcement_service.create_announcement(db, body)
    return ok(AnnouncementOut.model_validate(item))


@router.put("/admin/{item_id}", response_model=Envelope[AnnouncementOut])
async def update(
    item_id: int,
    body: AnnouncementIn,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    item = await announcement_service.update_announcement(db, item_id, body)
    return ok(AnnouncementOut.model_validate(item))


@router.delete("/admin/{item_id}", response_model=Envelope[None])
async def delete(
    item_id: int,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    await announcement_service.delete_announcement(db, item_id)
    return ok(message="Announcement deleted")
