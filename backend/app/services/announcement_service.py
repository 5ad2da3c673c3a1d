"""Announcement service."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Announcement
from app.errors import NotFound
from app.schemas.content import AnnouncementIn

PUBLIC_LIMIT = 10


async def list_published(db: AsyncSession, limit: int = PUBLIC_LIMIT) -> list[Announcement]:
    result = await db.execute(
        select(Announcement)
        .where(Announcement.is_published.is_(True))
        .order_by(Announcement.published_at.desc(), Announcement.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_all(db: AsyncSession) -> list[Announcement]:
    result = await db.execute(
        select(Announcement).order_by(Announcement.created_at.desc(), Announcement.id.desc())
    )
    return list(result.scalars().all())


def _apply(item: Announcement, body: AnnouncementIn) -> None:
    item.title = body.title
    item.content = body.content
    item.image_url = body.image_url
    if body.is_published and item.published_at is None:
        item.published_at = datetime.now(timezone.utc)
    item.is_published = body.is_published


async def create_announcement(db: AsyncSession, body: AnnouncementIn) -> Announcement:
    item = Announcement()
    _apply(item, body)
    db.add(item)
    await db.flush()
    await db.refresh(item)
    return item


async def update_announcement(db: AsyncSession, item_id: int, body: AnnouncementIn) -> Announcement:
    item = await db.get(Announcement, item_id)
    if item is None:
        raise NotFound("Announcement not found")
    _apply(item, body)
    await db.flush()
    await db.refresh(item)
    return item


async def delete_announcement(db: AsyncSession, item_id: int) -> None:
    item = await db.get(Announcement, item_id)
    if item is None:
        raise NotFound("Announcement not found")
    await db.delete(item)
    await db.flush()
