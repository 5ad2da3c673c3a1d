"""Staff comment service."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import StaffComment, User
from app.errors import NotFound
from app.schemas.content import CommentCreate


async def list_for_user(db: AsyncSession, user_id: int) -> list[StaffComment]:
    result = await db.execute(
        select(StaffComment)
        .where(StaffComment.user_id == user_id)
        .order_by(StaffComment.created_at.desc(), StaffComment.id.desc())
    )
    return list(result.scalars().all())


async def create_comment(db: AsyncSession, body: CommentCreate) -> StaffComment:
    if await db.get(User, body.user_id) is None:
        raise NotFound("User not found")
    item = StaffComment(user_id=body.user_id, staff_name=body.staff_name, comment=body.comment)
    db.add(item)
    await db.flush()
    await db.refresh(item)
    return item


async def update_comment(db: AsyncSession, comment_id: int, comment: str) -> StaffComment:
    item = await db.get(StaffComment, comment_id)
    if item is None:
        raise NotFound("Comment not found")
    item.comment = comment
    await db.flush()
    await db.refresh(item)
    return item


async def delete_comment(db: AsyncSession, comment_id: int) -> None:
    item = await db.get(StaffComment, comment_id)
    if item is None:
        raise NotFound("Comment not found")
    await db.delete(item)
    await db.flush()
