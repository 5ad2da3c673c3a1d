"""Member question box service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Opinion, User
from app.errors import NotFound

logger = logging.getLogger("gymportal.opinions")


async def create_opinion(db: AsyncSession, user_id: int, question: str) -> Opinion:
    opinion = Opinion(user_id=user_id, question=question, status="pending")
    db.add(opinion)
    await db.flush()
    await db.refresh(opinion)
    return opinion


async def list_for_user(db: AsyncSession, user_id: int) -> list[Opinion]:
    result = await db.execute(
        select(Opinion)
        .where(Opinion.user_id == user_id)
        .order_by(Opinion.created_at.desc(), Opinion.id.desc())
    )
    return list(result.scalars().all())


async def list_for_admin(db: AsyncSession) -> list[tuple[Opinion, str, str]]:
    """All questions, pending first, with the asker's name and email."""
    pending_first = case((Opinion.status == "pending", 0), else_=1)
    result = await db.execute(
        select(Opinion, User.name, User.email)
        .join(User, Opinion.user_id == User.id)
        .order_by(pending_first, Opinion.created_at.desc(), Opinion.id.desc())
    )
    return [(row[0], row[1], row[2]) for row in result.all()]


async def count_pending(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count()).select_from(Opinion).where(Opinion.status == "pending")
    )
    return int(result.scalar_one())


async def answer_opinion(db: AsyncSession, opinion_id: int, answer: str, answered_by: str) -> Opinion:
    opinion = await db.get(Opinion, opinion_id)
    if opinion is None:
        raise NotFound("Question not found")
    opinion.answer = answer
    opinion.answered_by = answered_by
    opinion.status = "answered"
    opinion.answered_at = datetime.now(timezone.utc)
    await db.flush()
    await db.refresh(opinion)
    logger.info("Question %s answered by %s", opinion_id, answered_by)
    return opinion


async def delete_opinion(db: AsyncSession, opinion_id: int) -> None:
    opinion = await db.get(Opinion, opinion_id)
    if opinion is None:
        raise NotFound("Question not found")
    await db.delete(opinion)
    await db.flush()
