"""Support inquiry service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Inquiry
from app.errors import NotFound
from app.schemas.inquiries import InquiryCreate, InquiryStatusUpdate

logger = logging.getLogger("gymportal.inquiries")


async def create_inquiry(db: AsyncSession, body: InquiryCreate, user_id: int | None = None) -> Inquiry:
    inquiry = Inquiry(
        user_id=user_id,
        name=body.name,
        email=str(body.email),
        phone=body.phone,
        subject=body.subject,
        message=body.message,
        status="pending",
    )
    db.add(inquiry)
    await db.flush()
    await db.refresh(inquiry)
    logger.info("Inquiry %s received (user=%s)", inquiry.id, user_id)
    return inquiry


async def list_inquiries(db: AsyncSession) -> list[Inquiry]:
    result = await db.execute(select(Inquiry).order_by(Inquiry.created_at.desc(), Inquiry.id.desc()))
    return list(result.scalars().all())


async def update_status(db: AsyncSession, inquiry_id: int, body: InquiryStatusUpdate) -> Inquiry:
    inquiry = await db.get(Inquiry, inquiry_id)
    if inquiry is None:
        raise NotFound("Inquiry not found")
    inquiry.status = body.status
    if body.admin_reply is not None:
        inquiry.admin_reply = body.admin_reply
    inquiry.resolved_at = datetime.now(timezone.utc) if body.status == "resolved" else None
    await db.flush()
    await db.refresh(inquiry)
    return inquiry
