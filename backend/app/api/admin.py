"""Admin console API.

Endpoints
---------
GET  /api/admin/users                   all members, newest first
GET  /api/admin/users/{id}/logs         one member's health logs
POST /api/admin/advices                 write staff advice for a member
GET  /api/admin/inquiries               all inquiries, newest first
PUT  /api/admin/inquiries/{id}/status   update status / reply

Every route requires the ``admin`` role.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import AuthenticatedPrincipal, get_current_user
from app.auth.roles import require_role
from app.db.engine import get_db
from app.errors import NotFound
from app.schemas.advices import AdviceCreate, AdviceOut
from app.schemas.auth import UserOut
from app.schemas.common import Envelope, ok
from app.schemas.health_logs import HealthLogOut
from app.schemas.inquiries import InquiryOut, InquiryStatusUpdate
from app.services import advice_service, health_log_service, inquiry_service, user_service

logger = logging.getLogger("gymportal.api.admin")
router = APIRouter(tags=["admin"], dependencies=[Depends(require_role("admin"))])


@router.get("/users", response_model=Envelope[list[UserOut]])
async def list_users(db: AsyncSession = Depends(get_db)):
    return ok([UserOut.model_validate(u) for u in await user_service.list_users(db)])


@router.get("/users/{user_id}/logs", response_model=Envelope[list[HealthLogOut]])
async def user_logs(
    user_id: int,
    limit: int = Query(default=100, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    if await user_service.get_user_by_id(db, user_id) is None:
        raise NotFound("User not found")
    logs = await health_log_service.list_logs(db, user_id, limit)
    return ok([HealthLogOut.from_log(log) for log in logs])


@router.post("/advices", response_model=Envelope[AdviceOut])
async def create_advice(
    body: AdviceCreate,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not body.staff_name:
        body = body.model_copy(update={"staff_name": principal.user.name})
    advice = await advice_service.create_staff_advice(db, body)
    return ok(AdviceOut.model_validate(advice))


@router.get("/inquiries", response_model=Envelope[list[InquiryOut]])
async def list_inquiries(db: AsyncSession = Depends(get_db)):
    return ok([InquiryOut.model_validate(i) for i in await inquiry_service.list_inquiries(db)])


@router.put("/inquiries/{inquiry_id}/status", response_model=Envelope[InquiryOut])
async def update_inquiry_status(
    inquiry_id: int,
    body: InquiryStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    inquiry = await inquiry_service.update_status(db, inquiry_id, body)
    logger.info("Inquiry %s -> %s", inquiry_id, body.status)
    return ok(InquiryOut.model_validate(inquiry), message="Status updated")
