"""Advice API (member-scoped): staff and AI advice addressed to the caller."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import AuthenticatedPrincipal, get_current_user
from app.db.engine import get_db
from app.schemas.advices import AdviceOut, UnreadCount
from app.schemas.common import Envelope, ok
from app.services import advice_service

router = APIRouter(tags=["advices"])


@router.get("", response_model=Envelope[list[AdviceOut]])
async def list_advices(
    limit: int = Query(default=100, ge=1, le=500),
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items = await advice_service.list_advices(db, principal.user_id, limit)
    return ok([AdviceOut.model_validate(a) for a in items])


@router.get("/by-date/{log_date}", response_model=Envelope[list[AdviceOut]])
async def list_for_date(
    log_date: date,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items = await advice_service.list_advices_for_date(db, principal.user_id, log_date)
    return ok([AdviceOut.model_validate(a) for a in items])


@router.get("/unread-count", response_model=Envelope[UnreadCount])
async def unread_count(
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(UnreadCount(count=await advice_service.count_unread(db, principal.user_id)))


@router.put("/{advice_id}/read", response_model=Envelope[None])
async def mark_read(
    advice_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await advice_service.mark_read(db, principal.user_id, advice_id)
    return ok(message="Advice marked as read")
