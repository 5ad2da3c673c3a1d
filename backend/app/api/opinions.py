"""Question box API.

Members post questions and read their own; admins answer and moderate.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import AuthenticatedPrincipal, get_current_user
from app.auth.roles import check_self, require_role
from app.db.engine import get_db
from app.schemas.common import Envelope, ok
from app.schemas.opinions import (
    AdminOpinionOut,
    OpinionAnswer,
    OpinionCreate,
    OpinionOut,
    PendingCount,
)
from app.services import opinion_service

logger = logging.getLogger("gymportal.api.opinions")
router = APIRouter(tags=["opinions"])


# ── Member ──────────────────────────────────────────────────────


@router.post("", response_model=Envelope[OpinionOut])
async def create_opinion(
    body: OpinionCreate,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    opinion = await opinion_service.create_opinion(db, principal.user_id, body.question)
    return ok(OpinionOut.model_validate(opinion), message="Question submitted")


@router.get("/mine", response_model=Envelope[list[OpinionOut]])
async def list_mine(
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    items = await opinion_service.list_for_user(db, principal.user_id)
    return ok([OpinionOut.model_validate(o) for o in items])


@router.get("/user/{user_id}", response_model=Envelope[list[OpinionOut]])
async def list_for_user(
    user_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_self(principal, user_id)
    items = await opinion_service.list_for_user(db, user_id)
    return ok([OpinionOut.model_validate(o) for o in items])


# ── Admin ───────────────────────────────────────────────────────


@router.get("/admin", response_model=Envelope[list[AdminOpinionOut]])
async def list_all(
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    rows = await opinion_service.list_for_admin(db)
    return ok([
        AdminOpinionOut(
            **OpinionOut.model_validate(o).model_dump(),
            user_name=name,
            user_email=email,
        )
        for o, name, email in rows
    ])


@router.get("/admin/unprocessed-count", response_model=Envelope[PendingCount])
async def unprocessed_count(
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    return ok(PendingCount(count=await opinion_service.count_pending(db)))


@router.put("/{opinion_id}/answer", response_model=Envelope[OpinionOut])
async def answer(
    opinion_id: int,
    body: OpinionAnswer,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    opinion = await opinion_service.answer_opinion(db, opinion_id, body.answer, body.answered_by)
    return ok(OpinionOut.model_validate(opinion), message="Question answered")


@router.delete("/{opinion_id}", response_model=Envelope[None])
async def delete(
    opinion_id: int,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    await opinion_service.delete_opinion(db, opinion_id)
    return ok(message="Question deleted")
