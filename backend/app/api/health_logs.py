"""Health logs API (member-scoped).

Every route operates on the caller's own rows; another member's log id is
reported as ``not_found``.  Creating or updating a log schedules AI advice
generation after the response is sent.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.auth.deps import AuthenticatedPrincipal, get_current_user
from app.config import settings
from app.db.engine import get_db, get_session_factory
from app.schemas.common import Envelope, ok
from app.schemas.health_logs import HealthLogIn, HealthLogOut, MealUploadOut
from app.services import health_log_service, meal_photo_service
from app.services.advice_service import generate_ai_advice

logger = logging.getLogger("gymportal.api.health_logs")
router = APIRouter(tags=["health-logs"])


def _schedule_advice(
    background: BackgroundTasks,
    session_factory: async_sessionmaker[AsyncSession],
    user_id: int,
    log_id: int,
    body: HealthLogIn,
) -> None:
    meals = {k: v.model_dump() for k, v in body.meals.items()}
    background.add_task(generate_ai_advice, session_factory, user_id, log_id, meals)


@router.get("", response_model=Envelope[list[HealthLogOut]])
async def list_logs(
    limit: int = Query(default=100, ge=1, le=500),
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    logs = await health_log_service.list_logs(db, principal.user_id, limit)
    return ok([HealthLogOut.from_log(log) for log in logs])


@router.post("", response_model=Envelope[HealthLogOut])
async def create_log(
    body: HealthLogIn,
    background: BackgroundTasks,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    log = await health_log_service.create_log(db, principal.user_id, body)
    # The advice task reads the log through its own session
    await db.commit()
    _schedule_advice(background, session_factory, principal.user_id, log.id, body)
    return ok(HealthLogOut.from_log(log))


@router.post("/upload-meal", response_model=Envelope[MealUploadOut])
async def upload_meal(
    photo: UploadFile = File(...),
    log_date: date = Form(...),
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    url = await meal_photo_service.store_meal_photo(photo, principal.user_id, settings.UPLOADS_DIR)
    analysis = meal_photo_service.analyze_meal_photo(url)
    log = await health_log_service.record_meal_photo(db, principal.user_id, log_date, url, analysis)
    return ok(MealUploadOut(analysis=analysis, photo_url=url, log_id=log.id))


@router.put("/{log_id}", response_model=Envelope[HealthLogOut])
async def update_log(
    log_id: int,
    body: HealthLogIn,
    background: BackgroundTasks,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    log = await health_log_service.update_log(db, principal.user_id, log_id, body)
    # The advice task reads the log through its own session
    await db.commit()
    _schedule_advice(background, session_factory, principal.user_id, log.id, body)
    return ok(HealthLogOut.from_log(log))


@router.delete("/{log_id}", response_model=Envelope[None])
async def delete_log(
    log_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await health_log_service.delete_log(db, principal.user_id, log_id)
    return ok(message="Health log deleted")
