"""Health log CRUD service.  Every query is scoped to the owning user."""

from __future__ import annotations

import json
import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.models import HealthLog, Meal, MealPhoto
from app.errors import NotFound
from app.schemas.health_logs import HealthLogIn, MealIn

logger = logging.getLogger("gymportal.health_logs")

_LOG_FIELDS = (
    "log_date",
    "weight",
    "body_fat_percentage",
    "body_temperature",
    "sleep_hours",
    "exercise_minutes",
    "condition_rating",
    "condition_note",
)


def _with_meals():
    return selectinload(HealthLog.meals).selectinload(Meal.photos)


def _build_meal(meal_type: str, body: MealIn) -> Meal:
    meal = Meal(
        meal_type=meal_type,
        calories=body.calories,
        protein=body.protein,
        carbs=body.carbs,
        fat=body.fat,
        ai_analysis_text=body.ai_analysis_text,
        ai_confidence=body.ai_confidence,
        input_method=body.input_method,
    )
    meal.photos = [
        MealPhoto(photo_url=url, photo_order=i) for i, url in enumerate(body.photos, start=1)
    ]
    return meal


async def list_logs(db: AsyncSession, user_id: int, limit: int = 100) -> list[HealthLog]:
    result = await db.execute(
        select(HealthLog)
        .where(HealthLog.user_id == user_id)
        .options(_with_meals())
        .order_by(HealthLog.log_date.desc(), HealthLog.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_log(db: AsyncSession, user_id: int, log_id: int) -> HealthLog:
    """Return the caller's log; another user's log is reported as absent."""
    result = await db.execute(
        select(HealthLog)
        .where(HealthLog.id == log_id, HealthLog.user_id == user_id)
        .options(_with_meals())
    )
    log = result.scalar_one_or_none()
    if log is None:
        raise NotFound("Health log not found")
    return log


async def get_log_for_date(db: AsyncSession, user_id: int, log_date: date) -> HealthLog | None:
    result = await db.execute(
        select(HealthLog)
        .where(HealthLog.user_id == user_id, HealthLog.log_date == log_date)
        .order_by(HealthLog.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _reload(db: AsyncSession, log: HealthLog) -> HealthLog:
    await db.flush()
    db.expunge(log)
    return await get_log(db, log.user_id, log.id)


async def create_log(db: AsyncSession, user_id: int, body: HealthLogIn) -> HealthLog:
    log = HealthLog(user_id=user_id, **{f: getattr(body, f) for f in _LOG_FIELDS})
    log.meals = [_build_meal(meal_type, meal) for meal_type, meal in body.meals.items()]
    db.add(log)
    await db.flush()
    logger.info("Created health log %s for user %s (%s)", log.id, user_id, body.log_date)
    return await _reload(db, log)


async def update_log(db: AsyncSession, user_id: int, log_id: int, body: HealthLogIn) -> HealthLog:
    """Replace the log's fields and its meals."""
    log = await get_log(db, user_id, log_id)
    for f in _LOG_FIELDS:
        setattr(log, f, getattr(body, f))
    log.meals = [_build_meal(meal_type, meal) for meal_type, meal in body.meals.items()]
    await db.flush()
    return await _reload(db, log)


async def delete_log(db: AsyncSession, user_id: int, log_id: int) -> None:
    log = await get_log(db, user_id, log_id)
    await db.delete(log)
    await db.flush()
    logger.info("Deleted health log %s for user %s", log_id, user_id)


async def recent_logs_before(
    db: AsyncSession, user_id: int, before: date, limit: int = 7
) -> list[HealthLog]:
    result = await db.execute(
        select(HealthLog)
        .where(HealthLog.user_id == user_id, HealthLog.log_date < before)
        .order_by(HealthLog.log_date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def record_meal_photo(
    db: AsyncSession,
    user_id: int,
    log_date: date,
    photo_url: str,
    analysis: dict,
) -> HealthLog:
    """Attach a photo + its nutrition estimate to that day's log, creating it if needed."""
    log = await get_log_for_date(db, user_id, log_date)
    if log is None:
        log = HealthLog(user_id=user_id, log_date=log_date)
        db.add(log)

    log.meal_photo_url = photo_url
    log.meal_analysis_json = json.dumps(analysis, ensure_ascii=False)
    log.meal_calories = analysis.get("calories")
    log.meal_protein = analysis.get("protein")
    log.meal_carbs = analysis.get("carbs")
    log.meal_fat = analysis.get("fat")
    await db.flush()
    await db.refresh(log)
    return log
