"""Advice service: member reads, staff writes, and AI advice generation.

AI advice runs after the response is sent (FastAPI background task) with its
own session from the injected factory.  It is skipped when no LLM key is
configured, and any failure is logged without touching the originating
request.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date

from pydantic import ValidationError
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.connectors.llm_client import LLMCallError, LLMClient
from app.db.models import Advice, HealthLog, User
from app.errors import NotFound
from app.schemas.advices import AdviceCreate, GeneratedAdvice
from app.utils.metrics import metrics

logger = logging.getLogger("gymportal.advices")

AI_STAFF_NAME = "AI Assistant"


# ── Member reads ──────────────────────────────────────────────


async def list_advices(db: AsyncSession, user_id: int, limit: int = 100) -> list[Advice]:
    result = await db.execute(
        select(Advice)
        .where(Advice.user_id == user_id)
        .order_by(Advice.created_at.desc(), Advice.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_advices_for_date(db: AsyncSession, user_id: int, log_date: date) -> list[Advice]:
    result = await db.execute(
        select(Advice)
        .where(Advice.user_id == user_id, Advice.log_date == log_date)
        .order_by(Advice.created_at.desc(), Advice.id.desc())
    )
    return list(result.scalars().all())


async def count_unread(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(Advice).where(
            Advice.user_id == user_id, Advice.is_read.is_(False)
        )
    )
    return int(result.scalar_one())


async def mark_read(db: AsyncSession, user_id: int, advice_id: int) -> None:
    result = await db.execute(
        update(Advice)
        .where(Advice.id == advice_id, Advice.user_id == user_id)
        .values(is_read=True)
    )
    if result.rowcount == 0:
        raise NotFound("Advice not found")


# ── Staff writes ──────────────────────────────────────────────


async def create_staff_advice(db: AsyncSession, body: AdviceCreate) -> Advice:
    if await db.get(User, body.user_id) is None:
        raise NotFound("User not found")
    advice = Advice(
        user_id=body.user_id,
        log_date=body.log_date,
        advice_type=body.advice_type,
        title=body.title,
        content=body.content,
        advice_source="staff",
        staff_name=body.staff_name,
    )
    db.add(advice)
    await db.flush()
    await db.refresh(advice)
    logger.info("Staff advice %s created for user %s", advice.id, body.user_id)
    return advice


# ── AI generation ─────────────────────────────────────────────

_SYSTEM_PROMPT = (
    "You are a professional personal trainer at a gym. Analyse the member's "
    "health log and give one piece of personalised, encouraging advice."
)

_FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")
_BARE_JSON = re.compile(r"\{[\s\S]*\}")


def _fmt(value, unit: str = "") -> str:
    return f"{value}{unit}" if value is not None else "not recorded"


def build_advice_prompt(
    user: User,
    log: HealthLog,
    meals: dict[str, dict],
    history: list[HealthLog],
) -> str:
    def kcal(meal_type: str) -> float:
        return float((meals.get(meal_type) or {}).get("calories") or 0)

    total = sum(kcal(t) for t in ("breakfast", "lunch", "dinner", "snack"))
    trend = "\n".join(
        f"- {h.log_date.isoformat()}: weight {_fmt(h.weight, 'kg')}, "
        f"exercise {h.exercise_minutes or 0}min, sleep {_fmt(h.sleep_hours, 'h')}"
        for h in history
    ) or "- no earlier logs"

    return f"""[Member]
- Name: {user.name}
- Height: {_fmt(user.height_cm, 'cm')}
- Goal: {user.goal or 'not set'}

[Today ({log.log_date.isoformat()})]
- Weight: {_fmt(log.weight, 'kg')}
- Body fat: {_fmt(log.body_fat_percentage, '%')}
- Sleep: {_fmt(log.sleep_hours, 'h')}
- Exercise: {_fmt(log.exercise_minutes, 'min')}
- Condition: {log.condition_rating}/5
- Note: {log.condition_note or 'none'}
- Breakfast: {kcal('breakfast'):g}kcal
- Lunch: {kcal('lunch'):g}kcal
- Dinner: {kcal('dinner'):g}kcal
- Total: {total:g}kcal

[Previous logs, newest first]
{trend}

[Requirements]
1. category: one of "meal", "exercise", "mental", "sleep", "weight"
2. title: concrete, at most 40 characters
3. content: 150-300 characters; assess the current state positively, give a
   concrete numeric suggestion and one or two next actions
4. confidence_score: 0.0-1.0 depending on how complete the data is

Reply with JSON only:
{{"category": "...", "title": "...", "content": "...", "confidence_score": 0.85,
  "ai_analysis_data": {{"detected_issues": [], "positive_points": [], "recommendations": []}}}}"""


def parse_advice_reply(text: str) -> GeneratedAdvice | None:
    """Extract the advice object from a fenced or bare JSON reply."""
    match = _FENCED_JSON.search(text)
    raw = match.group(1) if match else None
    if raw is None:
        bare = _BARE_JSON.search(text)
        raw = bare.group(0) if bare else None
    if raw is None:
        return None
    try:
        return GeneratedAdvice.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError):
        return None


async def generate_ai_advice(
    session_factory: async_sessionmaker[AsyncSession],
    user_id: int,
    log_id: int,
    meals: dict[str, dict],
    llm: LLMClient | None = None,
) -> None:
    """Background task: ask the LLM about one log and store the reply as advice."""
    llm = llm or LLMClient()
    if not llm.configured:
        logger.debug("AI advice skipped: no LLM key configured")
        return

    try:
        async with session_factory() as db:
            log = await db.get(HealthLog, log_id)
            user = await db.get(User, user_id)
            if log is None or user is None or log.user_id != user_id:
                return
            log_date = log.log_date
            history = await db.execute(
                select(HealthLog)
                .where(HealthLog.user_id == user_id, HealthLog.log_date < log_date)
                .order_by(HealthLog.log_date.desc())
                .limit(7)
            )
            prompt = build_advice_prompt(user, log, meals, list(history.scalars().all()))

            reply = await llm.complete(
                prompt,
                system_prompt=_SYSTEM_PROMPT,
                temperature=0.7,
                max_tokens=1000,
            )
            advice = parse_advice_reply(reply["text"])
            if advice is None:
                logger.warning("AI advice reply for log %s had no usable JSON", log_id)
                metrics.record_ai_advice("unparseable")
                return

            db.add(
                Advice(
                    user_id=user_id,
                    log_date=log_date,
                    advice_type=advice.category,
                    title=advice.title,
                    content=advice.content,
                    advice_source="ai",
                    ai_analysis_json=json.dumps(advice.ai_analysis_data, ensure_ascii=False),
                    confidence_score=advice.confidence_score,
                    staff_name=AI_STAFF_NAME,
                    is_read=False,
                )
            )
            await db.commit()
    except LLMCallError as exc:
        logger.warning("AI advice generation failed for log %s: %s", log_id, exc)
        metrics.record_ai_advice("upstream_error")
        return
    except Exception:
        logger.exception("AI advice generation crashed for log %s", log_id)
        metrics.record_ai_advice("error")
        return

    metrics.record_ai_advice("created")
    logger.info("AI advice generated for user %s (%s)", user_id, log_date)
