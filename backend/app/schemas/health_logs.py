"""Pydantic models for health logs, meals and meal photos."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class MealIn(BaseModel):
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)
    ai_analysis_text: str | None = None
    ai_confidence: float | None = Field(default=None, ge=0, le=1)
    input_method: Literal["manual", "ai", "photo"] = "manual"
    photos: list[str] = Field(default_factory=list, max_length=10)


class HealthLogIn(BaseModel):
    """Body for create and full-replace update."""

    log_date: date
    weight: float | None = Field(default=None, gt=0, lt=500)
    body_fat_percentage: float | None = Field(default=None, ge=0, le=100)
    body_temperature: float | None = Field(default=None, gt=30, lt=45)
    sleep_hours: float | None = Field(default=None, ge=0, le=24)
    exercise_minutes: int | None = Field(default=None, ge=0, le=1440)
    condition_rating: int = Field(default=3, ge=1, le=5)
    condition_note: str | None = None
    meals: dict[MealType, MealIn] = Field(default_factory=dict)


class MealOut(BaseModel):
    calories: float
    protein: float
    carbs: float
    fat: float
    ai_analysis_text: str | None = None
    ai_confidence: float | None = None
    input_method: str
    photos: list[str] = Field(default_factory=list)


class HealthLogOut(BaseModel):
    id: int
    user_id: int
    log_date: date
    weight: float | None = None
    body_fat_percentage: float | None = None
    body_temperature: float | None = None
    sleep_hours: float | None = None
    exercise_minutes: int | None = None
    condition_rating: int
    condition_note: str | None = None
    meal_photo_url: str | None = None
    meal_calories: float | None = None
    meal_protein: float | None = None
    meal_carbs: float | None = None
    meal_fat: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    meals: dict[str, MealOut] = Field(default_factory=dict)

    @classmethod
    def from_log(cls, log) -> "HealthLogOut":
        """Build from a ``HealthLog`` whose meals and photos are loaded."""
        meals = {
            m.meal_type: MealOut(
                calories=m.calories,
                protein=m.protein,
                carbs=m.carbs,
                fat=m.fat,
                ai_analysis_text=m.ai_analysis_text,
                ai_confidence=m.ai_confidence,
                input_method=m.input_method,
                photos=[p.photo_url for p in m.photos],
            )
            for m in log.meals
        }
        return cls(
            id=log.id,
            user_id=log.user_id,
            log_date=log.log_date,
            weight=log.weight,
            body_fat_percentage=log.body_fat_percentage,
            body_temperature=log.body_temperature,
            sleep_hours=log.sleep_hours,
            exercise_minutes=log.exercise_minutes,
            condition_rating=log.condition_rating,
            condition_note=log.condition_note,
            meal_photo_url=log.meal_photo_url,
            meal_calories=log.meal_calories,
            meal_protein=log.meal_protein,
            meal_carbs=log.meal_carbs,
            meal_fat=log.meal_fat,
            created_at=log.created_at,
            updated_at=log.updated_at,
            meals=meals,
        )


class MealUploadOut(BaseModel):
    analysis: dict
    photo_url: str
    log_id: int
