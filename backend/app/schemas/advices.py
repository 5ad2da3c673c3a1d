"""Pydantic models for staff / AI advice."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

AdviceType = Literal["meal", "exercise", "mental", "sleep", "weight", "general"]


class AdviceCreate(BaseModel):
    """Staff advice written from the admin console."""

    user_id: int
    log_date: date | None = None
    advice_type: AdviceType = "general"
    title: str = Field(min_length=1, max_length=256)
    content: str = Field(min_length=1)
    staff_name: str = Field(default="", max_length=256)


class AdviceOut(BaseModel):
    id: int
    user_id: int
    log_date: date | None = None
    advice_type: str
    title: str
    content: str
    advice_source: str
    ai_analysis_json: str | None = None
    confidence_score: float | None = None
    staff_name: str
    is_read: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class UnreadCount(BaseModel):
    count: int


class GeneratedAdvice(BaseModel):
    """Shape of the JSON object the LLM is asked to return."""

    category: AdviceType = "general"
    title: str = Field(min_length=1, max_length=256)
    content: str = Field(min_length=1)
    confidence_score: float = Field(default=0.75, ge=0, le=1)
    ai_analysis_data: dict = Field(default_factory=dict)
