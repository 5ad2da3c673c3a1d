"""Pydantic models for the member question box."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class OpinionCreate(BaseModel):
    question: str = Field(min_length=1, max_length=4000)

    @field_validator("question")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class OpinionAnswer(BaseModel):
    answer: str = Field(min_length=1)
    answered_by: str = Field(min_length=1, max_length=256)

    @field_validator("answer", "answered_by")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class OpinionOut(BaseModel):
    id: int
    user_id: int
    question: str
    answer: str | None = None
    status: str
    answered_by: str | None = None
    answered_at: datetime | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class AdminOpinionOut(OpinionOut):
    user_name: str
    user_email: str


class PendingCount(BaseModel):
    count: int
