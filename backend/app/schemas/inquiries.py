"""Pydantic models for support inquiries."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

InquiryStatus = Literal["pending", "in_progress", "resolved"]


class InquiryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=64)
    subject: str = Field(min_length=1, max_length=512)
    message: str = Field(min_length=1)


class InquiryStatusUpdate(BaseModel):
    status: InquiryStatus
    admin_reply: str | None = None


class InquiryOut(BaseModel):
    id: int
    user_id: int | None = None
    name: str
    email: str
    phone: str | None = None
    subject: str
    message: str
    status: str
    admin_reply: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    resolved_at: datetime | None = None

    model_config = {"from_attributes": True}
