"""Pydantic models for site settings and text-to-speech."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class SettingUpsert(BaseModel):
    value: str
    description: str | None = None


class SettingOut(BaseModel):
    setting_key: str
    setting_value: str
    description: str
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


Voice = Literal["alloy", "echo", "fable", "onyx", "nova", "shimmer"]


class SpeakRequest(BaseModel):
    text: str = Field(min_length=1, max_length=4096)
    voice: Voice = "nova"
