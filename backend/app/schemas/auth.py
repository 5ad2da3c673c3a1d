"""Pydantic models for authentication and profile routes."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=256)
    email: EmailStr
    password: str = Field(min_length=6, max_length=256)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=256)


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    avatar_url: str | None = None
    height_cm: float | None = Field(default=None, gt=0, lt=300)
    goal: str | None = None


class PasswordChange(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=256)


class UserOut(BaseModel):
    """Public principal fields; never includes the password digest."""

    id: int
    email: str
    name: str
    role: str
    provider: str
    avatar_url: str | None = None
    height_cm: float | None = None
    goal: str | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class AuthResult(BaseModel):
    token: str
    user: UserOut


class OAuthStart(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    auth_url: str = Field(alias="authUrl")
    state: str
