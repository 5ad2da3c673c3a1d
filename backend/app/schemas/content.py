"""Pydantic models for published content: announcements, blogs, staff comments."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

# ── Announcements ───────────────────────────────────────────────


class AnnouncementIn(BaseModel):
    title: str = Field(min_length=1, max_length=512)
    content: str = Field(min_length=1)
    image_url: str | None = None
    is_published: bool = False


class AnnouncementOut(BaseModel):
    id: int
    title: str
    content: str
    image_url: str | None = None
    is_published: bool
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


# ── Blogs ───────────────────────────────────────────────────────

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class BlogCreate(BaseModel):
    title: str = Field(min_length=1, max_length=512)
    content: str = Field(min_length=1)
    excerpt: str | None = None
    featured_image: str | None = None
    status: Literal["draft", "published"] = "draft"
    slug: str | None = Field(default=None, max_length=128, pattern=SLUG_PATTERN)


class BlogUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=512)
    content: str | None = Field(default=None, min_length=1)
    excerpt: str | None = None
    featured_image: str | None = None
    status: Literal["draft", "published"] | None = None
    slug: str | None = Field(default=None, max_length=128, pattern=SLUG_PATTERN)


class BlogOut(BaseModel):
    id: int
    title: str
    content: str
    excerpt: str | None = None
    author_id: int | None = None
    author_name: str
    featured_image: str | None = None
    status: str
    slug: str
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


# ── Staff comments ──────────────────────────────────────────────


class CommentCreate(BaseModel):
    user_id: int
    staff_name: str = Field(min_length=1, max_length=256)
    comment: str = Field(min_length=1)


class CommentUpdate(BaseModel):
    comment: str = Field(min_length=1)


class CommentOut(BaseModel):
    id: int
    user_id: int
    staff_name: str
    comment: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
