"""Blog post service."""

from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Blog
from app.errors import Conflict, NotFound
from app.schemas.content import BlogCreate, BlogUpdate

logger = logging.getLogger("gymportal.blogs")

EXCERPT_CHARS = 200
SLUG_MAX_CHARS = 100

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """``"Summer Training Tips!"`` -> ``"summer-training-tips"``.

    Titles with no ASCII letters or digits get a timestamped slug.
    """
    slug = _NON_SLUG.sub("-", title.lower()).strip("-")[:SLUG_MAX_CHARS].strip("-")
    return slug or f"post-{int(time.time())}"


def make_excerpt(content: str) -> str:
    return content[:EXCERPT_CHARS] + "..."


async def _ensure_slug_free(db: AsyncSession, slug: str, exclude_id: int | None = None) -> None:
    stmt = select(Blog.id).where(Blog.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(Blog.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        raise Conflict("Slug already in use")


async def list_published(db: AsyncSession) -> list[Blog]:
    result = await db.execute(
        select(Blog)
        .where(Blog.status == "published")
        .order_by(Blog.published_at.desc(), Blog.id.desc())
    )
    return list(result.scalars().all())


async def list_all(db: AsyncSession) -> list[Blog]:
    result = await db.execute(select(Blog).order_by(Blog.created_at.desc(), Blog.id.desc()))
    return list(result.scalars().all())


async def get_published_by_slug(db: AsyncSession, slug: str) -> Blog:
    result = await db.execute(select(Blog).where(Blog.slug == slug, Blog.status == "published"))
    blog = result.scalar_one_or_none()
    if blog is None:
        raise NotFound("Blog not found")
    return blog


async def create_blog(db: AsyncSession, body: BlogCreate, author_id: int, author_name: str) -> Blog:
    slug = body.slug or slugify(body.title)
    await _ensure_slug_free(db, slug)
    blog = Blog(
        title=body.title,
        content=body.content,
        excerpt=body.excerpt or make_excerpt(body.content),
        author_id=author_id,
        author_name=author_name,
        featured_image=body.featured_image,
        status=body.status,
        slug=slug,
        published_at=datetime.now(timezone.utc) if body.status == "published" else None,
    )
    db.add(blog)
    await db.flush()
    await db.refresh(blog)
    logger.info("Blog %s created (slug=%s, status=%s)", blog.id, slug, blog.status)
    return blog


async def update_blog(db: AsyncSession, blog_id: int, body: BlogUpdate) -> Blog:
    """Apply the provided fields; ``published_at`` is stamped on the first publish."""
    blog = await db.get(Blog, blog_id)
    if blog is None:
        raise NotFound("Blog not found")

    if body.slug is not None and body.slug != blog.slug:
        await _ensure_slug_free(db, body.slug, exclude_id=blog_id)
        blog.slug = body.slug
    if body.title is not None:
        blog.title = body.title
    if body.content is not None:
        blog.content = body.content
    if body.excerpt is not None:
        blog.excerpt = body.excerpt
    if body.featured_image is not None:
        blog.featured_image = body.featured_image
    if body.status is not None:
        if body.status == "published" and blog.status != "published" and blog.published_at is None:
            blog.published_at = datetime.now(timezone.utc)
        blog.status = body.status

    await db.flush()
    await db.refresh(blog)
    return blog


async def delete_blog(db: AsyncSession, blog_id: int) -> None:
    blog = await db.get(Blog, blog_id)
    if blog is None:
        raise NotFound("Blog not found")
    await db.delete(blog)
    await db.flush()
