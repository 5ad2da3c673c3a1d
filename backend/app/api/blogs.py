"""Blog API: public reads by slug, admin authoring."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import AuthenticatedPrincipal
from app.auth.roles import require_role
from app.db.engine import get_db
from app.schemas.common import Envelope, ok
from app.schemas.content import BlogCreate, BlogOut, BlogUpdate
from app.services import blog_service

router = APIRouter(tags=["blogs"])


@router.get("", response_model=Envelope[list[BlogOut]])
async def list_published(db: AsyncSession = Depends(get_db)):
    items = await blog_service.list_published(db)
    return ok([BlogOut.model_validate(b) for b in items])


# Declared before "/{slug}" so it is not captured as a slug
@router.get("/admin/all", response_model=Envelope[list[BlogOut]])
async def list_all(
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    items = await blog_service.list_all(db)
    return ok([BlogOut.model_validate(b) for b in items])


@router.get("/{slug}", response_model=Envelope[BlogOut])
async def get_by_slug(slug: str, db: AsyncSession = Depends(get_db)):
    return ok(BlogOut.model_validate(await blog_service.get_published_by_slug(db, slug)))


@router.post("", response_model=Envelope[BlogOut])
async def create(
    body: BlogCreate,
    principal: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    blog = await blog_service.create_blog(db, body, principal.user_id, principal.user.name)
    return ok(BlogOut.model_validate(blog))


@router.put("/{blog_id}", response_model=Envelope[BlogOut])
async def update(
    blog_id: int,
    body: BlogUpdate,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    return ok(BlogOut.model_validate(await blog_service.update_blog(db, blog_id, body)))


@router.delete("/{blog_id}", response_model=Envelope[None])
async def delete(
    blog_id: int,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    await blog_service.delete_blog(db, blog_id)
    return ok(message="Blog deleted")
