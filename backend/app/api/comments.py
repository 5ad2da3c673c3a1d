"""Staff comments API: members read their own, admins manage."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import AuthenticatedPrincipal, get_current_user
from app.auth.roles import check_self, require_role
from app.db.engine import get_db
from app.schemas.common import Envelope, ok
from app.schemas.content import CommentCreate, CommentOut, CommentUpdate
from app.services import comment_service

router = APIRouter(tags=["comments"])


@router.get("/user/{user_id}", response_model=Envelope[list[CommentOut]])
async def list_for_user(
    user_id: int,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    check_self(principal, user_id)
    items = await comment_service.list_for_user(db, user_id)
    return ok([CommentOut.model_validate(c) for c in items])


@router.get("/admin/user/{user_id}", response_model=Envelope[list[CommentOut]])
async def admin_list_for_user(
    user_id: int,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    items = await comment_service.list_for_user(db, user_id)
    return ok([CommentOut.model_validate(c) for c in items])


@router.post("/admin", response_model=Envelope[CommentOut])
async def create(
    body: CommentCreate,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    return ok(CommentOut.model_validate(await comment_service.create_comment(db, body)))


@router.put("/admin/{comment_id}", response_model=Envelope[CommentOut])
async def update(
    comment_id: int,
    body: CommentUpdate,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    item = await comment_service.update_comment(db, comment_id, body.comment)
    return ok(CommentOut.model_validate(item))


@router.delete("/admin/{comment_id}", response_model=Envelope[None])
async def delete(
    comment_id: int,
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, comment_id)
    return ok(message="Comment deleted")
