"""Site settings API (admin).  Values of ``*_api_key`` settings are masked on read."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import AuthenticatedPrincipal
from app.auth.roles import require_role
from app.db.engine import get_db
from app.schemas.common import Envelope, ok
from app.schemas.site import SettingOut, SettingUpsert
from app.services import setting_service

router = APIRouter(tags=["settings"])


def _out(item) -> SettingOut:
    out = SettingOut.model_validate(item)
    out.setting_value = setting_service.mask_value(item.setting_key, item.setting_value)
    return out


@router.get("/admin", response_model=Envelope[list[SettingOut]])
async def list_settings(
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    return ok([_out(s) for s in await setting_service.list_settings(db)])


@router.put("/admin/{key}", response_model=Envelope[SettingOut])
async def upsert(
    body: SettingUpsert,
    key: str = Path(min_length=1, max_length=128, pattern=r"^[A-Za-z0-9_.-]+$"),
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    item = await setting_service.upsert_setting(db, key, body.value, body.description)
    return ok(_out(item))


@router.delete("/admin/{key}", response_model=Envelope[None])
async def delete(
    key: str = Path(min_length=1, max_length=128, pattern=r"^[A-Za-z0-9_.-]+$"),
    _: AuthenticatedPrincipal = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    await setting_service.delete_setting(db, key)
    return ok(message="Setting deleted")
