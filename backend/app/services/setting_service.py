"""Admin-editable site settings (key/value)."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import SiteSetting
from app.errors import NotFound

SECRET_SUFFIX = "_api_key"
OPENAI_KEY_SETTING = "openai_api_key"


def mask_value(key: str, value: str) -> str:
    """Hide stored API keys, keeping the last four characters."""
    if not key.endswith(SECRET_SUFFIX) or not value:
        return value
    if len(value) <= 4:
        return "****"
    return "*" * 8 + value[-4:]


async def list_settings(db: AsyncSession) -> list[SiteSetting]:
    result = await db.execute(select(SiteSetting).order_by(SiteSetting.setting_key))
    return list(result.scalars().all())


async def get_value(db: AsyncSession, key: str) -> str | None:
    item = await db.get(SiteSetting, key)
    return item.setting_value if item is not None else None


async def upsert_setting(
    db: AsyncSession, key: str, value: str, description: str | None = None
) -> SiteSetting:
    item = await db.get(SiteSetting, key)
    if item is None:
        item = SiteSetting(setting_key=key, setting_value=value, description=description or "")
        db.add(item)
    else:
        item.setting_value = value
        if description is not None:
            item.description = description
    await db.flush()
    await db.refresh(item)
    return item


async def delete_setting(db: AsyncSession, key: str) -> None:
    item = await db.get(SiteSetting, key)
    if item is None:
        raise NotFound("Setting not found")
    await db.delete(item)
    await db.flush()
