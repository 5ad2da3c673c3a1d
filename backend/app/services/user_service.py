"""User management service: registration, login, OAuth upsert, profile.

Roles:  ``user`` (members) and ``admin`` (staff).

A default admin is seeded at startup when ``SEED_DEFAULT_ADMIN`` is on and
no account with ``DEFAULT_ADMIN_EMAIL`` exists yet.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.passwords import credential_for, hash_password, needs_rehash
from app.db.models import User
from app.errors import Conflict, InvalidCredentials, ValidationFailed

logger = logging.getLogger("gymportal.users")

VALID_ROLES = ("user", "admin")
PROVIDERS = ("email", "google", "line")


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ── Lookups ───────────────────────────────────────────────────


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def get_user_by_provider(db: AsyncSession, provider: str, provider_id: str) -> User | None:
    result = await db.execute(
        select(User).where(User.provider == provider, User.provider_id == provider_id)
    )
    return result.scalar_one_or_none()


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


# ── Create / authenticate ─────────────────────────────────────


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    name: str,
    password: str | None = None,
    role: str = "user",
    provider: str = "email",
    provider_id: str | None = None,
    avatar_url: str | None = None,
) -> User:
    if role not in VALID_ROLES:
        raise ValidationFailed(f"Invalid role '{role}'")
    if provider not in PROVIDERS:
        raise ValidationFailed(f"Invalid provider '{provider}'")
    if provider == "email" and not password:
        raise ValidationFailed("Password required")

    email = normalize_email(email)
    if await get_user_by_email(db, email) is not None:
        raise Conflict("Email already registered")

    user = User(
        email=email,
        name=name,
        provider=provider,
        provider_id=provider_id if provider != "email" else email,
        password_hash=hash_password(password) if provider == "email" else None,
        role=role,
        avatar_url=avatar_url,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    logger.info("Created user %s (%s, role=%s)", user.id, provider, role)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Verify email + password.  Raises :class:`InvalidCredentials` on any mismatch.

    A legacy SHA-256 digest that verifies is upgraded to bcrypt in place.
    """
    user = await get_user_by_email(db, email)
    if user is None or not credential_for(user).check(password):
        raise InvalidCredentials()

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()
        logger.info("Upgraded legacy password digest for user %s", user.id)
    return user


async def upsert_oauth_user(
    db: AsyncSession,
    *,
    provider: str,
    provider_id: str,
    email: str,
    name: str,
    avatar_url: str | None = None,
) -> User:
    """Find the account for (provider, provider_id), creating it on first login.

    Name and avatar are refreshed from the provider on every login.
    """
    user = await get_user_by_provider(db, provider, provider_id)
    if user is None:
        return await create_user(
            db,
            email=email,
            name=name,
            provider=provider,
            provider_id=provider_id,
            avatar_url=avatar_url,
        )

    user.name = name or user.name
    if avatar_url:
        user.avatar_url = avatar_url
    await db.flush()
    await db.refresh(user)
    return user


# ── Profile ───────────────────────────────────────────────────


async def update_profile(
    db: AsyncSession,
    user: User,
    *,
    name: str | None = None,
    avatar_url: str | None = None,
    height_cm: float | None = None,
    goal: str | None = None,
) -> User:
    if name is not None:
        user.name = name
    if avatar_url is not None:
        user.avatar_url = avatar_url
    if height_cm is not None:
        user.height_cm = height_cm
    if goal is not None:
        user.goal = goal
    await db.flush()
    await db.refresh(user)
    return user


async def change_password(db: AsyncSession, user: User, current: str, new: str) -> None:
    if user.provider != "email":
        raise ValidationFailed("Password login is not enabled for this account")
    if not credential_for(user).check(current):
        raise InvalidCredentials("Current password is incorrect")
    user.password_hash = hash_password(new)
    await db.flush()
    logger.info("Password changed for user %s", user.id)


# ── Seeding ───────────────────────────────────────────────────


async def ensure_default_admin(db: AsyncSession, email: str, password: str) -> None:
    """Seed a default admin unless an account with *email* already exists."""
    if await get_user_by_email(db, email) is not None:
        return
    await create_user(
        db,
        email=email,
        name="Administrator",
        password=password,
        role="admin",
    )
    await db.commit()
    logger.info("Seeded default admin user (%s). Change its password in production!", email)
