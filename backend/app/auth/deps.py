"""FastAPI dependency: ``get_current_user``.

Turns the raw ``Authorization`` header into an :class:`AuthenticatedPrincipal`
or a definitive rejection:

- header absent or not ``Bearer <token>``   -> ``missing_credential``
- signature mismatch / malformed token      -> ``invalid_token``
- ``exp`` not in the future                 -> ``expired_token``
- ``userId`` claim has no matching row      -> ``unknown_principal``

A returned principal always has a verified, unexpired token and an existing
user row.  The role used for authorization is the one carried in the token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.tokens import TokenExpiredError, TokenInvalidError, decode_token
from app.db.engine import get_db
from app.db.models import User
from app.errors import ExpiredToken, InvalidToken, MissingCredential, UnknownPrincipal
from app.utils.logger import ctx_user_id
from app.utils.metrics import metrics

logger = logging.getLogger("gymportal.auth")

_BEARER_PREFIX = "Bearer "


@dataclass
class AuthenticatedPrincipal:
    """Authenticated identity for a request."""

    user: User
    role: str
    claims: dict[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> int:
        return self.user.id


def _extract_bearer(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise MissingCredential()
    token = authorization[len(_BEARER_PREFIX):].strip()
    if not token:
        raise MissingCredential()
    return token


async def authenticate_bearer(
    authorization: str | None,
    db: AsyncSession,
    secret: str,
) -> AuthenticatedPrincipal:
    """Resolve a bearer header to a principal.  One storage read, no writes."""
    try:
        token = _extract_bearer(authorization)
        try:
            claims = decode_token(token, secret)
        except TokenExpiredError as exc:
            raise ExpiredToken() from exc
        except TokenInvalidError as exc:
            raise InvalidToken() from exc

        user_id = claims.get("userId")
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise InvalidToken()

        user = await db.get(User, user_id)
        if user is None:
            raise UnknownPrincipal()
    except (MissingCredential, InvalidToken, ExpiredToken, UnknownPrincipal) as exc:
        metrics.record_auth_failure(exc.code)
        logger.info("Authentication rejected: %s", exc.code)
        raise

    ctx_user_id.set(user.id)
    return AuthenticatedPrincipal(user=user, role=str(claims.get("role", "")), claims=claims)


# ── Dependencies ────────────────────────────────────────────────


async def get_current_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedPrincipal:
    from app.config import settings  # late import to avoid circular deps

    return await authenticate_bearer(authorization, db, settings.AUTH_SECRET_KEY)


async def get_optional_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedPrincipal | None:
    """Like :func:`get_current_user` but any rejection yields ``None``.

    Used by public routes that attach the caller's id when one is known.
    """
    from app.config import settings

    if not authorization:
        return None
    try:
        return await authenticate_bearer(authorization, db, settings.AUTH_SECRET_KEY)
    except (MissingCredential, InvalidToken, ExpiredToken, UnknownPrincipal):
        return None
