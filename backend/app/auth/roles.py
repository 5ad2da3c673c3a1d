"""Role-gating FastAPI dependencies.

Usage::

    from app.auth.roles import require_role

    @router.get("/users", dependencies=[Depends(require_role("admin"))])
    async def list_users(...): ...

    # Or inject the principal:
    @router.post("/advices")
    async def create_advice(
        ...,
        principal: AuthenticatedPrincipal = Depends(require_role("admin")),
    ): ...
"""

from __future__ import annotations

import logging

from fastapi import Depends

from app.auth.deps import AuthenticatedPrincipal, get_current_user
from app.errors import InsufficientRole

logger = logging.getLogger("gymportal.auth")

ROLES = ("user", "admin")


def has_role(principal: AuthenticatedPrincipal, role: str) -> bool:
    return principal.role == role


def check_role(principal: AuthenticatedPrincipal, role: str) -> AuthenticatedPrincipal:
    """Admit *principal* or raise :class:`InsufficientRole`."""
    if not has_role(principal, role):
        logger.warning(
            "Access denied: user %s (role=%s) needs role '%s'",
            principal.user_id,
            principal.role,
            role,
        )
        raise InsufficientRole()
    return principal


def check_self(principal: AuthenticatedPrincipal, user_id: int) -> None:
    """Self-only routes: the path user must be the caller."""
    if principal.user_id != user_id:
        logger.warning("Access denied: user %s asked for user %s", principal.user_id, user_id)
        raise InsufficientRole()


def require_role(role: str):
    """Return a FastAPI dependency that enforces *role*."""

    async def _check(
        principal: AuthenticatedPrincipal = Depends(get_current_user),
    ) -> AuthenticatedPrincipal:
        return check_role(principal, role)

    return _check
