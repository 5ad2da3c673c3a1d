"""AuthN/AuthZ for the gym portal.

Credential scheme
-----------------
``Authorization: Bearer <jwt>``
    HS256-signed token issued by ``/api/auth/login`` (and register, admin
    login, OAuth callbacks).  Claims: ``userId`` (int), ``email``, ``role``,
    ``exp`` (int seconds since epoch).

Roles (checked with ``require_role``)
-------------------------------------
``user`` (members) and ``admin`` (staff).
"""

from app.auth.deps import AuthenticatedPrincipal, get_current_user, get_optional_user
from app.auth.roles import require_role

__all__ = ["AuthenticatedPrincipal", "get_current_user", "get_optional_user", "require_role"]
