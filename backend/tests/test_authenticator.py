"""Tests for bearer authentication and role gating."""

from __future__ import annotations

import pytest

from app.auth.deps import AuthenticatedPrincipal, authenticate_bearer
from app.auth.roles import check_role, check_self, has_role
from app.auth.tokens import encode_token
from app.errors import (
    ExpiredToken,
    InsufficientRole,
    InvalidToken,
    MissingCredential,
    UnknownPrincipal,
)
from app.utils.metrics import metrics

SECRET = "authenticator-secret"


def _bearer(claims: dict, ttl: int = 3600, secret: str = SECRET) -> str:
    return f"Bearer {encode_token(claims, secret, ttl)}"


@pytest.mark.asyncio
class TestAuthenticateBearer:
    async def test_valid_token_yields_principal(self, db, make_user):
        user = await make_user(email="alice@example.com")
        header = _bearer({"userId": user.id, "email": user.email, "role": "user"})
        principal = await authenticate_bearer(header, db, SECRET)
        assert principal.user_id == user.id
        assert principal.role == "user"
        assert principal.claims["email"] == "alice@example.com"

    async def test_role_comes_from_the_token(self, db, make_user):
        user = await make_user()
        principal = await authenticate_bearer(
            _bearer({"userId": user.id, "role": "admin"}), db, SECRET
        )
        assert principal.role == "admin"

    @pytest.mark.parametrize("header", [None, "", "Token abc", "bearer abc", "Bearer ", "Basic Zm9vOmJhcg=="])
    async def test_missing_credential(self, db, header):
        with pytest.raises(MissingCredential):
            await authenticate_bearer(header, db, SECRET)

    async def test_bad_signature(self, db, make_user):
        user = await make_user()
        with pytest.raises(InvalidToken):
            await authenticate_bearer(_bearer({"userId": user.id}, secret="elsewhere"), db, SECRET)

    async def test_garbage_token(self, db):
        with pytest.raises(InvalidToken):
            await authenticate_bearer("Bearer not.a.token", db, SECRET)

    async def test_expired(self, db, make_user):
        user = await make_user()
        with pytest.raises(ExpiredToken):
            await authenticate_bearer(_bearer({"userId": user.id}, ttl=-5), db, SECRET)

    @pytest.mark.parametrize("user_id", ["1", None, 1.5, True])
    async def test_non_integer_user_id(self, db, user_id):
        with pytest.raises(InvalidToken):
            await authenticate_bearer(_bearer({"userId": user_id}), db, SECRET)

    async def test_unknown_principal(self, db):
        with pytest.raises(UnknownPrincipal):
            await authenticate_bearer(_bearer({"userId": 999_999}), db, SECRET)

    async def test_rejection_is_counted(self, db):
        before = metrics.get_counter("auth_rejections_total", labels={"code": "missing_credential"})
        with pytest.raises(MissingCredential):
            await authenticate_bearer(None, db, SECRET)
        after = metrics.get_counter("auth_rejections_total", labels={"code": "missing_credential"})
        assert after == before + 1


class TestRoleChecks:
    def _principal(self, role: str, user_id: int = 1) -> AuthenticatedPrincipal:
        from types import SimpleNamespace

        return AuthenticatedPrincipal(user=SimpleNamespace(id=user_id), role=role)

    def test_admin_passes_admin_gate(self):
        p = self._principal("admin")
        assert check_role(p, "admin") is p

    def test_user_fails_admin_gate(self):
        with pytest.raises(InsufficientRole):
            check_role(self._principal("user"), "admin")

    def test_empty_role_fails(self):
        assert not has_role(self._principal(""), "user")

    def test_check_self(self):
        check_self(self._principal("user", user_id=5), 5)
        with pytest.raises(InsufficientRole):
            check_self(self._principal("user", user_id=5), 6)
