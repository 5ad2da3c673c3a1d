"""Tests for /api/auth: registration, login, identity and profile."""

from __future__ import annotations

import hashlib

import pytest
from sqlalchemy import select

from app.auth.tokens import decode_token, encode_token
from app.config import settings
from app.db.models import User


@pytest.mark.asyncio
class TestRegisterAndLogin:
    async def test_register_then_login(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"name": "A", "email": "a@x.com", "password": "secret1"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert "error" not in body
        assert body["data"]["user"]["email"] == "a@x.com"
        assert body["data"]["user"]["role"] == "user"
        assert "password_hash" not in body["data"]["user"]

        resp = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "secret1"})
        assert resp.status_code == 200
        claims = decode_token(resp.json()["data"]["token"], settings.AUTH_SECRET_KEY)
        assert claims["role"] == "user"
        assert claims["userId"] == body["data"]["user"]["id"]
        assert claims["email"] == "a@x.com"

    async def test_email_is_case_insensitive(self, client):
        await client.post(
            "/api/auth/register",
            json={"name": "B", "email": "Bee@Example.com", "password": "secret1"},
        )
        resp = await client.post("/api/auth/login", json={"email": "bee@example.com", "password": "secret1"})
        assert resp.status_code == 200

    async def test_duplicate_email_conflicts(self, client):
        payload = {"name": "A", "email": "dup@x.com", "password": "secret1"}
        assert (await client.post("/api/auth/register", json=payload)).status_code == 200
        resp = await client.post("/api/auth/register", json=payload)
        assert resp.status_code == 409
        assert resp.json() == {"success": False, "error": "conflict", "message": "Email already registered"}

    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "A", "email": "not-an-email", "password": "secret1"},
            {"name": "A", "email": "a@x.com", "password": "123"},
            {"name": "", "email": "a@x.com", "password": "secret1"},
            {"email": "a@x.com", "password": "secret1"},
        ],
    )
    async def test_register_validation(self, client, payload):
        resp = await client.post("/api/auth/register", json=payload)
        assert resp.status_code == 400
        assert resp.json()["error"] == "validation_error"

    async def test_wrong_password(self, client, member):
        resp = await client.post("/api/auth/login", json={"email": member.email, "password": "nope123"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "invalid_credentials"

    async def test_unknown_email_same_error(self, client):
        resp = await client.post("/api/auth/login", json={"email": "ghost@x.com", "password": "secret1"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "invalid_credentials"

    async def test_legacy_digest_upgraded_on_login(self, client, db_factory):
        async with db_factory() as session:
            session.add(
                User(
                    email="old@x.com",
                    name="Old",
                    provider="email",
                    provider_id="old@x.com",
                    password_hash=hashlib.sha256(b"secret1").hexdigest(),
                    role="user",
                )
            )
            await session.commit()

        resp = await client.post("/api/auth/login", json={"email": "old@x.com", "password": "secret1"})
        assert resp.status_code == 200

        async with db_factory() as session:
            user = (await session.execute(select(User).where(User.email == "old@x.com"))).scalar_one()
            assert user.password_hash.startswith("$2")


@pytest.mark.asyncio
class TestAdminLogin:
    async def test_member_refused(self, client, member):
        resp = await client.post(
            "/api/auth/admin-login", json={"email": member.email, "password": "secret1"}
        )
        assert resp.status_code == 403
        assert resp.json()["error"] == "insufficient_role"
        assert "data" not in resp.json()

    async def test_admin_accepted(self, client, admin):
        resp = await client.post(
            "/api/auth/admin-login", json={"email": admin.email, "password": "secret1"}
        )
        assert resp.status_code == 200
        claims = decode_token(resp.json()["data"]["token"], settings.AUTH_SECRET_KEY)
        assert claims["role"] == "admin"


@pytest.mark.asyncio
class TestIdentity:
    async def test_me(self, client, member, auth_headers):
        resp = await client.get("/api/auth/me", headers=auth_headers(member))
        assert resp.status_code == 200
        assert resp.json()["data"]["id"] == member.id

    async def test_verify(self, client, member, auth_headers):
        resp = await client.get("/api/auth/verify", headers=auth_headers(member))
        assert resp.status_code == 200

    async def test_me_without_token(self, client):
        resp = await client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {
            "success": False,
            "error": "missing_credential",
            "message": "Authentication required",
        }

    async def test_me_with_expired_token(self, client, member):
        token = encode_token({"userId": member.id, "role": "user"}, settings.AUTH_SECRET_KEY, -1)
        resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "expired_token"

    async def test_me_for_deleted_user(self, client):
        token = encode_token({"userId": 424242, "role": "user"}, settings.AUTH_SECRET_KEY, 60)
        resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json()["error"] == "unknown_principal"


@pytest.mark.asyncio
class TestProfile:
    async def test_update_profile(self, client, member, auth_headers):
        resp = await client.put(
            "/api/auth/profile",
            json={"name": "New Name", "height_cm": 172.5, "goal": "Run a 10k"},
            headers=auth_headers(member),
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["name"] == "New Name"
        assert data["height_cm"] == 172.5
        assert data["goal"] == "Run a 10k"

    async def test_change_password(self, client, member, auth_headers):
        resp = await client.put(
            "/api/auth/password",
            json={"current_password": "secret1", "new_password": "secret2"},
            headers=auth_headers(member),
        )
        assert resp.status_code == 200
        assert resp.json() == {"success": True, "message": "Password updated"}

        old = await client.post("/api/auth/login", json={"email": member.email, "password": "secret1"})
        new = await client.post("/api/auth/login", json={"email": member.email, "password": "secret2"})
        assert old.status_code == 401
        assert new.status_code == 200

    async def test_change_password_wrong_current(self, client, member, auth_headers):
        resp = await client.put(
            "/api/auth/password",
            json={"current_password": "wrong1", "new_password": "secret2"},
            headers=auth_headers(member),
        )
        assert resp.status_code == 401
        assert resp.json()["error"] == "invalid_credentials"
