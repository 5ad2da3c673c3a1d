"""Tests for /api/admin and the member-side advice routes it feeds."""

from __future__ import annotations

import pytest


def _advice(user_id: int, **overrides) -> dict:
    body = {
        "user_id": user_id,
        "log_date": "2026-10-01",
        "advice_type": "exercise",
        "title": "Add a rest day",
        "content": "Three sessions back to back; take Thursday off.",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
class TestAdminGate:
    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/admin/users"),
            ("get", "/api/admin/users/1/logs"),
            ("get", "/api/admin/inquiries"),
        ],
    )
    async def test_member_is_refused(self, client, member, auth_headers, method, path):
        resp = await getattr(client, method)(path, headers=auth_headers(member))
        assert resp.status_code == 403
        assert resp.json()["error"] == "insufficient_role"

    async def test_anonymous_is_refused(self, client):
        resp = await client.get("/api/admin/users")
        assert resp.status_code == 401
        assert resp.json()["error"] == "missing_credential"

    async def test_admin_lists_users(self, client, admin, member, auth_headers):
        resp = await client.get("/api/admin/users", headers=auth_headers(admin))
        assert resp.status_code == 200
        emails = {u["email"] for u in resp.json()["data"]}
        assert {admin.email, member.email} <= emails


@pytest.mark.asyncio
class TestAdminUserLogs:
    async def test_reads_any_members_logs(self, client, admin, member, auth_headers):
        await client.post(
            "/api/health-logs",
            json={"log_date": "2026-10-02", "weight": 80},
            headers=auth_headers(member),
        )
        resp = await client.get(f"/api/admin/users/{member.id}/logs", headers=auth_headers(admin))
        assert resp.status_code == 200
        assert [log["weight"] for log in resp.json()["data"]] == [80]

    async def test_unknown_user(self, client, admin, auth_headers):
        resp = await client.get("/api/admin/users/99999/logs", headers=auth_headers(admin))
        assert resp.status_code == 404


@pytest.mark.asyncio
class TestStaffAdvice:
    async def test_member_reads_and_marks_advice(self, client, admin, member, auth_headers):
        resp = await client.post(
            "/api/admin/advices", json=_advice(member.id), headers=auth_headers(admin)
        )
        assert resp.status_code == 200
        advice = resp.json()["data"]
        assert advice["advice_source"] == "staff"
        assert advice["staff_name"] == "Coach Admin"
        assert advice["is_read"] is False

        headers = auth_headers(member)
        listing = await client.get("/api/advices", headers=headers)
        assert [a["id"] for a in listing.json()["data"]] == [advice["id"]]

        by_date = await client.get("/api/advices/by-date/2026-10-01", headers=headers)
        assert len(by_date.json()["data"]) == 1
        other_day = await client.get("/api/advices/by-date/2026-10-02", headers=headers)
        assert other_day.json()["data"] == []

        unread = await client.get("/api/advices/unread-count", headers=headers)
        assert unread.json()["data"] == {"count": 1}

        marked = await client.put(f"/api/advices/{advice['id']}/read", headers=headers)
        assert marked.status_code == 200
        unread = await client.get("/api/advices/unread-count", headers=headers)
        assert unread.json()["data"] == {"count": 0}

    async def test_explicit_staff_name_kept(self, client, admin, member, auth_headers):
        resp = await client.post(
            "/api/admin/advices",
            json=_advice(member.id, staff_name="Trainer Kim"),
            headers=auth_headers(admin),
        )
        assert resp.json()["data"]["staff_name"] == "Trainer Kim"

    async def test_other_member_cannot_mark_read(self, client, admin, member, make_user, auth_headers):
        advice_id = (
            await client.post("/api/admin/advices", json=_advice(member.id), headers=auth_headers(admin))
        ).json()["data"]["id"]
        other = await make_user()
        resp = await client.put(f"/api/advices/{advice_id}/read", headers=auth_headers(other))
        assert resp.status_code == 404

        unread = await client.get("/api/advices/unread-count", headers=auth_headers(member))
        assert unread.json()["data"] == {"count": 1}

    async def test_advice_for_unknown_user(self, client, admin, auth_headers):
        resp = await client.post("/api/admin/advices", json=_advice(99999), headers=auth_headers(admin))
        assert resp.status_code == 404

    async def test_invalid_advice_type(self, client, admin, member, auth_headers):
        resp = await client.post(
            "/api/admin/advices",
            json=_advice(member.id, advice_type="astrology"),
            headers=auth_headers(admin),
        )
        assert resp.status_code == 400


@pytest.mark.asyncio
class TestAdminInquiries:
    async def test_status_workflow(self, client, admin, auth_headers):
        created = await client.post(
            "/api/inquiries",
            json={
                "name": "Visitor",
                "email": "visitor@example.com",
                "subject": "Opening hours",
                "message": "Are you open on holidays?",
            },
        )
        inquiry_id = created.json()["data"]["id"]
        headers = auth_headers(admin)

        listing = await client.get("/api/admin/inquiries", headers=headers)
        assert [i["id"] for i in listing.json()["data"]] == [inquiry_id]

        progress = await client.put(
            f"/api/admin/inquiries/{inquiry_id}/status",
            json={"status": "in_progress"},
            headers=headers,
        )
        assert progress.json()["data"]["status"] == "in_progress"
        assert progress.json()["data"]["resolved_at"] is None

        resolved = await client.put(
            f"/api/admin/inquiries/{inquiry_id}/status",
            json={"status": "resolved", "admin_reply": "Yes, 9am to 5pm."},
            headers=headers,
        )
        data = resolved.json()["data"]
        assert data["status"] == "resolved"
        assert data["admin_reply"] == "Yes, 9am to 5pm."
        assert data["resolved_at"] is not None

    async def test_unknown_status_rejected(self, client, admin, auth_headers):
        resp = await client.put(
            "/api/admin/inquiries/1/status", json={"status": "closed"}, headers=auth_headers(admin)
        )
        assert resp.status_code == 400

    async def test_missing_inquiry(self, client, admin, auth_headers):
        resp = await client.put(
            "/api/admin/inquiries/4242/status", json={"status": "resolved"}, headers=auth_headers(admin)
        )
        assert resp.status_code == 404
