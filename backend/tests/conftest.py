"""Shared fixtures for backend tests.

Every test gets a private in-memory SQLite database.  The FastAPI app's
``get_db`` / ``get_session_factory`` dependencies are pointed at it, and
outbound HTTP goes through whatever ``httpx.MockTransport`` a test installs
with the ``outbound`` fixture.
"""

from __future__ import annotations

import uuid

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.api.auth import issue_session_token
from app.connectors import get_outbound_transport
from app.db.engine import get_db, get_session_factory
from app.db.models import Base
from app.main import app
from app.services import user_service


def _uid() -> str:
    """Return a short unique suffix for test isolation."""
    return uuid.uuid4().hex[:8]


# ── Database ────────────────────────────────────────────────────


@pytest.fixture
async def db_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _fk_on(dbapi_conn, _conn_rec):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def db(db_factory):
    async with db_factory() as session:
        yield session


# ── App client ──────────────────────────────────────────────────


class _Outbound:
    """Holder for the transport handed to connectors during a test."""

    def __init__(self):
        self.transport: httpx.AsyncBaseTransport | None = None
        self.requests: list[httpx.Request] = []

    def install(self, handler) -> None:
        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        self.transport = httpx.MockTransport(_record)


@pytest.fixture
def outbound() -> _Outbound:
    return _Outbound()


@pytest.fixture
async def client(db_factory, outbound):
    """Async test client wired to the per-test database."""

    async def override_db():
        async with db_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_session_factory] = lambda: db_factory
    app.dependency_overrides[get_outbound_transport] = lambda: outbound.transport

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ── Users / tokens ──────────────────────────────────────────────


@pytest.fixture
def make_user(db_factory):
    """Create a committed user; returns the ORM row."""

    async def _make(
        email: str | None = None,
        role: str = "user",
        password: str = "secret1",
        name: str = "Test Member",
    ):
        async with db_factory() as session:
            user = await user_service.create_user(
                session,
                email=email or f"member_{_uid()}@example.com",
                name=name,
                password=password,
                role=role,
            )
            await session.commit()
            return user

    return _make


@pytest.fixture
def auth_headers():
    """``auth_headers(user)`` -> ``{"Authorization": "Bearer <token>"}``."""

    def _headers(user) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_session_token(user)}"}

    return _headers


@pytest.fixture
async def member(make_user):
    return await make_user(name="Taro Member")


@pytest.fixture
async def admin(make_user):
    return await make_user(role="admin", name="Coach Admin")
