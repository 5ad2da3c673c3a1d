"""FastAPI application entry point."""

from __future__ import annotations

import logging
import os
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.db.engine import engine, async_session
from app.db.models import Base
from app.errors import install_error_handlers

# Routers
from app.api.auth import router as auth_router
from app.api.health_logs import router as health_logs_router
from app.api.advices import router as advices_router
from app.api.inquiries import router as inquiries_router
from app.api.opinions import router as opinions_router
from app.api.announcements import router as announcements_router
from app.api.blogs import router as blogs_router
from app.api.comments import router as comments_router
from app.api.settings import router as settings_router
from app.api.tts import router as tts_router
from app.api.admin import router as admin_router

from app.utils.logger import ctx_request_id, ctx_user_id, setup_logger
from app.utils.metrics import metrics
from app.utils.tracing import setup_tracing

setup_logger(log_format=settings.LOG_FORMAT, log_level="DEBUG" if settings.DEBUG else "INFO")
logger = logging.getLogger("gymportal.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    # else: for PostgreSQL, run `alembic upgrade head` before starting the server

    os.makedirs(os.path.join(settings.UPLOADS_DIR, "meals"), exist_ok=True)

    if settings.SEED_DEFAULT_ADMIN:
        async with async_session() as db:
            from app.services.user_service import ensure_default_admin
            await ensure_default_admin(db, settings.DEFAULT_ADMIN_EMAIL, settings.DEFAULT_ADMIN_PASSWORD)

    logger.info("Gym portal backend started (db=%s)", settings.GYM_DB_DIALECT)
    try:
        yield
    finally:
        await engine.dispose()


app = FastAPI(
    title="Gym Portal",
    description="Member health logs, AI coaching advice and gym content",
    version="0.1.0",
    lifespan=lifespan,
)

# Initialize OpenTelemetry setup (if endpoint is provided in config)
setup_tracing(app, settings.OTLP_ENDPOINT)

install_error_handlers(app)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every request with an id and count the response status."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    rid_token = ctx_request_id.set(request_id)
    uid_token = ctx_user_id.set(None)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        ctx_request_id.reset(rid_token)
        ctx_user_id.reset(uid_token)
    metrics.record_request(response.status_code)
    logger.debug(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    response.headers["X-Request-ID"] = request_id
    return response


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(auth_router, prefix="/api/auth")
app.include_router(health_logs_router, prefix="/api/health-logs")
app.include_router(advices_router, prefix="/api/advices")
app.include_router(inquiries_router, prefix="/api/inquiries")
app.include_router(opinions_router, prefix="/api/opinions")
app.include_router(announcements_router, prefix="/api/announcements")
app.include_router(blogs_router, prefix="/api/blogs")
app.include_router(comments_router, prefix="/api/comments")
app.include_router(settings_router, prefix="/api/settings")
app.include_router(tts_router, prefix="/api/tts")
app.include_router(admin_router, prefix="/api/admin")

# ── Serve uploaded meal photos ─────────────────────────────────────────────
# Uploads are stored under UPLOADS_DIR and referenced as /api/images/<path>.
app.mount(
    "/api/images",
    StaticFiles(directory=settings.UPLOADS_DIR, html=False, check_dir=False),
    name="images",
)


@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.get("/api/metrics", response_class=PlainTextResponse, tags=["observability"])
async def prometheus_metrics():
    """Prometheus-compatible text exposition of in-process metrics.

    Example line: ``gymportal_login_total{method="email"} 3``
    """
    from app.utils.metrics import to_prometheus_text
    return to_prometheus_text()
