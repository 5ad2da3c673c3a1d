"""Authentication API: registration, login, identity, profile and OAuth.

Endpoints
---------
POST /api/auth/register            name + email + password -> token + user
POST /api/auth/login               email + password -> token + user
POST /api/auth/admin-login         as login, admins only
GET  /api/auth/me                  current user
GET  /api/auth/verify              current user (token check for the frontend)
PUT  /api/auth/profile             update profile fields
PUT  /api/auth/password            change password (email accounts)
GET  /api/auth/{provider}          OAuth start -> {authUrl, state} + nonce cookie
GET  /api/auth/{provider}/callback OAuth code exchange -> redirect with token
"""

from __future__ import annotations

import logging
import secrets
from typing import Literal
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import AuthenticatedPrincipal, get_current_user
from app.auth.roles import check_role
from app.auth.tokens import TokenError, decode_token, encode_token
from app.config import settings
from app.connectors import get_outbound_transport
from app.connectors.oauth_client import OAuthError, get_provider
from app.db.engine import get_db
from app.db.models import User
from app.errors import InsufficientRole, InvalidCredentials, UpstreamError, ValidationFailed
from app.schemas.auth import (
    AuthResult,
    LoginRequest,
    OAuthStart,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    UserOut,
)
from app.schemas.common import Envelope, ok
from app.services import user_service
from app.utils.metrics import metrics

logger = logging.getLogger("gymportal.api.auth")
router = APIRouter(tags=["auth"])

Provider = Literal["google", "line"]

_STATE_PURPOSE = "oauth_state"
_NONCE_COOKIE = "gym_oauth_nonce"
_NONCE_COOKIE_PATH = "/api/auth"


# ── Shared helpers ──────────────────────────────────────────────


def issue_session_token(user: User) -> str:
    claims = {"userId": user.id, "email": user.email, "role": user.role}
    return encode_token(claims, settings.AUTH_SECRET_KEY, settings.AUTH_TOKEN_TTL_SECONDS)


def _auth_result(user: User) -> AuthResult:
    return AuthResult(token=issue_session_token(user), user=UserOut.model_validate(user))


def _redirect_uri(request: Request, provider: str) -> str:
    base = settings.PUBLIC_BASE_URL or f"{request.url.scheme}://{request.url.netloc}"
    return f"{base.rstrip('/')}/api/auth/{provider}/callback"


def _issue_state(provider: str) -> tuple[str, str]:
    nonce = secrets.token_urlsafe(16)
    claims = {"purpose": _STATE_PURPOSE, "provider": provider, "nonce": nonce}
    return encode_token(claims, settings.AUTH_SECRET_KEY, settings.OAUTH_STATE_TTL_SECONDS), nonce


def _check_state(state: str, provider: str, cookie_nonce: str | None) -> None:
    """The state must be ours, for this provider, and minted for this browser."""
    try:
        claims = decode_token(state, settings.AUTH_SECRET_KEY)
    except TokenError as exc:
        raise ValidationFailed("Invalid OAuth state") from exc
    if claims.get("purpose") != _STATE_PURPOSE or claims.get("provider") != provider:
        raise ValidationFailed("Invalid OAuth state")
    nonce = claims.get("nonce")
    if not cookie_nonce or not isinstance(nonce, str) or not secrets.compare_digest(nonce, cookie_nonce):
        raise ValidationFailed("Invalid OAuth state")


# ── Password login ──────────────────────────────────────────────


@router.post("/register", response_model=Envelope[AuthResult], summary="Create an email account")
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.create_user(
        db, email=str(body.email), name=body.name, password=body.password
    )
    metrics.record_login("register")
    return ok(_auth_result(user))


@router.post("/login", response_model=Envelope[AuthResult], summary="Login with email + password")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_service.authenticate(db, str(body.email), body.password)
    except InvalidCredentials as exc:
        metrics.record_auth_failure(exc.code)
        raise
    metrics.record_login("password")
    logger.info("Login: user=%s role=%s", user.id, user.role)
    return ok(_auth_result(user))


@router.post(
    "/admin-login",
    response_model=Envelope[AuthResult],
    summary="Login to the admin console",
)
async def admin_login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    try:
        user = await user_service.authenticate(db, str(body.email), body.password)
        check_role(AuthenticatedPrincipal(user=user, role=user.role), "admin")
    except (InvalidCredentials, InsufficientRole) as exc:
        metrics.record_auth_failure(exc.code)
        raise
    metrics.record_login("admin")
    return ok(_auth_result(user))


# ── Identity / profile ──────────────────────────────────────────


@router.get("/me", response_model=Envelope[UserOut], summary="Current user")
async def me(principal: AuthenticatedPrincipal = Depends(get_current_user)):
    return ok(UserOut.model_validate(principal.user))


@router.get("/verify", response_model=Envelope[UserOut], summary="Verify the bearer token")
async def verify(principal: AuthenticatedPrincipal = Depends(get_current_user)):
    return ok(UserOut.model_validate(principal.user))


@router.put("/profile", response_model=Envelope[UserOut], summary="Update profile")
async def update_profile(
    body: ProfileUpdate,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.update_profile(db, principal.user, **body.model_dump(exclude_unset=True))
    return ok(UserOut.model_validate(user))


@router.put("/password", response_model=Envelope[None], summary="Change password")
async def change_password(
    body: PasswordChange,
    principal: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.change_password(db, principal.user, body.current_password, body.new_password)
    return ok(message="Password updated")


# ── OAuth ───────────────────────────────────────────────────────


@router.get("/{provider}", response_model=Envelope[OAuthStart], summary="Start OAuth login")
async def oauth_start(provider: Provider, request: Request, response: Response):
    client = get_provider(provider)
    if not client.configured:
        logger.warning("OAuth login requested for unconfigured provider '%s'", provider)
    state, nonce = _issue_state(provider)
    response.set_cookie(
        _NONCE_COOKIE,
        nonce,
        max_age=settings.OAUTH_STATE_TTL_SECONDS,
        path=_NONCE_COOKIE_PATH,
        httponly=True,
        samesite="lax",
        secure=request.url.scheme == "https",
    )
    url = client.authorize_url(_redirect_uri(request, provider), state)
    return ok(OAuthStart(auth_url=url, state=state))


@router.get("/{provider}/callback", summary="OAuth redirect target")
async def oauth_callback(
    provider: Provider,
    code: str,
    state: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    transport: httpx.AsyncBaseTransport | None = Depends(get_outbound_transport),
):
    _check_state(state, provider, request.cookies.get(_NONCE_COOKIE))
    client = get_provider(provider, transport)
    redirect_uri = _redirect_uri(request, provider)
    try:
        access_token = await client.exchange_code(code, redirect_uri)
        profile = await client.fetch_profile(access_token)
    except OAuthError as exc:
        metrics.record_auth_failure("upstream_error")
        raise UpstreamError() from exc

    user = await user_service.upsert_oauth_user(
        db,
        provider=profile.provider,
        provider_id=profile.subject,
        email=profile.email,
        name=profile.name,
        avatar_url=profile.avatar_url,
    )
    token = issue_session_token(user)
    metrics.record_login(provider)
    logger.info("OAuth login: user=%s provider=%s", user.id, provider)
    redirect = RedirectResponse(url=f"/?token={token}&name={quote(user.name)}", status_code=302)
    redirect.delete_cookie(_NONCE_COOKIE, path=_NONCE_COOKIE_PATH)
    return redirect
