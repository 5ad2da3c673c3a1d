"""OAuth 2.0 authorization-code connectors for Google and LINE.

Each provider exposes three steps:

1. ``authorize_url(redirect_uri, state)``: where to send the browser;
2. ``exchange_code(code, redirect_uri)``: code -> provider access token;
3. ``fetch_profile(access_token)``: access token -> :class:`OAuthProfile`.

All outbound calls go through ``httpx.AsyncClient``; any transport error,
non-2xx status or malformed body raises :class:`OAuthError`.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

import httpx

from app.config import settings
from app.utils.metrics import metrics

logger = logging.getLogger("gymportal.connectors.oauth")

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

LINE_AUTHORIZE_URL = "https://access.line.me/oauth2/v2.1/authorize"
LINE_TOKEN_URL = "https://api.line.me/oauth2/v2.1/token"
LINE_PROFILE_URL = "https://api.line.me/v2/profile"


class OAuthError(Exception):
    pass


@dataclass(frozen=True)
class OAuthProfile:
    provider: str
    subject: str
    email: str
    name: str
    avatar_url: str | None = None


class OAuthProvider(ABC):
    name: str = ""
    authorize_endpoint: str = ""
    token_endpoint: str = ""
    scope: str = ""

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorize_url(self, redirect_uri: str, state: str) -> str:
        params = {
            "response_type": "code",
            "client_id": self.client_id or "",
            "redirect_uri": redirect_uri,
            "scope": self.scope,
            "state": state,
        }
        return f"{self.authorize_endpoint}?{urlencode(params)}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        started = time.monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=settings.OUTBOUND_TIMEOUT_SECONDS, transport=self._transport
            ) as client:
                resp = await client.request(method, url, **kwargs)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            metrics.record_upstream_error(self.name)
            logger.error("%s %s returned HTTP %s", self.name, url, exc.response.status_code)
            raise OAuthError(f"HTTP {exc.response.status_code}") from exc
        except (httpx.RequestError, ValueError) as exc:
            metrics.record_upstream_error(self.name)
            logger.error("%s %s failed: %s", self.name, url, exc)
            raise OAuthError(str(exc)) from exc
        finally:
            metrics.record_upstream_latency(self.name, time.monotonic() - started)

        if not isinstance(data, dict):
            metrics.record_upstream_error(self.name)
            raise OAuthError("unexpected response body")
        return data

    async def exchange_code(self, code: str, redirect_uri: str) -> str:
        data = await self._request(
            "POST",
            self.token_endpoint,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": self.client_id or "",
                "client_secret": self.client_secret or "",
            },
        )
        access_token = data.get("access_token")
        if not access_token:
            metrics.record_upstream_error(self.name)
            raise OAuthError("token response missing access_token")
        return access_token

    @abstractmethod
    async def fetch_profile(self, access_token: str) -> OAuthProfile:
        """Access token -> normalized profile."""


class GoogleProvider(OAuthProvider):
    name = "google"
    authorize_endpoint = GOOGLE_AUTHORIZE_URL
    token_endpoint = GOOGLE_TOKEN_URL
    scope = "openid email profile"

    async def fetch_profile(self, access_token: str) -> OAuthProfile:
        data = await self._request(
            "GET", GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        subject = data.get("id")
        if not subject:
            raise OAuthError("userinfo missing id")
        email = data.get("email") or f"{subject}@google.user"
        return OAuthProfile(
            provider=self.name,
            subject=str(subject),
            email=email,
            name=data.get("name") or email.split("@")[0],
            avatar_url=data.get("picture"),
        )


class LineProvider(OAuthProvider):
    name = "line"
    authorize_endpoint = LINE_AUTHORIZE_URL
    token_endpoint = LINE_TOKEN_URL
    scope = "profile openid email"

    async def fetch_profile(self, access_token: str) -> OAuthProfile:
        data = await self._request(
            "GET", LINE_PROFILE_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        subject = data.get("userId")
        if not subject:
            raise OAuthError("profile missing userId")
        # LINE only shares an email with an approved permission
        email = data.get("email") or f"{subject}@line.user"
        return OAuthProfile(
            provider=self.name,
            subject=str(subject),
            email=email,
            name=data.get("displayName") or "LINE user",
            avatar_url=data.get("pictureUrl"),
        )


def get_provider(name: str, transport: httpx.AsyncBaseTransport | None = None) -> OAuthProvider:
    if name == "google":
        return GoogleProvider(settings.GOOGLE_CLIENT_ID, settings.GOOGLE_CLIENT_SECRET, transport)
    if name == "line":
        return LineProvider(settings.LINE_CHANNEL_ID, settings.LINE_CHANNEL_SECRET, transport)
    raise ValueError(f"unknown OAuth provider '{name}'")
