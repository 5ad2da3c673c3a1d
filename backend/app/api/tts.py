"""Text-to-speech API (members).

The OpenAI key is read from the ``openai_api_key`` site setting first and
falls back to ``OPENAI_API_KEY``.
"""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.background import BackgroundTask

from app.auth.deps import AuthenticatedPrincipal, get_current_user
from app.config import settings
from app.connectors import get_outbound_transport
from app.connectors.tts_client import TTSClient, TTSError
from app.db.engine import get_db
from app.errors import UpstreamError
from app.schemas.site import SpeakRequest
from app.services import setting_service

logger = logging.getLogger("gymportal.api.tts")
router = APIRouter(tags=["tts"])

_AUDIO_HEADERS = {"Content-Disposition": "inline", "Cache-Control": "private, max-age=3600"}


async def _client(db: AsyncSession, transport: httpx.AsyncBaseTransport | None) -> TTSClient:
    stored = await setting_service.get_value(db, setting_service.OPENAI_KEY_SETTING)
    if stored:
        return TTSClient(stored, transport=transport)
    return TTSClient(settings.OPENAI_API_KEY, settings.OPENAI_BASE_URL, transport=transport)


@router.post("/speak", response_class=Response)
async def speak(
    body: SpeakRequest,
    _: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    transport: httpx.AsyncBaseTransport | None = Depends(get_outbound_transport),
):
    client = await _client(db, transport)
    try:
        audio = await client.speak(body.text, body.voice)
    except TTSError as exc:
        logger.warning("TTS failed: %s", exc)
        raise UpstreamError() from exc
    return Response(content=audio, media_type="audio/mpeg", headers=_AUDIO_HEADERS)


@router.post("/speak-stream", response_class=StreamingResponse)
async def speak_stream(
    body: SpeakRequest,
    _: AuthenticatedPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    transport: httpx.AsyncBaseTransport | None = Depends(get_outbound_transport),
):
    client = await _client(db, transport)
    try:
        chunks, close = await client.open_stream(body.text, body.voice)
    except TTSError as exc:
        logger.warning("TTS stream failed: %s", exc)
        raise UpstreamError() from exc
    return StreamingResponse(
        chunks,
        media_type="audio/mpeg",
        headers=_AUDIO_HEADERS,
        background=BackgroundTask(close),
    )
