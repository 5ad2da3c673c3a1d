"""Text-to-speech connector (OpenAI ``/audio/speech``)."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import httpx

from app.config import settings
from app.utils.metrics import metrics

logger = logging.getLogger("gymportal.connectors.tts")


class TTSError(Exception):
    pass


class TTSClient:
    def __init__(
        self,
        api_key: str | None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or settings.OPENAI_BASE_URL).rstrip("/")
        self._transport = transport

    def _payload(self, text: str, voice: str) -> dict[str, Any]:
        return {
            "model": settings.TTS_MODEL,
            "input": text,
            "voice": voice,
            "response_format": "mp3",
            "speed": 1.0,
        }

    def _client(self) -> httpx.AsyncClient:
        if not self.api_key:
            raise TTSError("OpenAI API key is not configured")
        return httpx.AsyncClient(
            timeout=settings.TTS_TIMEOUT_SECONDS,
            headers={"Authorization": f"Bearer {self.api_key}"},
            transport=self._transport,
        )

    async def speak(self, text: str, voice: str) -> bytes:
        """Return the whole MP3 for *text*."""
        async with self._client() as client:
            try:
                resp = await client.post(f"{self.base_url}/audio/speech", json=self._payload(text, voice))
                resp.raise_for_status()
            except httpx.HTTPStatusError as exc:
                metrics.record_upstream_error("tts")
                logger.error("TTS returned HTTP %s", exc.response.status_code)
                raise TTSError(f"HTTP {exc.response.status_code}") from exc
            except httpx.RequestError as exc:
                metrics.record_upstream_error("tts")
                logger.error("TTS request failed: %s", exc)
                raise TTSError(str(exc)) from exc
            return resp.content

    async def open_stream(self, text: str, voice: str) -> tuple[AsyncIterator[bytes], Any]:
        """Start a streamed synthesis.

        Returns ``(chunks, close)``; the caller must await ``close()`` once the
        chunks are consumed.  Errors before the first byte raise :class:`TTSError`.
        """
        client = self._client()
        request = client.build_request(
            "POST", f"{self.base_url}/audio/speech", json=self._payload(text, voice)
        )
        try:
            resp = await client.send(request, stream=True)
        except httpx.RequestError as exc:
            await client.aclose()
            metrics.record_upstream_error("tts")
            raise TTSError(str(exc)) from exc

        if resp.is_error:
            status = resp.status_code
            await resp.aclose()
            await client.aclose()
            metrics.record_upstream_error("tts")
            logger.error("TTS stream returned HTTP %s", status)
            raise TTSError(f"HTTP {status}")

        async def close() -> None:
            await resp.aclose()
            await client.aclose()

        return resp.aiter_bytes(), close
