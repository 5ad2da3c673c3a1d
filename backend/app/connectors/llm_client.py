"""LLM client connector (OpenAI-compatible chat completions API).

Used by the post-response AI advice task.  One request per call, no retries;
every failure surfaces as :class:`LLMCallError`.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from app.config import settings
from app.utils.metrics import metrics

logger = logging.getLogger("gymportal.connectors.llm")


class LLMCallError(Exception):
    pass


class LLMClient:
    """Async OpenAI-compatible chat completion client.

    Parameters
    ----------
    base_url : str | None
        Override the global ``LLM_BASE_URL`` for this client instance.
    api_key : str | None
        Override the global ``LLM_API_KEY``.
    transport : httpx.AsyncBaseTransport | None
        Injected transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.LLM_BASE_URL).rstrip("/")
        self.api_key = api_key or settings.LLM_API_KEY
        self.timeout = settings.LLM_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self,
        prompt: str,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
        system_prompt: str | None = None,
        json_mode: bool = False,
    ) -> dict[str, Any]:
        if not self.api_key:
            raise LLMCallError("LLM_API_KEY is not configured")

        model = model or settings.LLM_MODEL
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        body: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        url = f"{self.base_url}/chat/completions"
        logger.info("LLM call: model=%s url=%s", model, url)

        started = time.monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, headers=headers, transport=self._transport
            ) as client:
                resp = await client.post(url, json=body)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            metrics.record_upstream_error("llm")
            raise LLMCallError(f"HTTP {exc.response.status_code}") from exc
        except (httpx.RequestError, ValueError) as exc:
            metrics.record_upstream_error("llm")
            raise LLMCallError(str(exc)) from exc
        finally:
            metrics.record_upstream_latency("llm", time.monotonic() - started)

        choices = data.get("choices") or [] if isinstance(data, dict) else []
        if not choices:
            metrics.record_upstream_error("llm")
            raise LLMCallError("LLM response missing choices")

        message = choices[0].get("message") or {}
        usage = data.get("usage") or {}
        return {
            "text": message.get("content") or "",
            "raw": data,
            "usage": {
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
                "model": data.get("model", ""),
            },
        }
