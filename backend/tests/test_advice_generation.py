"""Tests for the post-response AI advice task."""

from __future__ import annotations

import json
from datetime import date

import httpx
import pytest
from sqlalchemy import select

from app.connectors.llm_client import LLMCallError, LLMClient
from app.db.models import Advice
from app.schemas.health_logs import HealthLogIn
from app.services import health_log_service
from app.services.advice_service import generate_ai_advice, parse_advice_reply
from app.utils.metrics import metrics

_ADVICE = {
    "category": "sleep",
    "title": "Protect your sleep",
    "content": "Six hours is short for your training load; aim for 7.5 tonight.",
    "confidence_score": 0.8,
    "ai_analysis_data": {"detected_issues": ["short sleep"]},
}


def _chat_reply(content: str):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/chat/completions")
        return httpx.Response(
            200,
            json={
                "model": "test-model",
                "choices": [{"message": {"role": "assistant", "content": content}}],
                "usage": {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30},
            },
        )

    return handler


async def _seed_log(db_factory, user_id: int) -> int:
    async with db_factory() as session:
        log = await health_log_service.create_log(
            session,
            user_id,
            HealthLogIn(log_date=date(2026, 10, 1), weight=70, sleep_hours=6),
        )
        await session.commit()
        return log.id


class TestParseAdviceReply:
    def test_fenced_json(self):
        advice = parse_advice_reply(f"Here you go:\n```json\n{json.dumps(_ADVICE)}\n```")
        assert advice.category == "sleep"
        assert advice.confidence_score == 0.8

    def test_bare_json(self):
        assert parse_advice_reply(f"Sure! {json.dumps(_ADVICE)} Hope it helps").title == "Protect your sleep"

    def test_no_json(self):
        assert parse_advice_reply("I cannot help with that.") is None

    def test_invalid_shape(self):
        assert parse_advice_reply('{"category": "sleep"}') is None

    def test_defaults(self):
        advice = parse_advice_reply('{"title": "Drink water", "content": "Two litres a day."}')
        assert advice.category == "general"
        assert advice.confidence_score == 0.75


@pytest.mark.asyncio
class TestGenerateAiAdvice:
    async def test_stores_ai_advice(self, db_factory, member):
        log_id = await _seed_log(db_factory, member.id)
        llm = LLMClient(api_key="test-key", transport=httpx.MockTransport(_chat_reply(f"```json\n{json.dumps(_ADVICE)}\n```")))

        await generate_ai_advice(db_factory, member.id, log_id, {"breakfast": {"calories": 300}}, llm=llm)

        async with db_factory() as session:
            rows = (await session.execute(select(Advice))).scalars().all()
        assert len(rows) == 1
        advice = rows[0]
        assert advice.user_id == member.id
        assert advice.advice_source == "ai"
        assert advice.advice_type == "sleep"
        assert advice.log_date == date(2026, 10, 1)
        assert advice.is_read is False
        assert json.loads(advice.ai_analysis_json) == {"detected_issues": ["short sleep"]}

    async def test_skipped_without_key(self, db_factory, member):
        log_id = await _seed_log(db_factory, member.id)

        def _unreachable(request):
            raise AssertionError("LLM must not be called")

        llm = LLMClient(api_key="", transport=httpx.MockTransport(_unreachable))
        llm.api_key = None
        await generate_ai_advice(db_factory, member.id, log_id, {}, llm=llm)

        async with db_factory() as session:
            assert (await session.execute(select(Advice))).scalars().all() == []

    async def test_upstream_error_is_swallowed(self, db_factory, member):
        log_id = await _seed_log(db_factory, member.id)
        llm = LLMClient(api_key="k", transport=httpx.MockTransport(lambda r: httpx.Response(503)))
        before = metrics.get_counter("ai_advice_total", labels={"outcome": "upstream_error"})

        await generate_ai_advice(db_factory, member.id, log_id, {}, llm=llm)

        assert metrics.get_counter("ai_advice_total", labels={"outcome": "upstream_error"}) == before + 1
        async with db_factory() as session:
            assert (await session.execute(select(Advice))).scalars().all() == []

    async def test_unparseable_reply(self, db_factory, member):
        log_id = await _seed_log(db_factory, member.id)
        llm = LLMClient(api_key="k", transport=httpx.MockTransport(_chat_reply("no json here")))
        await generate_ai_advice(db_factory, member.id, log_id, {}, llm=llm)
        async with db_factory() as session:
            assert (await session.execute(select(Advice))).scalars().all() == []

    async def test_log_of_another_user_is_ignored(self, db_factory, member, make_user):
        log_id = await _seed_log(db_factory, member.id)
        other = await make_user()
        llm = LLMClient(api_key="k", transport=httpx.MockTransport(_chat_reply(json.dumps(_ADVICE))))
        await generate_ai_advice(db_factory, other.id, log_id, {}, llm=llm)
        async with db_factory() as session:
            assert (await session.execute(select(Advice))).scalars().all() == []


@pytest.mark.asyncio
class TestLLMClient:
    async def test_missing_choices(self):
        llm = LLMClient(api_key="k", transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
        with pytest.raises(LLMCallError):
            await llm.complete("hi")

    async def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return _chat_reply("ok")(request)

        llm = LLMClient(base_url="http://llm.local/v1/", api_key="k", transport=httpx.MockTransport(handler))
        result = await llm.complete("hello", system_prompt="be nice", max_tokens=50, json_mode=True)
        assert result["text"] == "ok"
        assert result["usage"]["total_tokens"] == 30
        assert seen["auth"] == "Bearer k"
        assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user"]
        assert seen["body"]["max_tokens"] == 50
        assert seen["body"]["response_format"] == {"type": "json_object"}
