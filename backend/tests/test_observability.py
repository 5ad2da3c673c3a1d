"""Tests for logging correlation and tracing setup."""

from __future__ import annotations

import json
import logging

from app.utils.logger import (
    CorrelationJsonFormatter,
    CorrelationTextFormatter,
    ctx_request_id,
    ctx_user_id,
)
from app.utils.tracing import resolve_traces_endpoint, setup_tracing


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("gymportal.test", logging.INFO, __file__, 1, msg, None, None)


class TestResolveEndpoint:
    def test_bare_base_url_gets_signal_path(self):
        assert resolve_traces_endpoint("http://localhost:4318") == "http://localhost:4318/v1/traces"

    def test_other_signal_path_replaced(self):
        assert resolve_traces_endpoint("http://localhost:4318/v1/metrics") == "http://localhost:4318/v1/traces"

    def test_trailing_slash_stripped(self):
        assert resolve_traces_endpoint("http://collector:4318/") == "http://collector:4318/v1/traces"

    def test_none_returns_none(self):
        assert resolve_traces_endpoint(None) is None

    def test_empty_string_returns_none(self):
        assert resolve_traces_endpoint("") is None


class TestSetupTracingNoOp:
    def test_no_endpoint_is_no_op(self):
        assert setup_tracing(None, None) is None


class TestCorrelationFormatters:
    def test_json_includes_request_and_user(self):
        formatter = CorrelationJsonFormatter("%(levelname)s %(name)s %(message)s")
        rid = ctx_request_id.set("req-1")
        uid = ctx_user_id.set(7)
        try:
            out = json.loads(formatter.format(_record()))
        finally:
            ctx_request_id.reset(rid)
            ctx_user_id.reset(uid)
        assert out["message"] == "hello"
        assert out["request_id"] == "req-1"
        assert out["user_id"] == 7

    def test_json_without_context(self):
        formatter = CorrelationJsonFormatter("%(message)s")
        out = json.loads(formatter.format(_record()))
        assert "request_id" not in out
        assert "user_id" not in out

    def test_text_appends_request_id(self):
        formatter = CorrelationTextFormatter("%(message)s")
        rid = ctx_request_id.set("req-2")
        try:
            assert formatter.format(_record()) == "hello [request_id=req-2]"
        finally:
            ctx_request_id.reset(rid)

    def test_text_without_request_id(self):
        assert CorrelationTextFormatter("%(message)s").format(_record()) == "hello"
