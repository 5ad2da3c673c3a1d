"""Tests for metrics utility."""

from __future__ import annotations

import pytest

from app.utils.metrics import MetricsCollector, metrics, to_prometheus_text


class TestMetricsCollector:
    """Test the MetricsCollector class directly."""

    def test_increment_counter(self):
        mc = MetricsCollector()
        mc.increment_counter("test_counter")
        assert mc.get_counter("test_counter") == 1
        mc.increment_counter("test_counter")
        assert mc.get_counter("test_counter") == 2

    def test_increment_counter_with_value(self):
        mc = MetricsCollector()
        mc.increment_counter("test", value=5)
        assert mc.get_counter("test") == 5

    def test_counter_with_labels(self):
        mc = MetricsCollector()
        mc.increment_counter("logins", labels={"method": "password"})
        mc.increment_counter("logins", labels={"method": "google"})
        mc.increment_counter("logins", labels={"method": "password"})
        assert mc.get_counter("logins", labels={"method": "password"}) == 2
        assert mc.get_counter("logins", labels={"method": "google"}) == 1

    def test_nonexistent_counter_zero(self):
        mc = MetricsCollector()
        assert mc.get_counter("nonexistent") == 0

    def test_observe_histogram(self):
        mc = MetricsCollector()
        mc.observe_histogram("duration", 1.5)
        mc.observe_histogram("duration", 2.5)
        mc.observe_histogram("duration", 3.0)
        stats = mc.get_histogram_stats("duration")
        assert stats["count"] == 3
        assert stats["sum"] == 7.0
        assert stats["max"] == 3.0

    def test_empty_histogram(self):
        mc = MetricsCollector()
        stats = mc.get_histogram_stats("nonexistent")
        assert stats["count"] == 0
        assert stats["sum"] == 0

    def test_histogram_with_labels(self):
        mc = MetricsCollector()
        mc.observe_histogram("latency", 1.0, labels={"service": "llm"})
        mc.observe_histogram("latency", 2.0, labels={"service": "tts"})
        assert mc.get_histogram_stats("latency", labels={"service": "llm"})["count"] == 1
        assert mc.get_histogram_stats("latency", labels={"service": "tts"})["sum"] == 2.0

    def test_reset(self):
        mc = MetricsCollector()
        mc.increment_counter("logins")
        mc.observe_histogram("dur", 1.0)
        mc.reset()
        assert mc.get_counter("logins") == 0
        assert mc.get_histogram_stats("dur")["count"] == 0

    def test_build_key_with_labels(self):
        key = MetricsCollector._build_key("name", {"b": "2", "a": "1"})
        assert key == "name{a=1,b=2}"


class TestDomainRecorders:
    def setup_method(self):
        """Reset global metrics before each test."""
        metrics.reset()

    def test_record_login(self):
        metrics.record_login("password")
        metrics.record_login("password")
        assert metrics.get_counter("login_total", labels={"method": "password"}) == 2

    def test_record_auth_failure(self):
        metrics.record_auth_failure("expired_token")
        assert metrics.get_counter("auth_rejections_total", labels={"code": "expired_token"}) == 1

    def test_record_request_by_status_class(self):
        metrics.record_request(201)
        metrics.record_request(204)
        metrics.record_request(404)
        assert metrics.get_counter("http_requests_total", labels={"status": "2xx"}) == 2
        assert metrics.get_counter("http_requests_total", labels={"status": "4xx"}) == 1

    def test_upstream_latency(self):
        metrics.record_upstream_latency("llm", 0.25)
        stats = metrics.get_histogram_stats("upstream_latency_seconds", labels={"service": "llm"})
        assert stats == {"count": 1, "sum": 0.25, "max": 0.25}


class TestPrometheusText:
    def setup_method(self):
        metrics.reset()

    def test_counters_and_summaries(self):
        metrics.record_login("google")
        metrics.record_upstream_latency("tts", 0.5)
        text = to_prometheus_text()
        assert "# TYPE gymportal_login_total counter" in text
        assert 'gymportal_login_total{method="google"} 1' in text
        assert "# TYPE gymportal_upstream_latency_seconds summary" in text
        assert 'gymportal_upstream_latency_seconds_count{service="tts"} 1' in text
        assert text.endswith("\n")

    def test_one_type_line_per_family(self):
        metrics.record_auth_failure("invalid_token")
        metrics.record_auth_failure("missing_credential")
        text = to_prometheus_text()
        assert text.count("# TYPE gymportal_auth_rejections_total counter") == 1


@pytest.mark.asyncio
class TestHttpEndpoints:
    async def test_health(self, client):
        resp = await client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_metrics_endpoint(self, client):
        metrics.reset()
        await client.get("/api/health")
        resp = await client.get("/api/metrics")
        assert resp.status_code == 200
        assert 'gymportal_http_requests_total{status="2xx"}' in resp.text

    async def test_request_id_echoed(self, client):
        resp = await client.get("/api/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    async def test_request_id_generated(self, client):
        resp = await client.get("/api/health")
        assert len(resp.headers["X-Request-ID"]) == 32

    async def test_unknown_route_uses_envelope(self, client):
        resp = await client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.json() == {"success": False, "error": "not_found", "message": "Not found"}

    async def test_wrong_method(self, client):
        resp = await client.delete("/api/health")
        assert resp.status_code == 405
        assert resp.json()["error"] == "method_not_allowed"
