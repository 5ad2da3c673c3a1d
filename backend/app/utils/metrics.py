"""
Basic in-memory metrics counters for observability.

Counters:
- login_total: successful logins by method (password, admin, google, line)
- auth_rejections_total: authenticator / login rejections by error code
- upstream_errors_total: OAuth / LLM / TTS provider failures by service
- ai_advice_total: background advice generations by outcome
- http_requests_total: requests by status class

Histogram:
- upstream_latency_seconds: outbound call latency by service
"""
import logging
import re as _re
from collections import defaultdict
from typing import Any

logger = logging.getLogger("gymportal.metrics")

PREFIX = "gymportal_"


class MetricsCollector:
    """Simple in-memory metrics collector."""

    def __init__(self):
        self.counters: dict[str, int] = defaultdict(int)
        self.histograms: dict[str, list[float]] = defaultdict(list)

    def increment_counter(self, name: str, value: int = 1, labels: dict[str, str] | None = None):
        key = self._build_key(name, labels)
        self.counters[key] += value

    def observe_histogram(self, name: str, value: float, labels: dict[str, str] | None = None):
        key = self._build_key(name, labels)
        self.histograms[key].append(value)

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        key = self._build_key(name, labels)
        return self.counters.get(key, 0)

    def get_histogram_stats(self, name: str, labels: dict[str, str] | None = None) -> dict[str, Any]:
        return _summarize(self.histograms.get(self._build_key(name, labels), []))

    def reset(self):
        self.counters.clear()
        self.histograms.clear()

    # ── Domain recorders ───────────────────────────────────────

    def record_login(self, method: str):
        self.increment_counter("login_total", labels={"method": method})

    def record_auth_failure(self, code: str):
        self.increment_counter("auth_rejections_total", labels={"code": code})

    def record_upstream_error(self, service: str):
        self.increment_counter("upstream_errors_total", labels={"service": service})

    def record_upstream_latency(self, service: str, seconds: float):
        self.observe_histogram("upstream_latency_seconds", seconds, labels={"service": service})

    def record_ai_advice(self, outcome: str):
        self.increment_counter("ai_advice_total", labels={"outcome": outcome})

    def record_request(self, status_code: int):
        self.increment_counter("http_requests_total", labels={"status": f"{status_code // 100}xx"})

    @staticmethod
    def _build_key(name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


def _summarize(values: list[float]) -> dict[str, Any]:
    """Count, sum and max for one histogram series."""
    if not values:
        return {"count": 0, "sum": 0.0, "max": 0.0}
    return {"count": len(values), "sum": sum(values), "max": max(values)}


# Global metrics collector instance
metrics = MetricsCollector()


def _parse_metric_key(key: str) -> tuple[str, str]:
    """Split an internal key ``name{k=v,...}`` into (name, Prometheus label block)."""
    m = _re.match(r"^([^{]+)(?:\{(.+)\})?$", key)
    if not m:
        return key, ""
    base_name = m.group(1)
    raw_labels = m.group(2) or ""
    if not raw_labels:
        return base_name, ""
    label_parts: list[str] = []
    for pair in raw_labels.split(","):
        if "=" in pair:
            k, v = pair.split("=", 1)
            label_parts.append(f'{k.strip()}="{v.strip()}"')
    return base_name, "{" + ",".join(label_parts) + "}" if label_parts else ""


def to_prometheus_text() -> str:
    """Render all in-memory metrics as Prometheus text exposition format.

    Each family gets exactly one ``# TYPE`` line; histograms are rendered as
    summaries with ``_count``, ``_sum`` and ``_max`` series.
    """
    lines: list[str] = []

    counter_families: dict[str, list[tuple[str, int]]] = defaultdict(list)
    for key, val in metrics.counters.items():
        base_name, label_str = _parse_metric_key(key)
        counter_families[PREFIX + base_name].append((label_str, val))
    for prom_name, entries in counter_families.items():
        lines.append(f"# TYPE {prom_name} counter")
        for label_str, val in entries:
            lines.append(f"{prom_name}{label_str} {val}")

    histogram_families: dict[str, list[tuple[str, dict]]] = defaultdict(list)
    for key, values in metrics.histograms.items():
        base_name, label_str = _parse_metric_key(key)
        histogram_families[PREFIX + base_name].append((label_str, _summarize(values)))
    for prom_name, entries in histogram_families.items():
        lines.append(f"# TYPE {prom_name} summary")
        for label_str, stats in entries:
            lines.append(f"{prom_name}_count{label_str} {stats['count']}")
            lines.append(f"{prom_name}_sum{label_str} {stats['sum']:.6f}")
            lines.append(f"{prom_name}_max{label_str} {stats['max']:.6f}")

    return "\n".join(lines) + "\n"
