"""OpenTelemetry tracing bootstrap.

Opt-in: nothing is enabled unless ``OTLP_ENDPOINT`` is configured.  The
endpoint may be a bare collector base (``http://localhost:4318``) or a full
signal URL (``http://localhost:4318/v1/traces``).
"""

from __future__ import annotations

import logging
import re

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger("gymportal.tracing")

_tracer_provider: TracerProvider | None = None


def resolve_traces_endpoint(base: str | None) -> str | None:
    """Normalise *base* to ``<collector>/v1/traces``; ``None`` when unset."""
    if not base:
        return None
    clean = re.sub(r"/v1/[^/]+$", "", base.rstrip("/"))
    return f"{clean}/v1/traces"


def setup_tracing(app=None, otlp_endpoint: str | None = None) -> TracerProvider | None:
    global _tracer_provider

    endpoint = resolve_traces_endpoint(otlp_endpoint)
    if not endpoint:
        logger.info("OpenTelemetry disabled: no OTLP endpoint configured.")
        return None

    resource = Resource.create({"service.name": "gymportal-backend"})
    try:
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        trace.set_tracer_provider(provider)
        if app is not None:
            FastAPIInstrumentor.instrument_app(app)
    except Exception as exc:  # pragma: no cover
        logger.warning("OTEL traces setup failed: %s", exc)
        return None

    _tracer_provider = provider
    logger.info("OTEL traces -> %s", endpoint)
    return provider
