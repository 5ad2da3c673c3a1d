"""Outbound HTTP connectors (OAuth providers, LLM, text-to-speech)."""

from __future__ import annotations

import httpx


def get_outbound_transport() -> httpx.AsyncBaseTransport | None:
    """FastAPI dependency: transport for outbound calls; ``None`` uses the network.

    Tests override it with ``httpx.MockTransport``.
    """
    return None
