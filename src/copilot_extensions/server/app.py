"""FastAPI application for a Copilot agent.

Wires up:
  - JSON logging and OpenTelemetry
  - The payload verifier (literal key or the metadata endpoint)
  - /agent, /events and /_ping routes
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from copilot_extensions.agents.base_agent import BaseAgent
from copilot_extensions.configs.settings import Settings
from copilot_extensions.configs.settings import settings as default_settings
from copilot_extensions.logger import setup_logging
from copilot_extensions.observability.telemetry import (
    configure_opentelemetry,
    shutdown_opentelemetry,
)
from copilot_extensions.payload import PayloadVerifier
from copilot_extensions.server.routes.agent import router as agent_router
from copilot_extensions.server.routes.webhooks import router as webhooks_router

logger = logging.getLogger(__name__)


async def build_verifier(settings: Settings) -> PayloadVerifier:
    """Literal key when configured, else the key GitHub currently publishes."""
    if settings.COPILOT_PUBLIC_KEY:
        logger.info("Using Copilot public key from configuration")
        return PayloadVerifier.from_key(settings.COPILOT_PUBLIC_KEY)
    return await PayloadVerifier.from_metadata_endpoint(settings.COPILOT_PUBLIC_KEYS_URL)


# ── App factory ──────────────────────────────────────────────────────────────

def create_app(
    agent: BaseAgent,
    *,
    verifier: Optional[PayloadVerifier] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the application serving ``agent``.

    An injected ``verifier`` skips key loading at startup.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ---------- STARTUP ----------
        setup_logging(
            level=logging.DEBUG if settings.is_development else logging.INFO,
            service_name=agent.name,
        )
        if settings.OTEL_ENABLED:
            configure_opentelemetry(
                service_name=agent.name,
                otlp_endpoint=settings.OTLP_TRACE_ENDPOINT or None,
            )

        # Quiet noisy loggers
        for name in ("httpx", "httpcore"):
            logging.getLogger(name).setLevel(logging.WARNING)

        app.state.verifier = verifier or await build_verifier(settings)
        logger.info("Agent %r ready", agent.name)

        yield

        # ---------- SHUTDOWN ----------
        await agent.aclose()
        if settings.OTEL_ENABLED:
            shutdown_opentelemetry()

    app = FastAPI(
        title=f"{agent.name} Copilot agent",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.agent = agent
    app.state.settings = settings

    app.include_router(agent_router)
    app.include_router(webhooks_router)

    @app.get("/_ping", response_class=PlainTextResponse, tags=["infra"])
    async def ping():
        return "OK"

    if settings.OTEL_ENABLED:
        FastAPIInstrumentor.instrument_app(app)

    return app
