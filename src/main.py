"""Entry point for the call timer webhook service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI

from api.routes import router as api_router
from calls.dispatcher import WebhookDispatcher
from calls.events import EventClassifier
from calls.registry import CallRegistry
from config.settings import Settings, get_settings
from integrations.call_control import CallControlClient, build_http_client

LOGGER = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build the application.

    ``http_client`` is used for outbound control commands when given and is
    left open on shutdown; otherwise one is created and closed here.
    """

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = http_client or build_http_client(settings.control_request_timeout_seconds)
        control = CallControlClient(client)
        registry = CallRegistry(
            control,
            max_duration=settings.max_call_duration_seconds,
            grace_period=settings.cleanup_grace_seconds,
            closing_message=settings.closing_message,
            closing_delay=settings.closing_message_delay_seconds,
        )
        app.state.control = control
        app.state.registry = registry
        app.state.dispatcher = WebhookDispatcher(
            registry,
            EventClassifier.from_settings(settings),
            settings.control_url_paths,
        )
        LOGGER.info("Max call duration: %ss", settings.max_call_duration_seconds)
        try:
            yield
        finally:
            await registry.aclose()
            if http_client is None:
                await client.aclose()

    app = FastAPI(
        title="Call Timer",
        description="Ends voice-platform calls once they reach a maximum duration.",
        lifespan=lifespan,
    )
    app.include_router(api_router)
    return app


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = create_app(settings)


def main() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
