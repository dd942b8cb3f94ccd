"""FastAPI application factory and lifespan management.

This module contains the create_app() factory function that creates and configures
the FastAPI application instance, including lifespan management for startup/shutdown
and router registration.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tool_relay.cache import ResponseCache
from tool_relay.config import ToolRelaySettings
from tool_relay.llm import ChatCompletionsClient
from tool_relay.routers import chat, health, tools

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager for FastAPI application.

    The provider client (and its connection pool) and the response cache are
    created once at startup and stored in app.state for reuse across all
    requests.

    Args:
        app: The FastAPI application instance.

    Yields:
        None: Control is yielded while the app is running.
    """
    settings: ToolRelaySettings = app.state.settings
    app.state.llm_client = ChatCompletionsClient(
        base_url=settings.base_url,
        api_key=settings.api_key,
        timeout=settings.request_timeout,
    )
    app.state.response_cache = ResponseCache(settings.resolved_cache_dir)
    logger.info(f"Caching responses in {settings.resolved_cache_dir}")

    if not settings.api_key:
        logger.warning("No API key configured - set TOOL_RELAY_API_KEY")

    yield

    # Shutdown: Clean up resources
    if hasattr(app.state, "llm_client"):
        await app.state.llm_client.close()
        logger.info("Chat-completion client closed")


def create_app(settings: ToolRelaySettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional ToolRelaySettings instance. If not provided,
                  settings will be loaded from environment variables.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        from tool_relay.dependencies import get_settings

        settings = get_settings()

    app = FastAPI(
        title="tool-relay",
        description="Tool-calling chat server for OpenAI-compatible LLM providers",
        version=VERSION,
        lifespan=lifespan,
    )

    # Store settings in app.state for lifespan access
    app.state.settings = settings

    # Note: FastAPI's type hints for add_middleware are overly strict
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(tools.router)
    app.include_router(chat.router)

    return app
