"""Dependency injection providers for FastAPI endpoints.

This module provides FastAPI dependency functions that are used across
multiple routers to inject common dependencies like settings, the provider
client and the conversation orchestrator.
"""

from functools import lru_cache

from fastapi import HTTPException, Request

from tool_relay.cache import ResponseCache
from tool_relay.config import ToolRelaySettings
from tool_relay.conversation import ChatOrchestrator
from tool_relay.llm import ChatCompletionsClient


@lru_cache
def get_settings() -> ToolRelaySettings:
    """Get the application settings instance.

    This function is cached so that the same settings instance is reused
    across all requests. Settings are loaded from environment variables
    with the TOOL_RELAY_ prefix.

    Returns:
        ToolRelaySettings: The application configuration settings.
    """
    return ToolRelaySettings()


def get_llm_client(request: Request) -> ChatCompletionsClient:
    """Get the chat-completion client from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        ChatCompletionsClient: The client created during application startup.

    Raises:
        HTTPException: If the client is not initialized (503 Service Unavailable).
    """
    if not hasattr(request.app.state, "llm_client"):
        raise HTTPException(
            status_code=503,
            detail="Chat-completion client not initialized",
        )
    return request.app.state.llm_client


def get_response_cache(request: Request) -> ResponseCache:
    """Get the response cache from app state, creating it if needed.

    Args:
        request: The FastAPI request object.

    Returns:
        ResponseCache: Cache rooted at the configured cache directory.
    """
    if not hasattr(request.app.state, "response_cache"):
        settings = request.app.state.settings
        request.app.state.response_cache = ResponseCache(settings.resolved_cache_dir)
    return request.app.state.response_cache


def get_orchestrator(request: Request) -> ChatOrchestrator:
    """Get a ChatOrchestrator configured from app settings.

    A new orchestrator is created per request; it is stateless and only
    wraps the shared client and cache.

    Args:
        request: The FastAPI request object.

    Returns:
        ChatOrchestrator: Orchestrator for this request.

    Raises:
        HTTPException: If the client is not initialized (503 Service Unavailable).
    """
    # Settings from app.state so tests can use isolated settings
    settings = request.app.state.settings
    return ChatOrchestrator.from_settings(
        settings,
        client=get_llm_client(request),
        cache=get_response_cache(request),
    )
