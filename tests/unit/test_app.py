"""Unit tests for the FastAPI app factory and configuration."""

from pathlib import Path

import pytest
from fastapi import FastAPI

from tool_relay import __version__, create_app
from tool_relay.config import ToolRelaySettings


def test_create_app_returns_fastapi_instance():
    """Test that create_app returns a FastAPI instance."""
    app = create_app()
    assert isinstance(app, FastAPI)


def test_create_app_with_settings(test_settings):
    """Test that create_app accepts custom settings."""
    app = create_app(settings=test_settings)
    assert isinstance(app, FastAPI)
    assert app.state.settings is test_settings


def test_create_app_metadata():
    """Test that app has correct metadata."""
    app = create_app()
    assert app.title == "tool-relay"
    assert app.version == "0.1.0"


def test_create_app_includes_routers():
    """Test that all routers are registered."""
    app = create_app()

    routes = [route.path for route in app.routes]  # type: ignore[attr-defined]
    assert "/api/v1/health" in routes
    assert "/api/v1/tools" in routes
    assert "/api/v1/chat" in routes


def test_create_app_has_cors_middleware(test_settings):
    """Test that CORS middleware is configured."""
    app = create_app(settings=test_settings)

    middleware_classes = [m.cls.__name__ for m in app.user_middleware]  # type: ignore[attr-defined]
    assert "CORSMiddleware" in middleware_classes


def test_version_constant():
    """Test that __version__ is defined and matches app version."""
    assert __version__ == "0.1.0"


def test_settings_default_values(monkeypatch):
    """Test that settings have correct default values."""
    for name in ("TOOL_RELAY_API_KEY", "TOOL_RELAY_CHAT_MODEL", "TOOL_RELAY_TOOLS_MODEL"):
        monkeypatch.delenv(name, raising=False)

    settings = ToolRelaySettings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.chat_model == "qwen-plus"
    assert settings.tools_model is None
    assert settings.request_timeout is None
    assert settings.max_tokens == 8192
    assert settings.temperature == 0.7
    assert settings.tools_dirs == ["tools"]
    assert settings.log_level == "INFO"


def test_settings_env_prefix(monkeypatch):
    """Test that settings respect TOOL_RELAY_ environment variable prefix."""
    monkeypatch.setenv("TOOL_RELAY_PORT", "9000")
    monkeypatch.setenv("TOOL_RELAY_BASE_URL", "http://custom:8080/v1")
    monkeypatch.setenv("TOOL_RELAY_TOOLS_DIRS", '["a", "b"]')

    settings = ToolRelaySettings()

    assert settings.port == 9000
    assert settings.base_url == "http://custom:8080/v1"
    assert settings.tools_dirs == ["a", "b"]


def test_settings_resolved_paths(tmp_path):
    """Test that resolved path properties work correctly."""
    settings = ToolRelaySettings(data_dir=str(tmp_path), tools_dirs=["tools", "more"])

    assert settings.resolved_cache_dir == tmp_path / ".cache"
    assert settings.resolved_tools_dirs == [tmp_path / "tools", tmp_path / "more"]
    assert isinstance(settings.resolved_cache_dir, Path)


@pytest.mark.parametrize(
    "tools_model,expected",
    [(None, "qwen-plus"), ("qwen-max", "qwen-max")],
)
def test_settings_resolved_tools_model(tools_model, expected):
    """Test the tools model falls back to the chat model."""
    settings = ToolRelaySettings(chat_model="qwen-plus", tools_model=tools_model)

    assert settings.resolved_tools_model == expected


@pytest.mark.asyncio
async def test_lifespan_creates_and_closes_client(test_app):
    """Test the lifespan creates the client and cache and closes the client."""
    async with test_app.router.lifespan_context(test_app):
        client = test_app.state.llm_client
        assert client.base_url == "http://provider.test/v1"
        assert test_app.state.response_cache.cache_dir == (
            test_app.state.settings.resolved_cache_dir
        )

    assert client._client.is_closed
