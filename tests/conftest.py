"""Pytest configuration and shared fixtures for tool-relay tests.

This module provides common fixtures used across all test modules,
including test app creation, async client setup and capability modules
written to a temporary tools directory.
"""

import textwrap

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tool_relay import create_app
from tool_relay.config import ToolRelaySettings

GREET_MODULE = '''
__all__ = ["greet"]


def greet(input, shared):
    """Greet someone by name.

    Args:
        input.name (str): Who to greet
        input.punctuation (str): Closing mark. Defaults to "!".

    Returns:
        str: The greeting
    """
    return f"Hello, {input['name']}{input.get('punctuation', '!')}"
'''


def write_module(directory, name, source):
    """Write a capability module and return its path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(textwrap.dedent(source).lstrip(), encoding="utf-8")
    return path


@pytest.fixture
def module_writer():
    """Provide the write_module helper to tests."""
    return write_module


@pytest.fixture
def test_settings(tmp_path):
    """Create test settings with isolated temporary directories.

    Args:
        tmp_path: Pytest fixture providing a temporary directory.

    Returns:
        ToolRelaySettings: Settings instance configured for testing.
    """
    return ToolRelaySettings(
        host="127.0.0.1",
        port=8000,
        base_url="http://provider.test/v1",
        api_key="test-key",
        chat_model="chat-model",
        tools_model="tools-model",
        data_dir=str(tmp_path),
        cache_dir=".cache",
        tools_dirs=["tools"],
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def tools_dir(tmp_path):
    """Tools directory containing the greet capability."""
    directory = tmp_path / "tools"
    write_module(directory, "greet.py", GREET_MODULE)
    return directory


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
