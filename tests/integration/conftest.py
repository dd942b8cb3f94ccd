"""Pytest configuration for integration tests.

This module provides integration-test-specific fixtures that ensure
proper test isolation and mocking for API endpoint tests.
"""

from unittest.mock import AsyncMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_llm_client():
    """Mock ChatCompletionsClient for all integration tests.

    This fixture patches the ChatCompletionsClient class before the app is
    created, ensuring the lifespan uses our mock instead of creating a real
    client.
    """
    with patch("tool_relay.app.ChatCompletionsClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.base_url = "http://provider.test/v1"
        mock_instance.create.return_value = {
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": "Hello!"},
                    "finish_reason": "stop",
                }
            ]
        }

        mock_client_class.return_value = mock_instance

        yield mock_instance


@pytest.fixture(autouse=True)
def clean_cache_dir(test_settings):
    """Ensure the response cache is empty before each test.

    Args:
        test_settings: The test settings fixture from parent conftest
    """
    cache_dir = test_settings.resolved_cache_dir

    if cache_dir.exists():
        for record in cache_dir.glob("*.json"):
            record.unlink()

    yield
