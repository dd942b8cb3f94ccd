"""Chat-completion provider client.

This package talks to an OpenAI-compatible ``/chat/completions`` endpoint.
"""

from tool_relay.llm.client import ChatCompletionsClient
from tool_relay.llm.types import ChatCompletion, ChatMessage, ProviderError

__all__ = ["ChatCompletion", "ChatCompletionsClient", "ChatMessage", "ProviderError"]
