"""tool-relay: tool-calling chat engine for OpenAI-compatible LLM providers.

Local Python functions are discovered from capability modules, offered to the
model as tools, and invoked when the model calls them. Responses are cached by
a fingerprint of the request content.
"""

from tool_relay.app import VERSION as __version__
from tool_relay.app import create_app
from tool_relay.conversation import (
    ChatOptions,
    ChatOrchestrator,
    TerminalAnswer,
    inject,
    salt,
    system_say,
    user_say,
)
from tool_relay.tools import break_loop, discover, stop, stop_output

__all__ = [
    "ChatOptions",
    "ChatOrchestrator",
    "TerminalAnswer",
    "__version__",
    "break_loop",
    "create_app",
    "discover",
    "inject",
    "salt",
    "stop",
    "stop_output",
    "system_say",
    "user_say",
]
