"""Conversation orchestration.

This package normalizes conversation fragments, builds and caches
chat-completion requests, and resolves tool calls by invoking local
capabilities until the model answers or a capability stops the turn.
"""

from tool_relay.conversation.content import (
    answer_json,
    answer_markdown,
    answer_text,
    dedent_text,
)
from tool_relay.conversation.errors import ToolExecutionError, UnknownToolError
from tool_relay.conversation.fragments import (
    inject,
    normalize,
    normalize_message,
    salt,
    system_say,
    user_say,
)
from tool_relay.conversation.orchestrator import ChatOrchestrator, tool_result_message
from tool_relay.conversation.request import build_request, select_model
from tool_relay.conversation.types import ChatOptions, ConversationState, TerminalAnswer

__all__ = [
    "ChatOptions",
    "ChatOrchestrator",
    "ConversationState",
    "TerminalAnswer",
    "ToolExecutionError",
    "UnknownToolError",
    "answer_json",
    "answer_markdown",
    "answer_text",
    "build_request",
    "dedent_text",
    "inject",
    "normalize",
    "normalize_message",
    "salt",
    "select_model",
    "system_say",
    "tool_result_message",
    "user_say",
]
