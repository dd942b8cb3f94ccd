"""Chat-completion request building."""

from typing import Any

from tool_relay.conversation.types import ChatOptions, ConversationState


def select_model(
    state: ConversationState,
    options: ChatOptions,
    chat_model: str,
    tools_model: str | None = None,
) -> str:
    """Pick the model: explicit override, else the tools model when tools are
    offered, else the chat model."""
    if options.model:
        return options.model
    if state.tools and tools_model:
        return tools_model
    return chat_model


def build_request(
    state: ConversationState,
    options: ChatOptions,
    chat_model: str,
    tools_model: str | None = None,
) -> dict[str, Any]:
    """Build the ``/chat/completions`` request body.

    Only options the provider understands are attached; unset ones are left
    out. Tools are attached only when at least one is offered, and then with
    ``parallel_tool_calls`` disabled so calls arrive in a strict order.

    Args:
        state: Normalized conversation state
        options: Resolved options for this request
        chat_model: Default model for plain chat
        tools_model: Model for tool-augmented requests

    Returns:
        The request body

    Raises:
        ValueError: If the conversation has no messages
    """
    if not state.messages:
        raise ValueError("Conversation has no messages to send")

    body: dict[str, Any] = {
        "model": select_model(state, options, chat_model, tools_model),
        "messages": list(state.messages),
    }
    if options.max_tokens is not None:
        body["max_tokens"] = options.max_tokens
    if options.temperature is not None:
        body["temperature"] = options.temperature

    tools = _unique_tools(state.tools)
    if tools:
        body["tools"] = tools
        body["parallel_tool_calls"] = False

    if options.tool_choice is not None:
        body["tool_choice"] = options.tool_choice
    if options.enable_thinking is not None:
        body["enable_thinking"] = options.enable_thinking

    return body


def _unique_tools(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    seen: set[str] = set()
    unique = []
    for tool in tools:
        name = tool["function"]["name"]
        if name not in seen:
            seen.add(name)
            unique.append(tool)
    return unique
