"""Conversation fragments and their normalization.

A conversation is described by a loose sequence of fragments that are
classified by shape:

- ``str`` or a number: a user message
- a mapping with ``role`` and ``content``: a message
- ``{"type": "function", "function": {...}}``: an offered tool when the
  function has a ``description``, otherwise a forced ``tool_choice``
- a mapping with ``message`` and ``finish_reason``: a provider choice, whose
  message is appended
- any other mapping: option overrides
- a Capability or a CapabilityRegistry: offered capabilities
- a TerminalAnswer: its input state, then its messages
- lists and tuples are flattened, awaitables awaited and None ignored
"""

import inspect
from typing import Any, Mapping

from tool_relay.conversation.types import ConversationState, TerminalAnswer
from tool_relay.tools.manifest import Capability
from tool_relay.tools.registry import CapabilityRegistry

# Response-only fields that must not be sent back or fingerprinted
_PROVIDER_ONLY_KEYS = {"reasoning_content", "refusal", "annotations", "audio"}


def user_say(*parts: Any) -> dict[str, Any]:
    """Build a user message from one or more text parts."""
    return {"role": "user", "content": "\n".join(str(part) for part in parts)}


def system_say(*parts: Any) -> dict[str, Any]:
    """Build a system message from one or more text parts."""
    return {"role": "system", "content": "\n".join(str(part) for part in parts)}


def inject(value: Any) -> dict[str, Any]:
    """Option fragment carrying the shared context for structured capabilities."""
    return {"shared": value}


def salt(value: Any) -> dict[str, Any]:
    """Option fragment that changes the fingerprint without changing the request."""
    return {"salt": value}


def normalize_message(message: Mapping[str, Any]) -> dict[str, Any]:
    """Give a message a fixed key order.

    ``role`` and ``content`` come first, remaining keys follow sorted. None
    values and response-only keys are dropped; missing content becomes "".
    """
    content = message.get("content")
    normalized: dict[str, Any] = {
        "role": message["role"],
        "content": "" if content is None else content,
    }
    for key in sorted(message):
        if key in ("role", "content") or key in _PROVIDER_ONLY_KEYS:
            continue
        if message[key] is not None:
            normalized[key] = message[key]
    return normalized


async def normalize(*fragments: Any) -> ConversationState:
    """Flatten and classify fragments into a conversation state.

    Args:
        *fragments: Conversation fragments, see the module docstring

    Returns:
        ConversationState with messages, offered tools and option overrides

    Raises:
        TypeError: If a fragment has no recognizable shape
    """
    state = ConversationState()
    await _walk(fragments, state)
    return state


async def _walk(items: Any, state: ConversationState) -> None:
    for item in items:
        if inspect.isawaitable(item):
            item = await item
        if item is None:
            continue

        if isinstance(item, TerminalAnswer):
            state.absorb(item.state)
            state.messages.extend(_settled(m) for m in item.messages)
        elif isinstance(item, CapabilityRegistry):
            for capability in item:
                state.add_capability(capability)
        elif isinstance(item, Capability):
            state.add_capability(item)
        elif isinstance(item, str) or (
            isinstance(item, (int, float)) and not isinstance(item, bool)
        ):
            state.messages.append(user_say(item))
        elif isinstance(item, Mapping):
            _classify(item, state)
        elif isinstance(item, (list, tuple)):
            await _walk(item, state)
        else:
            raise TypeError(
                f"Unsupported conversation fragment: {type(item).__name__}"
            )


def _settled(message: Mapping[str, Any]) -> dict[str, Any]:
    """An answer message without its tool calls, none of which were answered."""
    return normalize_message({k: v for k, v in message.items() if k != "tool_calls"})


def _classify(item: Mapping[str, Any], state: ConversationState) -> None:
    function = item.get("function")
    if "role" in item and "content" in item:
        state.messages.append(normalize_message(item))
    elif item.get("type") == "function" and isinstance(function, Mapping):
        if "description" in function:
            state.add_tool(item)
        else:
            state.overrides["tool_choice"] = dict(item)
    elif "message" in item and "finish_reason" in item:
        state.messages.append(normalize_message(item["message"]))
    else:
        state.overrides.update(item)
