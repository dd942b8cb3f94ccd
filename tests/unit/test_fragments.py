"""Unit tests for conversation fragment normalization."""

import pytest

from tool_relay.conversation import (
    ConversationState,
    TerminalAnswer,
    inject,
    normalize,
    normalize_message,
    salt,
    system_say,
    user_say,
)
from tool_relay.tools import discover


def test_message_builders():
    """Test user_say and system_say join parts with newlines."""
    assert user_say("a", "b") == {"role": "user", "content": "a\nb"}
    assert system_say("Be brief.") == {"role": "system", "content": "Be brief."}
    assert inject({"k": 1}) == {"shared": {"k": 1}}
    assert salt(2) == {"salt": 2}


def test_normalize_message_key_order():
    """Test role and content first, then sorted keys, None dropped."""
    message = normalize_message(
        {
            "tool_calls": [{"id": "1"}],
            "content": None,
            "reasoning_content": "thinking...",
            "role": "assistant",
            "name": None,
        }
    )

    assert list(message) == ["role", "content", "tool_calls"]
    assert message["content"] == ""


@pytest.mark.asyncio
async def test_strings_and_numbers_become_user_messages():
    """Test plain text and numbers are user messages."""
    state = await normalize("Hello", 42)

    assert state.messages == [
        {"role": "user", "content": "Hello"},
        {"role": "user", "content": "42"},
    ]


@pytest.mark.asyncio
async def test_nested_lists_and_awaitables_flatten():
    """Test nesting and awaitables are resolved in order."""

    async def later():
        return user_say("from coroutine")

    state = await normalize(
        [system_say("sys"), ["one", None, ("two",)]], later(), None
    )

    assert [m["content"] for m in state.messages] == [
        "sys",
        "one",
        "two",
        "from coroutine",
    ]


@pytest.mark.asyncio
async def test_tool_dicts_offer_or_force():
    """Test described functions are offered and bare ones force a choice."""
    offered = {
        "type": "function",
        "function": {"name": "f", "description": "F", "parameters": {}},
    }
    forced = {"type": "function", "function": {"name": "f"}}

    state = await normalize("hi", offered, offered, forced)

    assert state.tools == [offered]
    assert state.overrides["tool_choice"] == forced


@pytest.mark.asyncio
async def test_choice_dicts_append_their_message():
    """Test provider choices contribute their message."""
    choice = {
        "index": 0,
        "message": {"role": "assistant", "content": "Hi"},
        "finish_reason": "stop",
    }

    state = await normalize("Hello", choice)

    assert state.messages[-1] == {"role": "assistant", "content": "Hi"}


@pytest.mark.asyncio
async def test_plain_dicts_are_options():
    """Test any other mapping merges into the overrides."""
    state = await normalize("Hello", {"temperature": 0.1}, inject("ctx"), salt(1))

    assert state.overrides == {"temperature": 0.1, "shared": "ctx", "salt": 1}


@pytest.mark.asyncio
async def test_registry_and_capabilities(tools_dir):
    """Test registries offer their capabilities with invocations."""
    registry = await discover(tools_dir)
    [capability] = registry.capabilities

    state = await normalize(registry, capability, "Hi")

    assert state.tools == [capability.schema()]
    assert state.invocations == {capability.tool_id: capability.invocation}


@pytest.mark.asyncio
async def test_terminal_answer_reexpands_history():
    """Test continuing an answer restores its input before its messages."""
    earlier = ConversationState(
        messages=[{"role": "user", "content": "Hello"}],
        overrides={"temperature": 0.2},
    )
    answer = TerminalAnswer(
        choices=[
            {
                "message": {"role": "assistant", "content": "Hi", "refusal": None},
                "finish_reason": "stop",
            }
        ],
        state=earlier,
    )

    state = await normalize(answer, "And you?")

    assert state.messages == [
        {"role": "user", "content": "Hello"},
        {"role": "assistant", "content": "Hi"},
        {"role": "user", "content": "And you?"},
    ]
    assert state.overrides == {"temperature": 0.2}


@pytest.mark.asyncio
async def test_unsupported_fragment():
    """Test unknown fragment types are rejected."""
    with pytest.raises(TypeError):
        await normalize(object())
