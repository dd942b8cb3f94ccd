"""Unit tests for answer content helpers."""

import pytest

from tool_relay.conversation import (
    ConversationState,
    TerminalAnswer,
    answer_json,
    answer_markdown,
    answer_text,
    dedent_text,
)


def answer(*contents):
    return TerminalAnswer(
        choices=[
            {"message": {"role": "assistant", "content": c}, "finish_reason": "stop"}
            for c in contents
        ],
        state=ConversationState(),
    )


def test_answer_text():
    """Test choice contents are joined."""
    assert answer_text(answer("one", "two ")) == "one\ntwo"
    assert answer("one").content == "one"


def test_answer_json_plain_and_fenced():
    """Test JSON is decoded with or without a code fence."""
    assert answer_json(answer('{"a": 1}')) == {"a": 1}
    assert answer_json(answer('```json\n{"b": 2}\n```')) == {"b": 2}


def test_answer_json_merges_objects():
    """Test several JSON objects are merged."""
    assert answer_json(answer('{"a": 1}', '{"b": 2, "a": 3}')) == {"a": 3, "b": 2}


def test_answer_json_invalid():
    """Test invalid JSON raises."""
    with pytest.raises(ValueError):
        answer_json(answer("not json"))


def test_answer_markdown_strips_fence():
    """Test Markdown fences are removed."""
    assert answer_markdown(answer("```markdown\n# Title\n```")) == "# Title"
    assert answer_markdown(answer("plain")) == "plain"


def test_dedent_text():
    """Test common indentation is removed."""
    assert dedent_text("\n    a\n      b\n") == "a\n  b"
    assert dedent_text(None) == ""
