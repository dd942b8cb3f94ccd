"""Helpers for reading answer content."""

import json
import re
import textwrap
from typing import Any, Iterable

_FENCE = re.compile(r"^\s*```(?P<lang>[\w-]*)[ \t]*\n(?P<body>.*?)\n?```\s*$", re.DOTALL)


def _contents(answer: Iterable[dict[str, Any]]) -> list[str]:
    return [
        (choice.get("message") or {}).get("content") or "" for choice in answer
    ]


def _unfence(text: str, language: str) -> str:
    match = _FENCE.match(text)
    if match and match.group("lang").lower() in ("", language):
        return match.group("body")
    return text


def answer_text(answer: Iterable[dict[str, Any]]) -> str:
    """Join the text content of every choice."""
    return "\n".join(_contents(answer)).strip()


def answer_json(answer: Iterable[dict[str, Any]]) -> Any:
    """Decode the JSON content of every choice.

    Content may be wrapped in a json code fence. When several choices decode
    to objects they are merged, later keys winning; otherwise the first decoded
    value is returned.

    Raises:
        json.JSONDecodeError: If a choice's content is not JSON
    """
    result: Any = None
    for content in _contents(answer):
        value = json.loads(_unfence(content, "json"))
        if result is None:
            result = value
        elif isinstance(result, dict) and isinstance(value, dict):
            result.update(value)
    return result


def answer_markdown(answer: Iterable[dict[str, Any]]) -> str:
    """Join the Markdown content of every choice, without code fences."""
    return "\n".join(
        _unfence(content, "markdown").strip() for content in _contents(answer)
    )


def dedent_text(text: str | None) -> str:
    """Remove common indentation and surrounding blank space."""
    return textwrap.dedent(text or "").strip()
