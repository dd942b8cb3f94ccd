"""Unit tests for request fingerprints."""

import hashlib
from dataclasses import dataclass
from pathlib import Path

import pytest

from tool_relay.cache.fingerprint import canonical_json, fingerprint

MESSAGES = [{"role": "user", "content": "Hello"}]
OPTIONS = {"max_tokens": 100, "temperature": 0.5}


def test_fingerprint_is_deterministic():
    """Test that repeated calls return the same key."""
    first = fingerprint(MESSAGES, [], OPTIONS, "model-a")
    second = fingerprint(MESSAGES, [], OPTIONS, "model-a")

    assert first == second
    assert len(first) == 64


def test_fingerprint_matches_documented_construction():
    """Test the exact digest so keys stay stable across releases."""
    expected = hashlib.sha256(
        "\n".join(
            [
                '[{"role":"user","content":"Hello"}]',
                "[]",
                '{"max_tokens":100,"temperature":0.5}',
                '"model-a"',
            ]
        ).encode("utf-8")
    ).hexdigest()

    assert fingerprint(MESSAGES, [], OPTIONS, "model-a") == expected


def test_separately_built_requests_match():
    """Test that equal content built separately hashes the same."""
    a = fingerprint([{"role": "user", "content": "Hel" + "lo"}], (), dict(OPTIONS), "m")
    b = fingerprint([dict(role="user", content="Hello")], [], OPTIONS, "m")

    assert a == b


@pytest.mark.parametrize(
    "messages,tools,options,model",
    [
        ([{"role": "user", "content": "Hello!"}], [], OPTIONS, "model-a"),
        (MESSAGES, [{"type": "function"}], OPTIONS, "model-a"),
        (MESSAGES, [], {"max_tokens": 100, "temperature": 0.6}, "model-a"),
        (MESSAGES, [], OPTIONS, "model-b"),
    ],
)
def test_each_part_changes_the_key(messages, tools, options, model):
    """Test that every part of the request contributes to the key."""
    base = fingerprint(MESSAGES, [], OPTIONS, "model-a")

    assert fingerprint(messages, tools, options, model) != base


def test_non_ascii_kept_verbatim():
    """Test that non-ASCII text is serialized without escapes."""
    assert canonical_json({"content": "你好"}) == '{"content":"你好"}'


def test_canonical_json_fallbacks():
    """Test serialization of dataclasses, sets and paths."""

    @dataclass
    class Point:
        x: int
        y: int

    assert canonical_json(Point(1, 2)) == '{"x":1,"y":2}'
    assert canonical_json(Path("a/b")) == '"a/b"'
    assert canonical_json({3, 1, 2}) == "[1,2,3]"


def test_canonical_json_rejects_unknown_objects():
    """Test that arbitrary objects cannot be fingerprinted."""
    with pytest.raises(TypeError):
        canonical_json(object())
