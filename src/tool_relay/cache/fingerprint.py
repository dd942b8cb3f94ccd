"""Deterministic request fingerprints.

A fingerprint is the SHA-256 of four canonical JSON strings (messages, tools,
resolved options, model id) joined by a newline. Keys are serialized in
insertion order; fragment normalization gives every message a fixed key order
before it gets here, so separately constructed but equal conversations hash
the same.
"""

import dataclasses
import hashlib
import json
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Sequence

FINGERPRINT_SEPARATOR = "\n"


def _encode_fallback(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not fingerprintable")


def canonical_json(value: Any) -> str:
    """Serialize a value to its compact canonical JSON text."""
    return json.dumps(
        value,
        ensure_ascii=False,
        separators=(",", ":"),
        default=_encode_fallback,
    )


def fingerprint(
    messages: Sequence[Mapping[str, Any]],
    tools: Sequence[Mapping[str, Any]],
    options: Mapping[str, Any],
    model_id: str,
) -> str:
    """Compute the cache key of a chat request.

    Args:
        messages: Normalized conversation messages
        tools: Tool descriptors offered to the model
        options: Resolved options, excluding the shared context
        model_id: The model the request is addressed to

    Returns:
        Hex SHA-256 digest
    """
    parts = (
        canonical_json(list(messages)),
        canonical_json(list(tools)),
        canonical_json(dict(options)),
        canonical_json(model_id),
    )
    return hashlib.sha256(FINGERPRINT_SEPARATOR.join(parts).encode("utf-8")).hexdigest()
