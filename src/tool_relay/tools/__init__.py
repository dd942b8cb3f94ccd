"""Capability discovery and invocation.

Capability modules are plain Python files exporting documented functions via
``__all__``. This package extracts their schemas without executing them,
aggregates them across directories, and invokes them on the model's behalf.
"""

from tool_relay.tools.docstrings import ParsedDocstring, parse_docstring
from tool_relay.tools.extractor import extract_capabilities, extract_file, make_tool_id
from tool_relay.tools.manifest import (
    Capability,
    Invocation,
    PositionalInvocation,
    StructuredInvocation,
)
from tool_relay.tools.registry import CapabilityRegistry, discover
from tool_relay.tools.signals import (
    SignalKind,
    StopSignal,
    break_loop,
    stop,
    stop_output,
)

__all__ = [
    "Capability",
    "CapabilityRegistry",
    "Invocation",
    "ParsedDocstring",
    "PositionalInvocation",
    "SignalKind",
    "StopSignal",
    "StructuredInvocation",
    "break_loop",
    "discover",
    "extract_capabilities",
    "extract_file",
    "make_tool_id",
    "parse_docstring",
    "stop",
    "stop_output",
]
