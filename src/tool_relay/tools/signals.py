"""Control-flow results a capability can return to end a conversation turn."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SignalKind(str, Enum):
    """The reserved early-termination kinds."""

    STOP = "stop"
    BREAK = "break"
    STOP_OUTPUT = "stop_output"


@dataclass(frozen=True)
class StopSignal:
    """Returned by a capability to halt the tool-call loop immediately.

    Queued tool calls after the one that returned the signal are not executed,
    and the signal is handed back to the caller of the conversation instead of
    a terminal answer.

    Attributes:
        kind: Which reserved signal this is
        value: Optional payload for the caller (a reason, partial output, ...)
    """

    kind: SignalKind = SignalKind.STOP
    value: Any = None


def stop(value: Any = None) -> StopSignal:
    """End the conversation turn."""
    return StopSignal(SignalKind.STOP, value)


def break_loop(value: Any = None) -> StopSignal:
    """Break out of the tool-call loop."""
    return StopSignal(SignalKind.BREAK, value)


def stop_output(value: Any = None) -> StopSignal:
    """End the turn and hand ``value`` to the caller as the output."""
    return StopSignal(SignalKind.STOP_OUTPUT, value)
