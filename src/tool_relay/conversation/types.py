"""Type definitions for conversations.

This module contains the resolved option set, the conversation state threaded
through the tool-call loop, and the terminal answer handed back to callers.
"""

from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from tool_relay.conversation.content import answer_text
from tool_relay.tools.manifest import Capability, Invocation

if TYPE_CHECKING:
    from tool_relay.config import ToolRelaySettings


@dataclass(frozen=True)
class ChatOptions:
    """Options resolved once per request, before the request body is built.

    Attributes:
        model: Model override; None selects by whether tools are offered
        max_tokens: Completion token limit
        temperature: Sampling temperature
        tool_choice: ``tool_choice`` value passed through to the provider
        enable_thinking: Extended thinking flag, omitted when None
        shared: Context injected into capability calls; never fingerprinted
        extra: Any other option (e.g. ``salt``); fingerprinted, never sent
    """

    model: str | None = None
    max_tokens: int | None = 8192
    temperature: float | None = 0.7
    tool_choice: Any = None
    enable_thinking: bool | None = None
    shared: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: "ToolRelaySettings") -> "ChatOptions":
        return cls(
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            enable_thinking=settings.enable_thinking,
        )

    def merged(self, overrides: Mapping[str, Any]) -> "ChatOptions":
        """Return a copy with ``overrides`` applied; unknown keys go to ``extra``."""
        known = {f.name for f in fields(self)} - {"extra"}
        changes = {key: value for key, value in overrides.items() if key in known}
        extra = dict(self.extra)
        extra.update(
            (key, value) for key, value in overrides.items() if key not in known
        )
        return replace(self, extra=extra, **changes)

    def fingerprint_fields(self) -> dict[str, Any]:
        """Option values that identify a request (the shared context excluded)."""
        values: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "tool_choice": self.tool_choice,
            "enable_thinking": self.enable_thinking,
        }
        for key in sorted(self.extra):
            values[key] = self.extra[key]
        return values


@dataclass
class ConversationState:
    """Everything a request is built from.

    Attributes:
        messages: Normalized messages, oldest first
        tools: Model-facing tool descriptors, unique by name
        invocations: Tool id to local invocation for discovered capabilities
        overrides: Option overrides collected from fragments
    """

    messages: list[dict[str, Any]] = field(default_factory=list)
    tools: list[dict[str, Any]] = field(default_factory=list)
    invocations: dict[str, Invocation] = field(default_factory=dict)
    overrides: dict[str, Any] = field(default_factory=dict)

    def add_capability(self, capability: Capability) -> None:
        if self.add_tool(capability.schema()):
            self.invocations[capability.tool_id] = capability.invocation

    def add_tool(self, tool: Mapping[str, Any]) -> bool:
        """Offer a tool descriptor.

        Returns:
            False if a tool with the same name is already offered
        """
        name = tool["function"]["name"]
        if any(existing["function"]["name"] == name for existing in self.tools):
            return False
        self.tools.append(dict(tool))
        return True

    def absorb(self, other: "ConversationState") -> None:
        """Fold another state (an earlier turn's input) into this one."""
        self.messages.extend(other.messages)
        for tool in other.tools:
            if self.add_tool(tool):
                name = tool["function"]["name"]
                if name in other.invocations:
                    self.invocations[name] = other.invocations[name]
        self.overrides.update(other.overrides)

    def extended(self, messages: list[dict[str, Any]]) -> "ConversationState":
        """A new state with ``messages`` appended; this one is left untouched."""
        return ConversationState(
            messages=[*self.messages, *messages],
            tools=list(self.tools),
            invocations=dict(self.invocations),
            overrides=dict(self.overrides),
        )


@dataclass
class TerminalAnswer:
    """A turn's final, non-tool-calling model output.

    Iterating yields the provider's choices. Passing the answer back into a
    conversation re-expands ``state`` first, so a follow-up question carries
    the full history without the caller resupplying it.

    Attributes:
        choices: Choices from the final provider response
        state: The conversation state that produced them
        fingerprint: Cache key of the final request
        cached: Whether the final response came from the cache
    """

    choices: list[dict[str, Any]]
    state: ConversationState
    fingerprint: str = ""
    cached: bool = False

    @property
    def messages(self) -> list[dict[str, Any]]:
        """The answer's own messages, one per choice."""
        return [choice["message"] for choice in self.choices if choice.get("message")]

    @property
    def history(self) -> list[dict[str, Any]]:
        """Input messages followed by the answer's messages."""
        return [*self.state.messages, *self.messages]

    @property
    def content(self) -> str:
        """Text content of all choices, newline-joined."""
        return answer_text(self.choices)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return iter(self.choices)

    def __len__(self) -> int:
        return len(self.choices)
