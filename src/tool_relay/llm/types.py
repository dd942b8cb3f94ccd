"""Type definitions for the chat-completion provider.

The request and response shapes follow the OpenAI-compatible
``/chat/completions`` API. They are TypedDicts because the bodies travel as
plain JSON dicts end to end (request building, fingerprinting, the cache).
"""

from typing import Any, TypedDict


class ToolCallFunction(TypedDict):
    name: str
    arguments: str


class ToolCall(TypedDict, total=False):
    id: str
    type: str
    index: int
    function: ToolCallFunction


class ChatMessage(TypedDict, total=False):
    role: str
    content: str | None
    tool_calls: list[ToolCall]
    tool_call_id: str
    index: int


class Choice(TypedDict, total=False):
    index: int
    message: ChatMessage
    finish_reason: str | None


class ChatCompletion(TypedDict, total=False):
    id: str
    model: str
    choices: list[Choice]
    usage: dict[str, Any]
    error: dict[str, Any] | None


class ProviderError(Exception):
    """The provider answered with an error payload instead of choices.

    Attributes:
        message: Human-readable error message from the provider
        code: Provider error code, if any
        type: Provider error type, if any
        param: Offending request parameter, if the provider named one
        status_code: HTTP status of the response
        payload: The raw ``error`` object
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        type: str | None = None,
        param: str | None = None,
        status_code: int | None = None,
        payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.type = type
        self.param = param
        self.status_code = status_code
        self.payload = payload or {}

    @classmethod
    def from_payload(
        cls, error: Any, status_code: int | None = None
    ) -> "ProviderError":
        """Build from a response's ``error`` member (object or bare string)."""
        if not isinstance(error, dict):
            return cls(str(error), status_code=status_code)

        message = error.get("message") or error.get("messages") or "Provider error"
        code = error.get("code")
        return cls(
            str(message),
            code=str(code) if code is not None else None,
            type=error.get("type"),
            param=error.get("param"),
            status_code=status_code,
            payload=error,
        )

    def details(self) -> dict[str, Any]:
        """Error fields for API error envelopes."""
        return {
            "code": self.code,
            "type": self.type,
            "param": self.param,
            "status_code": self.status_code,
        }
