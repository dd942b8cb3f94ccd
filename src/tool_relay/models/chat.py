"""Pydantic models for chat API requests and responses."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageIn(BaseModel):
    """A message in the conversation history sent by the client."""

    role: Literal["system", "user", "assistant", "tool"] = Field(
        description="Message role"
    )
    content: str | None = Field(default=None, description="Message content")
    tool_calls: list[dict[str, Any]] | None = Field(
        default=None, description="Tool calls requested by an assistant message"
    )
    tool_call_id: str | None = Field(
        default=None, description="Tool call a tool message answers"
    )

    def to_message(self) -> dict[str, Any]:
        message = self.model_dump(exclude_none=True)
        message.setdefault("content", "")
        return message


class ChatOptionsIn(BaseModel):
    """Per-request option overrides. Unset fields keep the server defaults."""

    model: str | None = Field(default=None, description="Model override")
    max_tokens: int | None = Field(default=None, description="Completion token limit")
    temperature: float | None = Field(default=None, description="Sampling temperature")
    tool_choice: str | dict[str, Any] | None = Field(
        default=None, description="tool_choice passed to the provider"
    )
    enable_thinking: bool | None = Field(
        default=None, description="Extended thinking flag"
    )
    salt: str | None = Field(
        default=None, description="Changes the cache key without changing the request"
    )

    def overrides(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class ChatRequest(BaseModel):
    """Request body for POST /api/v1/chat."""

    messages: list[ChatMessageIn] = Field(description="Conversation history")
    options: ChatOptionsIn | None = Field(default=None, description="Option overrides")
    use_tools: bool = Field(
        default=True,
        description="Offer the capabilities found in the configured tool directories",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "messages": [
                        {"role": "user", "content": "What time is it in Tokyo?"}
                    ],
                    "use_tools": True,
                },
            ]
        }
    )


class StopInfo(BaseModel):
    """The signal a capability returned to stop the conversation."""

    kind: str = Field(description="stop, break or stop_output")
    value: Any = Field(default=None, description="Payload returned with the signal")


class ChatResponse(BaseModel):
    """Response body for POST /api/v1/chat."""

    status: Literal["answer", "stopped"] = Field(
        description="Whether the model answered or a capability stopped the turn"
    )
    messages: list[dict[str, Any]] = Field(
        default_factory=list, description="Answer messages, one per choice"
    )
    content: str = Field(default="", description="Text content of the answer")
    fingerprint: str | None = Field(
        default=None, description="Cache key of the final request"
    )
    cached: bool = Field(default=False, description="Whether the answer was cached")
    stop: StopInfo | None = Field(default=None, description="Stop signal, if any")
