"""Pydantic models for API request and response schemas.

This package contains all Pydantic models used for validating and
serializing API requests and responses across all endpoints.
"""

from tool_relay.models.chat import (
    ChatMessageIn,
    ChatOptionsIn,
    ChatRequest,
    ChatResponse,
    StopInfo,
)
from tool_relay.models.health import HealthResponse
from tool_relay.models.tools import ToolInfo, ToolListResponse

__all__ = [
    "ChatMessageIn",
    "ChatOptionsIn",
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
    "StopInfo",
    "ToolInfo",
    "ToolListResponse",
]
