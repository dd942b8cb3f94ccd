"""Pydantic models for the capability listing endpoint."""

from typing import Any

from pydantic import BaseModel, Field

from tool_relay.tools import Capability


class ToolInfo(BaseModel):
    """One discovered capability."""

    tool_id: str = Field(description="Identifier the model calls the tool by")
    name: str = Field(description="Function name")
    description: str = Field(description="Description sent to the model")
    convention: str = Field(description="Calling convention (structured or positional)")
    parameters: dict[str, Any] = Field(description="JSON schema of the arguments")
    source_path: str = Field(description="File defining the function")

    @classmethod
    def from_capability(cls, capability: Capability) -> "ToolInfo":
        return cls(
            tool_id=capability.tool_id,
            name=capability.display_name,
            description=capability.description,
            convention=capability.convention,
            parameters=capability.parameters,
            source_path=str(capability.invocation.source_path),
        )


class ToolListResponse(BaseModel):
    """Response body for GET /api/v1/tools."""

    tools: list[ToolInfo] = Field(description="Discovered capabilities")
    count: int = Field(description="Number of capabilities")
