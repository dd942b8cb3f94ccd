"""Health check response model."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint.

    Attributes:
        status: Health status indicator ("ok" or "error").
        version: The version of tool-relay.
        provider_base_url: Base URL of the chat-completion provider.
        cache_dir: Directory holding cached responses.
    """

    status: str = Field(..., description="Health status of the service")
    version: str = Field(..., description="Version of tool-relay")
    provider_base_url: str | None = Field(
        default=None,
        description="Chat-completion provider base URL",
    )
    cache_dir: str | None = Field(
        default=None,
        description="Response cache directory",
    )
